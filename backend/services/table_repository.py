import enum
import logging

from sqlalchemy import column, delete, select, table, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.families import TENANT_LINK, TableFamily
from services.errors import RequestRejected, TableNotFound
from services.identifiers import resolve
from services.provisioning import table_exists

logger = logging.getLogger(__name__)

# placeholder row some deployments seed into bases_datos
_CATALOG_SENTINEL = "created"


class MutationOutcome(str, enum.Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"


def _require_table(db: Session, table_name: str) -> None:
    if not table_exists(db, table_name):
        raise TableNotFound(table_name)


def _require_key(key_column: str, key_value) -> None:
    if key_value is None or (isinstance(key_value, str) and not key_value.strip()):
        raise RequestRejected(f"{key_column} is required")


def list_catalog(db: Session, family: TableFamily) -> list[dict]:
    model = family.catalog
    if model is None:
        raise ValueError(f"Family '{family.name}' has no catalog")
    if not table_exists(db, model.__tablename__):
        return []

    col = getattr(model, family.catalog_column)
    query = db.query(col).order_by(model.id)
    if family.catalog_column == "nombre_base_datos":
        query = query.filter(col != _CATALOG_SENTINEL)
    return [{family.catalog_column: value} for (value,) in query.all()]


def read_rows(db: Session, table_name: str, columns: list[str] | None = None) -> list[dict]:
    _require_table(db, table_name)
    if columns:
        stmt = select(*[column(name) for name in columns]).select_from(table(table_name))
    else:
        stmt = select(text("*")).select_from(table(table_name))
    return [dict(row) for row in db.execute(stmt).mappings()]


def update_row(
    db: Session,
    table_name: str,
    key_column: str,
    key_value,
    changes: dict | None,
) -> MutationOutcome:
    """
    Update the rows whose `key_column` equals `key_value`.

    Column names in `changes` are quoted by the dialect but not checked
    against the schema; unknown columns fail at the store.
    """
    _require_key(key_column, key_value)
    if not changes:
        raise RequestRejected("No data provided to update")
    _require_table(db, table_name)

    names = {key_column, *changes.keys()}
    target = table(table_name, *[column(name) for name in names])
    try:
        result = db.execute(
            update(target).where(target.c[key_column] == key_value).values(changes)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating %s where %s=%s", table_name, key_column, key_value)
        raise

    if not result.rowcount:
        return MutationOutcome.NOT_FOUND
    return MutationOutcome.APPLIED


def delete_row(db: Session, table_name: str, key_column: str, key_value) -> MutationOutcome:
    _require_key(key_column, key_value)
    _require_table(db, table_name)

    target = table(table_name, column(key_column))
    try:
        result = db.execute(delete(target).where(target.c[key_column] == key_value))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting from %s where %s=%s", table_name, key_column, key_value)
        raise

    if not result.rowcount:
        return MutationOutcome.NOT_FOUND
    return MutationOutcome.APPLIED


def list_user_links(db: Session, username: str) -> list[dict]:
    return read_rows(db, resolve(TENANT_LINK, username))
