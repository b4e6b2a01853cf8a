import enum
import logging

from sqlalchemy import Table, inspect
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.schema import CreateTable

from models.families import TableFamily
from services.errors import ProvisioningFailed

logger = logging.getLogger(__name__)


class ProvisionOutcome(str, enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


def table_exists(db: Session, table_name: str) -> bool:
    return inspect(db.connection()).has_table(table_name)


def _record_catalog_entry(db: Session, family: TableFamily, key: str) -> None:
    model = family.catalog
    column = getattr(model, family.catalog_column)
    model.__table__.create(bind=db.connection(), checkfirst=True)

    if db.query(model).filter(column == key).first() is not None:
        return

    try:
        with db.begin_nested():
            db.add(model(**{family.catalog_column: key}))
    except IntegrityError:
        # a concurrent provisioner recorded the same key first
        logger.info("Catalog %s already lists %s", model.__tablename__, key)


def _create_unless_present(db: Session, table: Table) -> bool:
    """Create `table` in a savepoint; False when another transaction won the race."""
    try:
        with db.begin_nested():
            db.execute(CreateTable(table))
    except (IntegrityError, OperationalError, ProgrammingError):
        if not table_exists(db, table.name):
            raise
        logger.info("Table %s was created concurrently", table.name)
        return False
    return True


def ensure_table(
    db: Session,
    family: TableFamily,
    table_name: str,
    key: str | None = None,
) -> ProvisionOutcome:
    """
    Create `table_name` with the family schema unless it already exists,
    and record `key` in the family catalog when the table is new.

    Runs inside the caller's transaction; nothing is committed here.
    """
    try:
        if table_exists(db, table_name):
            return ProvisionOutcome.ALREADY_EXISTS

        if not _create_unless_present(db, family.build_table(table_name)):
            return ProvisionOutcome.ALREADY_EXISTS

        if family.catalog is not None:
            _record_catalog_entry(db, family, key if key is not None else table_name)
    except (SQLAlchemyError, ValueError) as exc:
        logger.error("Provisioning %s failed: %s", table_name, exc)
        raise ProvisioningFailed(table_name, exc) from exc

    logger.info("PROVISION: family=%s table=%s", family.name, table_name)
    return ProvisionOutcome.CREATED
