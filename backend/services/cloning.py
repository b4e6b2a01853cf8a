import enum
import logging
import os

from sqlalchemy import Column, MetaData, Table, insert, select
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.schema import CreateTable, DropTable

from models.families import DATASET, INVENTORY, TENANT_LINK, USER_COPY
from services.errors import CloneFailed, ProvisioningFailed
from services.identifiers import resolve, validate_token
from services.provisioning import ensure_table, table_exists

logger = logging.getLogger(__name__)


class CloneOutcome(str, enum.Enum):
    CLONED = "cloned"
    ALREADY_LINKED = "already_linked"


def inventory_source_table() -> str:
    return validate_token(os.getenv("INVENTORY_SOURCE_TABLE", "data"))


def _copy_structure(source: Table, dest_table: str) -> Table:
    columns = [
        Column(
            col.name,
            col.type,
            primary_key=col.primary_key,
            nullable=col.nullable,
        )
        for col in source.columns
    ]
    return Table(dest_table, MetaData(), *columns)


def clone_into(db: Session, source_table: str, dest_table: str) -> CloneOutcome:
    """
    Create `dest_table` with the columns of `source_table` and copy all of
    its rows. An existing destination is left untouched, so copies are not
    refreshed when the source changes later. Nothing is committed here.

    Create and copy share a savepoint, so rows are only copied into a table
    this call created.
    """
    try:
        if table_exists(db, dest_table):
            return CloneOutcome.ALREADY_LINKED
        if not table_exists(db, source_table):
            raise CloneFailed(source_table, dest_table, LookupError(f"{source_table} does not exist"))

        source = Table(source_table, MetaData(), autoload_with=db.connection())
        dest = _copy_structure(source, dest_table)
        names = [col.name for col in source.columns]

        try:
            with db.begin_nested():
                db.execute(CreateTable(dest))
                db.execute(insert(dest).from_select(names, select(*[source.c[name] for name in names])))
        except (IntegrityError, OperationalError, ProgrammingError):
            if not table_exists(db, dest_table):
                raise
            logger.info("Copy %s was created concurrently", dest_table)
            return CloneOutcome.ALREADY_LINKED
    except SQLAlchemyError as exc:
        logger.error("Error cloning %s into %s: %s", source_table, dest_table, exc)
        raise CloneFailed(source_table, dest_table, exc) from exc

    logger.info("CLONE: source=%s dest=%s", source_table, dest_table)
    return CloneOutcome.CLONED


def _record_link(db: Session, link_table: str, dataset: str) -> bool:
    links = TENANT_LINK.build_table(link_table)
    existing = db.execute(
        select(links.c.id).where(links.c.database == dataset, links.c.planograma == dataset).limit(1)
    ).first()
    if existing is not None:
        return False
    db.execute(insert(links).values(database=dataset, planograma=dataset))
    return True


def link_dataset_to_user(db: Session, username: str, dataset: str) -> CloneOutcome:
    source_table = resolve(DATASET, dataset)
    dest_table = resolve(USER_COPY, username, dataset)
    link_table = resolve(TENANT_LINK, username)

    try:
        ensure_table(db, TENANT_LINK, link_table)
        outcome = clone_into(db, source_table, dest_table)
        recorded = _record_link(db, link_table, dataset)
        db.commit()
    except (CloneFailed, ProvisioningFailed):
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise CloneFailed(source_table, dest_table, exc) from exc

    logger.info(
        "LINK: user=%s dataset=%s outcome=%s new_link=%s",
        username,
        dataset,
        outcome.value,
        recorded,
    )
    return outcome


def refresh_inventory(db: Session, username: str, source_table: str | None = None) -> list[dict]:
    source_table = source_table or inventory_source_table()
    dest_table = resolve(INVENTORY, username)

    try:
        db.execute(DropTable(Table(dest_table, MetaData()), if_exists=True))
        clone_into(db, source_table, dest_table)
        rows = db.execute(select(Table(dest_table, MetaData(), autoload_with=db.connection()))).mappings().all()
        db.commit()
    except CloneFailed:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise CloneFailed(source_table, dest_table, exc) from exc

    return [dict(row) for row in rows]
