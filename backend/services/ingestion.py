import logging
import os
from dataclasses import dataclass

from sqlalchemy import column, delete, insert, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.families import TableFamily
from services.errors import IngestionFailed, IngestionRowFailed, ProvisioningFailed
from services.identifiers import resolve
from services.provisioning import ProvisionOutcome, ensure_table
from services.spreadsheet import Grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestReport:
    table_name: str
    provisioned: bool
    rows_written: int


def use_atomic_ingest() -> bool:
    return os.getenv("INGEST_ATOMIC", "1") != "0"


def _split_grid(table_name: str, grid: Grid) -> tuple[list[str], list[list]]:
    if not grid:
        raise IngestionFailed(table_name, ValueError("Spreadsheet has no header row"))
    headers = [str(h) for h in grid[0]]
    if not all(headers):
        raise IngestionFailed(table_name, ValueError("Spreadsheet has an empty header cell"))
    duplicates = sorted({h for h in headers if headers.count(h) > 1})
    if duplicates:
        raise IngestionFailed(table_name, ValueError(f"Spreadsheet repeats header(s) {duplicates}"))
    return headers, [list(row) for row in grid[1:]]


def _row_mismatch(headers: list[str], row: list) -> ValueError:
    return ValueError(f"expected {len(headers)} values, got {len(row)}")


def _ingest_atomic(db: Session, target, headers: list[str], rows: list[list]) -> int:
    for index, row in enumerate(rows, start=1):
        if len(row) != len(headers):
            raise IngestionFailed(target.name, ValueError(f"row {index}: {_row_mismatch(headers, row)}"))

    payloads = [dict(zip(headers, row)) for row in rows]
    try:
        db.execute(delete(target))
        if payloads:
            db.execute(insert(target), payloads)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error replacing contents of %s: %s", target.name, exc)
        raise IngestionFailed(target.name, exc) from exc
    return len(payloads)


def _ingest_row_by_row(db: Session, target, headers: list[str], rows: list[list]) -> int:
    try:
        db.execute(delete(target))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error deleting existing records from %s: %s", target.name, exc)
        raise IngestionFailed(target.name, exc) from exc
    logger.info("Existing records deleted from %s", target.name)

    for index, row in enumerate(rows, start=1):
        if len(row) != len(headers):
            raise IngestionRowFailed(target.name, index, _row_mismatch(headers, row))
        try:
            db.execute(insert(target).values(dict(zip(headers, row))))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Error inserting row %s into %s: %s", index, target.name, exc)
            raise IngestionRowFailed(target.name, index, exc) from exc
    return len(rows)


def ingest(db: Session, table_name: str, grid: Grid, atomic: bool | None = None) -> int:
    """
    Replace every row of `table_name` with the data rows of `grid`.

    The header row supplies the column list and is not checked against
    the table schema; unknown columns fail at the store.

    In atomic mode (the default) delete and insert share one transaction.
    Row-by-row mode commits the delete and each row separately, so a
    failing row leaves the rows before it in place. Pass `atomic` or set
    INGEST_ATOMIC=0 to select row-by-row mode.
    """
    headers, rows = _split_grid(table_name, grid)
    target = table(table_name, *[column(h) for h in headers])

    if atomic is None:
        atomic = use_atomic_ingest()

    if atomic:
        written = _ingest_atomic(db, target, headers, rows)
    else:
        written = _ingest_row_by_row(db, target, headers, rows)

    logger.info("INGEST: table=%s rows=%s atomic=%s", table_name, written, atomic)
    return written


def provision_and_ingest(
    db: Session,
    family: TableFamily,
    key: str,
    grid: Grid,
    atomic: bool | None = None,
) -> IngestReport:
    table_name = resolve(family, key)

    try:
        outcome = ensure_table(db, family, table_name, key=key)
        db.commit()
    except ProvisioningFailed:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise ProvisioningFailed(table_name, exc) from exc

    written = ingest(db, table_name, grid, atomic=atomic)
    return IngestReport(
        table_name=table_name,
        provisioned=outcome is ProvisionOutcome.CREATED,
        rows_written=written,
    )
