import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.families import ORDER_LEDGER, ORDER_MIRROR
from models.payloads import OrderItem, OrderLine
from services.errors import ProvisioningFailed, RequestRejected, TableNotFound, TransactionAborted
from services.identifiers import resolve
from services.provisioning import ensure_table, table_exists
from services.table_repository import MutationOutcome

logger = logging.getLogger(__name__)

_LINE_FIELDS = ("producto", "cantidad", "precioUnitario", "entregado", "pagado")


@dataclass(frozen=True)
class OrderReceipt:
    mesa: int
    ledger_table: str
    mirror_table: str
    rows: int


def _line_values(item) -> dict:
    return {field: getattr(item, field) for field in _LINE_FIELDS}


def _run_in_transaction(db: Session, steps: Iterable[tuple[str, Callable[[], object]]]) -> None:
    """Run steps in order and commit; any failure rolls back everything."""
    step = "begin"
    try:
        for step, run in steps:
            run()
        step = "commit"
        db.commit()
    except (SQLAlchemyError, ProvisioningFailed) as exc:
        db.rollback()
        logger.error("Order transaction rolled back at %s: %s", step, exc)
        raise TransactionAborted(step, exc) from exc


def _batch_mesa(items: list[OrderItem]) -> int:
    if not items:
        raise RequestRejected("No orders provided")
    mesas = {item.mesa for item in items}
    if len(mesas) != 1:
        raise RequestRejected(f"An order batch must target a single mesa, got {sorted(mesas)}")
    return items[0].mesa


def submit_order_batch(db: Session, items: list[OrderItem]) -> OrderReceipt:
    """
    Append the batch to the global ledger and make the mesa mirror hold
    exactly this batch, in a single transaction.
    """
    mesa = _batch_mesa(items)
    ledger_name = resolve(ORDER_LEDGER)
    mirror_name = resolve(ORDER_MIRROR, mesa)
    ledger = ORDER_LEDGER.build_table(ledger_name)
    mirror = ORDER_MIRROR.build_table(mirror_name)

    ledger_rows = [{"mesa": item.mesa, **_line_values(item)} for item in items]
    mirror_rows = [_line_values(item) for item in items]

    _run_in_transaction(
        db,
        (
            ("ensure_ledger", lambda: ensure_table(db, ORDER_LEDGER, ledger_name)),
            ("ensure_mirror", lambda: ensure_table(db, ORDER_MIRROR, mirror_name)),
            ("clear_mirror", lambda: db.execute(delete(mirror))),
            ("insert_ledger_batch", lambda: db.execute(insert(ledger).values(ledger_rows))),
            ("insert_mirror_batch", lambda: db.execute(insert(mirror).values(mirror_rows))),
        ),
    )

    logger.info("ORDER: mesa=%s lines=%s", mesa, len(items))
    return OrderReceipt(mesa=mesa, ledger_table=ledger_name, mirror_table=mirror_name, rows=len(items))


def append_order_item(db: Session, mesa: int, line: OrderLine) -> None:
    ledger_name = resolve(ORDER_LEDGER)
    mirror_name = resolve(ORDER_MIRROR, mesa)
    ledger = ORDER_LEDGER.build_table(ledger_name)
    mirror = ORDER_MIRROR.build_table(mirror_name)
    values = _line_values(line)

    _run_in_transaction(
        db,
        (
            ("ensure_ledger", lambda: ensure_table(db, ORDER_LEDGER, ledger_name)),
            ("ensure_mirror", lambda: ensure_table(db, ORDER_MIRROR, mirror_name)),
            ("insert_ledger_line", lambda: db.execute(insert(ledger).values(mesa=mesa, **values))),
            ("insert_mirror_line", lambda: db.execute(insert(mirror).values(**values))),
        ),
    )


def update_order_quantity(db: Session, mesa: int, producto: str, cantidad: int) -> MutationOutcome:
    ledger_name = resolve(ORDER_LEDGER)
    mirror_name = resolve(ORDER_MIRROR, mesa)
    ledger = ORDER_LEDGER.build_table(ledger_name)
    mirror = ORDER_MIRROR.build_table(mirror_name)
    affected = []

    def _update_ledger():
        if table_exists(db, ledger_name):
            result = db.execute(
                update(ledger)
                .where(ledger.c.mesa == mesa, ledger.c.producto == producto)
                .values(cantidad=cantidad)
            )
            affected.append(result.rowcount or 0)

    def _update_mirror():
        if table_exists(db, mirror_name):
            result = db.execute(update(mirror).where(mirror.c.producto == producto).values(cantidad=cantidad))
            affected.append(result.rowcount or 0)

    _run_in_transaction(
        db,
        (
            ("update_ledger", _update_ledger),
            ("update_mirror", _update_mirror),
        ),
    )

    if sum(affected) == 0:
        return MutationOutcome.NOT_FOUND
    return MutationOutcome.APPLIED


def list_ledger(db: Session) -> list[dict]:
    ledger_name = resolve(ORDER_LEDGER)
    if not table_exists(db, ledger_name):
        return []
    ledger = ORDER_LEDGER.build_table(ledger_name)
    return [dict(row) for row in db.execute(select(ledger).order_by(ledger.c.id)).mappings()]


def list_mirror(db: Session, mesa: int) -> list[dict]:
    mirror_name = resolve(ORDER_MIRROR, mesa)
    if not table_exists(db, mirror_name):
        raise TableNotFound(mirror_name)
    mirror = ORDER_MIRROR.build_table(mirror_name)
    return [dict(row) for row in db.execute(select(mirror).order_by(mirror.c.id)).mappings()]
