import logging

from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.families import CATEGORIES, MESAS, PAYMENTS, PRODUCTS, TableFamily
from services.errors import ProvisioningFailed
from services.identifiers import resolve
from services.provisioning import ProvisionOutcome, ensure_table, table_exists
from services.table_repository import MutationOutcome

logger = logging.getLogger(__name__)


def _insert(db: Session, family: TableFamily, values: dict) -> ProvisionOutcome:
    table_name = resolve(family)
    target = family.build_table(table_name)
    try:
        outcome = ensure_table(db, family, table_name)
        db.execute(insert(target).values(**values))
        db.commit()
    except (SQLAlchemyError, ProvisioningFailed):
        db.rollback()
        logger.exception("Error inserting into %s", table_name)
        raise
    return outcome


def _list(db: Session, family: TableFamily, *criteria) -> list[dict]:
    table_name = resolve(family)
    if not table_exists(db, table_name):
        return []
    target = family.build_table(table_name)
    stmt = select(target).order_by(target.c.id)
    for criterion in criteria:
        stmt = stmt.where(criterion(target))
    return [dict(row) for row in db.execute(stmt).mappings()]


def add_category(db: Session, nombre: str) -> ProvisionOutcome:
    return _insert(db, CATEGORIES, {"categoria": nombre})


def add_product(db: Session, nombre: str, precio: int, categoria: str, estado: str) -> ProvisionOutcome:
    return _insert(
        db,
        PRODUCTS,
        {"nombre": nombre, "precio": precio, "categoria": categoria, "estado": estado},
    )


def list_active_products(db: Session, categoria: str | None) -> list[dict]:
    return _list(
        db,
        PRODUCTS,
        lambda t: t.c.estado == "activo",
        lambda t: t.c.categoria == categoria,
    )


def add_mesa(db: Session, mesa: int, estado: str) -> ProvisionOutcome:
    return _insert(db, MESAS, {"mesa": mesa, "estado": estado})


def list_mesas(db: Session) -> list[dict]:
    return _list(db, MESAS)


def update_mesa(db: Session, mesa_id: int, mesa: int, estado: str) -> MutationOutcome:
    table_name = resolve(MESAS)
    if not table_exists(db, table_name):
        return MutationOutcome.NOT_FOUND
    target = MESAS.build_table(table_name)
    try:
        result = db.execute(update(target).where(target.c.id == mesa_id).values(mesa=mesa, estado=estado))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return MutationOutcome.APPLIED if result.rowcount else MutationOutcome.NOT_FOUND


def record_payment(db: Session, **payment) -> ProvisionOutcome:
    return _insert(db, PAYMENTS, payment)


def list_payments(db: Session) -> list[dict]:
    return _list(db, PAYMENTS)
