from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.deps import get_db
from models.payloads import CategoryCreate, MesaPayload, PaymentCreate, ProductCreate
from routers.errors import raise_for_outcome, to_http_error
from services import pos_repository
from services.errors import TableEngineError
from services.provisioning import ProvisionOutcome

router = APIRouter(tags=["pos"])


def _created_message(outcome: ProvisionOutcome, noun: str) -> dict:
    if outcome is ProvisionOutcome.CREATED:
        return {"message": f"{noun} added and table created"}
    return {"message": f"{noun} added"}


@router.post("/admin/create/category", status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    try:
        outcome = pos_repository.add_category(db, payload.nombreCategoria)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    return _created_message(outcome, "Category")


@router.post("/admin/create/product", status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    try:
        outcome = pos_repository.add_product(
            db,
            nombre=payload.nombre,
            precio=payload.precio,
            categoria=payload.categoria,
            estado=payload.estado,
        )
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    return _created_message(outcome, "Product")


@router.get("/user/get/products")
def get_products(categoria: str | None = Query(None), db: Session = Depends(get_db)):
    return pos_repository.list_active_products(db, categoria)


@router.post("/admin/create/mesa", status_code=201)
def create_mesa(payload: MesaPayload, db: Session = Depends(get_db)):
    try:
        outcome = pos_repository.add_mesa(db, payload.mesa, payload.estado)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    return _created_message(outcome, "Mesa")


@router.get("/admin/get/mesa")
def get_mesas(db: Session = Depends(get_db)):
    return pos_repository.list_mesas(db)


@router.put("/admin/update/mesa/{mesa_id}")
def update_mesa(mesa_id: int, payload: MesaPayload, db: Session = Depends(get_db)):
    try:
        outcome = pos_repository.update_mesa(db, mesa_id, payload.mesa, payload.estado)
    except SQLAlchemyError as exc:
        raise to_http_error(exc) from exc
    raise_for_outcome(outcome, "Mesa not found")
    return {"message": "Mesa updated"}


@router.post("/user/create/new/payment", status_code=201)
def create_payment(payload: PaymentCreate, db: Session = Depends(get_db)):
    try:
        outcome = pos_repository.record_payment(db, **payload.model_dump())
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    return _created_message(outcome, "Payment")


@router.get("/admin/get/payments")
def get_payments(db: Session = Depends(get_db)):
    return pos_repository.list_payments(db)
