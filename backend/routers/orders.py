from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.deps import get_db
from models.payloads import OrderBatchRequest, OrderLine, OrderQuantityUpdate
from routers.errors import raise_for_outcome, to_http_error
from services.errors import TableEngineError
from services.orders import (
    append_order_item,
    list_ledger,
    list_mirror,
    submit_order_batch,
    update_order_quantity,
)

router = APIRouter(prefix="/user", tags=["orders"])


@router.post("/create/new/order", status_code=201)
def create_order(payload: OrderBatchRequest, db: Session = Depends(get_db)):
    try:
        receipt = submit_order_batch(db, payload.ordenes)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    return {
        "message": "Orders added",
        "mesa": receipt.mesa,
        "rows": receipt.rows,
    }


@router.get("/get/orders")
def get_orders(db: Session = Depends(get_db)):
    try:
        return list_ledger(db)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc


@router.get("/get/orders/mesa")
def get_mesa_orders(mesa: int = Query(...), db: Session = Depends(get_db)):
    try:
        return list_mirror(db, mesa)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc


@router.put("/update/orden/{mesa}")
def update_order(mesa: int, payload: OrderQuantityUpdate, db: Session = Depends(get_db)):
    try:
        outcome = update_order_quantity(db, mesa, payload.producto, payload.cantidad)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    raise_for_outcome(outcome, "Product not found in order")
    return {"message": "Product updated"}


@router.post("/insert/orden/{mesa}", status_code=201)
def insert_order_line(mesa: int, payload: OrderLine, db: Session = Depends(get_db)):
    try:
        append_order_item(db, mesa, payload)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    return {"message": "Product added"}
