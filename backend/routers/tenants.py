from fastapi import APIRouter, Body, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.deps import get_db
from models.families import USER_COPY
from models.payloads import UserDatabaseLink
from routers.errors import raise_for_outcome, to_http_error
from services.cloning import CloneOutcome, link_dataset_to_user, refresh_inventory
from services.errors import TableEngineError
from services.identifiers import resolve
from services.table_repository import list_user_links, read_rows, update_row

router = APIRouter(tags=["tenants"])


@router.post("/user/add/database", status_code=201)
def add_user_database(payload: UserDatabaseLink, db: Session = Depends(get_db)):
    try:
        outcome = link_dataset_to_user(db, payload.username, payload.baseDeDatos)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc

    if outcome is CloneOutcome.CLONED:
        message = "Database added and table created"
    else:
        message = "Database added"
    return {"message": message, "outcome": outcome.value}


@router.get("/user/databases/{username}")
def get_user_databases(username: str, db: Session = Depends(get_db)):
    try:
        return list_user_links(db, username)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc


@router.get("/datosUser/{base}/{username}")
def read_user_dataset(base: str, username: str, db: Session = Depends(get_db)):
    try:
        return read_rows(db, resolve(USER_COPY, username, base))
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc


@router.put("/inventoryUser/{base}/{rank}/{username}")
def update_user_dataset_row(
    base: str,
    rank: str,
    username: str,
    updated: dict | None = Body(None),
    db: Session = Depends(get_db),
):
    try:
        outcome = update_row(db, resolve(USER_COPY, username, base), "rank", rank, updated)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    raise_for_outcome(outcome)
    return {"message": "Item updated successfully"}


@router.get("/inventory/{username}")
def get_inventory(username: str, db: Session = Depends(get_db)):
    try:
        return refresh_inventory(db, username)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
