import logging

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.deps import get_db
from models.families import DATASET
from routers.errors import raise_for_outcome, to_http_error
from services.errors import TableEngineError
from services.identifiers import resolve
from services.ingestion import provision_and_ingest
from services.spreadsheet import UnsupportedSpreadsheet, read_grid
from services.table_repository import delete_row, list_catalog, read_rows, update_row

logger = logging.getLogger(__name__)

router = APIRouter(tags=["datasets"])


async def read_upload(file: UploadFile) -> list[list]:
    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Empty file")
    try:
        return read_grid(contents, file.filename or "")
    except UnsupportedSpreadsheet as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        raise HTTPException(status_code=400, detail=f"Failed to parse file: {exc}")


@router.post("/upload/excel")
async def upload_dataset(
    tableName: str = Form(...),
    myFile: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    grid = await read_upload(myFile)
    try:
        report = provision_and_ingest(db, DATASET, tableName, grid)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc

    logger.info("UPLOAD: dataset=%s rows=%s", tableName, report.rows_written)
    return {
        "message": "File processed successfully",
        "table": report.table_name,
        "created": report.provisioned,
        "rows_inserted": report.rows_written,
    }


@router.get("/bases-datos")
def list_datasets(db: Session = Depends(get_db)):
    return list_catalog(db, DATASET)


@router.get("/datos/{base}")
def read_dataset(base: str, db: Session = Depends(get_db)):
    try:
        return read_rows(db, resolve(DATASET, base))
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc


@router.put("/inventory/{base}/{rank}")
def update_dataset_row(
    base: str,
    rank: str,
    updated: dict | None = Body(None),
    db: Session = Depends(get_db),
):
    try:
        outcome = update_row(db, resolve(DATASET, base), "rank", rank, updated)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    raise_for_outcome(outcome)
    return {"message": "Item updated successfully"}


@router.delete("/inventory/{base}/{rank}")
def delete_dataset_row(base: str, rank: str, db: Session = Depends(get_db)):
    try:
        outcome = delete_row(db, resolve(DATASET, base), "rank", rank)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    raise_for_outcome(outcome)
    return {"message": "Item deleted successfully"}
