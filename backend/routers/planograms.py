import logging

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.deps import get_db
from models.families import PLANOGRAM
from routers.datasets import read_upload
from routers.errors import raise_for_outcome, to_http_error
from services.errors import TableEngineError
from services.identifiers import resolve
from services.ingestion import provision_and_ingest
from services.table_repository import delete_row, list_catalog, read_rows, update_row

logger = logging.getLogger(__name__)

router = APIRouter(tags=["planograms"])


def _read_planogram(db: Session, planograma: str, columns: list[str] | None = None):
    try:
        return read_rows(db, resolve(PLANOGRAM, planograma), columns)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc


@router.post("/upload/excel/planograma")
async def upload_planogram(
    tableName: str = Form(...),
    myFile: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    grid = await read_upload(myFile)
    try:
        report = provision_and_ingest(db, PLANOGRAM, tableName, grid)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc

    logger.info("UPLOAD: planogram=%s rows=%s", tableName, report.rows_written)
    return {
        "message": "File processed successfully",
        "table": report.table_name,
        "created": report.provisioned,
        "rows_inserted": report.rows_written,
    }


@router.get("/planogramas")
def list_planograms(db: Session = Depends(get_db)):
    return list_catalog(db, PLANOGRAM)


@router.get("/datosPlanograma/{planograma}")
def read_planogram(planograma: str, db: Session = Depends(get_db)):
    return _read_planogram(db, planograma)


@router.get("/datosFrentesTotalesUser/planogramas/{planograma}")
def read_total_fronts(planograma: str, db: Session = Depends(get_db)):
    return _read_planogram(db, planograma, ["frentes_totales"])


@router.get("/datosDegradadoUser/degradados/{planograma}")
def read_gradient(planograma: str, db: Session = Depends(get_db)):
    return _read_planogram(db, planograma, ["degradado"])


@router.get("/datosFrentesUser/frentes/{planograma}")
def read_fronts(planograma: str, db: Session = Depends(get_db)):
    return _read_planogram(db, planograma, ["frente"])


@router.put("/planograma/{base}/{frente}")
def update_planogram_row(
    base: str,
    frente: str,
    updated: dict | None = Body(None),
    db: Session = Depends(get_db),
):
    try:
        outcome = update_row(db, resolve(PLANOGRAM, base), "frente", frente, updated)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    raise_for_outcome(outcome)
    return {"message": "Item updated successfully"}


@router.delete("/planograma/{base}/{frente}")
def delete_planogram_row(base: str, frente: str, db: Session = Depends(get_db)):
    try:
        outcome = delete_row(db, resolve(PLANOGRAM, base), "frente", frente)
    except (TableEngineError, SQLAlchemyError) as exc:
        raise to_http_error(exc) from exc
    raise_for_outcome(outcome)
    return {"message": "Item deleted successfully"}
