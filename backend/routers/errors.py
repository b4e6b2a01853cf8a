import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from services.errors import RequestRejected, TableEngineError, TableNotFound
from services.spreadsheet import UnsupportedSpreadsheet
from services.table_repository import MutationOutcome

logger = logging.getLogger(__name__)


def to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, TableNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (RequestRejected, UnsupportedSpreadsheet, ValueError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, (TableEngineError, SQLAlchemyError)):
        logger.error("Store operation failed: %s", exc)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    raise exc


def raise_for_outcome(outcome: MutationOutcome, message: str = "Item not found") -> None:
    if outcome is MutationOutcome.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)
