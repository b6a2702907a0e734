"""
Shared API dependencies: caller identity, service wiring and error mapping.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from revenue.adapters.repositories_sqlite import (
    SQLiteActivityLogsRepo,
    SQLiteBatchesRepo,
    SQLiteFilesRepo,
    SQLiteProcessingLogsRepo,
    SQLiteValidationLogsRepo,
)
from revenue.core.database import get_db
from revenue.core.errors import (
    AccessDeniedError,
    BatchClosedError,
    NotFoundError,
    RevenueError,
    SchemaError,
    UnsupportedFormatError,
)
from revenue.core.logging_config import api_logger as logger
from revenue.services.batch_service import BatchService
from revenue.services.process_service import ProcessService
from revenue.services.validation_service import ValidationService

ERROR_STATUS = {
    NotFoundError: 404,
    AccessDeniedError: 403,
    SchemaError: 422,
    UnsupportedFormatError: 400,
    BatchClosedError: 400,
}


@dataclass
class Caller:
    """Who is making the request, as reported by the client."""

    user_id: Optional[str]
    user_name: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]


def get_caller(
    request: Request,
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    user_agent: Optional[str] = Header(None),
) -> Caller:
    client = request.client.host if request.client else None
    return Caller(user_id=x_user_id, user_name=x_user_name, ip_address=client, user_agent=user_agent)


def get_batch_service(db: Session = Depends(get_db)) -> BatchService:
    return BatchService(SQLiteBatchesRepo(db), SQLiteFilesRepo(db), SQLiteActivityLogsRepo(db))


def get_validation_service(
    db: Session = Depends(get_db),
    batch_service: BatchService = Depends(get_batch_service),
) -> ValidationService:
    return ValidationService(SQLiteFilesRepo(db), SQLiteValidationLogsRepo(db), batch_service)


def get_process_service(
    db: Session = Depends(get_db),
    batch_service: BatchService = Depends(get_batch_service),
) -> ProcessService:
    return ProcessService(SQLiteFilesRepo(db), SQLiteProcessingLogsRepo(db), batch_service)

async def revenue_error_handler(request: Request, exc: RevenueError):
    """Map service exceptions to HTTP status codes."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code == 500:
        logger.error(f"Unhandled service error on {request.url.path}: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RevenueError, revenue_error_handler)
