# =====================================================
# metrocal/api/errors.py - Exception -> HTTP mapping
# =====================================================
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

from metrocal.database.exceptions import (
    BulkAssociationError,
    ConcurrencyError,
    DatabaseError,
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Dal più specifico al più generico
STATUS_CODES = (
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DuplicateEntityError, status.HTTP_409_CONFLICT),
    (BulkAssociationError, status.HTTP_409_CONFLICT),
    (ConcurrencyError, status.HTTP_409_CONFLICT),
    (DatabaseError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_code_for(error: DatabaseError) -> int:
    for error_cls, code in STATUS_CODES:
        if isinstance(error, error_cls):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    code = status_code_for(exc)
    content = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, BulkAssociationError):
        content["operation"] = exc.operation
        content["attempted_count"] = exc.attempted_count

    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DatabaseError, database_error_handler)
