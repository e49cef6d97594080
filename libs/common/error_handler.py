"""Global exception handlers shared by dashboard applications."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from libs.common.logging import get_logger, get_request_id
from libs.db.documents import DocumentStoreError, TransactionAbortedError

logger = get_logger(__name__)


def _error_body(detail: str, code: str) -> dict:
    return {"detail": detail, "code": code, "request_id": get_request_id()}


async def transaction_aborted_handler(request: Request, exc: TransactionAbortedError) -> JSONResponse:
    logger.warning("Transaction gave up after repeated conflicts on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body("The request conflicted with a concurrent change; retry it", "CONFLICT"),
    )


async def document_store_error_handler(request: Request, exc: DocumentStoreError) -> JSONResponse:
    logger.error("Document store failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "STORE_ERROR"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "INTERNAL_ERROR"),
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register JSON error responses for failures that escape the services."""
    app.add_exception_handler(TransactionAbortedError, transaction_aborted_handler)
    app.add_exception_handler(DocumentStoreError, document_store_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
