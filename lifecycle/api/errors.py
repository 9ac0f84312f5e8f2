"""Mapping of domain errors onto HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from lifecycle.core.observability import get_correlation_id, get_logger
from lifecycle.domain.shared.exceptions import DomainError, ErrorType

logger = get_logger(__name__)

STATUS_BY_ERROR_TYPE = {
    ErrorType.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorType.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorType.CONCURRENCY: status.HTTP_409_CONFLICT,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_ERROR_TYPE.get(
        exc.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    logger.warning(
        "domain_error",
        path=request.url.path,
        error_type=exc.error_type.value,
        status_code=status_code,
        message=exc.message,
    )
    body = {"detail": exc.to_dict()}
    correlation_id = get_correlation_id()
    if correlation_id:
        body["correlation_id"] = correlation_id
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
