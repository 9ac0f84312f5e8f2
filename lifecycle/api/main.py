import time
import uuid

from fastapi import APIRouter, FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from lifecycle.api.errors import register_exception_handlers
from lifecycle.api.routes import library, products, sales, tasks
from lifecycle.core.config import Settings
from lifecycle.core.observability import (
    get_logger,
    set_correlation_id,
    setup_structured_logging,
)
from lifecycle.infrastructure.container import Container, build_container

logger = get_logger(__name__)

api_router = APIRouter()
api_router.include_router(library.router)
api_router.include_router(sales.router)
api_router.include_router(products.router)
api_router.include_router(tasks.router)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation id to every request and logs its outcome."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )
        response.headers["X-Correlation-ID"] = correlation_id
        return response


def create_app(container: Container | None = None, settings: Settings | None = None) -> FastAPI:
    if container is None:
        container = build_container(settings or Settings())
    settings = container.settings

    setup_structured_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
    )
    app.state.container = container
    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app
