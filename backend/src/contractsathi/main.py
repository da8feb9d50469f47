"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from contractsathi import __version__
from contractsathi.api.ratelimit import limiter, rate_limit_exceeded_handler
from contractsathi.api.router import api_router
from contractsathi.config import get_settings
from contractsathi.domain.reports.renderer import ReportRenderer
from contractsathi.infrastructure.ai.factory import close_ai_client
from contractsathi.infrastructure.database.connection import dispose_engine
from contractsathi.infrastructure.document.extractor import DocumentExtractor
from contractsathi.infrastructure.storage.s3 import S3Storage
from contractsathi.observability.metrics import setup_metrics
from contractsathi.shared.exceptions import ContractSathiError
from contractsathi.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events."""
    setup_logging()
    settings = get_settings()
    logger.info(
        "contractsathi_starting",
        version=__version__,
        env=settings.app_env,
        ai_provider=settings.ai_provider,
        ai_configured=bool(settings.ai_api_key),
    )

    # Shared resources (avoid per-request client creation)
    app.state.s3_storage = getattr(app.state, "s3_storage", None) or S3Storage(settings)
    app.state.document_extractor = (
        getattr(app.state, "document_extractor", None) or DocumentExtractor()
    )
    app.state.report_renderer = getattr(app.state, "report_renderer", None) or ReportRenderer(
        settings.report_unicode_font_path
    )

    yield

    logger.info("contractsathi_stopping")
    await close_ai_client()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="ContractSathi API",
        description="Bilingual (English/Hindi) contract risk analysis",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Wildcard origins cannot be combined with credentials
    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    setup_metrics(app)

    return app


def _error(status_code: int, message: str, code: str, details: dict | None = None) -> JSONResponse:
    content: dict = {"error": message, "code": code}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Map request validation and the ContractSathiError hierarchy to JSON errors."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        _ = request
        return _error(
            400,
            "Invalid request",
            "validation_error",
            {"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ContractSathiError)
    async def contractsathi_error_handler(
        request: Request, exc: ContractSathiError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                exc.code,
                path=request.url.path,
                error=exc.message,
                details=exc.details,
            )
        if not exc.expose:
            return _error(exc.status_code, "An internal error occurred", exc.code)
        # Details of server-side failures stay in the logs
        details = exc.details if exc.status_code < 500 else None
        return _error(exc.status_code, exc.message, exc.code, details)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unexpected_error", path=request.url.path, error=str(exc))
        return _error(500, "An unexpected error occurred", "internal_error")


# Create app instance
app = create_app()
