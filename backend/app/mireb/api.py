"""FastAPI application factory.

Wires the routers under ``/api``, the CORS policy, the exception handlers
that turn every failure into an error envelope, and the startup sequence.
"""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mireb import __version__
from mireb.configs import settings
from mireb.controllers.auth_controllers import auth_router
from mireb.controllers.leads_controllers import leads_router
from mireb.controllers.products_controllers import products_router
from mireb.errors import ApiError, ConflictError, UpstreamError, ValidationError
from mireb.logger_config import get_logger
from mireb.models.response_models import error_response, success_response
from mireb.repositories.storefront import models  # noqa: F401
from mireb.repositories.storefront.database import Base, engine

logger = get_logger(__name__)

API_PREFIX = "/api"
VALUE_ERROR_PREFIX = "Value error, "
REQUEST_LOCATIONS = {"body", "query", "path", "header"}


def init_database() -> None:
    """Create missing tables; any failure here is fatal."""
    logger.info("Creating database tables...")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.critical("Could not initialize the database", exc_info=True)
        raise
    logger.info("Database tables created successfully!")


def _fatal_loop_error(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    exc = context.get("exception")
    logger.critical(
        "Unhandled error outside a request: %s",
        context.get("message"),
        exc_info=exc,
    )
    os._exit(1)


def validation_details(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into ``{field, message, value}`` entries."""
    details = []
    for error in exc.errors():
        location = [
            str(part) for part in error.get("loc", ()) if part not in REQUEST_LOCATIONS
        ]
        message = str(error.get("msg", ""))
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]
        details.append(
            {
                "field": ".".join(location) or None,
                "message": message,
                "value": None if error.get("type") == "missing" else error.get("input"),
            }
        )
    return details


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.errors)


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(
        ValidationError.status_code,
        ValidationError.default_message,
        validation_details(exc),
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(404, f"Route {request.url.path} non trouvée")
    return error_response(exc.status_code, str(exc.detail))


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
    return error_response(ConflictError.status_code, ConflictError.default_message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(UpstreamError.status_code, UpstreamError.default_message)


def create_app(
    init_db: bool = True, seed: Optional[Callable[[], None]] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        init_db (bool): create the tables on startup.
        seed (Callable | None): called once after the tables exist.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        asyncio.get_running_loop().set_exception_handler(_fatal_loop_error)
        if init_db:
            init_database()
        if seed is not None:
            seed()
        logger.info("Mireb API started (%s)", settings.ENVIRONMENT)
        yield
        logger.info("Mireb API stopped")

    app = FastAPI(
        title="Mireb Commercial API",
        version=__version__,
        root_path=settings.ROOT_PATH_BACKEND,
        description="Catalogue produits, leads et comptes administrateurs.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(SQLAlchemyError, handle_unexpected_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(products_router, prefix=API_PREFIX)
    app.include_router(leads_router, prefix=API_PREFIX)

    @app.get("/", response_description="Api welcome")  # type: ignore[misc]
    async def index() -> JSONResponse:
        return success_response(
            "Bienvenue sur l'API Mireb Commercial",
            {
                "version": __version__,
                "endpoints": {
                    "auth": f"{API_PREFIX}/auth",
                    "products": f"{API_PREFIX}/products",
                    "leads": f"{API_PREFIX}/leads",
                },
            },
        )

    @app.get("/health", response_description="Api healthcheck")  # type: ignore[misc]
    async def health() -> JSONResponse:
        return success_response(
            "API Mireb Commercial en fonctionnement",
            {"version": __version__, "environment": settings.ENVIRONMENT},
        )

    return app
