import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.middleware.cors import CORSMiddleware

from sqlpatch.api.main import api_router
from sqlpatch.core.config import settings
from sqlpatch.core.openapi import add_query_operations
from sqlpatch.core.registry import QueryRegistry
from sqlpatch.core.storage import ArtifactStore
from sqlpatch.engines.executor import PatchGenerator
from sqlpatch.engines.sql import SQLTemplateEngine

logging.basicConfig(level=settings.LOG_LEVEL)
_logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
APP_DESCRIPTION = (
    "Generate SQL patch files from annotated query templates "
    "and user-supplied parameter values."
)


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load templates once and prepare the output directory."""
    registry = QueryRegistry.from_directory(settings.TEMPLATES_DIR)
    store = ArtifactStore(settings.OUTPUT_DIR)
    store.ensure_directory()
    engine = SQLTemplateEngine(
        in_clause_max_size=settings.IN_CLAUSE_MAX_SIZE,
        strict=settings.STRICT_PARAM_TYPES,
    )
    app.state.registry = registry
    app.state.store = store
    app.state.generator = PatchGenerator(registry, store, engine=engine)
    app.openapi_schema = None
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=APP_VERSION,
    description=APP_DESCRIPTION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)


def custom_openapi() -> dict[str, Any]:
    """Generated schema plus one documented operation per loaded query."""
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    registry = getattr(app.state, "registry", None)
    if registry is not None:
        add_query_operations(schema, registry, prefix=settings.API_V1_STR)
    app.openapi_schema = schema
    return schema


app.openapi = custom_openapi  # type: ignore[method-assign]


# ---------------------------------------------------------------------------
# Global exception handlers: standardized error response format
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with a human-readable detail string instead of raw Pydantic errors."""
    errors = exc.errors()
    messages = []
    for err in errors:
        loc = " → ".join(str(l) for l in err.get("loc", []) if l != "body")
        msg = err.get("msg", "Invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return JSONResponse(
        status_code=422,
        content={"detail": "; ".join(messages)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Catch-all for unhandled exceptions: log and return 500 with safe message."""
    _logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail = "Internal server error"
    if settings.ENVIRONMENT == "local":
        detail = f"Internal server error: {exc}"
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
    )


# Set all CORS enabled origins
if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_V1_STR)
