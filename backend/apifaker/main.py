"""
API Faker — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes store construction, middleware registration, route
       mounting and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn apifaker.main:app) and by the tests.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌────────────┐  │
    │  │ Req ID   │→│ Logging  │→│ GZip │→│ CORS       │  │
    │  └──────────┘ └──────────┘ └──────┘ └────────────┘  │
    │                                                     │
    │  Routes:  /db  /{resource}  /{resource}/{item_id}   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ApiFakerError→status │ HTTPException │ →500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   setup logging → load the JSON document → log the resources
    Shutdown:  log (every write is already on disk)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apifaker import __version__
from apifaker.config import Settings, settings as default_settings
from apifaker.database import Database
from apifaker.exceptions import ApiFakerError
from apifaker.middleware.logging import RequestLoggingMiddleware
from apifaker.middleware.request_id import RequestIDMiddleware, request_id_var
from apifaker.routes import resources
from apifaker.services.resource_service import ResourceService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [WARNING] apifaker.routes.dependencies: ...
    Called once from the lifespan, before the store is loaded.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's own access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Load the store on startup.

    A file that cannot be loaded aborts startup: serving an empty store in
    place of the user's data would silently overwrite it on the first write.
    """
    config: Settings = app.state.settings
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("API Faker %s starting up...", __version__)

    database: Database = app.state.database
    await database.init()

    resource_names = sorted(database.get_data())
    logger.info("Resources: %s", ", ".join(resource_names) or "(none)")
    if app.state.resource_service.read_only:
        logger.info("Read-only mode: all writes will be rejected with 403")
    logger.info("Serving at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("API Faker shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every failure as {"error": "<message>"}.

    Handler hierarchy:
        ApiFakerError           → exc.status_code (400 / 403 / 404)
        StarletteHTTPException  → its status (unmatched route 404, wrong verb 405)
        Exception (fallback)    → 500, traceback logged server-side only
    """

    @app.exception_handler(ApiFakerError)
    async def handle_api_faker_error(request: Request, exc: ApiFakerError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.debug("[%s] %d %s | Context: %s", rid, exc.status_code, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error on %s %s: %s",
            rid,
            request.method,
            request.url.path,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:    Settings to use; defaults to the environment-loaded singleton.
        database:  Store to serve; defaults to one backed by config.db_file.
                   Tests pass an in-memory Database here.
                   Its id_field overrides config.id_field for routing.
    """
    config = config or default_settings
    if database is None:
        database = Database(
            path=config.db_file or None,
            id_field=config.id_field,
            strict_ids=config.strict_ids,
        )

    app = FastAPI(
        title="API Faker",
        description="Generic REST API over a JSON document: collections, singular resources, CRUD.",
        version=__version__,
        # /docs, /redoc and /openapi.json would shadow resources of the same name
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.database = database
    # The store owns the identifier key; routing must agree with it
    options = config.router_options.model_copy(update={"id_field": database.id_field})
    app.state.resource_service = ResourceService(database, options)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute
    origins = config.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(resources.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `apifaker.main:app` to be importable
app = create_app()
