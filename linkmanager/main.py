import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import links
from .config import Settings, settings as default_settings
from .core.errors import LinkManagerError
from .core.seed import seed_if_empty
from .core.store import LinkStore
from .database import create_db_engine, create_session_factory, init_database
from .schemas import ErrorResponse
from .services.metadata import MetadataExtractor

logger = logging.getLogger(__name__)

SERVICE_NAME = "Link Manager"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed an empty database on startup"""
    init_database(app.state.engine)
    logger.info("Database initialized successfully")

    if app.state.settings.SEED_EXAMPLES:
        db = app.state.session_factory()
        try:
            seed_if_empty(LinkStore(db), app.state.extractor.favicon_template)
        finally:
            db.close()

    yield

    app.state.engine.dispose()


def format_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one message, e.g. "tags: Input should be a valid list" """
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            messages.append(f"{'.'.join(loc)}: {error.get('msg')}")
        else:
            messages.append(str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


async def link_manager_error_handler(request: Request, exc: LinkManagerError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": format_validation_error(exc)})


def create_app(
    settings: Optional[Settings] = None,
    extractor: Optional[MetadataExtractor] = None
) -> FastAPI:
    """
    Build the application with its own engine, session factory and extractor.

    Args:
        settings: Defaults to settings read from the environment
        extractor: Defaults to an extractor configured from settings
    """
    settings = settings or default_settings

    app = FastAPI(
        title=SERVICE_NAME,
        description="Personal bookmark manager",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = create_db_engine(settings.DATABASE_URL)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.extractor = extractor or MetadataExtractor(
        timeout=settings.METADATA_TIMEOUT,
        user_agent=settings.METADATA_USER_AGENT,
        favicon_template=settings.FAVICON_SERVICE_URL
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LinkManagerError, link_manager_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(
        links.router,
        prefix="/api",
        tags=["links"],
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        }
    )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": SERVICE_NAME}

    return app


app = create_app()


def run():
    logging.basicConfig(
        level=default_settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger.info("Link Manager server running at http://localhost:%s", default_settings.PORT)
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
