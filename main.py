from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classroom.config import get_settings
from classroom.infrastructure.database import engine, initialize_database
from classroom.interfaces.api.errors import register_exception_handlers
from classroom.interfaces.api.middleware import RequestLoggingMiddleware
from classroom.interfaces.api.routes import register_routes
from classroom.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup and release pooled connections on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    setup_logging()
    settings = get_settings()

    app = FastAPI(title="Classroom Notifications", lifespan=lifespan)

    # Origins of the browser client allowed to poll the feed.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)
    register_routes(app)
    return app


app = create_app()
