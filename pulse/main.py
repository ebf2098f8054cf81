import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from alembic.config import Config
from alembic import command

from pulse.core.config import Settings, get_settings
from pulse.core.errors import register_exception_handlers
from pulse.core.middleware import RequestLoggingMiddleware
from pulse.db.database import build_engine, build_session_factory, init_db
from pulse.api.routes import api_router, health_router
from pulse.logs import api_logger, debug_logger

ALEMBIC_INI = Path(__file__).parent.parent / "alembic.ini"


def run_migrations(settings: Settings) -> None:
    """Upgrade the database schema to the latest Alembic revision"""
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(alembic_cfg, "head")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    if settings.is_production and settings.uses_default_secret:
        api_logger.warning("SECRET_KEY is the built-in default; set it in production")

    try:
        if settings.RUN_MIGRATIONS:
            api_logger.info("Running database migrations...")
            # env.py drives its own event loop, so keep it off ours
            await asyncio.to_thread(run_migrations, settings)

        await init_db(app.state.engine)
        api_logger.info("Database ready")
    except Exception as e:
        api_logger.error(f"Error preparing database: {e}")
        raise

    yield

    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one Settings instance"""
    settings = settings or get_settings()

    debug_logger.set_level(logging.DEBUG if settings.DEBUG else logging.INFO)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Team, project and task board API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )

    app.add_middleware(RequestLoggingMiddleware, json_logs=settings.is_production)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.settings
    api_logger.info(f"Server starting on http://{settings.HOST}:{settings.PORT} ({settings.ENVIRONMENT})")

    uvicorn.run(
        "pulse.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
