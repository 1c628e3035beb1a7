# backend/arithmancy/main.py
import logging
import random
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from . import __version__, config
from .db import AsyncSessionLocal, engine
from .engine import (ConflictError, GameEngine, GameError,
                     InvalidOperationError, NotFoundError)
from .logging import configure_logging
from .models import Base
from .routes import characters_router, game_router

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidOperationError: status.HTTP_400_BAD_REQUEST,
}


def status_for_error(exc: GameError) -> int:
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
    status_code = status_for_error(exc)
    logger.debug("%s %s -> %d %s", request.method, request.url.path, status_code, exc.code)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def create_app(
    db_engine: Optional[AsyncEngine] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    rng: Optional[random.Random] = None,
    create_tables: bool = True,
) -> FastAPI:
    """
    Build the application.

    Tests pass their own engine/session factory and a seeded random source;
    the defaults come from arithmancy.db and arithmancy.config.
    """
    db_engine = db_engine or engine
    session_factory = session_factory or AsyncSessionLocal

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        - Configure logging.
        - Create tables (dev-time; deployments run migrations).
        - Create the GameEngine and publish it on app.state.
        """
        # Startup
        configure_logging(config.LOG_LEVEL)

        if create_tables:
            async with db_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        source = rng
        if source is None and config.RANDOM_SEED is not None:
            source = random.Random(config.RANDOM_SEED)
        app.state.game_engine = GameEngine(session_factory, rng=source)

        logger.info("Arithmancy engine %s started", __version__)

        yield

        # Shutdown
        app.state.game_engine = None
        logger.info("Arithmancy engine stopped")

    app = FastAPI(title="Arithmancy", version=__version__, lifespan=lifespan)
    app.add_exception_handler(GameError, game_error_handler)
    app.include_router(characters_router)
    app.include_router(game_router)

    @app.get("/")
    async def root():
        return {"name": "arithmancy", "version": __version__}

    return app


app = create_app()
