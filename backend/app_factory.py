"""Application factory and context for the Grove evolution API.

The FastAPI app is built by ``create_app`` so importing this module has no
side effects. All runtime state lives in an ``AppContext`` attached to
``app.state.context``; tests pass their own context to get a fresh engine
with a fixed seed and a temporary archive folder.

Usage:
------
    # For production (settings from GROVE_* environment variables)
    app = create_app()

    # For testing
    app = create_app(context=AppContext(config=EvolutionConfig(seed=1)))
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import __version__
from grove.config import EvolutionConfig
from grove.config.server import DEFAULT_API_PORT, DEFAULT_ARCHIVE_DIR
from grove.engine import GrammaticalEvolution
from grove.exceptions import PersistenceError
from grove.logging_config import configure_logging


@dataclass
class AppContext:
    """Runtime context holding the evolution engine and server settings.

    Every request touching the engine must hold ``lock``; the engine itself
    is not safe for concurrent use.
    """

    config: EvolutionConfig = field(default_factory=EvolutionConfig.from_env)
    archive_dir: str = field(
        default_factory=lambda: os.getenv("GROVE_ARCHIVE_DIR", DEFAULT_ARCHIVE_DIR)
    )
    api_port: int = field(
        default_factory=lambda: int(os.getenv("GROVE_API_PORT", str(DEFAULT_API_PORT)))
    )
    allowed_origins: list = field(
        default_factory=lambda: os.getenv("ALLOWED_ORIGINS", "*").split(",")
    )
    server_version: str = __version__

    engine: Optional[GrammaticalEvolution] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    server_start_time: float = field(default_factory=time.time)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("backend"))

    def get_engine(self) -> GrammaticalEvolution:
        """The current engine, creating generation 0 on first use."""
        if self.engine is None:
            self.start_run(self.config)
        return self.engine

    def start_run(self, config: EvolutionConfig) -> GrammaticalEvolution:
        """Replace the engine with a fresh run.

        Generations the old engine queued but never flushed are dropped.
        """
        if self.engine is not None and len(self.engine.archive):
            self.logger.warning(
                "Discarding %d unsaved generations from the previous run",
                len(self.engine.archive),
            )
        self.config = config
        self.engine = GrammaticalEvolution(config)
        self.engine.init_population()
        return self.engine

    def flush_pending(self) -> None:
        """Write queued generations on shutdown; failures are logged only."""
        if self.engine is None or not len(self.engine.archive):
            return
        try:
            self.engine.archive.flush(self.archive_dir, rng=self.engine.rng)
        except PersistenceError as e:
            self.logger.error("Could not save pending generations: %s", e)


def create_app(
    *,
    config: Optional[EvolutionConfig] = None,
    archive_dir: Optional[str] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Override the run configuration (default: from GROVE_* env vars)
        archive_dir: Override where archives are written (default: GROVE_ARCHIVE_DIR)
        context: Pre-configured AppContext (for testing). If None, creates a new one.

    Returns:
        Configured FastAPI application with context attached as app.state.context
    """
    logger = configure_logging(include_uvicorn=True)

    if context is None:
        context = AppContext()
    if config is not None:
        context.config = config.validate()
    if archive_dir is not None:
        context.archive_dir = archive_dir

    context.logger = logging.getLogger("backend")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the first generation on startup, save pending work on shutdown."""
        ctx = app.state.context
        try:
            async with ctx.lock:
                engine = ctx.get_engine()
            ctx.logger.info(
                "Serving generation %d of %d trees",
                engine.population.generation_number,
                len(engine.population),
            )
            yield
            ctx.logger.info("LIFESPAN: Received shutdown signal")
        except Exception as e:
            ctx.logger.error(f"Exception in lifespan startup: {e}", exc_info=True)
            raise
        finally:
            ctx.flush_pending()

    app = FastAPI(title="Grove Interactive Evolution API", lifespan=lifespan)
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    _setup_routers(app, context)
    logger.debug("API routers configured")
    return app


def _setup_routers(app: FastAPI, ctx: AppContext) -> None:
    """Setup and include all API routers."""
    from backend.routers.health import setup_health_router
    from backend.routers.population import setup_archive_router, setup_population_router

    app.include_router(setup_population_router(ctx))
    app.include_router(setup_archive_router(ctx))
    app.include_router(setup_health_router(ctx))
