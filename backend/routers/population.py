"""Population endpoints for the interactive evolution loop.

A browser UI polls the current generation, sends pick events, and asks the
server to breed once enough trees were picked. Every handler holds the
context lock while it touches the engine.
"""

import dataclasses
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from backend.app_factory import AppContext
from backend.models import (
    EvolveRequest,
    FlushResponse,
    PickRequest,
    PickResponse,
    PopulationState,
    ResetRequest,
    ShowcaseRequest,
)
from grove.engine import GrammaticalEvolution
from grove.exceptions import GroveError, UnknownIndividualError
from grove.persistence import best_sentences

logger = logging.getLogger(__name__)


def _state(engine: GrammaticalEvolution, include_branches: bool = False) -> PopulationState:
    return PopulationState.from_population(
        engine.population,
        required_picks=engine.config.required_picks,
        ready_to_evolve=engine.ready_to_evolve(),
        finished=engine.is_finished(),
        include_branches=include_branches,
    )


def setup_population_router(ctx: AppContext) -> APIRouter:
    """Create and configure the population router.

    Args:
        ctx: The application context owning the engine

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/population", tags=["population"])

    @router.get("", response_model=PopulationState)
    async def get_population(branches: bool = False):
        """The current generation; ``branches=true`` adds drawn segments."""
        async with ctx.lock:
            return _state(ctx.get_engine(), include_branches=branches)

    @router.post("/reset", response_model=PopulationState)
    async def reset_population(request: ResetRequest):
        """Start a new run from a fresh generation 0."""
        async with ctx.lock:
            config = dataclasses.replace(ctx.config, seed=request.seed)
            try:
                engine = ctx.start_run(config.validate())
            except GroveError as e:
                raise HTTPException(status_code=400, detail=str(e))
            logger.info("Run reset (seed=%s)", request.seed)
            return _state(engine)

    @router.post("/picks", response_model=PickResponse)
    async def record_pick(request: PickRequest):
        """Pick or unpick one tree of the current generation."""
        async with ctx.lock:
            engine = ctx.get_engine()
            try:
                weight = engine.record_pick(request.individual_id, request.selected)
            except UnknownIndividualError:
                raise HTTPException(
                    status_code=404, detail=f"Tree not found: {request.individual_id}"
                )
            return PickResponse(
                individual_id=request.individual_id,
                weight=weight,
                pick_count=engine.population.pick_count,
                ready_to_evolve=engine.ready_to_evolve(),
            )

    @router.post("/picks/reset", response_model=PopulationState)
    async def reset_picks():
        """Unpick every tree of the current generation."""
        async with ctx.lock:
            engine = ctx.get_engine()
            engine.reset_picks()
            return _state(engine)

    @router.post("/evolve", response_model=PopulationState)
    async def evolve(request: EvolveRequest):
        """Breed the next generation from the picks made so far."""
        async with ctx.lock:
            engine = ctx.get_engine()
            if engine.is_finished():
                raise HTTPException(status_code=409, detail="Run is finished")
            if not request.force and not engine.ready_to_evolve():
                raise HTTPException(
                    status_code=409,
                    detail=(
                        f"Pick at least {engine.config.required_picks} trees "
                        f"(picked {engine.population.pick_count})"
                    ),
                )
            try:
                engine.evolve_generation()
            except GroveError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.error(f"Error breeding generation: {e}", exc_info=True)
                raise HTTPException(status_code=500, detail=str(e))
            return _state(engine)

    @router.get("/export")
    async def export_population():
        """The current generation as an archive record, branches included."""
        async with ctx.lock:
            stats = ctx.get_engine().export_generation(include_branches=True)
            return JSONResponse(stats.to_json_dict())

    return router


def setup_archive_router(ctx: AppContext) -> APIRouter:
    """Create the router that saves runs and shows the best archived trees."""
    router = APIRouter(prefix="/api/archive", tags=["archive"])

    @router.post("/flush", response_model=FlushResponse)
    async def flush_archive():
        """Save the run: every bred generation plus the current one.

        A run is saved once; a second flush answers 409.
        """
        async with ctx.lock:
            engine = ctx.get_engine()
            if engine.run_saved:
                raise HTTPException(status_code=409, detail="Run already saved")
            path = engine.finish_run(ctx.archive_dir)
            if path is None:
                raise HTTPException(status_code=500, detail="Failed to save evaluations")
            return FlushResponse(path=str(path), generation=engine.population.generation_number)

    @router.post("/showcase", response_model=PopulationState)
    async def showcase(request: ShowcaseRequest):
        """Replace the current generation with the fittest archived trees.

        Sentences come from every archive in the archive folder, best first.
        """
        async with ctx.lock:
            engine = ctx.get_engine()
            try:
                sentences = best_sentences(ctx.archive_dir, request.count)
                engine.showcase(sentences)
            except GroveError as e:
                raise HTTPException(status_code=400, detail=str(e))
            logger.info("Showing %d archived trees", len(engine.population))
            return _state(engine)

    return router
