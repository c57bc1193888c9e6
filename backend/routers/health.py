"""Liveness endpoint."""

import time

from fastapi import APIRouter

from backend.app_factory import AppContext


def setup_health_router(ctx: AppContext) -> APIRouter:
    router = APIRouter(tags=["health"])

    @router.get("/health")
    async def health():
        return {
            "status": "ok",
            "version": ctx.server_version,
            "uptime_seconds": time.time() - ctx.server_start_time,
        }

    return router
