"""Health check."""

from __future__ import annotations

from fastapi import APIRouter

from layerforge import __version__
from layerforge.engine.registry import get_registry
from layerforge.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        steps_registered=get_registry().count,
    )
