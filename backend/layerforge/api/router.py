"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from layerforge.api import designs, export, guides, health, layers

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(export.router)
api_router.include_router(designs.router)
api_router.include_router(layers.router)
api_router.include_router(guides.router)
