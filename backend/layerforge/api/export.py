"""GET /api/export/{design_id} — composite a design and return it as PNG."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from layerforge.config import Settings
from layerforge.dependencies import get_exporter, get_settings, get_store
from layerforge.engine.exporter import DesignExporter
from layerforge.errors import ExportTimeout
from layerforge.storage.designs import DesignStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/export/{design_id}",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def export_design(
    design_id: str,
    store: DesignStore = Depends(get_store),
    exporter: DesignExporter = Depends(get_exporter),
    settings: Settings = Depends(get_settings),
) -> Response:
    # Snapshot first: edits made while the export runs are not seen
    design = store.get_design(design_id)

    try:
        result = await asyncio.wait_for(
            exporter.export_png(design),
            timeout=settings.export_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.warning(
            "Export of design %s timed out after %.1fs",
            design_id,
            settings.export_timeout_seconds,
        )
        raise ExportTimeout(
            f"Export of design {design_id} did not finish in time",
            design_id=design_id,
        ) from e

    headers = {"Content-Disposition": f'attachment; filename="{result.filename}"'}
    if result.skipped:
        headers["X-Skipped-Layers"] = ",".join(result.skipped)
    return Response(content=result.png, media_type="image/png", headers=headers)
