"""POST /api/guides/snap — guide lines and snapped position for a layer edit."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from layerforge.config import Settings
from layerforge.dependencies import get_settings
from layerforge.editor import operations
from layerforge.editor.state import EditorState
from layerforge.errors import LayerNotFound
from layerforge.models.requests import GuideSnapRequest
from layerforge.models.responses import GuideSnapResponse

router = APIRouter(prefix="/guides")


@router.post("/snap", response_model=GuideSnapResponse, response_model_by_alias=True)
async def snap_layer(
    req: GuideSnapRequest,
    settings: Settings = Depends(get_settings),
) -> GuideSnapResponse:
    state = EditorState(
        canvas_width=req.canvas_width,
        canvas_height=req.canvas_height,
        layers=tuple(snapshot.to_domain() for snapshot in req.layers),
        show_guides=req.show_guides,
        snap_tolerance=settings.snap_tolerance if req.tolerance is None else req.tolerance,
    )
    moving = state.find(req.moving_layer_id)
    if moving is None:
        raise LayerNotFound(req.moving_layer_id)

    if req.is_transform:
        state = operations.transform_layer(
            state,
            moving.ref,
            x=req.x,
            y=req.y,
            width=req.width,
            height=req.height,
            rotation=req.rotation,
        )
    else:
        state = operations.move_layer(state, moving.ref, x=req.x, y=req.y)

    layer = state.get(moving.ref)
    guides = state.guides_for(moving.ref)
    line_x, line_y = state.active_guides
    return GuideSnapResponse(
        vertical_lines=list(guides.vertical),
        horizontal_lines=list(guides.horizontal),
        x=layer.x,
        y=layer.y,
        width=layer.width,
        height=layer.height,
        rotation=layer.rotation,
        snapped_x=line_x is not None,
        snapped_y=line_y is not None,
    )
