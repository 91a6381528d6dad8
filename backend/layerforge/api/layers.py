"""Layer CRUD.

Updates apply only the fields present in the body. A layer's asset is fixed
once set; sending a different one is rejected with 409.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from layerforge.dependencies import get_store
from layerforge.models.design import LayerCreate, LayerRecord, LayerUpdate
from layerforge.models.responses import DeleteResponse
from layerforge.storage.designs import DesignStore

router = APIRouter(prefix="/layers")


@router.post("", response_model=LayerRecord, status_code=201, response_model_by_alias=True)
async def create_layer(req: LayerCreate, store: DesignStore = Depends(get_store)) -> LayerRecord:
    return store.create_layer(req)


@router.get("/{layer_id}", response_model=LayerRecord, response_model_by_alias=True)
async def get_layer(layer_id: str, store: DesignStore = Depends(get_store)) -> LayerRecord:
    return store.get_layer(layer_id)


@router.put("/{layer_id}", response_model=LayerRecord, response_model_by_alias=True)
async def update_layer(
    layer_id: str,
    req: LayerUpdate,
    store: DesignStore = Depends(get_store),
) -> LayerRecord:
    return store.update_layer(layer_id, req)


@router.delete("/{layer_id}", response_model=DeleteResponse, response_model_by_alias=True)
async def delete_layer(layer_id: str, store: DesignStore = Depends(get_store)) -> DeleteResponse:
    store.delete_layer(layer_id)
    return DeleteResponse(id=layer_id)
