"""Design CRUD. There is deliberately no list/search endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from layerforge.dependencies import get_store
from layerforge.models.design import DesignCreate, DesignRecord, DesignUpdate
from layerforge.models.responses import DeleteResponse
from layerforge.storage.designs import DesignStore

router = APIRouter(prefix="/designs")


@router.post("", response_model=DesignRecord, status_code=201, response_model_by_alias=True)
async def create_design(req: DesignCreate, store: DesignStore = Depends(get_store)) -> DesignRecord:
    return store.create_design(req)


@router.get("/{design_id}", response_model=DesignRecord, response_model_by_alias=True)
async def get_design(design_id: str, store: DesignStore = Depends(get_store)) -> DesignRecord:
    return store.get_record(design_id)


@router.patch("/{design_id}", response_model=DesignRecord, response_model_by_alias=True)
async def update_design(
    design_id: str,
    req: DesignUpdate,
    store: DesignStore = Depends(get_store),
) -> DesignRecord:
    return store.update_design(design_id, req)


@router.delete("/{design_id}", response_model=DeleteResponse, response_model_by_alias=True)
async def delete_design(design_id: str, store: DesignStore = Depends(get_store)) -> DeleteResponse:
    removed = store.delete_design(design_id)
    return DeleteResponse(id=design_id, layers_removed=removed)
