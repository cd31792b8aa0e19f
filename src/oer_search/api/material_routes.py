"""
Material Routes

Record detail plus the create / update / delete endpoints used by the
ingestion pipeline. Every write is followed by an index refresh, so a
subsequent read sees it.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from .dependencies import get_search_service
from .models import MaterialResponse, MaterialWriteRequest, OperationResult
from .params import to_bool, to_int
from ..auth.models import ClientContext
from ..auth.security import require_scopes
from ..search.service import SearchService

router = APIRouter(prefix="/api/v1/oer_materials", tags=["materials"])

WRITE_SCOPE = "materials_write"


@router.get(
    "/{material_id}",
    response_model=MaterialResponse,
    summary="Get a single material",
)
async def get_material(
    material_id: int,
    service: Annotated[SearchService, Depends(get_search_service)],
    wikipedia: Annotated[Optional[str], Query()] = None,
    wikipedia_limit: Annotated[Optional[str], Query()] = None,
) -> MaterialResponse:
    record = await service.get_material(
        material_id,
        wikipedia=to_bool(wikipedia),
        wikipedia_limit=to_int(wikipedia_limit),
    )
    return MaterialResponse(rec_materials=record)


@router.post(
    "",
    response_model=OperationResult,
    summary="Add a new material to the index",
)
async def create_material(
    req: MaterialWriteRequest,
    client: Annotated[ClientContext, Depends(require_scopes(WRITE_SCOPE))],
    service: Annotated[SearchService, Depends(get_search_service)],
) -> OperationResult:
    material_id = await service.create_material(req.record)
    return OperationResult(message="record pushed to the index", material_id=material_id)


@router.patch(
    "/{material_id}",
    response_model=OperationResult,
    response_model_exclude_none=True,
    summary="Update a material in the index",
)
async def update_material(
    material_id: int,
    req: MaterialWriteRequest,
    client: Annotated[ClientContext, Depends(require_scopes(WRITE_SCOPE))],
    service: Annotated[SearchService, Depends(get_search_service)],
) -> OperationResult:
    await service.update_material(material_id, req.record)
    return OperationResult(message="record updated in the index")


@router.delete(
    "/{material_id}",
    response_model=OperationResult,
    response_model_exclude_none=True,
    summary="Delete a material from the index",
)
async def delete_material(
    material_id: int,
    client: Annotated[ClientContext, Depends(require_scopes(WRITE_SCOPE))],
    service: Annotated[SearchService, Depends(get_search_service)],
) -> OperationResult:
    await service.delete_material(material_id)
    return OperationResult(message="record deleted in the index")
