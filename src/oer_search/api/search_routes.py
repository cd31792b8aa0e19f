"""
Search Routes

Public search and recommendation endpoints. Both return the same
envelope: echoed effective parameters, formatted records and navigation
metadata with facet counts.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from .dependencies import get_search_service
from .models import SearchResponse
from .params import recommend_request, search_request
from ..search.models import SearchRequest
from ..search.service import SearchService

router = APIRouter(prefix="/api/v1", tags=["search"])


@router.get(
    "/oer_materials",
    response_model=SearchResponse,
    summary="Search through the OER materials",
    status_code=status.HTTP_200_OK,
)
async def search_materials(
    req: Annotated[SearchRequest, Depends(search_request)],
    service: Annotated[SearchService, Depends(get_search_service)],
) -> SearchResponse:
    """
    Full-text search over the material index.

    `types=image` is answered by the image provider instead of the index.
    A missing `text` is rejected with 400 by the missing-parameter handler;
    upstream failures become a generic 500.
    """
    return await service.search(req)


@router.get(
    "/recommend/materials",
    response_model=SearchResponse,
    summary="Recommend materials related to a web page",
    status_code=status.HTTP_200_OK,
)
async def recommend_materials(
    req: Annotated[SearchRequest, Depends(recommend_request)],
    service: Annotated[SearchService, Depends(get_search_service)],
) -> SearchResponse:
    """
    Recommend materials sharing Wikipedia concepts with the materials
    published under `url`. Without a usable `url` this behaves as a plain
    search on `text`.
    """
    return await service.recommend(req)
