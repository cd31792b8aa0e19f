from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_search_service
from .models import LanguagesResponse
from ..auth.models import ClientContext
from ..auth.security import require_scopes
from ..search.service import SearchService

router = APIRouter(prefix="/api/v1/languages", tags=["languages"])


@router.get("", response_model=LanguagesResponse, summary="Document languages in the index")
async def list_languages(
    service: Annotated[SearchService, Depends(get_search_service)],
) -> LanguagesResponse:
    cache = service.languages
    return LanguagesResponse(languages=cache.languages, refreshed_at=cache.refreshed_at)


@router.post("/refresh", response_model=LanguagesResponse, summary="Reload the language cache")
async def refresh_languages(
    client: Annotated[ClientContext, Depends(require_scopes("admin"))],
    service: Annotated[SearchService, Depends(get_search_service)],
) -> LanguagesResponse:
    languages = await service.refresh_languages()
    return LanguagesResponse(languages=languages, refreshed_at=service.languages.refreshed_at)
