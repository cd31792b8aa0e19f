from fastapi import APIRouter

from .dependencies import get_language_cache
from ..config import settings

router = APIRouter(tags=["health"])

@router.get("/health")
def health():
    return {
        "status": "ok",
        "index": settings.elasticsearch_index,
        "languages_cached": len(get_language_cache().languages),
    }
