from functools import lru_cache

from ..config import settings
from ..index.client import IndexClient
from ..providers.images import ImageSearchClient
from ..search.languages import LanguageCache
from ..search.service import SearchService


@lru_cache
def get_index_client() -> IndexClient:
    return IndexClient(
        str(settings.elasticsearch_url),
        settings.elasticsearch_index,
        timeout=settings.elasticsearch_timeout,
    )


@lru_cache
def get_image_client() -> ImageSearchClient:
    return ImageSearchClient(
        str(settings.image_search_url),
        settings.image_search_token.get_secret_value(),
        settings.image_sources,
        timeout=settings.image_search_timeout,
    )


@lru_cache
def get_language_cache() -> LanguageCache:
    return LanguageCache()


@lru_cache
def get_search_service() -> SearchService:
    return SearchService(
        index=get_index_client(),
        images=get_image_client(),
        languages=get_language_cache(),
        search_base_url=settings.search_base_url,
        recommend_base_url=settings.recommend_base_url,
    )
