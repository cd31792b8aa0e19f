"""
Search Service

Orchestrates every search-facing operation:

- plain search (index, or the image provider for `types=image`)
- recommendation from reference materials
- record detail, create, update, delete
- bulk normalize-then-write

Upstream failures (`IndexClientError`, `ImageSearchError`) are not caught
here; the application's exception handlers turn them into a generic 500.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..core.errors import MaterialNotFoundError, MissingParameterError
from ..index.client import DocumentNotFoundError, IndexClient, IndexClientError
from ..providers.images import ImageSearchClient, estimate_totals
from .concepts import concept_weights, extract_concepts
from .formatter import DisplayOptions, format_aggregations, format_result
from .languages import LanguageCache
from .models import MaterialHit, SearchRequest
from .pagination import PaginationWindow
from .query import (
    compile_material_query,
    compile_recommend_query,
    compile_reference_query,
    compile_search_query,
)
from .records import normalize_partial, normalize_record

logger = logging.getLogger("oer.search")

BULK_PROGRESS_EVERY = 10000


@dataclass
class BulkResult:
    indexed: int = 0
    failed: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def _material_id(raw: Dict[str, Any]) -> int:
    """
    Integer id of a raw record.

    Raises
    ------
    ValueError
        If the id is missing, boolean, fractional or not numeric.
    """
    value = raw.get("material_id")
    if value is None or isinstance(value, bool):
        raise ValueError(f"invalid material_id {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"invalid material_id {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"invalid material_id {value!r}") from None


def _total_hits(output: Dict[str, Any]) -> int:
    total = output.get("hits", {}).get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total)


class SearchService:
    """
    Stateless per request; the only shared state is the language cache.
    """

    def __init__(
        self,
        index: IndexClient,
        images: ImageSearchClient,
        languages: LanguageCache,
        search_base_url: str,
        recommend_base_url: str,
    ) -> None:
        self.index = index
        self.images = images
        self.languages = languages
        self.search_base_url = search_base_url
        self.recommend_base_url = recommend_base_url

    async def refresh_languages(self) -> List[str]:
        return await self.languages.refresh(self.index)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, request: SearchRequest) -> Dict[str, Any]:
        """
        Plain text search.

        Raises
        ------
        MissingParameterError
            If `text` is absent.
        """
        if not request.text:
            raise MissingParameterError(
                "query parameter 'text' not available", request.query_params()
            )

        window = PaginationWindow.plan(request.limit, request.page)
        effective = request.model_copy(update={"limit": window.limit, "page": window.page})

        compiled = compile_search_query(effective, window.from_, window.size)
        if compiled is None:
            return await self._search_images(effective, window)

        output = await self.index.search(compiled.body)
        options = DisplayOptions.for_request(effective, compiled.fetch_contents)
        return self._assemble(effective, window, output, options, self.search_base_url)

    async def _search_images(self, request: SearchRequest, window: PaginationWindow) -> Dict[str, Any]:
        page = await self.images.search(request.text, window.limit, window.page, request.licenses)
        total_hits, total_pages, exact = estimate_totals(page)
        if not exact:
            logger.debug("Image total estimated from %d pages", page.page_count)

        params = request.query_params()
        window.complete(total_hits, self.search_base_url, params, total_pages=total_pages)

        metadata = window.metadata()
        metadata["total_hits_exact"] = exact
        metadata["aggregations"] = format_aggregations({})
        return {
            "query": params,
            "rec_materials": [format_result(image) for image in page.results],
            "metadata": metadata,
        }

    # ------------------------------------------------------------------
    # Recommendation
    # ------------------------------------------------------------------

    async def recommend(self, request: SearchRequest) -> Dict[str, Any]:
        """
        Recommend materials related to the ones published under `url`.

        Falls back to a plain search when no `url` is given, or when the
        url matches nothing and `text` is available.
        """
        if not request.text and not request.url:
            raise MissingParameterError(
                "query parameter 'text' or 'url' not available", request.query_params()
            )
        if not request.url:
            return await self.search(request)

        lookup = await self.index.search(compile_reference_query(request.url))
        if _total_hits(lookup) == 0 and request.text:
            logger.info("No reference materials for %s, serving plain search", request.url)
            return await self.search(request)

        references = [MaterialHit.from_hit(hit).record for hit in lookup["hits"]["hits"]]
        weighted = concept_weights(extract_concepts(references), len(references))
        excluded = [record.material_url for record in references if record.material_url]

        window = PaginationWindow.plan(request.limit, request.page)
        effective = request.model_copy(update={"limit": window.limit, "page": window.page})

        compiled = compile_recommend_query(effective, window.from_, window.size, weighted, excluded)
        output = await self.index.search(compiled.body)
        options = DisplayOptions.for_request(effective, compiled.fetch_contents)
        return self._assemble(effective, window, output, options, self.recommend_base_url)

    def _assemble(
        self,
        request: SearchRequest,
        window: PaginationWindow,
        output: Dict[str, Any],
        options: DisplayOptions,
        base_url: str,
    ) -> Dict[str, Any]:
        hits = output.get("hits", {}).get("hits", [])
        results = [format_result(MaterialHit.from_hit(hit), options) for hit in hits]

        params = request.query_params()
        window.complete(_total_hits(output), base_url, params)

        metadata = window.metadata()
        metadata["total_hits_exact"] = True
        metadata["aggregations"] = format_aggregations(output.get("aggregations", {}))
        return {"query": params, "rec_materials": results, "metadata": metadata}

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def get_material(
        self,
        material_id: int,
        wikipedia: Optional[bool] = None,
        wikipedia_limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        output = await self.index.search(compile_material_query(material_id))
        hits = output.get("hits", {}).get("hits", [])
        if not hits:
            raise MaterialNotFoundError(material_id)
        options = DisplayOptions(wikipedia=bool(wikipedia), wikipedia_limit=wikipedia_limit)
        return format_result(MaterialHit.from_hit(hits[0]), options)

    async def create_material(self, raw: Dict[str, Any]) -> int:
        """
        Normalize and write one record, then refresh the index.

        Raises
        ------
        MissingParameterError
            If the record has no integer `material_id`.
        LicenseFormatError
            If the license URL is malformed.
        """
        material_id = raw.get("material_id")
        if material_id is None:
            raise MissingParameterError("body parameter 'record.material_id' not available")
        try:
            material_id = _material_id(raw)
        except ValueError:
            raise MissingParameterError(
                "body parameter 'record.material_id' must be an integer"
            ) from None

        record = normalize_record({**raw, "material_id": material_id})
        await self.index.index_document(record["material_id"], record)
        await self.index.refresh()
        logger.info("Material %s pushed to the index", record["material_id"])
        return record["material_id"]

    async def update_material(self, material_id: int, raw: Dict[str, Any]) -> None:
        partial = normalize_partial(raw)
        try:
            await self.index.update_document(material_id, partial)
        except DocumentNotFoundError as exc:
            raise MaterialNotFoundError(material_id) from exc
        await self.index.refresh()
        logger.info("Material %s updated", material_id)

    async def delete_material(self, material_id: int) -> None:
        try:
            await self.index.delete_document(material_id)
        except DocumentNotFoundError as exc:
            raise MaterialNotFoundError(material_id) from exc
        await self.index.refresh()
        logger.info("Material %s deleted", material_id)

    async def bulk_index(self, records: Iterable[Dict[str, Any]]) -> BulkResult:
        """
        Normalize and write records one by one.

        A failing record is counted, logged and skipped; the batch goes on.
        The index is refreshed once at the end.
        """
        result = BulkResult()
        for raw in records:
            material_id = raw.get("material_id")
            if not material_id:
                result.skipped += 1
                continue

            try:
                material_id = _material_id(raw)
                record = normalize_record({**raw, "material_id": material_id})
                await self.index.index_document(material_id, record)
                result.indexed += 1
            except (ValueError, TypeError, AttributeError, IndexClientError) as exc:
                result.failed += 1
                logger.warning("Material %s not indexed: %s", material_id, exc)

            processed = result.indexed + result.failed
            if processed and processed % BULK_PROGRESS_EVERY == 0:
                logger.info("Currently processed: %d OER materials", processed)

        await self.index.refresh()
        logger.info(
            "Bulk load finished: %d indexed, %d failed, %d skipped",
            result.indexed,
            result.failed,
            result.skipped,
        )
        return result
