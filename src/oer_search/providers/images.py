"""
Image Search Provider Client

Requests served with `types=image` skip the index and are answered by an
external Creative Commons image catalogue. This module issues that request
and reshapes the upstream page into `ImageRecord` objects.

Limitations
-----------
- The provider reports pages, not always an exact result count. When the
  count is missing the total is estimated as min(page_count, 100) * 20.
- No retries; any upstream failure surfaces as `ImageSearchError`.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError

from ..search.models import ImagePage
from ..search.query import ANY_CC_LICENSE

logger = logging.getLogger("oer.images")

MAX_PAGES = 100
ESTIMATED_PAGE_SIZE = 20


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class ImageSearchError(RuntimeError):
    """Raised when the image provider request fails."""


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class ImageSearchClient:
    """
    Authenticated client for the image provider's search endpoint.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        sources: Sequence[str],
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.sources = list(sources)
        self._headers = {"Authorization": f"Bearer {token}"}
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_params(
        self,
        text: str,
        limit: int,
        page: int,
        licenses: Optional[Sequence[str]] = None,
    ) -> dict:
        """
        Upstream query parameters. The local "cc" license shorthand is
        dropped before forwarding.
        """
        params = {"q": text}
        forwarded = image_licenses(licenses)
        if forwarded:
            params["license"] = ",".join(forwarded)
        params["source"] = ",".join(self.sources)
        params["page_size"] = limit
        params["page"] = page
        return params

    async def search(
        self,
        text: str,
        limit: int,
        page: int,
        licenses: Optional[Sequence[str]] = None,
    ) -> ImagePage:
        """
        Fetch one page of images.

        Raises
        ------
        ImageSearchError
            On transport errors, non-2xx answers or unexpected payloads.
        """
        params = self.build_params(text, limit, page, licenses)
        try:
            resp = await self._client.get("/v1/images", params=params, headers=self._headers)
            resp.raise_for_status()
            return ImagePage.model_validate(resp.json())
        except httpx.HTTPStatusError as exc:
            logger.error("Image provider responded %s", exc.response.status_code)
            raise ImageSearchError(
                f"Image provider responded with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Image provider request failed: %s", type(exc).__name__)
            raise ImageSearchError(f"Image provider request failed: {type(exc).__name__}") from exc
        except (ValidationError, ValueError) as exc:
            logger.error("Image provider returned an unexpected payload")
            raise ImageSearchError("Image provider returned an unexpected payload") from exc


def estimate_totals(page: ImagePage) -> Tuple[int, int, bool]:
    """
    Return (total_hits, total_pages, exact) for an image page.

    `exact` is False when the hit count is the page-based estimate.
    """
    total_pages = min(page.page_count, MAX_PAGES)
    if page.result_count is not None:
        return page.result_count, total_pages, True
    return total_pages * ESTIMATED_PAGE_SIZE, total_pages, False


def image_licenses(licenses: Optional[Sequence[str]]) -> List[str]:
    return [code for code in (licenses or []) if code != ANY_CC_LICENSE]
