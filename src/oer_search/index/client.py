"""
Index Engine Client

Thin async client over the index engine's REST API. It knows how to send a
query document, write/update/delete single documents and force a refresh;
it knows nothing about what the queries mean.

Every write is followed by an explicit refresh from the service layer so
that subsequent reads observe it immediately.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("oer.index")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class IndexClientError(RuntimeError):
    """Base exception for index engine failures."""


class IndexRequestError(IndexClientError):
    """Raised when the index engine cannot be reached."""


class IndexResponseError(IndexClientError):
    """Raised when the index engine answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class DocumentNotFoundError(IndexClientError):
    """Raised when an update or delete targets an absent document id."""

    def __init__(self, doc_id: Any) -> None:
        super().__init__(f"document {doc_id} not found")
        self.doc_id = doc_id


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class IndexClient:
    """
    Async REST client bound to a single index.
    """

    def __init__(
        self,
        base_url: str,
        index: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Parameters
        ----------
        base_url : str
            Node URL of the index engine.
        index : str
            Name of the index every call targets.
        timeout : float
            Transport timeout in seconds.
        client : Optional[httpx.AsyncClient]
            Pre-built HTTP client (tests pass one with a mock transport).
        """
        self.index = index
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            logger.error("Index request %s %s failed: %s", method, path, type(exc).__name__)
            raise IndexRequestError(f"Index request failed: {type(exc).__name__}") from exc
        return resp

    @staticmethod
    def _json(resp: httpx.Response, method: str, path: str) -> Dict[str, Any]:
        if resp.status_code >= 400:
            logger.error(
                "Index responded %s to %s %s: %s",
                resp.status_code,
                method,
                path,
                resp.text[:500],
            )
            raise IndexResponseError(
                resp.status_code,
                f"Index responded with status {resp.status_code}",
            )
        return resp.json()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute one query document and return the raw engine response.
        """
        path = f"/{self.index}/_search"
        resp = await self._request("POST", path, body)
        return self._json(resp, "POST", path)

    async def index_document(self, doc_id: Any, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create or replace the document stored under `doc_id`.
        """
        path = f"/{self.index}/_doc/{doc_id}"
        resp = await self._request("PUT", path, document)
        return self._json(resp, "PUT", path)

    async def update_document(self, doc_id: Any, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge `partial` into an existing document.

        Raises
        ------
        DocumentNotFoundError
            If no document is stored under `doc_id`.
        """
        path = f"/{self.index}/_update/{doc_id}"
        resp = await self._request("POST", path, {"doc": partial})
        if resp.status_code == 404:
            raise DocumentNotFoundError(doc_id)
        return self._json(resp, "POST", path)

    async def delete_document(self, doc_id: Any) -> Dict[str, Any]:
        """
        Remove the document stored under `doc_id`.

        Raises
        ------
        DocumentNotFoundError
            If no document is stored under `doc_id`.
        """
        path = f"/{self.index}/_doc/{doc_id}"
        resp = await self._request("DELETE", path)
        if resp.status_code == 404:
            raise DocumentNotFoundError(doc_id)
        return self._json(resp, "DELETE", path)

    async def refresh(self) -> None:
        path = f"/{self.index}/_refresh"
        resp = await self._request("POST", path)
        self._json(resp, "POST", path)
