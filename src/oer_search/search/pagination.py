"""
Pagination Planner

Converts the caller's `limit` / `page` into the engine's `from` / `size`
and, once the total is known, into page counts and navigation links.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_PAGE = 1


def effective_limit(limit: Optional[int]) -> int:
    """Any limit outside 1..MAX_LIMIT-1 falls back to the default."""
    if not limit or limit <= 0 or limit >= MAX_LIMIT:
        return DEFAULT_LIMIT
    return limit


def effective_page(page: Optional[int]) -> int:
    if not page or page <= 0:
        return DEFAULT_PAGE
    return page


def _serialize(params: Dict[str, Any]) -> str:
    flat = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        elif isinstance(value, bool):
            value = "true" if value else "false"
        flat[key] = value
    return urlencode(flat)


@dataclass
class PaginationWindow:
    limit: int
    page: int
    total_hits: Optional[int] = None
    total_pages: Optional[int] = None
    prev_page_url: Optional[str] = None
    next_page_url: Optional[str] = None

    @classmethod
    def plan(cls, limit: Optional[int], page: Optional[int]) -> "PaginationWindow":
        return cls(limit=effective_limit(limit), page=effective_page(page))

    @property
    def size(self) -> int:
        return self.limit

    @property
    def from_(self) -> int:
        return (self.page - 1) * self.size

    def complete(
        self,
        total_hits: int,
        base_url: str,
        params: Dict[str, Any],
        total_pages: Optional[int] = None,
    ) -> "PaginationWindow":
        """
        Fill in totals and navigation links.

        Parameters
        ----------
        total_hits : int
            Hit count reported for the query.
        base_url : str
            Fixed path the navigation links point at.
        params : Dict[str, Any]
            Full effective request parameters; `page` is overridden.
        total_pages : Optional[int]
            Page count to use instead of deriving it from `total_hits`.
        """
        self.total_hits = total_hits
        self.total_pages = (
            total_pages if total_pages is not None else math.ceil(total_hits / self.size)
        )

        if self.page - 1 > 0:
            self.prev_page_url = f"{base_url}?{_serialize({**params, 'page': self.page - 1})}"
        if self.total_pages >= self.page + 1:
            self.next_page_url = f"{base_url}?{_serialize({**params, 'page': self.page + 1})}"
        return self

    def metadata(self) -> Dict[str, Any]:
        return {
            "total_hits": self.total_hits,
            "total_pages": self.total_pages,
            "prev_page": self.prev_page_url,
            "next_page": self.next_page_url,
        }
