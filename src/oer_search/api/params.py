"""
Query parameter sanitization.

Raw query strings are trimmed, lower-cased and coerced here so that the
search core only ever sees a clean `SearchRequest`.
"""

from __future__ import annotations

from typing import Annotated, List, Optional

from fastapi import Query

from ..search.models import SearchRequest

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}

QueryStr = Annotated[Optional[str], Query()]


def clean(value: Optional[str], lower: bool = True) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if lower:
        value = value.lower()
    return value or None


def split_list(value: Optional[str]) -> Optional[List[str]]:
    value = clean(value)
    if value is None:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def to_int(value: Optional[str]) -> Optional[int]:
    value = clean(value)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def to_int_list(value: Optional[str]) -> Optional[List[int]]:
    items = split_list(value)
    if items is None:
        return None
    ids = [int(item) for item in items if item.lstrip("-").isdigit()]
    return ids or None


def to_bool(value: Optional[str]) -> Optional[bool]:
    value = clean(value)
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


def _build_request(
    text: Optional[str],
    types: Optional[str],
    licenses: Optional[str],
    languages: Optional[str],
    content_languages: Optional[str],
    content_extension: Optional[str],
    provider_ids: Optional[str],
    wikipedia: Optional[str],
    wikipedia_limit: Optional[str],
    sort_by: Optional[str],
    limit: Optional[str],
    page: Optional[str],
    url: Optional[str] = None,
) -> SearchRequest:
    return SearchRequest(
        text=clean(text, lower=False),
        url=clean(url, lower=False),
        types=clean(types),
        licenses=split_list(licenses),
        languages=split_list(languages),
        content_languages=split_list(content_languages),
        content_extension=clean(content_extension),
        provider_ids=to_int_list(provider_ids),
        wikipedia=to_bool(wikipedia),
        wikipedia_limit=to_int(wikipedia_limit),
        sort_by=clean(sort_by),
        limit=to_int(limit),
        page=to_int(page),
    )


def search_request(
    text: QueryStr = None,
    types: QueryStr = None,
    licenses: QueryStr = None,
    languages: QueryStr = None,
    content_languages: QueryStr = None,
    content_extension: QueryStr = None,
    provider_ids: QueryStr = None,
    wikipedia: QueryStr = None,
    wikipedia_limit: QueryStr = None,
    sort_by: QueryStr = None,
    limit: QueryStr = None,
    page: QueryStr = None,
) -> SearchRequest:
    return _build_request(
        text, types, licenses, languages, content_languages, content_extension,
        provider_ids, wikipedia, wikipedia_limit, sort_by, limit, page,
    )


def recommend_request(
    text: QueryStr = None,
    url: QueryStr = None,
    types: QueryStr = None,
    licenses: QueryStr = None,
    languages: QueryStr = None,
    content_languages: QueryStr = None,
    content_extension: QueryStr = None,
    provider_ids: QueryStr = None,
    wikipedia: QueryStr = None,
    wikipedia_limit: QueryStr = None,
    sort_by: QueryStr = None,
    limit: QueryStr = None,
    page: QueryStr = None,
) -> SearchRequest:
    return _build_request(
        text, types, licenses, languages, content_languages, content_extension,
        provider_ids, wikipedia, wikipedia_limit, sort_by, limit, page, url=url,
    )
