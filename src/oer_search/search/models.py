"""
Search Data Models

This module defines the typed shapes the search core works with:

- `SearchRequest`: normalized search/recommendation parameters
- `MaterialRecord` and its parts: documents stored in the index
- `MaterialHit` / `ImageRecord`: the two result kinds the formatter accepts,
  tagged by their `kind` discriminator

Stored sub-documents (contents, concepts, license) accept unknown keys so
they can be echoed back exactly as the index holds them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    """
    Sanitized search input.

    `limit` and `page` hold whatever the caller sent; the pagination
    planner clamps them and the service echoes the effective values.
    """
    text: Optional[str] = None
    url: Optional[str] = None
    types: Optional[str] = None
    licenses: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    content_languages: Optional[List[str]] = None
    content_extension: Optional[str] = None
    provider_ids: Optional[List[int]] = None
    wikipedia: Optional[bool] = None
    wikipedia_limit: Optional[int] = None
    sort_by: Optional[str] = None
    limit: Optional[int] = None
    page: Optional[int] = None

    model_config = ConfigDict(extra="forbid")

    def query_params(self) -> Dict[str, Any]:
        """Parameters that were actually supplied, in declaration order."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------
# Stored Record Parts
# ---------------------------------------------------------------------

class License(BaseModel):
    short_name: Optional[str] = None
    typed_name: Optional[List[str]] = None
    disclaimer: Optional[str] = None
    url: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class Content(BaseModel):
    """
    One extracted content payload (plain text, transcript, ...).

    Only `content_id` survives when the payload fields are excluded
    from the returned source.
    """
    content_id: Optional[int] = None
    type: Optional[str] = None
    extension: Optional[str] = None
    language: Optional[str] = None
    value: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class WikipediaConcept(BaseModel):
    uri: Optional[str] = None
    name: Optional[str] = None
    sec_uri: Optional[str] = None
    sec_name: Optional[str] = None
    lang: Optional[str] = None
    cosine: Optional[float] = None
    pagerank: Optional[float] = None
    support: Optional[int] = None
    db_pedia_iri: Optional[str] = None
    wiki_data_classes: Optional[List[str]] = None

    model_config = ConfigDict(extra="allow")

    @property
    def label(self) -> Optional[str]:
        return self.sec_name or self.name


class MaterialRecord(BaseModel):
    """
    Canonical material document as stored in the index.
    """
    material_id: int
    title: Optional[str] = None
    description: Optional[str] = None
    creation_date: Optional[str] = None
    retrieved_date: Optional[str] = None
    type: Optional[str] = None
    extension: Optional[str] = None
    mimetype: Optional[str] = None
    material_url: Optional[str] = None
    website_url: Optional[str] = None
    language: Optional[str] = None
    license: Optional[License] = None
    provider_id: Optional[int] = None
    provider_name: Optional[str] = None
    provider_url: Optional[str] = None
    contents: Optional[List[Content]] = None
    wikipedia: Optional[List[WikipediaConcept]] = None

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------
# Result Kinds
# ---------------------------------------------------------------------

class MaterialHit(BaseModel):
    """
    One index hit: relevance score plus the stored record.
    """
    kind: Literal["material"] = "material"
    score: Optional[float] = None
    record: MaterialRecord

    @classmethod
    def from_hit(cls, hit: Dict[str, Any]) -> "MaterialHit":
        return cls(score=hit.get("_score"), record=MaterialRecord.model_validate(hit["_source"]))


class ImageRecord(BaseModel):
    """
    One result from the secondary image provider.
    """
    kind: Literal["image"] = "image"
    id: str
    title: Optional[str] = None
    source: Optional[str] = None
    creator: Optional[str] = None
    creator_url: Optional[str] = None
    license: Optional[str] = None
    license_version: Optional[str] = None
    license_url: Optional[str] = None
    url: Optional[str] = None
    foreign_landing_url: Optional[str] = None
    height: Optional[int] = None
    width: Optional[int] = None

    model_config = ConfigDict(extra="ignore")


class ImagePage(BaseModel):
    """
    One page of image results with the upstream counters.
    """
    results: List[ImageRecord] = Field(default_factory=list)
    page_count: int = 0
    result_count: Optional[int] = None
