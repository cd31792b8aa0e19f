"""
API Models

Pydantic models for request bodies and response envelopes. Formatted
records stay plain dictionaries: their optional fields (`contents`,
`wikipedia`) are present only when requested.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


# ---------------------------------------------------------------------
# Search Responses
# ---------------------------------------------------------------------

class Aggregations(BaseModel):
    """
    Facet buckets (`{"key": ..., "doc_count": ...}`) per facet.
    """
    licenses: List[Dict[str, Any]] = Field(default_factory=list)
    languages: List[Dict[str, Any]] = Field(default_factory=list)
    providers: List[Dict[str, Any]] = Field(default_factory=list)
    types: List[Dict[str, Any]] = Field(default_factory=list)


class SearchMetadata(BaseModel):
    total_hits: Optional[int] = None
    total_pages: Optional[int] = None
    prev_page: Optional[str] = None
    next_page: Optional[str] = None
    total_hits_exact: bool = True
    aggregations: Aggregations = Field(default_factory=Aggregations)


class SearchResponse(BaseModel):
    """
    Envelope shared by the search and recommendation endpoints.
    """
    query: Dict[str, Any]
    rec_materials: List[Dict[str, Any]]
    metadata: SearchMetadata


class MaterialResponse(BaseModel):
    rec_materials: Dict[str, Any]


# ---------------------------------------------------------------------
# Record Mutations
# ---------------------------------------------------------------------

class MaterialWriteRequest(BaseModel):
    """
    Raw material record as produced by the ingestion pipeline.
    """
    record: Dict[str, Any]

    model_config = ConfigDict(extra="forbid")


class OperationResult(BaseModel):
    message: str
    material_id: Optional[int] = None


# ---------------------------------------------------------------------
# Languages
# ---------------------------------------------------------------------

class LanguagesResponse(BaseModel):
    languages: List[str] = Field(default_factory=list)
    refreshed_at: Optional[datetime] = None
