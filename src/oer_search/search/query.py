"""
Query Compiler

Builds the structured query document sent to the index engine.

Clauses are typed values (`Term`, `Terms`, `Regexp`, `Exists`, `Match`,
`Range`, `Nested`, `Bool`) accumulated by a `QueryBuilder` into ordered
`must` / `should` / `filter` / `must_not` lists; a clause list that stays
empty is simply left out of the serialized body.

Compilation order
-----------------
1. content-nested `must`
2. type filter
3. license filter
4. provider / language filters (plus the sort-key filter)
5. exclusion of reference materials (recommendation mode)
6. relevance `should` clauses
7. facet aggregations
8. minimum score
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import re

from ..core.errors import MissingParameterError
from .models import SearchRequest

# ---------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------

TRANSCRIPT_EXTENSIONS = ("plain", "webvtt", "dfxp")
DEFAULT_CONTENT_EXTENSION = "plain"
TYPE_GROUPS = ("text", "video", "audio", "image")
ALL_TYPES = "all"
IMAGE_GROUP = "image"
ANY_CC_LICENSE = "cc"

CONTENT_PAYLOAD_FIELDS = (
    "contents.type",
    "contents.extension",
    "contents.language",
    "contents.value",
)

FACETS = {
    "languages": "language",
    "types": "type",
    "licenses": "license.short_name",
    "providers": "provider_name",
}

SORT_FIELDS = ("creation_date", "retrieved_date")
RECENCY_WINDOW = ("now-5y/d", "now/d")
RECENCY_BOOST = 10.0
MIN_SCORE = 5
REFERENCE_LOOKUP_SIZE = 100
LANGUAGE_BUCKETS = 500

_EXTENSION_TOKEN = re.compile(r"^[a-z0-9]+(?:\.[a-z0-9]+)*$")


# ---------------------------------------------------------------------
# Clause Variants
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Term:
    field: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"term": {self.field: self.value}}


@dataclass(frozen=True)
class Terms:
    field: str
    values: Tuple[Any, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"terms": {self.field: list(self.values)}}


@dataclass(frozen=True)
class Regexp:
    field: str
    pattern: str

    def to_dict(self) -> Dict[str, Any]:
        return {"regexp": {self.field: self.pattern}}


@dataclass(frozen=True)
class Exists:
    field: str

    def to_dict(self) -> Dict[str, Any]:
        return {"exists": {"field": self.field}}


@dataclass(frozen=True)
class Match:
    field: str
    query: str
    boost: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.boost is None:
            return {"match": {self.field: self.query}}
        return {"match": {self.field: {"query": self.query, "boost": self.boost}}}


@dataclass(frozen=True)
class Range:
    field: str
    gte: Optional[str] = None
    lte: Optional[str] = None
    boost: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        bounds: Dict[str, Any] = {}
        if self.gte is not None:
            bounds["gte"] = self.gte
        if self.lte is not None:
            bounds["lte"] = self.lte
        if self.boost is not None:
            bounds["boost"] = self.boost
        return {"range": {self.field: bounds}}


@dataclass(frozen=True)
class Bool:
    must: Tuple["Clause", ...] = ()
    should: Tuple["Clause", ...] = ()
    filter: Tuple["Clause", ...] = ()
    must_not: Tuple["Clause", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        for name in ("must", "should", "filter", "must_not"):
            clauses = getattr(self, name)
            if clauses:
                body[name] = [c.to_dict() for c in clauses]
        return {"bool": body}


@dataclass(frozen=True)
class Nested:
    path: str
    query: "Clause"

    def to_dict(self) -> Dict[str, Any]:
        return {"nested": {"path": self.path, "query": self.query.to_dict()}}


Clause = Union[Term, Terms, Regexp, Exists, Match, Range, Bool, Nested]


# ---------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------

@dataclass
class QueryBuilder:
    """
    Accumulates clauses for one request and serializes the query body.
    """
    from_: int = 0
    size: int = 20
    must: List[Clause] = field(default_factory=list)
    should: List[Clause] = field(default_factory=list)
    filter: List[Clause] = field(default_factory=list)
    must_not: List[Clause] = field(default_factory=list)
    source_excludes: List[str] = field(default_factory=list)
    sort: List[Any] = field(default_factory=list)
    collapse_field: Optional[str] = None
    aggregations: Dict[str, str] = field(default_factory=dict)
    min_score: Optional[float] = None

    def bool_query(self) -> Bool:
        return Bool(
            must=tuple(self.must),
            should=tuple(self.should),
            filter=tuple(self.filter),
            must_not=tuple(self.must_not),
        )

    def build(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "from": self.from_,
            "size": self.size,
            "query": self.bool_query().to_dict(),
        }
        if self.source_excludes:
            body["_source"] = {"excludes": list(self.source_excludes)}
        if self.sort:
            body["sort"] = list(self.sort)
        if self.collapse_field:
            body["collapse"] = {"field": self.collapse_field}
        if self.aggregations:
            body["aggs"] = {
                name: {"terms": {"field": facet_field}}
                for name, facet_field in self.aggregations.items()
            }
        if self.min_score is not None:
            body["min_score"] = self.min_score
        body["track_total_hits"] = True
        return body


@dataclass(frozen=True)
class CompiledQuery:
    body: Dict[str, Any]
    fetch_contents: bool = False


# ---------------------------------------------------------------------
# Type Resolution
# ---------------------------------------------------------------------

def resolve_types(types: Optional[str]) -> Tuple[Optional[str], List[str]]:
    """
    Split the `types` parameter into a type group or file-extension hints.

    Returns
    -------
    (group, extensions)
        `group` is one of TYPE_GROUPS or None; `extensions` is empty
        unless the value was not a group token. Extensions are letters and
        digits, optionally dot-separated ("tar.gz"); a leading dot is
        ignored and any other token is dropped.
    """
    if not types:
        return None, []
    token = types.strip().lower()
    if token == ALL_TYPES:
        return None, []
    if token in TYPE_GROUPS:
        return token, []
    extensions = [t.strip().lstrip(".") for t in token.split(",")]
    return None, [t for t in extensions if _EXTENSION_TOKEN.match(t)]


def wants_images(request: SearchRequest) -> bool:
    group, _ = resolve_types(request.types)
    return group == IMAGE_GROUP


# ---------------------------------------------------------------------
# Clause Steps
# ---------------------------------------------------------------------

def add_content_clause(builder: QueryBuilder, request: SearchRequest) -> bool:
    """
    Require a matching content entry; return True when content payloads
    should be returned with the hits.
    """
    extension = request.content_extension
    fetch_contents = extension in TRANSCRIPT_EXTENSIONS

    nested_must: List[Clause] = [
        Term("contents.extension", extension if fetch_contents else DEFAULT_CONTENT_EXTENSION)
    ]
    if request.content_languages:
        nested_must.append(Terms("contents.language", tuple(request.content_languages)))

    builder.must.append(Nested("contents", Bool(must=tuple(nested_must))))
    if not fetch_contents:
        builder.source_excludes.extend(CONTENT_PAYLOAD_FIELDS)
    return fetch_contents


def extension_pattern(extensions: Sequence[str]) -> str:
    escaped = [ext.replace(".", "\\.") for ext in extensions]
    return f".*\\.({'|'.join(escaped)})"


def add_type_clause(builder: QueryBuilder, request: SearchRequest) -> None:
    """
    Restrict to a type group or to material URLs ending in one of the
    requested extensions.

    Raises
    ------
    MissingParameterError
        If `types` is neither a group nor carries a usable extension.
    """
    group, extensions = resolve_types(request.types)
    if group:
        builder.filter.append(Term("type", group))
    elif extensions:
        builder.filter.append(Regexp("material_url", extension_pattern(extensions)))
    elif request.types and request.types.strip().lower() != ALL_TYPES:
        raise MissingParameterError(
            "query parameter 'types' has no valid file extension", request.query_params()
        )


def add_license_clause(builder: QueryBuilder, licenses: Optional[Sequence[str]]) -> None:
    if not licenses:
        return
    if ANY_CC_LICENSE in licenses:
        builder.filter.append(Exists("license.url"))
    else:
        builder.filter.append(Terms("license.short_name", tuple(licenses)))


def add_attribute_clauses(builder: QueryBuilder, request: SearchRequest) -> None:
    if request.provider_ids:
        builder.filter.append(Terms("provider_id", tuple(request.provider_ids)))
    if request.languages:
        builder.filter.append(Terms("language", tuple(request.languages)))


def add_sort(builder: QueryBuilder, sort_by: Optional[str]) -> None:
    if sort_by not in SORT_FIELDS:
        return
    if sort_by == "creation_date":
        builder.filter.append(Exists("creation_date"))
    builder.sort.extend([{sort_by: {"order": "desc"}}, "_score"])


def add_exclusions(builder: QueryBuilder, material_urls: Sequence[str]) -> None:
    if material_urls:
        builder.must_not.append(Terms("material_url", tuple(material_urls)))
    builder.collapse_field = "website_url"


def add_text_relevance(builder: QueryBuilder, text: str) -> None:
    builder.should.extend([
        Match("title", text),
        Nested("contents", Match("contents.value", text)),
        Nested("wikipedia", Match("wikipedia.sec_name", text)),
        Range("creation_date", gte=RECENCY_WINDOW[0], lte=RECENCY_WINDOW[1], boost=RECENCY_BOOST),
    ])


def add_concept_relevance(builder: QueryBuilder, weighted: Sequence[Tuple[str, float]]) -> None:
    for name, weight in weighted:
        builder.should.append(
            Nested("wikipedia", Match("wikipedia.sec_name", name, boost=weight))
        )


def add_aggregations(builder: QueryBuilder) -> None:
    builder.aggregations.update(FACETS)


def _filters(builder: QueryBuilder, request: SearchRequest) -> bool:
    fetch_contents = add_content_clause(builder, request)
    add_type_clause(builder, request)
    add_license_clause(builder, request.licenses)
    add_attribute_clauses(builder, request)
    add_sort(builder, request.sort_by)
    return fetch_contents


# ---------------------------------------------------------------------
# Public Compilers
# ---------------------------------------------------------------------

def compile_search_query(request: SearchRequest, from_: int, size: int) -> Optional[CompiledQuery]:
    """
    Compile a plain text search.

    Returns None when the request targets the image group; such requests
    are served by the image provider and never reach the index.
    """
    if wants_images(request):
        return None

    builder = QueryBuilder(from_=from_, size=size)
    fetch_contents = _filters(builder, request)
    add_text_relevance(builder, request.text or "")
    add_aggregations(builder)
    builder.min_score = MIN_SCORE
    return CompiledQuery(builder.build(), fetch_contents)


def compile_recommend_query(
    request: SearchRequest,
    from_: int,
    size: int,
    weighted_concepts: Sequence[Tuple[str, float]],
    excluded_urls: Sequence[str],
) -> CompiledQuery:
    """
    Compile a recommendation query from concepts of reference materials.

    The reference materials themselves are excluded and hits sharing a
    website URL are collapsed into one.
    """
    builder = QueryBuilder(from_=from_, size=size)
    fetch_contents = _filters(builder, request)
    add_exclusions(builder, excluded_urls)
    add_concept_relevance(builder, weighted_concepts)
    add_aggregations(builder)
    builder.min_score = MIN_SCORE
    return CompiledQuery(builder.build(), fetch_contents)


def compile_reference_query(url: str) -> Dict[str, Any]:
    return {
        "size": REFERENCE_LOOKUP_SIZE,
        "query": Term("website_url", {"value": url}).to_dict(),
    }


def compile_material_query(material_id: int) -> Dict[str, Any]:
    return {"query": Terms("_id", (str(material_id),)).to_dict()}


def compile_language_aggregation() -> Dict[str, Any]:
    return {
        "size": 0,
        "aggs": {"languages": {"terms": {"field": "language", "size": LANGUAGE_BUCKETS}}},
    }
