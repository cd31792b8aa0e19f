"""
Result Formatter

Maps index hits and image-provider records into the public material shape.
Both kinds go through `format_result`; consumers tell them apart by the
`kind` field ("material" or "image"). `type` stays the material type, which
can itself be "image" for indexed pictures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import pycountry

from .license import license_from_code, normalize_license
from .models import ImageRecord, MaterialHit, SearchRequest

CC_METADATA_URL = "https://search.creativecommons.org/photos/{id}"


@dataclass(frozen=True)
class DisplayOptions:
    """
    Request-level flags controlling optional output fields.
    """
    wikipedia: bool = False
    wikipedia_limit: Optional[int] = None
    content_extension: Optional[str] = None
    fetch_contents: bool = False

    @classmethod
    def for_request(cls, request: SearchRequest, fetch_contents: bool = False) -> "DisplayOptions":
        return cls(
            wikipedia=bool(request.wikipedia),
            wikipedia_limit=request.wikipedia_limit,
            content_extension=request.content_extension,
            fetch_contents=fetch_contents,
        )


def language_name(code: Optional[str]) -> Optional[str]:
    """English name of an ISO 639-1 code, or None when the code is unknown."""
    if not code:
        return None
    language = pycountry.languages.get(alpha_2=code.lower())
    return language.name if language else None


def format_material(hit: MaterialHit, options: DisplayOptions) -> Dict[str, Any]:
    record = hit.record
    contents = record.contents or []

    output: Dict[str, Any] = {
        "kind": hit.kind,
        "weight": hit.score,
        "material_id": record.material_id,
        "title": record.title,
        "description": record.description,
        "creation_date": record.creation_date,
        "retrieved_date": record.retrieved_date,
        "type": record.type,
        "mimetype": record.mimetype,
        "url": record.material_url,
        "website": record.website_url,
        "language": record.language,
        "language_full": language_name(record.language),
        "license": record.license.model_dump(exclude_unset=True) if record.license else None,
        "provider": {
            "id": record.provider_id,
            "name": record.provider_name.lower() if record.provider_name else record.provider_name,
            "domain": record.provider_url,
        },
        "content_ids": [content.content_id for content in contents],
    }

    if options.fetch_contents:
        output["contents"] = [
            content.model_dump(exclude_unset=True)
            for content in contents
            if content.extension == options.content_extension
        ]

    if options.wikipedia:
        concepts = record.wikipedia or []
        if options.wikipedia_limit and options.wikipedia_limit > 0:
            concepts = concepts[:options.wikipedia_limit]
        output["wikipedia"] = [concept.model_dump(exclude_unset=True) for concept in concepts]

    return output


def format_image(image: ImageRecord) -> Dict[str, Any]:
    if image.license:
        license = license_from_code(image.license, image.license_url)
    else:
        license = normalize_license(None)

    return {
        "kind": image.kind,
        "type": "image",
        "image_id": image.id,
        "title": image.title,
        "source": image.source,
        "creator": image.creator,
        "creator_url": image.creator_url,
        "license": license,
        "material_url": image.url,
        "website": image.foreign_landing_url,
        "height": image.height,
        "width": image.width,
        "cc_metadata_url": CC_METADATA_URL.format(id=image.id),
    }


def format_result(
    result: Union[MaterialHit, ImageRecord],
    options: Optional[DisplayOptions] = None,
) -> Dict[str, Any]:
    if result.kind == "image":
        return format_image(result)
    return format_material(result, options or DisplayOptions())


def format_aggregations(aggregations: Dict[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Pull the facet buckets out of the engine response.

    Provider names are lower-cased to match the formatted records.
    """
    def buckets(name: str) -> List[Dict[str, Any]]:
        return list(aggregations.get(name, {}).get("buckets", []))

    providers = [
        {**bucket, "key": str(bucket.get("key", "")).lower()}
        for bucket in buckets("providers")
    ]
    return {
        "licenses": buckets("licenses"),
        "languages": buckets("languages"),
        "providers": providers,
        "types": buckets("types"),
    }
