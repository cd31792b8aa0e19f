"""
Record Normalization

Prepares raw material records (as sent to the create/update routes or read
from an export) for storage in the index.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Optional

from .license import normalize_license

MIMETYPES: Dict[str, List[str]] = {
    "video": [
        "video/mp4", "video/webm", "video/ogg", "video/mpeg", "video/quicktime",
        "video/x-msvideo", "video/x-ms-wmv", "video/x-flv", "video/3gpp",
    ],
    "audio": [
        "audio/mpeg", "audio/mp3", "audio/ogg", "audio/wav", "audio/x-wav",
        "audio/webm", "audio/aac", "audio/flac", "audio/mp4",
    ],
    "text": [
        "application/pdf", "text/plain", "text/html",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.oasis.opendocument.text",
        "application/vnd.oasis.opendocument.presentation",
        "application/epub+zip", "application/rtf",
    ],
    "image": [
        "image/jpeg", "image/png", "image/gif", "image/svg+xml", "image/webp",
        "image/tiff", "image/bmp",
    ],
}

# camelCase keys from the concept extractor -> stored names
CONCEPT_FIELDS = {
    "secUri": "sec_uri",
    "secName": "sec_name",
    "pageRank": "pagerank",
    "dbPediaIri": "db_pedia_iri",
    "supportLen": "support",
    "wikiDataClasses": "wiki_data_classes",
}

_NEWLINES = re.compile(r"\r*\n+")
_TABS = re.compile(r"\t+")


def material_type(mimetype: Optional[str]) -> Optional[str]:
    for group, mimetypes in MIMETYPES.items():
        if mimetype in mimetypes:
            return group
    return None


def clean_text(value: str) -> str:
    return _TABS.sub(" ", _NEWLINES.sub(" ", value)).strip()


def rename_concepts(concepts: Optional[List[Dict[str, Any]]]) -> Optional[List[Dict[str, Any]]]:
    if concepts is None:
        return None
    renamed = []
    for concept in concepts:
        renamed.append({CONCEPT_FIELDS.get(key, key): value for key, value in concept.items()})
    return renamed


def normalize_record(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize a full record before it is written.

    - title/description: newlines and tabs collapsed to one space, trimmed
    - incoming `type` (a file extension) moves to `extension`; `type`
      becomes the group of `mimetype`
    - `license` (a URL or null) becomes the stored license object
    - wikipedia concept keys are renamed to their stored form

    Raises
    ------
    LicenseFormatError
        If the license URL is malformed.
    """
    record = copy.deepcopy(raw)

    if record.get("title"):
        record["title"] = clean_text(record["title"])
    if record.get("description"):
        record["description"] = clean_text(record["description"])

    record["extension"] = record.get("type")
    record["type"] = material_type(record.get("mimetype"))
    record["license"] = normalize_license(record.get("license"))
    record["wikipedia"] = rename_concepts(record.get("wikipedia"))
    return record


def normalize_partial(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize the fields an update carries, leaving everything else alone.
    """
    record = copy.deepcopy(raw)
    if "wikipedia" in record:
        record["wikipedia"] = rename_concepts(record["wikipedia"])
    if "license" in record and not isinstance(record["license"], dict):
        record["license"] = normalize_license(record["license"])
    return record
