"""
License Normalizer

Turns a license URL (or its absence) into the license object stored with
every material:

    {"short_name": "by-nc-sa", "typed_name": ["by", "nc", "sa"],
     "disclaimer": DEFAULT_DISCLAIMER, "url": "<source url>"}
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from ..core.errors import LicenseFormatError

LICENSE_PATTERN = re.compile(r"/licen[sc]es/([\w\-]+)/")

NO_LICENSE_DISCLAIMER = (
    "X5GON recommends the use of the Creative Commons open licenses. "
    "During a transitory phase, other licenses, open in spirit, "
    "are sometimes used by our partner sites."
)
DEFAULT_DISCLAIMER = (
    "The usage of the corresponding material is in all cases "
    "under the sole responsibility of the user."
)


def extract_short_name(url: str) -> str:
    """
    Return the license code found between `/licenses/` (or `/licences/`)
    and the next slash.

    Raises
    ------
    LicenseFormatError
        If the URL has no such segment.
    """
    match = LICENSE_PATTERN.search(url)
    if match is None:
        raise LicenseFormatError(f"license url has no /licenses/<code>/ segment: {url!r}")
    return match.group(1)


def license_from_code(short_name: str, url: Optional[str] = None) -> Dict[str, Any]:
    return {
        "short_name": short_name,
        "typed_name": short_name.split("-"),
        "disclaimer": DEFAULT_DISCLAIMER,
        "url": url,
    }


def normalize_license(url: Optional[str]) -> Dict[str, Any]:
    """
    Build the stored license object from a license URL.

    Without a URL the short name carries the no-license disclaimer and
    `typed_name` is left out entirely.
    """
    if not url:
        return {
            "short_name": NO_LICENSE_DISCLAIMER,
            "disclaimer": DEFAULT_DISCLAIMER,
            "url": url,
        }
    return license_from_code(extract_short_name(url), url)
