"""Utilities for deriving arXiv identifiers from URLs."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from urllib.parse import urlparse

ARXIV_ABS_URL = "https://arxiv.org/abs/{arxiv_id}"

_NEW_ID_RE = re.compile(r"^\d{4}\.\d{4,5}$")
_OLD_ID_RE = re.compile(r"^[a-z-]+(\.[A-Z]{2})?/\d{7}$", re.IGNORECASE)
_VERSIONED_NEW_ID_RE = re.compile(r"^(?P<base>\d{4}\.\d{4,5})v\d+$")
_VERSIONED_OLD_ID_RE = re.compile(
    r"^(?P<base>[a-z-]+(\.[A-Z]{2})?/\d{7})v\d+$",
    re.IGNORECASE,
)
_ID_PATH_PREFIXES = ("pdf", "abs")


def base_id_from_versioned(versioned_id: str) -> str:
    """Strip version suffixes from arXiv IDs.

    Args:
        versioned_id: ID that may include a version suffix.
    Returns:
        Base arXiv ID without version suffix.
    Edge cases:
        Returns the input unchanged when no version suffix is present.
    """

    if match := _VERSIONED_NEW_ID_RE.match(versioned_id):
        return match.group("base")
    if match := _VERSIONED_OLD_ID_RE.match(versioned_id):
        return match.group("base")
    return versioned_id


def is_valid_base_id(base_id: str) -> bool:
    """Check whether a base arXiv ID matches known patterns."""

    return bool(_NEW_ID_RE.match(base_id) or _OLD_ID_RE.match(base_id))


def arxiv_id_from_url(url: str) -> str:
    """Derive an arXiv identifier from a PDF or abstract URL.

    Args:
        url: URL such as ``https://arxiv.org/pdf/1234.5678.pdf``.
    Returns:
        Identifier with any ``.pdf`` suffix removed, version kept.
    Raises:
        ValueError: If the URL has no path component to derive from.
    Edge cases:
        Old-style IDs (``cs/9901001``) keep their archive prefix when the
        URL uses a ``/pdf/`` or ``/abs/`` path.
    """

    path = PurePosixPath(urlparse(url.strip()).path)
    parts = [part for part in path.parts if part != "/"]
    if not parts:
        raise ValueError(f"Cannot derive an arXiv ID from {url!r}")
    if len(parts) > 1 and parts[0] in _ID_PATH_PREFIXES:
        candidate = "/".join(parts[1:])
    else:
        candidate = parts[-1]
    if candidate.lower().endswith(".pdf"):
        candidate = candidate[: -len(".pdf")]
    if not candidate:
        raise ValueError(f"Cannot derive an arXiv ID from {url!r}")
    return candidate


def abs_url_for(arxiv_id: str) -> str:
    """Return the arXiv abstract-page URL for an identifier."""

    return ARXIV_ABS_URL.format(arxiv_id=arxiv_id)
