from __future__ import annotations

from html import unescape
import re
from typing import Iterable, List


def normalize_label(value: str) -> str:
    """Unescape HTML entities and collapse inner whitespace.

    Preserves original casing but trims leading/trailing spaces
    and converts sequences of whitespace to a single space.
    """
    if not value:
        return ""
    text = unescape(value).strip()
    text = re.sub(r"\s+", " ", text)
    return text


def labels_match(remote_name: str, wanted: str) -> bool:
    """Case-insensitive comparison of a remote term name with a local one.

    WordPress returns term names HTML-escaped (``Tips &amp; Tricks``), so
    both sides are normalized first.
    """
    return normalize_label(remote_name).lower() == normalize_label(wanted).lower()


def clean_tag_names(tags: Iterable[str]) -> List[str]:
    """
    Normalize the tag names of an index entry.

    - Unescapes HTML entities (e.g., '&amp;' -> '&')
    - Trims spaces, collapses inner whitespace, drops blanks
    - Deduplicates case-insensitively while preserving first-seen casing
    """
    seen_lower = set()
    result: List[str] = []
    for tag in tags or []:
        label = normalize_label(tag)
        key = label.lower()
        if label and key not in seen_lower:
            seen_lower.add(key)
            result.append(label)
    return result
