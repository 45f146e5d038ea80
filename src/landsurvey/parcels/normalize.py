"""Identifier and query normalization.

The geometry and tax datasets are maintained independently and their parcel
identifiers carry inconsistent internal spacing (``"040123"`` vs
``"0401 23"``). :func:`normalize_key` is the single join predicate between
them; nothing else should special-case identifier formatting.
"""

from __future__ import annotations

import re
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")

# Synonym groups are stripped as whole words. "way" is left alone because it
# is frequently a literal street-name token.
STREET_SUFFIXES: dict[str, tuple[str, ...]] = {
    "drive": ("drive", "dr"),
    "street": ("street", "st"),
    "road": ("road", "rd"),
    "lane": ("lane", "ln"),
    "avenue": ("avenue", "ave", "av"),
    "boulevard": ("boulevard", "blvd"),
    "court": ("court", "ct"),
    "place": ("place", "pl"),
    "circle": ("circle", "cir"),
    "parkway": ("parkway", "pkwy"),
    "highway": ("highway", "hwy"),
    "terrace": ("terrace", "ter"),
    "trail": ("trail", "trl"),
    "cove": ("cove", "cv"),
}

SUFFIX_WORDS: tuple[str, ...] = tuple(
    word
    for words in STREET_SUFFIXES.values()
    for word in sorted(words, key=len, reverse=True)
)

_SUFFIX_RE = re.compile(r"\b(?:" + "|".join(map(re.escape, SUFFIX_WORDS)) + r")\b\.?")


def normalize_key(identifier: Any) -> str:
    """Remove every whitespace character from a parcel identifier.

    Total: ``None`` becomes ``""`` and non-string values are stringified.
    No case folding is applied. Idempotent.
    """
    if identifier is None:
        return ""
    if not isinstance(identifier, str):
        identifier = str(identifier)
    return _WHITESPACE_RE.sub("", identifier)


def clean_query(raw: str) -> str:
    """Lower-case a free-text address and strip street-suffix words.

    ``"123 Bradfield Drive"`` and ``"123 bradfield dr"`` both clean to
    ``"123 bradfield"``.
    """
    if not raw:
        return ""
    cleaned = _SUFFIX_RE.sub(" ", raw.lower())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def compose_address(*parts: Any, sep: str = " ") -> str:
    """Join the non-empty parts of an address with a single separator.

    ``None``, blank strings and surrounding whitespace are dropped, so missing
    fields never produce doubled or dangling separators.
    """
    pieces = []
    for part in parts:
        if part is None:
            continue
        text = _WHITESPACE_RE.sub(" ", str(part)).strip()
        if text:
            pieces.append(text)
    return sep.join(pieces)
