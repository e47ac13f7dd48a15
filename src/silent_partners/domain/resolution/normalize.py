"""Name canonicalization for entity comparison.

Responsibilities of this stage:
- derive one deterministic comparison string per entity name
- stay pure and total (never raises, never empties a non-empty name)

The result is only a comparison key; display names are never rewritten.
"""

from __future__ import annotations

import re
import unicodedata

LEGAL_SUFFIXES: tuple[str, ...] = (
    "inc",
    "corp",
    "llc",
    "ltd",
    "co",
    "company",
    "corporation",
    "incorporated",
)

_LEGAL_SUFFIX_PATTERN = re.compile(
    r"(?:\s*,\s*|\s+)(?:" + "|".join(LEGAL_SUFFIXES) + r")\.?$",
)
_TRAILING_PARENTHETICAL_PATTERN = re.compile(r"\s*\([^()]*\)$")


def normalize_name(name: str) -> str:
    """Return the comparison form of ``name``.

    ``"Tesla, Inc."`` -> ``"tesla"``, ``"Meta Platforms (Facebook)"`` ->
    ``"meta platforms"``. A stripping step that would leave nothing is skipped.
    """

    text = unicodedata.normalize("NFKC", name).casefold()
    text = _collapse_whitespace(text)
    text = _strip_unless_empty(text, _LEGAL_SUFFIX_PATTERN)
    text = _strip_unless_empty(text, _TRAILING_PARENTHETICAL_PATTERN)
    return _collapse_whitespace(text)


def name_key(name: str) -> str:
    """Lookup key used for plain case-insensitive name matching."""

    return _collapse_whitespace(name.casefold())


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def _strip_unless_empty(text: str, pattern: re.Pattern[str]) -> str:
    stripped = pattern.sub("", text).strip()
    return stripped or text
