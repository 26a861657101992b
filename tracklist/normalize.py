"""Title canonicalization and alternate-version detection.

Normalization pipeline:
1. Lowercase
2. Strip diacritics
3. Drop one layer of (...) / [...] qualifiers, unless that empties the title
4. Strip trailing edition suffixes (" - Remastered 2011", " - Radio Edit", ...)
5. Strip a trailing bare year tag
6. Collapse punctuation, hyphens and whitespace to single spaces
"""

import re
import unicodedata

_PAREN_RE = re.compile(r"\([^)]*\)")
_BRACKET_RE = re.compile(r"\[[^\]]*\]")

_EDITION_SUFFIX_RE = re.compile(
    r"\s*-\s*(?:"
    r"(?:\d{4}\s+)?remaster(?:ed)?(?:\s+\d{4})?"
    r"|single\s+version"
    r"|radio\s+edit"
    r"|edit"
    r"|extended(?:\s+(?:version|mix))?"
    r"|live"
    r"|deluxe"
    r"|explicit"
    r"|clean"
    r")(?:\s+(?:version|edition))?\s*$"
)
_YEAR_TAG_RE = re.compile(r"\s*-?\s*\b\d{4}\s*$")
_SEPARATOR_RE = re.compile(r"[\W_]+")

# ── Alternate versions ─────────────────────────────────────────────────
# A trigger word alone is ordinary vocabulary ("Live Wire"); it only marks an
# alternate version when it closes a bracket or the last " - " segment, or
# when a qualifier word follows it directly.
_TRIGGERS = r"live|remix(?:ed)?|rmx|instrumental|acoustic|a\s*cappella|acapella|a\s*capella"
_QUALIFIERS = r"version|mix|edit|track|at|from|in|recording|performance|session"

ALTERNATE_VERSION_PATTERNS = [
    re.compile(rf"[(\[][^)\]]*\b(?:{_TRIGGERS})(?:\s+(?:{_QUALIFIERS})\b[^)\]]*)?\s*[)\]]", re.IGNORECASE),
    re.compile(r"[(\[][^)\]]*\brock\s+(?:version|mix)\b[^)\]]*[)\]]", re.IGNORECASE),
    re.compile(rf"\s[-–—]\s*[^-–—]*\b(?:{_TRIGGERS})(?:\s+(?:{_QUALIFIERS})\b[^-–—]*)?\s*$", re.IGNORECASE),
    re.compile(r"\blive\s+(?:at|from|in|version|recording|performance|session)\b", re.IGNORECASE),
    re.compile(
        r"\b(?:remix(?:ed)?|rmx|instrumental|acoustic|a\s*cappella|acapella|a\s*capella|rock)"
        r"\s+(?:version|mix|track|edit)\b",
        re.IGNORECASE,
    ),
]


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_title(title: str) -> str:
    """Canonical form of a title used for fuzzy equality."""
    if not title:
        return ""

    text = strip_diacritics(title.lower())

    unbracketed = _BRACKET_RE.sub("", _PAREN_RE.sub("", text))
    if _SEPARATOR_RE.sub("", unbracketed):
        text = unbracketed

    previous = None
    while previous != text:
        previous = text
        text = _EDITION_SUFFIX_RE.sub("", text)

    without_year = _YEAR_TAG_RE.sub("", text)
    if _SEPARATOR_RE.sub("", without_year):
        text = without_year

    return _SEPARATOR_RE.sub(" ", text).strip()


def is_alternate_version(title: str) -> bool:
    """True for live, remix, instrumental, acoustic, a cappella and rock versions."""
    if not title:
        return False
    return any(pattern.search(title) for pattern in ALTERNATE_VERSION_PATTERNS)
