"""Accept-Language header parsing."""

import re
from typing import List, Optional, Tuple

LANGUAGE_RANGE_PATTERN = re.compile(
    r"\s?(?P<tag>[\w\-]+)(?:;q=(?P<quality>[\d\.]+))?", re.ASCII | re.IGNORECASE
)
QUALITY_PATTERN = re.compile(r"\d+(?:\.\d*)?")


def _parse_quality(quality: Optional[str]) -> float:
    """Read the leading number of a q-value, defaulting to 1.0."""
    if not quality:
        return 1.0

    match = QUALITY_PATTERN.match(quality)
    if not match:
        return 1.0

    return float(match.group(0))


def parse_accept_language(accept_language: Optional[str] = None) -> List[Tuple[str, float]]:
    """Parse Accept-Language header and return ordered list of (tag, quality) pairs.

    Malformed language ranges are dropped. Ranges with the same quality keep
    the order they had in the header.
    """
    if not accept_language:
        return []

    languages = []
    for lang_range in accept_language.split(","):
        match = LANGUAGE_RANGE_PATTERN.fullmatch(lang_range)
        if not match:
            continue
        languages.append((match.group("tag"), _parse_quality(match.group("quality"))))

    # sorted() is stable, so equal qualities keep their header order
    return sorted(languages, key=lambda x: x[1], reverse=True)


def extract_locales(accept_language: Optional[str] = None) -> List[str]:
    """Return the locale tags of an Accept-Language header by preference."""
    return [tag for tag, _ in parse_accept_language(accept_language)]
