"""Language code utilities."""

import re
from typing import Optional

# Tags that mean "no language" in prober output
UNKNOWN_LANGUAGE_TAGS = frozenset({"", "und", "unknown"})

# ISO 639-2/B codes offered when fixing unknown tracks
LANGUAGE_OPTIONS = {
    "eng": "English",
    "spa": "Spanish",
    "fre": "French",
    "ger": "German",
    "ita": "Italian",
    "por": "Portuguese",
    "rus": "Russian",
    "jpn": "Japanese",
    "kor": "Korean",
    "chi": "Chinese",
    "ara": "Arabic",
    "hin": "Hindi",
    "dut": "Dutch",
    "swe": "Swedish",
    "nor": "Norwegian",
    "dan": "Danish",
    "fin": "Finnish",
    "pol": "Polish",
    "cze": "Czech",
    "hun": "Hungarian",
}

_LANGUAGE_CODE_PATTERN = re.compile(r"[a-z]{3}")


def is_unknown_language(tag: Optional[str]) -> bool:
    """Check whether a raw language tag means "unknown".

    Args:
        tag: Language tag as reported by a prober (may be None)

    Returns:
        True for None, empty, "und" and "unknown" (case-insensitive)
    """
    if tag is None:
        return True
    return tag.strip().lower() in UNKNOWN_LANGUAGE_TAGS


def normalize_language_tag(tag: Optional[str]) -> Optional[str]:
    """Collapse unknown tags to None and lowercase everything else.

    Args:
        tag: Raw language tag

    Returns:
        Normalized 3-letter code, or None when the tag means unknown
    """
    if is_unknown_language(tag):
        return None
    return tag.strip().lower()


def is_valid_language_code(code: object) -> bool:
    """Check that a code is exactly three lowercase ASCII letters."""
    return isinstance(code, str) and _LANGUAGE_CODE_PATTERN.fullmatch(code) is not None


def language_name(code: Optional[str]) -> str:
    """Human-readable name for a language code.

    Args:
        code: 3-letter language code or None

    Returns:
        English name, "Unknown" for None, or the code itself if not in the vocabulary
    """
    if code is None:
        return "Unknown"
    return LANGUAGE_OPTIONS.get(code, code)
