"""
Utility functions and helpers for lyricfx
Common functions for title cleaning, text normalization and response handling
"""

import re
from typing import Iterable, Optional, Union


DEFAULT_MODIFIED_KEYWORDS = ("sped up", "nightcore", "slowed", "reverb")

# Bracketed annotations, including CJK-style brackets: (..) [..] {..} 〔..〕 【..】
_BRACKETED = re.compile(r"[(\[{〔【].*?[)\]}〕】]")
_FEATURING = re.compile(r"\b(?:feat|ft)\..*", re.IGNORECASE)
_DASH_SEPARATOR = re.compile(r"\s*[-—]\s*")
_PROMO_TOKENS = re.compile(r"official video|lyrics|audio", re.IGNORECASE)
_CODE_FENCE = re.compile(r"^\s*```[\w-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def collapse_whitespace(text: str) -> str:
    """
    Collapse runs of whitespace into single spaces and trim

    Args:
        text: Input text

    Returns:
        Text with normalized spacing
    """
    return re.sub(r'\s+', ' ', text or '').strip()


def _keyword_pattern(keywords: Iterable[str]) -> Optional[re.Pattern]:
    words = [re.escape(k) for k in keywords if k]
    if not words:
        return None
    return re.compile("|".join(words), re.IGNORECASE)


def is_speed_modified(title: str, keywords: Iterable[str] = DEFAULT_MODIFIED_KEYWORDS) -> bool:
    """
    Detect tempo-altered uploads (sped up, nightcore, slowed, reverb)

    Args:
        title: Raw track title as reported by the player
        keywords: Modification keywords, matched case-insensitively anywhere in the title

    Returns:
        True if the title names a tempo modification
    """
    pattern = _keyword_pattern(keywords)
    return bool(title and pattern and pattern.search(title))


def clean_track_title(title: str, keywords: Iterable[str] = DEFAULT_MODIFIED_KEYWORDS) -> str:
    """
    Normalize a noisy track title for lyrics search

    Strips bracketed annotations, featuring credits, dash separators,
    promotional tokens and tempo-modification keywords. Falls back to the raw
    title when nothing is left.

    Args:
        title: Raw track title
        keywords: Modification keywords to remove

    Returns:
        Cleaned title suitable as a search query
    """
    if not title:
        return ""

    cleaned = _BRACKETED.sub("", title)
    cleaned = _FEATURING.sub("", cleaned)
    cleaned = _DASH_SEPARATOR.sub(" ", cleaned)
    cleaned = _PROMO_TOKENS.sub("", cleaned).strip()

    pattern = _keyword_pattern(keywords)
    if pattern:
        cleaned = pattern.sub("", cleaned)
    cleaned = collapse_whitespace(cleaned)

    return cleaned or title


def clean_artist_label(artist: str) -> str:
    """
    Reduce a player byline to the artist name

    Web players often show "Artist • Album • Year"; only the first part names
    the artist.

    Args:
        artist: Raw artist label

    Returns:
        Artist name without album/year suffixes
    """
    if not artist:
        return ""
    return artist.split('•')[0].strip()


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence from a model completion

    Args:
        text: Raw completion text, optionally wrapped in ```json ... ```

    Returns:
        The fenced content, or the trimmed input when no fence is present
    """
    if not text:
        return ""
    match = _CODE_FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def format_timestamp(seconds: Union[int, float]) -> str:
    """
    Format a timeline position as an LRC-style mm:ss.xx string

    Args:
        seconds: Position in seconds

    Returns:
        Formatted timestamp string
    """
    if seconds < 0:
        seconds = 0
    centis = int(round(seconds * 100))
    minutes, centis = divmod(centis, 6000)
    secs, centis = divmod(centis, 100)
    return f"{minutes:02d}:{secs:02d}.{centis:02d}"


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length with suffix

    Args:
        text: Original text
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    truncate_length = max_length - len(suffix)
    if truncate_length <= 0:
        return suffix[:max_length]

    return text[:truncate_length] + suffix
