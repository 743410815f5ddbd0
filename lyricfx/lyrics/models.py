"""
Data models for lyric timelines and lyrics search results

This module defines the data structures that flow through the lyrics side of
the overlay: the time-indexed lines produced by the LRC parser, the strict
candidate records validated at the lyrics API boundary, and the resolver's
result container.

Models:
- LyricLine: One timestamped line of lyrics
- Timeline: Type alias for an immutable, time-sorted tuple of LyricLine
- Candidate: One search result from the lyrics corpus
- ResolvedLyrics: What the resolver hands to the track pipeline

All models are frozen. A timeline is built once per track cycle and replaced
wholesale; nothing mutates a published timeline.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class LyricLine:
    """
    A single timestamped lyric line

    Attributes:
        time_seconds: Position in the track where the line starts
        text: Line text (never empty inside a parsed timeline)
    """
    time_seconds: float
    text: str

    def with_text(self, text: str) -> 'LyricLine':
        """Return a copy of this line carrying different text at the same time"""
        return replace(self, text=text)


Timeline = Tuple[LyricLine, ...]


def _as_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Candidate:
    """
    One lyrics corpus search result

    Attributes:
        duration_seconds: Duration of the track the lyrics were timed against
        synced_lyrics: LRC-format text (None if the entry has none)
        plain_lyrics: Unsynced lyrics text (None if the entry has none)
        track_name: Corpus track name, kept for diagnostics
        artist_name: Corpus artist name, kept for diagnostics
    """
    duration_seconds: float
    synced_lyrics: Optional[str] = None
    plain_lyrics: Optional[str] = None
    track_name: str = ""
    artist_name: str = ""

    @property
    def has_synced(self) -> bool:
        return bool(self.synced_lyrics)

    @property
    def has_plain(self) -> bool:
        return bool(self.plain_lyrics)

    @classmethod
    def from_api_data(cls, data: Any) -> Optional['Candidate']:
        """
        Validate a raw search result into a Candidate

        The search API is duck-typed JSON; entries that are not objects or
        whose duration is not a number are rejected instead of trusted.

        Args:
            data: One element of the search API's JSON array

        Returns:
            Candidate instance, or None if the entry does not conform
        """
        if not isinstance(data, dict):
            return None

        duration = data.get('duration')
        # bool is an int subclass but never a valid duration
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            return None

        return cls(
            duration_seconds=float(duration),
            synced_lyrics=_as_text(data.get('syncedLyrics')),
            plain_lyrics=_as_text(data.get('plainLyrics')),
            track_name=_as_text(data.get('trackName')) or "",
            artist_name=_as_text(data.get('artistName')) or "",
        )


@dataclass(frozen=True)
class ResolvedLyrics:
    """
    Result of resolving a playing track to lyrics

    Exactly one of timeline / plain_text is set.

    Attributes:
        candidate: The corpus entry that was selected
        timeline: Parsed (and possibly rescaled) synced lyrics
        plain_text: Unsynced lyrics block when no synced lyrics exist
        speed_ratio: Factor the timestamps were divided by (1.0 when untouched)
        modified: Whether the title named a tempo modification
        query: Search query that produced the candidate list
    """
    candidate: Candidate
    timeline: Optional[Timeline] = None
    plain_text: Optional[str] = None
    speed_ratio: float = 1.0
    modified: bool = False
    query: str = ""

    @property
    def is_synced(self) -> bool:
        return self.timeline is not None

    @property
    def text(self) -> str:
        """Plain text of the lyrics, one line per timeline entry when synced"""
        if self.timeline is not None:
            return "\n".join(line.text for line in self.timeline)
        return self.plain_text or ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for CLI output"""
        return {
            'synced': self.is_synced,
            'speed_ratio': self.speed_ratio,
            'modified': self.modified,
            'query': self.query,
            'candidate_duration': self.candidate.duration_seconds,
            'lines': [
                {'time': line.time_seconds, 'text': line.text}
                for line in (self.timeline or ())
            ],
            'plain': self.plain_text,
        }
