"""
Track resolver - maps a playing track to lyrics

Web players report noisy titles ("Song (Official Video) [Sped Up]") and
sometimes a channel name instead of the artist. The resolver cleans the
title, searches the lyrics corpus with and without the artist, picks the best
candidate by a fixed priority and, for tempo-altered uploads, rescales the
synced timeline to the observed playback speed.

Selection priority:
1. Duration known and track not modified: first candidate within the
   duration tolerance that has synced lyrics
2. First candidate with synced lyrics
3. First candidate with plain lyrics
"""

from typing import List, Optional, Sequence

from ..config.settings import get_settings
from ..exceptions import NetworkFailure, NoMatchError
from ..utils.helpers import clean_track_title, collapse_whitespace, is_speed_modified
from ..utils.logger import get_logger
from .lrc import parse_lrc, rescale_timeline
from .lrclib import LrcLibClient
from .models import Candidate, ResolvedLyrics


logger = get_logger(__name__)


def select_candidate(
    candidates: Sequence[Candidate],
    duration_seconds: Optional[float],
    modified: bool,
    tolerance: float = 5.0
) -> Optional[Candidate]:
    """
    Pick the best candidate by strict priority

    Args:
        candidates: Search results in API order
        duration_seconds: Played track duration (None or <= 0 if unknown)
        modified: Whether the title names a tempo modification
        tolerance: Maximum duration difference for a strict match

    Returns:
        Selected candidate, or None if no candidate carries any lyrics
    """
    duration_known = bool(duration_seconds and duration_seconds > 0)

    if duration_known and not modified:
        for candidate in candidates:
            if candidate.has_synced and abs(candidate.duration_seconds - duration_seconds) < tolerance:
                return candidate

    for candidate in candidates:
        if candidate.has_synced:
            return candidate

    for candidate in candidates:
        if candidate.has_plain:
            return candidate

    return None


def compute_speed_ratio(
    candidate_duration: float,
    played_duration: Optional[float],
    modified: bool,
    tolerance: float = 5.0
) -> float:
    """
    Speed ratio between the original recording and the played audio

    Returns:
        candidate / played when the track is modified, both durations are
        known and they differ by more than the tolerance; 1.0 otherwise
    """
    if not modified or not played_duration or played_duration <= 0 or candidate_duration <= 0:
        return 1.0
    if abs(candidate_duration - played_duration) <= tolerance:
        return 1.0
    return candidate_duration / played_duration


class TrackResolver:
    """
    Resolve a (title, artist, duration) triple to lyrics

    Only the search queries touch the network; everything else is pure.
    """

    def __init__(self, client: Optional[LrcLibClient] = None, settings=None):
        """
        Initialize the resolver

        Args:
            client: Lyrics search client (created lazily from settings if None)
            settings: Settings snapshot, defaults to the global settings
        """
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> LrcLibClient:
        if self._client is None:
            self._client = LrcLibClient()
        return self._client

    def build_queries(self, title: str, artist: str, settings=None) -> List[str]:
        """
        Search queries to try in order

        Args:
            title: Raw track title
            artist: Artist label (may be empty)
            settings: Settings to read the modification keywords from

        Returns:
            ["<clean> <artist>", "<clean>"], or just ["<clean>"] without an artist
        """
        settings = settings or self.settings
        cleaned = clean_track_title(title, settings.lyrics.modified_keywords)
        artist = collapse_whitespace(artist)
        if not artist:
            return [cleaned]
        return [f"{cleaned} {artist}", cleaned]

    async def _search(self, query: str) -> List[Candidate]:
        try:
            return await self.client.search(query)
        except NetworkFailure as e:
            logger.warning(f"Lyrics search failed for '{query}': {e}")
            return []

    async def resolve(
        self,
        title: str,
        artist: str,
        duration_seconds: Optional[float],
        settings=None
    ) -> ResolvedLyrics:
        """
        Resolve a playing track to a timeline or a plain-text block

        Args:
            title: Raw track title as reported by the player
            artist: Artist label (may be a channel name or empty)
            duration_seconds: Played duration (None or <= 0 if unknown)
            settings: Per-call settings snapshot, defaults to the resolver's own

        Returns:
            ResolvedLyrics with either a timeline or plain text

        Raises:
            NoMatchError: If no search returns a usable candidate
        """
        settings = settings or self.settings
        tolerance = settings.lyrics.duration_tolerance
        modified = is_speed_modified(title, settings.lyrics.modified_keywords)

        candidates: List[Candidate] = []
        used_query = ""
        for query in self.build_queries(title, artist, settings):
            used_query = query
            candidates = await self._search(query)
            if candidates:
                break

        logger.debug(
            f"Resolving '{title}' by '{artist}': query='{used_query}', "
            f"{len(candidates)} candidates, modified={modified}"
        )

        if not candidates:
            raise NoMatchError(f"No lyrics found for '{title}'", details={'artist': artist, 'query': used_query})

        candidate = select_candidate(candidates, duration_seconds, modified, tolerance)
        if candidate is None:
            raise NoMatchError(f"No candidate with lyrics for '{title}'", details={'artist': artist, 'query': used_query})

        if candidate.has_synced:
            timeline = parse_lrc(candidate.synced_lyrics)
            if timeline:
                ratio = compute_speed_ratio(candidate.duration_seconds, duration_seconds, modified, tolerance)
                if ratio != 1.0:
                    logger.info(
                        f"Speed modification detected, ratio {ratio:.2f} "
                        f"(original {candidate.duration_seconds}s, playing {duration_seconds}s)"
                    )
                    timeline = rescale_timeline(timeline, ratio)
                return ResolvedLyrics(
                    candidate=candidate,
                    timeline=timeline,
                    speed_ratio=ratio,
                    modified=modified,
                    query=used_query
                )

            logger.debug("Synced lyrics contained no timed lines, falling back to plain text")
            if not candidate.has_plain:
                raise NoMatchError(f"Synced lyrics for '{title}' are empty", details={'query': used_query})

        return ResolvedLyrics(
            candidate=candidate,
            plain_text=candidate.plain_lyrics,
            modified=modified,
            query=used_query
        )
