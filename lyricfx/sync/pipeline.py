"""
Track pipeline - one lyrics cycle per detected track

resolve -> (AI effects race) -> (translation) -> publish

Each run carries the generation number it was started with. Anything it
produces is only published while that generation is still current, so a
superseded cycle can finish its network calls without touching the overlay.
"""

import asyncio
from typing import TYPE_CHECKING, Optional

from ..exceptions import NoMatchError
from ..lyrics.models import ResolvedLyrics
from ..player.base import Track
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from .session import LyricsSession


logger = get_logger(__name__)


class TrackPipeline:
    """
    Runs the resolve/enrich/publish sequence for a track
    """

    def __init__(self, session: 'LyricsSession'):
        self.session = session

    async def run(self, track: Track, generation: int) -> Optional[ResolvedLyrics]:
        """
        Resolve, enrich and publish lyrics for a track

        Args:
            track: Track that started this cycle
            generation: Session generation at cycle start

        Returns:
            The resolved lyrics as published, or None when nothing was
            published (no match, or the cycle was superseded)
        """
        session = self.session
        settings = session.settings.snapshot()
        renderer = session.renderer

        renderer.show_status("Searching lyrics...")

        try:
            resolved = await session.resolver.resolve(
                track.title,
                track.artist,
                track.duration_seconds,
                settings=settings
            )
        except NoMatchError as e:
            logger.info(f"No lyrics for {track}: {e.message}")
            if session.is_current(generation):
                renderer.show_not_found()
            return None

        if not session.is_current(generation):
            return None

        if resolved.is_synced and settings.ai_available and settings.effects.enabled:
            await self._race_effects(resolved, track, generation, settings)

        if settings.translation_available:
            resolved = await self._translate(resolved, track, settings)

        if not session.is_current(generation):
            logger.debug(f"Dropping lyrics for {track}: superseded")
            return None

        if resolved.is_synced:
            session.publish(resolved.timeline, generation, effects_enabled=settings.effects.enabled)
            renderer.show_timeline(resolved.timeline, str(track))
        else:
            renderer.show_plain(resolved.plain_text or "", str(track))

        summary = f"{len(resolved.timeline)} synced lines" if resolved.is_synced else "unsynced lyrics"
        logger.info(f"Published lyrics for {track}: {summary}")
        return resolved

    async def _race_effects(self, resolved: ResolvedLyrics, track: Track, generation: int, settings) -> None:
        session = self.session
        race_timeout = settings.ai.race_timeout
        task = session.spawn_background(
            session.generator.generate(
                resolved.text,
                track.artist,
                track.title,
                is_current=lambda: session.is_current(generation),
                settings=settings
            )
        )

        # asyncio.wait leaves the task running after the timeout
        done, _ = await asyncio.wait({task}, timeout=race_timeout)
        if not done:
            logger.debug(f"AI effects still generating after {race_timeout}s, continuing without waiting")

    async def _translate(self, resolved: ResolvedLyrics, track: Track, settings) -> ResolvedLyrics:
        translator = self.session.translator

        if resolved.is_synced:
            translated = await translator.translate_lines(resolved.timeline, track.artist, track.title, settings=settings)
            if translated is None:
                return resolved
            return ResolvedLyrics(
                candidate=resolved.candidate,
                timeline=translated,
                speed_ratio=resolved.speed_ratio,
                modified=resolved.modified,
                query=resolved.query,
            )

        translated_text = await translator.translate_plain(
            resolved.plain_text or "",
            track.artist,
            track.title,
            settings=settings
        )
        if translated_text is None:
            return resolved
        return ResolvedLyrics(
            candidate=resolved.candidate,
            plain_text=translated_text,
            modified=resolved.modified,
            query=resolved.query,
        )
