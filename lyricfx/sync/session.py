"""
Lyrics session - shared overlay state and task orchestration

The session is the single writer of the overlay state:
- the published timeline reference (swapped, never mutated)
- the current track
- the generation counter identifying the current track cycle
- the set of background tasks (AI generation) that may outlive a cycle

It runs two periodic tasks on one event loop, the track-change detector and
the synchronization loop, and starts one pipeline task per detected track.
"""

import asyncio
import random
from typing import Awaitable, Optional, Set

from ..ai.client import GenerativeTextClient
from ..config.settings import Settings, get_settings
from ..effects.engine import EffectsEngine
from ..effects.generator import AIEffectsGenerator
from ..effects.rules import EffectRuleTable
from ..lyrics.lrclib import LrcLibClient
from ..lyrics.models import Timeline
from ..lyrics.resolver import TrackResolver
from ..lyrics.translation import TranslationAdapter
from ..player.base import PlayerSource, Track
from ..render.base import Renderer
from ..utils.logger import get_logger
from .pipeline import TrackPipeline
from .synchronizer import SyncLoop
from .tracker import TrackChangeDetector


logger = get_logger(__name__)


class LyricsSession:
    """
    Owns the overlay state and the periodic tasks driving it
    """

    def __init__(
        self,
        player: PlayerSource,
        renderer: Renderer,
        settings: Optional[Settings] = None,
        resolver: Optional[TrackResolver] = None,
        engine: Optional[EffectsEngine] = None,
        generator: Optional[AIEffectsGenerator] = None,
        translator: Optional[TranslationAdapter] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            player: Player-state source
            renderer: Rendering collaborator
            settings: Settings, defaults to the global settings
            resolver: Track resolver (built from settings if None)
            engine: Effects engine (built from settings if None)
            generator: AI effects generator (built from settings if None)
            translator: Translation adapter (built from settings if None)
            rng: Random source for the effects engine
        """
        self.settings = settings or get_settings()
        self.player = player
        self.renderer = renderer

        self._lyrics_client: Optional[LrcLibClient] = None
        self._ai_client: Optional[GenerativeTextClient] = None
        if resolver is None:
            self._lyrics_client = LrcLibClient(
                api_base=self.settings.lyrics.api_base,
                timeout=self.settings.lyrics.request_timeout,
                rate_limit=self.settings.lyrics.rate_limit,
                user_agent=self.settings.lyrics.user_agent,
            )
        if generator is None or translator is None:
            self._ai_client = GenerativeTextClient(
                api_key=self.settings.ai.api_key,
                model=self.settings.ai.model,
                endpoint=self.settings.ai.endpoint,
                timeout=self.settings.ai.request_timeout,
            )

        self.resolver = resolver or TrackResolver(self._lyrics_client, self.settings)
        self.engine = engine or EffectsEngine.from_settings(self.settings, rng=rng)
        self.generator = generator or AIEffectsGenerator(
            self.engine,
            client=self._ai_client,
            settings=self.settings,
        )
        if self.generator.on_merged is None:
            self.generator.on_merged = self._on_effects_merged
        self.translator = translator or TranslationAdapter(self._ai_client, self.settings)
        self.pipeline = TrackPipeline(self)

        self.timeline: Optional[Timeline] = None
        self.track: Optional[Track] = None
        self.generation = 0
        self.background_tasks: Set[asyncio.Task] = set()
        self._pipeline_task: Optional[asyncio.Task] = None
        self._periodic_tasks: Set[asyncio.Task] = set()

        self.tracker = TrackChangeDetector(
            player,
            on_change=self.on_track_change,
            interval=self.settings.sync.poll_interval,
            tolerance=self.settings.sync.track_change_tolerance,
            confirmations=self.settings.sync.track_change_confirmations,
        )
        self.sync_loop = SyncLoop(
            self.get_timeline,
            player,
            renderer,
            engine=self.engine,
            interval=self.settings.sync.sync_interval,
            effects_enabled=self.settings.effects.enabled,
        )

    def get_timeline(self) -> Optional[Timeline]:
        return self.timeline

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def publish(self, timeline: Timeline, generation: int, effects_enabled: Optional[bool] = None) -> bool:
        """
        Swap in a new timeline if its cycle is still current

        Args:
            timeline: Timeline to publish
            generation: Generation of the cycle publishing it
            effects_enabled: Effects toggle from the cycle's settings snapshot;
                the sync loop keeps its current value when None

        Returns:
            True if the timeline was published
        """
        if not self.is_current(generation):
            return False
        if effects_enabled is not None:
            self.sync_loop.effects_enabled = effects_enabled
        self.timeline = timeline
        return True

    def spawn_background(self, coro: Awaitable) -> asyncio.Task:
        """Start a task that may outlive the cycle that created it"""
        task = asyncio.ensure_future(coro)
        self.background_tasks.add(task)
        task.add_done_callback(self._background_done)
        return task

    def _background_done(self, task: asyncio.Task) -> None:
        self.background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background task failed: {error}", exc_info=error)

    def _on_effects_merged(self, table: EffectRuleTable) -> None:
        self.renderer.install_styles(self.engine.style_content())

    def on_track_change(self, track: Track) -> asyncio.Task:
        """Track-change detector callback"""
        if self.settings.display.show_on_track_change and not self.renderer.is_visible():
            self.renderer.set_visible(True)
        return self.begin_cycle(track)

    def begin_cycle(self, track: Track) -> asyncio.Task:
        """
        Start a new track cycle, superseding the current one

        Args:
            track: Newly detected track

        Returns:
            The pipeline task for the new cycle
        """
        self.generation += 1
        generation = self.generation

        if self._pipeline_task is not None and not self._pipeline_task.done():
            self._pipeline_task.cancel()

        self.track = track
        self.timeline = None
        self.engine.clear_ai_rules()

        self._pipeline_task = asyncio.ensure_future(self._run_pipeline(track, generation))
        return self._pipeline_task

    async def _run_pipeline(self, track: Track, generation: int):
        try:
            return await self.pipeline.run(track, generation)
        except asyncio.CancelledError:
            logger.debug(f"Pipeline for {track} cancelled")
            raise
        except Exception as e:
            logger.error(f"Lyrics pipeline failed for {track}: {e}", exc_info=True)
            if self.is_current(generation):
                self.renderer.show_not_found("Lyrics unavailable")
            return None

    async def run(self) -> None:
        """Run both periodic tasks until cancelled"""
        self._periodic_tasks = {
            asyncio.ensure_future(self.tracker.run()),
            asyncio.ensure_future(self.sync_loop.run()),
        }
        try:
            await asyncio.gather(*self._periodic_tasks)
        finally:
            await self.close()

    async def close(self) -> None:
        """Cancel every task and release network sessions"""
        tasks = set(self._periodic_tasks) | set(self.background_tasks)
        if self._pipeline_task is not None:
            tasks.add(self._pipeline_task)

        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._periodic_tasks = set()
        if self._lyrics_client is not None:
            await self._lyrics_client.close()
        if self._ai_client is not None:
            await self._ai_client.close()
