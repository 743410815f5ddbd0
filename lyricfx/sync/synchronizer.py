"""
Synchronization loop - active line detection

Polls the playback position on a fixed period and activates the lyric line
being sung. Activation is edge-triggered: the renderer and the effects engine
only hear about a line when the active index changes, never on every tick.

The loop reads the published timeline by reference on every tick and holds no
lock; a new track publishes a new tuple and the loop notices the new identity
and starts over.
"""

import asyncio
from typing import Callable, Optional

from ..effects.engine import EffectsEngine
from ..lyrics.models import Timeline
from ..player.base import PlayerSource
from ..render.base import Renderer
from ..utils.logger import get_logger


logger = get_logger(__name__)


def find_active_index(timeline: Timeline, current_time: float) -> int:
    """
    Index of the line being sung at current_time

    Args:
        timeline: Time-sorted lyric lines
        current_time: Playback position in seconds

    Returns:
        Greatest index whose time <= current_time, or -1 before the first line
    """
    active = -1
    for index, line in enumerate(timeline):
        if line.time_seconds > current_time:
            break
        active = index
    return active


class SyncLoop:
    """
    Periodic task mapping playback time to line activations
    """

    def __init__(
        self,
        get_timeline: Callable[[], Optional[Timeline]],
        player: PlayerSource,
        renderer: Renderer,
        engine: Optional[EffectsEngine] = None,
        interval: float = 0.2,
        effects_enabled: bool = True,
    ):
        """
        Args:
            get_timeline: Returns the currently published timeline (or None)
            player: Source of the playback position
            renderer: Receives highlights and effect spawns
            engine: Effects rule engine (no effects when None)
            interval: Tick period in seconds
            effects_enabled: Run the effects engine on activated lines
        """
        self.get_timeline = get_timeline
        self.player = player
        self.renderer = renderer
        self.engine = engine
        self.interval = interval
        self.effects_enabled = effects_enabled

        self._last_timeline: Optional[Timeline] = None
        self._last_index: Optional[int] = None

    @property
    def last_index(self) -> Optional[int]:
        return self._last_index

    async def tick(self) -> Optional[int]:
        """
        One synchronization step

        Returns:
            The newly activated index, or None when nothing changed
        """
        timeline = self.get_timeline()
        if timeline is None or not self.renderer.is_visible():
            return None

        if timeline is not self._last_timeline:
            self._last_timeline = timeline
            self._last_index = None

        current_time = await self.player.current_time()
        if self.get_timeline() is not timeline:
            # Republished while waiting on the player; the next tick picks it up
            return None

        index = find_active_index(timeline, current_time)
        if index == self._last_index:
            return None

        self._last_index = index
        self.activate(timeline, index)
        return index

    def activate(self, timeline: Timeline, index: int) -> None:
        """Highlight a line and fire its effects"""
        self.renderer.highlight(index)

        if index < 0 or self.engine is None or not self.effects_enabled:
            return

        effect_ids = self.engine.evaluate(timeline[index].text)
        if effect_ids:
            logger.debug(f"Line {index} fired effects: {effect_ids}")
            self.renderer.spawn_effects(self.engine.spawn_requests(effect_ids))

    async def run(self) -> None:
        """Tick forever; errors are logged and the loop keeps going"""
        logger.debug(f"Sync loop started ({self.interval}s period)")
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Sync tick failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval)
