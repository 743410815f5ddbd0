"""
Track-change detection

Polls the player about once a second and reports when a different track
starts. A track counts as different when the title changes or the duration
moves by more than the tolerance; small duration jitter from the player is
ignored.

Players occasionally report half-updated metadata while switching songs, so
a change can optionally be debounced by requiring the same new track on
several consecutive polls.
"""

import asyncio
from typing import Any, Callable, Optional

from ..player.base import PlayerSource, Track
from ..utils.logger import get_logger


logger = get_logger(__name__)


class TrackChangeDetector:
    """
    Periodic task firing on_change(track) for every new track
    """

    def __init__(
        self,
        player: PlayerSource,
        on_change: Callable[[Track], Any],
        interval: float = 1.0,
        tolerance: float = 5.0,
        confirmations: int = 1,
    ):
        """
        Args:
            player: Source of player state
            on_change: Called with a copy of the new track
            interval: Poll period in seconds
            tolerance: Duration difference still considered the same track
            confirmations: Consecutive polls a new track must be seen on
        """
        self.player = player
        self.on_change = on_change
        self.interval = interval
        self.tolerance = tolerance
        self.confirmations = max(1, confirmations)

        self.current: Optional[Track] = None
        self._pending: Optional[Track] = None
        self._pending_count = 0

    def observe(self, track: Track) -> bool:
        """
        Feed one observation into the debounce state

        Returns:
            True when the observation completes a confirmed track change
        """
        if track.same_as(self.current, self.tolerance):
            self._pending = None
            self._pending_count = 0
            return False

        if track.same_as(self._pending, self.tolerance):
            self._pending_count += 1
        else:
            self._pending = track
            self._pending_count = 1

        if self._pending_count < self.confirmations:
            return False

        self.current = track
        self._pending = None
        self._pending_count = 0
        return True

    async def poll(self) -> Optional[Track]:
        """
        Read the player once

        Returns:
            The new track when a change fired, otherwise None
        """
        state = await self.player.read_state()
        if not state.is_ready:
            return None

        track = state.to_track()
        if not self.observe(track):
            return None

        logger.info(f"Track changed: {track} ({track.duration_seconds:.0f}s)")
        self.on_change(track)
        return track

    async def run(self) -> None:
        """Poll forever; errors are logged and polling continues"""
        logger.debug(f"Track-change detector started ({self.interval}s period)")
        while True:
            try:
                await self.poll()
            except Exception as e:
                logger.error(f"Track poll failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval)
