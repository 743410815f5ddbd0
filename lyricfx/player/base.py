"""
Player-state collaborator interface

The overlay never talks to a media player directly. It polls a PlayerSource
for a PlayerState snapshot (title, artist, duration, position) and derives
everything else from that.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Track:
    """
    Identity of the playing track

    Two tracks are the same when the titles are equal and the durations
    differ by no more than the change tolerance.
    """
    title: str
    artist: str = ""
    duration_seconds: float = 0.0

    def same_as(self, other: Optional['Track'], tolerance: float = 5.0) -> bool:
        if other is None:
            return False
        return (
            self.title == other.title
            and abs(self.duration_seconds - other.duration_seconds) <= tolerance
        )

    def __str__(self) -> str:
        return f"{self.artist} - {self.title}" if self.artist else self.title


@dataclass(frozen=True)
class PlayerState:
    """
    One snapshot of the player

    An empty title means the player is not ready (nothing loaded yet).
    """
    title: str = ""
    artist: str = ""
    duration_seconds: float = 0.0
    current_time_seconds: float = 0.0

    @property
    def is_ready(self) -> bool:
        return bool(self.title)

    def to_track(self) -> Track:
        return Track(title=self.title, artist=self.artist, duration_seconds=self.duration_seconds)


class PlayerSource(ABC):
    """Abstract player-state source"""

    @abstractmethod
    async def read_state(self) -> PlayerState:
        """
        Read the current player state

        Returns:
            PlayerState; an empty state when no player is available
        """

    async def current_time(self) -> float:
        """Current playback position in seconds"""
        state = await self.read_state()
        return state.current_time_seconds
