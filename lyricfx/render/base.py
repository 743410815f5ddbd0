"""
Rendering collaborator interface

The core decides what to show and when; a Renderer decides how. All methods
are synchronous and are called from the event loop thread.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..effects.rules import EffectSpawn
from ..lyrics.models import Timeline


class Renderer(ABC):
    """Abstract rendering surface"""

    @abstractmethod
    def is_visible(self) -> bool:
        """Whether the overlay is currently shown"""

    @abstractmethod
    def set_visible(self, visible: bool) -> None:
        """Show or hide the overlay"""

    @abstractmethod
    def show_status(self, message: str) -> None:
        """Transient status such as "Searching lyrics..." """

    @abstractmethod
    def show_not_found(self, message: str = "Lyrics not found") -> None:
        """Terminal state for a track without lyrics"""

    @abstractmethod
    def show_timeline(self, timeline: Timeline, title: str = "") -> None:
        """Display a freshly published synced timeline"""

    @abstractmethod
    def show_plain(self, text: str, title: str = "") -> None:
        """Display unsynced lyrics"""

    @abstractmethod
    def highlight(self, index: int) -> None:
        """Mark the active line (-1 clears the highlight)"""

    @abstractmethod
    def spawn_effects(self, spawns: Sequence[EffectSpawn]) -> None:
        """Play the effects fired by the active line"""

    @abstractmethod
    def install_styles(self, style_content: str) -> None:
        """Install style blocks that AI effect visuals depend on"""
