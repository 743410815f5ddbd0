"""
Console renderer

Prints the overlay to the terminal: one row per activated line, long-held
("epic") lines emphasized and fired effects shown as glyph badges after the
line. AI effects have no terminal representation of their visual, so they
are shown by id.
"""

from typing import List, Optional, Sequence

import click
from colorama import Fore, Style

from ..effects.rules import EffectSpawn
from ..lyrics.lrc import is_epic, line_durations
from ..lyrics.models import Timeline
from ..utils.helpers import format_timestamp
from ..utils.logger import get_logger
from .base import Renderer


logger = get_logger(__name__)


EFFECT_GLYPHS = {
    'heart': "❤",
    'fire': "\U0001F525",
    'rain': "\U0001F327",
    'stars': "✨",
    'night': "\U0001F303",
    'moon': "\U0001F319",
    'vision': "\U0001F441",
    'thinking': "\U0001F4AD",
    'money': "\U0001F4B8",
    'music': "\U0001F3B5",
    'time': "⏳",
    'call': "\U0001F4DE",
    'snow': "❄",
}


class ConsoleRenderer(Renderer):
    """
    Terminal implementation of the rendering collaborator
    """

    def __init__(
        self,
        colored: bool = True,
        epic_threshold: float = 5.0,
        last_line_duration: float = 5.0,
        visible: bool = True,
    ):
        self.colored = colored
        self.epic_threshold = epic_threshold
        self.last_line_duration = last_line_duration
        self._visible = visible
        self._timeline: Timeline = ()
        self._epic: List[bool] = []
        self._styles = ""

    @classmethod
    def from_settings(cls, settings) -> 'ConsoleRenderer':
        return cls(
            colored=settings.display.colored_output,
            epic_threshold=settings.display.epic_threshold,
            last_line_duration=settings.display.last_line_duration,
        )

    def _echo(self, text: str, fg: Optional[str] = None, bold: bool = False, dim: bool = False) -> None:
        if self.colored and (fg or bold or dim):
            text = click.style(text, fg=fg, bold=bold, dim=dim)
        click.echo(text)

    def is_visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool) -> None:
        self._visible = visible

    def show_status(self, message: str) -> None:
        self._echo(message, dim=True)

    def show_not_found(self, message: str = "Lyrics not found") -> None:
        self._timeline = ()
        self._epic = []
        self._echo(message, fg='yellow')

    def show_timeline(self, timeline: Timeline, title: str = "") -> None:
        self._timeline = timeline
        durations = line_durations(timeline, self.last_line_duration)
        self._epic = [is_epic(duration, self.epic_threshold) for duration in durations]
        if title:
            self._echo(f"\n♪ {title}", fg='cyan', bold=True)
        self._echo(f"{len(timeline)} synced lines", dim=True)

    def show_plain(self, text: str, title: str = "") -> None:
        self._timeline = ()
        self._epic = []
        if title:
            self._echo(f"\n♪ {title}", fg='cyan', bold=True)
        self._echo("(unsynced lyrics)", dim=True)
        click.echo(text)

    def highlight(self, index: int) -> None:
        if index < 0 or index >= len(self._timeline):
            return

        line = self._timeline[index]
        stamp = f"[{format_timestamp(line.time_seconds)}]"
        if self._epic[index]:
            self._echo(f"{stamp} ✦ {line.text.upper()}", fg='magenta', bold=True)
        else:
            self._echo(f"{stamp} {line.text}", fg='white')

    def spawn_effects(self, spawns: Sequence[EffectSpawn]) -> None:
        if not spawns:
            return

        badges = []
        for spawn in spawns:
            glyph = EFFECT_GLYPHS.get(spawn.effect_id)
            badges.append(f"{glyph} {spawn.effect_id}" if glyph else f"* {spawn.effect_id}")

        line = "    " + "  ".join(badges)
        if self.colored:
            line = f"{Fore.YELLOW}{line}{Style.RESET_ALL}"
        click.echo(line)

    def install_styles(self, style_content: str) -> None:
        self._styles = style_content
        if style_content:
            logger.debug(f"Installed {len(style_content)} chars of effect styles")
