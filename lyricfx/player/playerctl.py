"""
playerctl player source

Reads MPRIS metadata through the playerctl command line tool, which works
with any MPRIS-capable player on Linux (Spotify, browsers, mpv, VLC...).
mpris:length and position are reported in microseconds.
"""

import asyncio
import shutil
from typing import List, Optional

from ..config.settings import get_settings
from ..exceptions import ConfigError
from ..utils.helpers import clean_artist_label
from ..utils.logger import get_logger
from .base import PlayerSource, PlayerState


logger = get_logger(__name__)


FIELD_SEPARATOR = "\x1f"
METADATA_FORMAT = FIELD_SEPARATOR.join([
    "{{title}}",
    "{{artist}}",
    "{{mpris:length}}",
    "{{position}}",
])


def _micros_to_seconds(value: str) -> float:
    try:
        return max(0.0, int(value.strip()) / 1_000_000)
    except ValueError:
        return 0.0


def parse_metadata_output(output: str) -> PlayerState:
    """
    Parse one line of `playerctl metadata --format` output

    Args:
        output: Command output using METADATA_FORMAT

    Returns:
        PlayerState (empty when the output does not have four fields)
    """
    fields = output.rstrip("\n").split(FIELD_SEPARATOR)
    if len(fields) != 4:
        return PlayerState()

    title, artist, length, position = fields
    return PlayerState(
        title=title.strip(),
        artist=clean_artist_label(artist),
        duration_seconds=_micros_to_seconds(length),
        current_time_seconds=_micros_to_seconds(position),
    )


class PlayerctlSource(PlayerSource):
    """
    PlayerSource backed by the playerctl binary
    """

    def __init__(self, player_name: Optional[str] = None, command_timeout: Optional[float] = None):
        config = get_settings().player
        self.player_name = player_name if player_name is not None else config.player_name
        self.command_timeout = command_timeout if command_timeout is not None else config.command_timeout

    @staticmethod
    def is_available() -> bool:
        return shutil.which("playerctl") is not None

    def _command(self, *args: str) -> List[str]:
        command = ["playerctl"]
        if self.player_name:
            command.append(f"--player={self.player_name}")
        command.extend(args)
        return command

    async def _run(self, *args: str) -> Optional[str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *self._command(*args),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(f"playerctl could not be started: {e}")
            return None

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.command_timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.debug(f"playerctl {' '.join(args)} timed out")
            return None

        if process.returncode != 0:
            # "No players found" while nothing is playing
            logger.debug(f"playerctl exited {process.returncode}: {stderr.decode(errors='replace').strip()}")
            return None

        return stdout.decode("utf-8", errors="replace")

    async def read_state(self) -> PlayerState:
        output = await self._run("metadata", "--format", METADATA_FORMAT)
        if output is None:
            return PlayerState()
        return parse_metadata_output(output)

    async def current_time(self) -> float:
        output = await self._run("position")
        if output is None:
            return 0.0
        try:
            return max(0.0, float(output.strip()))
        except ValueError:
            return 0.0


def create_player_source(settings=None) -> PlayerSource:
    """
    Build the configured player source

    Raises:
        ConfigError: If the configured backend is unknown
    """
    settings = settings or get_settings()
    if settings.player.backend == "playerctl":
        return PlayerctlSource(settings.player.player_name, settings.player.command_timeout)
    raise ConfigError(f"Unknown player backend: {settings.player.backend}")
