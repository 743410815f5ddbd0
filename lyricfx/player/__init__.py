"""
Player package
Player-state snapshots and the playerctl (MPRIS) source
"""

from .base import Track, PlayerState, PlayerSource
from .playerctl import PlayerctlSource, create_player_source, parse_metadata_output

__all__ = [
    'Track',
    'PlayerState',
    'PlayerSource',
    'PlayerctlSource',
    'create_player_source',
    'parse_metadata_output',
]
