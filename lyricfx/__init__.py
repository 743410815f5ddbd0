"""
lyricfx - synchronized lyrics overlay with reactive visual effects

Follows the track playing in a media player, resolves time-synced lyrics,
highlights the active line and decides which visual effects fire for it.
"""

__version__ = "0.3.0"
__author__ = "lyricfx contributors"
