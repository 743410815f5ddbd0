"""
Lyrics package
Lyrics search, LRC parsing, track resolution and translation
"""

from .models import LyricLine, Timeline, Candidate, ResolvedLyrics
from .lrc import parse_lrc, rescale_timeline, line_durations, is_epic, epic_markers
from .lrclib import LrcLibClient
from .resolver import TrackResolver, select_candidate, compute_speed_ratio
from .translation import TranslationAdapter, align_translation

__all__ = [
    'LyricLine',
    'Timeline',
    'Candidate',
    'ResolvedLyrics',
    'parse_lrc',
    'rescale_timeline',
    'line_durations',
    'is_epic',
    'epic_markers',
    'LrcLibClient',
    'TrackResolver',
    'select_candidate',
    'compute_speed_ratio',
    'TranslationAdapter',
    'align_translation',
]
