"""
Sync package
Track-change detection, the per-track pipeline and active-line synchronization
"""

from .synchronizer import SyncLoop, find_active_index
from .tracker import TrackChangeDetector
from .pipeline import TrackPipeline
from .session import LyricsSession

__all__ = [
    'SyncLoop',
    'find_active_index',
    'TrackChangeDetector',
    'TrackPipeline',
    'LyricsSession',
]
