# lyricfx/utils/__init__.py
"""
Utilities package
Common helpers, logging, and text-cleaning functions
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    get_current_log_file
)
from .helpers import (
    collapse_whitespace,
    is_speed_modified,
    clean_track_title,
    clean_artist_label,
    strip_code_fences,
    format_timestamp,
    format_duration,
    truncate_string
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'get_current_log_file',

    # Helper exports
    'collapse_whitespace',
    'is_speed_modified',
    'clean_track_title',
    'clean_artist_label',
    'strip_code_fences',
    'format_timestamp',
    'format_duration',
    'truncate_string',
]
