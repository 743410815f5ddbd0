"""
Configuration package for lyricfx

Exposes the settings singleton and its reload hook. The overlay core reads
settings at the start of every track cycle and never writes them.

Usage:
    from lyricfx.config import get_settings

    settings = get_settings()
    if settings.ai_available:
        ...
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',      # Factory function for singleton settings access
    'reload_settings',   # Function to hot-reload settings from files
    'Settings',          # Settings class for direct instantiation
]
