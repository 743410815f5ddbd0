"""
Render package
Rendering collaborator interface and the terminal renderer
"""

from .base import Renderer
from .console import ConsoleRenderer, EFFECT_GLYPHS

__all__ = [
    'Renderer',
    'ConsoleRenderer',
    'EFFECT_GLYPHS',
]
