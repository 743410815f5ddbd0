"""
Generative text API access shared by effects generation and translation
"""

from .client import GenerativeTextClient, extract_completion

__all__ = [
    'GenerativeTextClient',
    'extract_completion',
]
