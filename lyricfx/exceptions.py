"""
Exception classes for lyricfx.

Every failure inside a track cycle is expected to degrade to "fewer features
this cycle" rather than stop the overlay, so these exceptions are raised at
component boundaries and caught by the pipeline or the polling tasks.

Exception Hierarchy:
    LyricFxError (base)
        ConfigError - Configuration file issues
        NoMatchError - No usable lyrics for the playing track
        MalformedResponseError - AI or translation output failed validation
        AlignmentMismatchError - Translated line count diverged too far
        NetworkFailure - Any HTTP request failure
"""

from typing import Any, Dict, Optional


class LyricFxError(Exception):
    """
    Base exception for all lyricfx errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g. query, track title).

    Example:
        try:
            resolved = await resolver.resolve(title, artist, duration)
        except LyricFxError as e:
            logger.warning(f"Lyrics unavailable: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'title': Track title involved in the error
                     - 'query': Search query that produced the error
                     - 'reason': Validation failure reason
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LyricFxError):
    """
    Raised when the configuration file cannot be read or holds invalid values.

    This is the only error that should stop the CLI before the overlay starts.
    """
    pass


class NoMatchError(LyricFxError):
    """
    Raised when the resolver finds nothing usable for the playing track.

    Terminal for the current track cycle: the renderer shows a "not found"
    state and the overlay waits for the next track change.

    Example:
        raise NoMatchError(
            "No lyrics found",
            details={'title': 'Song Title', 'queries': ['song title artist', 'song title']}
        )
    """
    pass


class MalformedResponseError(LyricFxError):
    """
    Raised when generative output fails structural validation.

    Recovered by retrying (AI effects) or by discarding the result
    (translation). Never fatal for a track cycle.
    """
    pass


class AlignmentMismatchError(LyricFxError):
    """
    Raised when a translation returns a line count too far from the input.

    Line-index alignment with the original timestamps is the whole contract of
    a synced translation, so the translation is discarded and the original
    lines are kept.

    Attributes:
        expected: Number of lines sent for translation.
        received: Number of lines returned by the service.
    """

    def __init__(self, message: str, expected: int, received: int) -> None:
        super().__init__(message, details={'expected': expected, 'received': received})
        self.expected = expected
        self.received = received


class NetworkFailure(LyricFxError):
    """
    Raised when an HTTP request fails (connection error, timeout, bad status).

    Treated as an empty result for lyrics search and as a generation failure
    for AI calls.

    Attributes:
        status: HTTP status code when the server answered, None otherwise.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, status: Optional[int] = None) -> None:
        super().__init__(message, details)
        self.status = status
