"""
Line-aligned lyrics translation

Synced lyrics are translated as one newline-joined block so the model sees
the whole song, then split back into lines and zipped with the original
timestamps. Alignment is by line index only, so a response whose line count
drifts too far from the input is discarded rather than shown out of sync.

Translation is an enrichment: every failure returns None and the caller keeps
the original lyrics.
"""

from typing import List, Optional, Sequence

from ..ai.client import GenerativeTextClient
from ..config.settings import get_settings
from ..exceptions import AlignmentMismatchError, LyricFxError
from ..utils.logger import get_logger
from .models import LyricLine, Timeline


logger = get_logger(__name__)


LINES_PROMPT = """Translate the following song lyrics by {artist} ("{track}") into {language}.

Rules:
- Return exactly one output line for every input line, in the same order.
- Keep empty lines empty.
- Do not add timestamps, numbering, titles, notes or any commentary.
- Return only the translated lines.

Lyrics:
{lyrics}"""

PLAIN_PROMPT = """Translate the following song lyrics by {artist} ("{track}") into {language}.

Preserve the original line breaks, empty lines and stanza structure.
Return only the translated lyrics, without commentary.

Lyrics:
{lyrics}"""


def align_translation(lines: Sequence[LyricLine], translated: List[str], max_drift: int = 5) -> Timeline:
    """
    Zip translated text with the original timestamps

    Args:
        lines: Original timeline
        translated: Translated lines in response order
        max_drift: Largest tolerated difference in line count

    Returns:
        New timeline; indices the translation lacks (or leaves blank) keep
        the original text

    Raises:
        AlignmentMismatchError: If the line counts differ by more than max_drift
    """
    if abs(len(translated) - len(lines)) > max_drift:
        raise AlignmentMismatchError(
            f"Translation returned {len(translated)} lines for {len(lines)}",
            expected=len(lines),
            received=len(translated)
        )

    aligned = []
    for index, line in enumerate(lines):
        text = translated[index].strip() if index < len(translated) else ""
        aligned.append(line.with_text(text) if text else line)
    return tuple(aligned)


class TranslationAdapter:
    """
    Translate lyrics through the generative text API
    """

    def __init__(self, client: Optional[GenerativeTextClient] = None, settings=None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> GenerativeTextClient:
        if self._client is None:
            self._client = GenerativeTextClient()
        return self._client

    async def translate_lines(
        self,
        lines: Sequence[LyricLine],
        artist: str,
        track: str,
        settings=None
    ) -> Optional[Timeline]:
        """
        Translate a synced timeline line by line

        Args:
            lines: Timeline to translate
            artist: Artist name for prompt context
            track: Track title for prompt context
            settings: Per-call settings snapshot, defaults to the adapter's own

        Returns:
            Translated timeline with the original timestamps, or None on any
            failure (network, malformed response, alignment mismatch)
        """
        if not lines:
            return None

        config = (settings or self.settings).translation
        prompt = LINES_PROMPT.format(
            artist=artist or "unknown artist",
            track=track,
            language=config.target_language,
            lyrics="\n".join(line.text for line in lines)
        )

        try:
            completion = await self.client.generate_text(prompt)
            translated = align_translation(
                lines,
                completion.split("\n"),
                config.max_line_drift
            )
        except AlignmentMismatchError as e:
            logger.warning(f"Discarding translation: {e.message}")
            return None
        except LyricFxError as e:
            logger.warning(f"Translation failed: {e}")
            return None

        logger.debug(f"Translated {len(translated)} lines into {config.target_language}")
        return translated

    async def translate_plain(self, text: str, artist: str, track: str, settings=None) -> Optional[str]:
        """
        Translate an unsynced lyrics block

        Returns:
            Translated text, or None on any failure
        """
        if not text or not text.strip():
            return None

        language = (settings or self.settings).translation.target_language
        prompt = PLAIN_PROMPT.format(
            artist=artist or "unknown artist",
            track=track,
            language=language,
            lyrics=text
        )

        try:
            completion = await self.client.generate_text(prompt)
        except LyricFxError as e:
            logger.warning(f"Translation failed: {e}")
            return None

        return completion or None
