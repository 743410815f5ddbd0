"""
AI effects generator

Asks the generative API for a small batch of song-specific effect rules and
merges them into the effects engine. Generation is slow compared with lyric
resolution, so the track pipeline races it against a timeout and lets it
finish in the background; the is_current check keeps a late result from a
previous track out of the rule table.
"""

import json
from typing import Any, Callable, List, Optional

from ..ai.client import GenerativeTextClient
from ..config.settings import get_settings
from ..exceptions import LyricFxError, MalformedResponseError
from ..utils.logger import get_logger
from .engine import EffectsEngine
from .rules import EffectRule, EffectRuleTable


logger = get_logger(__name__)


EFFECTS_PROMPT = """You design visual effects for a lyrics overlay.

Song: "{track}" by {artist}

Lyrics:
{lyrics}

Create exactly {count} visual effects tied to words or themes that recur in these lyrics.
Return ONLY a JSON array (no markdown, no commentary) of {count} objects with these keys:
- "id": short unique lowercase identifier (not one of: {reserved})
- "regex": JavaScript-compatible regular expression matching the trigger words, case-insensitive
- "html": a self-contained HTML fragment for the effect. It must position and center itself,
  fade in and fade out on its own over 3 to 5 seconds, and must not depend on any external file
- "css": optional CSS (keyframes, classes) used by the html fragment
"""

RETRY_SUFFIX = """

Your previous answer was rejected: {reason}
Answer again with ONLY the JSON array."""


def parse_effects_response(completion: str, batch_size: int) -> List[EffectRule]:
    """
    Parse and validate a generated effects batch

    Args:
        completion: Fence-stripped completion text
        batch_size: Maximum number of rules kept

    Returns:
        Validated rules, truncated to batch_size

    Raises:
        MalformedResponseError: If the text is not a non-empty JSON array of
            complete, non-colliding entries
    """
    try:
        data = json.loads(completion)
    except ValueError as e:
        raise MalformedResponseError(f"response is not valid JSON ({e})") from e

    if not isinstance(data, list):
        raise MalformedResponseError("response is not a JSON array")
    if not data:
        raise MalformedResponseError("response is an empty array")

    return EffectsEngine.validate_ai_rules(data[:batch_size])


class AIEffectsGenerator:
    """
    Generate and install song-specific effect rules

    Up to max_attempts requests are made; each retry tells the model why the
    previous answer was rejected. After the last failure the generator gives
    up quietly and the core rules stay in effect.
    """

    def __init__(
        self,
        engine: EffectsEngine,
        client: Optional[GenerativeTextClient] = None,
        settings=None,
        on_merged: Optional[Callable[[EffectRuleTable], Any]] = None,
    ):
        """
        Args:
            engine: Effects engine receiving the merged rules
            client: Generative text client (created lazily if None)
            settings: Settings snapshot, defaults to the global settings
            on_merged: Called with the new table after a successful merge
        """
        self.engine = engine
        self.settings = settings or get_settings()
        self.on_merged = on_merged
        self._client = client

    @property
    def client(self) -> GenerativeTextClient:
        if self._client is None:
            self._client = GenerativeTextClient()
        return self._client

    def build_prompt(self, lyrics_text: str, artist: str, track: str, settings=None) -> str:
        settings = settings or self.settings
        return EFFECTS_PROMPT.format(
            track=track,
            artist=artist or "unknown artist",
            lyrics=lyrics_text,
            count=settings.ai.batch_size,
            reserved=", ".join(rule.id for rule in self.engine.table.core),
        )

    async def generate(
        self,
        lyrics_text: str,
        artist: str,
        track: str,
        is_current: Optional[Callable[[], bool]] = None,
        settings=None
    ) -> Optional[EffectRuleTable]:
        """
        Generate effects for a song and merge them into the engine

        Args:
            lyrics_text: Full lyrics, one line per row
            artist: Artist name
            track: Track title
            is_current: Returns False once the track cycle that started this
                generation has been superseded
            settings: Per-call settings snapshot, defaults to the generator's own

        Returns:
            The new rule table, or None if generation failed or went stale
        """
        settings = settings or self.settings
        base_prompt = self.build_prompt(lyrics_text, artist, track, settings)
        prompt = base_prompt
        max_attempts = max(1, settings.ai.max_attempts)
        rules = None

        for attempt in range(1, max_attempts + 1):
            try:
                completion = await self.client.generate_text(prompt)
                rules = parse_effects_response(completion, settings.ai.batch_size)
                break
            except LyricFxError as e:
                logger.debug(f"AI effects attempt {attempt}/{max_attempts} failed: {e}")
                prompt = base_prompt + RETRY_SUFFIX.format(reason=e.message)

        if rules is None:
            logger.info(f"AI effects unavailable for '{track}' after {max_attempts} attempts")
            return None

        if is_current is not None and not is_current():
            logger.debug(f"Discarding AI effects for '{track}': track changed")
            return None

        table = self.engine.merge_ai_rules(rules)
        if self.on_merged is not None:
            self.on_merged(table)
        return table
