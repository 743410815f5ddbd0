"""
Effects rule engine

Decides which effects fire for the active lyric line. Evaluation is layered:

1. moon override - a line mentioning the moon fires only the moon effect
   (the night rule would otherwise fire alongside it)
2. vision gate - a line matching vision fires only vision, and only with
   probability vision_fire_rate; nothing else is evaluated
3. everything else - every other matching rule fires, core rules first, then
   AI rules; thinking is damped to thinking_fire_rate

The random source is injectable so tests can seed it.
"""

import random
from typing import Any, List, Optional, Sequence

from ..exceptions import MalformedResponseError
from ..utils.logger import get_logger
from .rules import CORE_RULE_IDS, EffectRule, EffectRuleTable, EffectSpawn


logger = get_logger(__name__)


class EffectsEngine:
    """
    Stateless evaluation over a swappable immutable rule table
    """

    def __init__(
        self,
        table: Optional[EffectRuleTable] = None,
        rng: Optional[random.Random] = None,
        vision_fire_rate: float = 0.8,
        thinking_fire_rate: float = 0.8,
    ):
        self.table = table or EffectRuleTable()
        self.rng = rng or random.Random()
        self.vision_fire_rate = vision_fire_rate
        self.thinking_fire_rate = thinking_fire_rate

    @classmethod
    def from_settings(cls, settings, rng: Optional[random.Random] = None) -> 'EffectsEngine':
        return cls(
            rng=rng,
            vision_fire_rate=settings.effects.vision_fire_rate,
            thinking_fire_rate=settings.effects.thinking_fire_rate,
        )

    def _fires(self, rate: float) -> bool:
        return self.rng.random() < rate

    def evaluate(self, text: str) -> List[str]:
        """
        Effect ids that fire for a line

        Args:
            text: Active line text

        Returns:
            Ordered list of effect ids (possibly empty)
        """
        if not text:
            return []

        table = self.table

        moon = table.get('moon')
        if moon is not None and moon.matches(text):
            return ['moon']

        vision = table.get('vision')
        if vision is not None and vision.matches(text):
            return ['vision'] if self._fires(self.vision_fire_rate) else []

        fired = []
        for rule in table.rules:
            if rule.id == 'vision' or not rule.matches(text):
                continue
            if rule.id == 'thinking' and not self._fires(self.thinking_fire_rate):
                continue
            fired.append(rule.id)
        return fired

    @staticmethod
    def validate_ai_rules(entries: Sequence[Any]) -> List[EffectRule]:
        """
        Validate a generated rule batch without installing it

        Args:
            entries: Generated rules, either EffectRule instances or dicts with
                id, regex, html and optional css

        Returns:
            Validated rules in batch order

        Raises:
            MalformedResponseError: If the batch is empty, an entry is
                incomplete, or an id collides with a core id or another entry
        """
        if not isinstance(entries, (list, tuple)) or not entries:
            raise MalformedResponseError("AI rule batch must be a non-empty list")

        rules: List[EffectRule] = []
        seen = set()
        for entry in entries:
            rule = entry if isinstance(entry, EffectRule) else EffectRule.from_ai_entry(entry)
            if not rule.id or not rule.visual:
                raise MalformedResponseError(f"AI rule '{rule.id}' has no id or visual")
            if rule.id in CORE_RULE_IDS:
                raise MalformedResponseError(f"AI rule id '{rule.id}' collides with a core effect")
            if rule.id in seen:
                raise MalformedResponseError(f"Duplicate AI rule id '{rule.id}'")
            seen.add(rule.id)
            rules.append(rule)
        return rules

    def merge_ai_rules(self, entries: Sequence[Any]) -> EffectRuleTable:
        """
        Replace the AI subset of the rule table

        The whole batch is validated before anything changes; on failure the
        current table is left untouched.

        Returns:
            The newly installed table

        Raises:
            MalformedResponseError: See validate_ai_rules
        """
        rules = self.validate_ai_rules(entries)
        self.table = self.table.with_ai_rules(rules)
        logger.info(f"Installed {len(rules)} AI effects: {', '.join(r.id for r in rules)}")
        return self.table

    def clear_ai_rules(self) -> None:
        self.table = self.table.with_ai_rules(())

    def spawn_requests(self, effect_ids: Sequence[str]) -> List[EffectSpawn]:
        """Map fired ids to spawn requests carrying AI visual descriptors"""
        spawns = []
        for effect_id in effect_ids:
            rule = self.table.get(effect_id)
            spawns.append(EffectSpawn(effect_id=effect_id, visual=rule.visual if rule else None))
        return spawns

    def style_content(self) -> str:
        """Concatenated style blocks of the AI rules"""
        return "\n".join(rule.style for rule in self.table.ai if rule.style)
