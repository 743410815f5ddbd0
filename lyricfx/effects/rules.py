"""
Effect rules and the immutable rule table

An effect rule pairs an id with a case-insensitive trigger pattern. The 13
core rules are fixed; AI-generated rules come with their own visual
descriptor (a self-contained HTML fragment) and an optional style block.

EffectRuleTable is a value object: merging AI rules builds a new table and
the engine swaps its reference, so a table being evaluated is never mutated.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Pattern, Tuple

from ..exceptions import MalformedResponseError


@dataclass(frozen=True)
class EffectRule:
    """
    One effect trigger

    Attributes:
        id: Effect identifier, unique within a table
        pattern: Compiled case-insensitive trigger regex
        visual: Visual descriptor for AI rules (None for core rules)
        style: Optional style block installed with the visual
    """
    id: str
    pattern: Pattern
    visual: Optional[str] = None
    style: Optional[str] = None

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text))

    @classmethod
    def core(cls, rule_id: str, pattern: str) -> 'EffectRule':
        return cls(id=rule_id, pattern=re.compile(pattern, re.IGNORECASE))

    @classmethod
    def from_ai_entry(cls, entry: Any) -> 'EffectRule':
        """
        Build a rule from one entry of a generated JSON array

        Args:
            entry: Dict with required keys id, regex, html and optional css

        Returns:
            EffectRule

        Raises:
            MalformedResponseError: If a required field is missing or empty,
                or the regex does not compile
        """
        if not isinstance(entry, dict):
            raise MalformedResponseError("Effect entry is not an object", details={'entry': str(entry)[:100]})

        values = {}
        for key in ('id', 'regex', 'html'):
            value = entry.get(key)
            if not isinstance(value, str) or not value.strip():
                raise MalformedResponseError(f"Effect entry is missing '{key}'", details={'entry': str(entry)[:100]})
            values[key] = value.strip()

        try:
            pattern = re.compile(values['regex'], re.IGNORECASE)
        except re.error as e:
            raise MalformedResponseError(f"Effect '{values['id']}' has an invalid regex: {e}") from e

        css = entry.get('css')
        return cls(
            id=values['id'],
            pattern=pattern,
            visual=values['html'],
            style=css.strip() if isinstance(css, str) and css.strip() else None
        )


CORE_RULES: Tuple[EffectRule, ...] = (
    EffectRule.core('heart', r"\b(love|heart|kiss)"),
    EffectRule.core('fire', r"\b(fire|burn\w*|flames?|hot)\b"),
    EffectRule.core('rain', r"\b(rain|tears?|cry|crying)\b"),
    EffectRule.core('stars', r"\b(stars?|sky|galaxy|shine)"),
    # Also matches "moon"; the moon override keeps them from firing together
    EffectRule.core('night', r"\b(night|dark|midnight|moon)"),
    EffectRule.core('moon', r"\bmoon"),
    EffectRule.core('vision', r"\b(see|eyes?|look|vision)\b"),
    EffectRule.core('thinking', r"\b(think|thought|mind|wonder)"),
    EffectRule.core('money', r"\b(money|cash|rich|gold|dollars?)\b"),
    EffectRule.core('music', r"\b(music|song|sing|dance|melody)"),
    EffectRule.core('time', r"\b(time|clock|forever|tonight)"),
    EffectRule.core('call', r"\b(call|phone|ring)"),
    EffectRule.core('snow', r"\b(snow|cold|ice|winter|freeze)"),
)

CORE_RULE_IDS = frozenset(rule.id for rule in CORE_RULES)


@dataclass(frozen=True)
class EffectRuleTable:
    """
    Immutable ordered rule table: core rules first, then AI rules
    """
    core: Tuple[EffectRule, ...] = CORE_RULES
    ai: Tuple[EffectRule, ...] = field(default_factory=tuple)

    @property
    def rules(self) -> Tuple[EffectRule, ...]:
        return self.core + self.ai

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(rule.id for rule in self.rules)

    def get(self, rule_id: str) -> Optional[EffectRule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def with_ai_rules(self, rules: Iterable[EffectRule]) -> 'EffectRuleTable':
        """Return a new table with the AI subset replaced wholesale"""
        return EffectRuleTable(core=self.core, ai=tuple(rules))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'core': [rule.id for rule in self.core],
            'ai': [{'id': rule.id, 'regex': rule.pattern.pattern} for rule in self.ai],
        }


@dataclass(frozen=True)
class EffectSpawn:
    """
    Effect spawn request handed to the renderer

    Attributes:
        effect_id: Id of the rule that fired
        visual: Visual descriptor for AI rules, None for core effects
    """
    effect_id: str
    visual: Optional[str] = None
