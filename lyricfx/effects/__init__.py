"""
Effects package
Rule table, layered rule engine and AI-generated effects
"""

from .rules import EffectRule, EffectRuleTable, EffectSpawn, CORE_RULES, CORE_RULE_IDS
from .engine import EffectsEngine
from .generator import AIEffectsGenerator, parse_effects_response

__all__ = [
    'EffectRule',
    'EffectRuleTable',
    'EffectSpawn',
    'CORE_RULES',
    'CORE_RULE_IDS',
    'EffectsEngine',
    'AIEffectsGenerator',
    'parse_effects_response',
]
