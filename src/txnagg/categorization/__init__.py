"""Transaction categorization.

Rule-based and deterministic: descriptions are matched against keyword rules
in priority order, with ``Other`` as the fallback.
"""

from .engine import Categorizer, RuleBasedCategorizer, StaticCategorizer, build_categorizer
from .rules import OTHER, match_description, sort_rules

__all__ = [
    "Categorizer",
    "OTHER",
    "RuleBasedCategorizer",
    "StaticCategorizer",
    "build_categorizer",
    "match_description",
    "sort_rules",
]
