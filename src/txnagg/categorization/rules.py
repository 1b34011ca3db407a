"""Deterministic, priority-ordered keyword matching.

A rule is a (keyword, category, priority) triple. Descriptions are matched
case-insensitively against rule keywords in priority order; the first rule
whose keyword occurs in the description decides the category. Anything that
matches no rule is ``Other``.

The matcher is pure: it never touches the store, and it never raises for
unmatched input.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol, Sequence

OTHER = "Other"

# Ordering matters: earlier categories win, and within a category earlier keywords win.
DEFAULT_CATEGORY_KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "Groceries": ("walmart", "target", "grocery", "supermarket", "safeway", "kroger", "whole foods"),
        "Entertainment": ("netflix", "spotify", "hulu", "disney", "hbo", "theater", "cinema", "movie"),
        "Utilities": ("electric", "water", "gas", "internet", "phone", "utility", "bill"),
        "Transportation": ("uber", "lyft", "gas station", "shell", "exxon", "chevron", "parking", "transit"),
        "Healthcare": ("pharmacy", "cvs", "walgreens", "hospital", "clinic", "doctor", "medical", "health"),
        "Shopping": ("amazon", "ebay", "clothing", "h&m", "zara", "store", "mall"),
        "Dining": ("restaurant", "cafe", "bistro", "diner", "pizza", "burger", "starbucks", "coffee"),
        "Travel": ("flight", "hotel", "airline", "marriott", "hilton", "booking", "airbnb", "travel"),
        "Education": ("course", "udemy", "coursera", "school", "university", "tuition", "education", "learning"),
    }
)

CATEGORY_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        "Groceries": "Grocery stores and supermarkets",
        "Entertainment": "Entertainment and streaming services",
        "Utilities": "Utility bills and services",
        "Transportation": "Transportation and fuel",
        "Healthcare": "Healthcare and medical services",
        "Shopping": "Shopping and retail",
        "Dining": "Restaurants and food services",
        "Travel": "Travel and accommodation",
        "Education": "Education and learning",
        OTHER: "Other uncategorized transactions",
    }
)

# Priority given to the first generated rule; each following keyword gets one less.
TOP_PRIORITY = 100


class RuleLike(Protocol):
    keyword: str
    category_name: str
    priority: int


@dataclass(frozen=True)
class KeywordRule:
    """An in-memory rule, used where no rule store is involved."""

    keyword: str
    category_name: str
    priority: int = 0
    is_deleted: bool = False


def normalize_description(description: str | None) -> str:
    """Case-insensitive form of a description (or keyword)."""
    return (description or "").casefold()


def is_active(rule: RuleLike) -> bool:
    return bool((rule.keyword or "").strip()) and not getattr(rule, "is_deleted", False)


def sort_rules(rules: Iterable[RuleLike]) -> list[RuleLike]:
    """Order rules for matching: priority descending, input order kept on ties."""
    return sorted(rules, key=lambda rule: -rule.priority)


def match_description(description: str | None, rules: Sequence[RuleLike]) -> str:
    """Return the category of the first rule whose keyword occurs in ``description``.

    ``rules`` must already be ordered with :func:`sort_rules` (or come from the
    store ordered the same way). Empty-keyword and deleted rules never match.

    Args:
        description: Free-text transaction description.
        rules: Rules in evaluation order.

    Returns:
        The winning rule's ``category_name``, or ``OTHER``.
    """
    text = normalize_description(description)
    if not text:
        return OTHER

    for rule in rules:
        if not is_active(rule):
            continue
        if normalize_description(rule.keyword) in text:
            return rule.category_name

    return OTHER


def rules_from_keywords(
    keywords: Mapping[str, Sequence[str]], top_priority: int = TOP_PRIORITY
) -> list[KeywordRule]:
    """Expand a category -> keywords table into rules with descending priority."""
    rules: list[KeywordRule] = []
    priority = top_priority
    for category_name, category_keywords in keywords.items():
        for keyword in category_keywords:
            rules.append(KeywordRule(keyword=keyword, category_name=category_name, priority=priority))
            priority -= 1
    return rules
