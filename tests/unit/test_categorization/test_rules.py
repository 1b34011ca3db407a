from txnagg.categorization.rules import (
    DEFAULT_CATEGORY_KEYWORDS,
    OTHER,
    TOP_PRIORITY,
    KeywordRule,
    match_description,
    rules_from_keywords,
    sort_rules,
)

NETFLIX = KeywordRule(keyword="netflix", category_name="Entertainment", priority=10)
NET = KeywordRule(keyword="net", category_name="Internet", priority=1)

DEFAULT_RULES = sort_rules(rules_from_keywords(DEFAULT_CATEGORY_KEYWORDS))


def test_higher_priority_rule_wins() -> None:
    assert match_description("Netflix Payment", sort_rules([NETFLIX, NET])) == "Entertainment"


def test_priority_wins_regardless_of_input_order() -> None:
    assert match_description("Netflix Payment", sort_rules([NET, NETFLIX])) == "Entertainment"


def test_lower_priority_rule_matches_when_higher_does_not() -> None:
    assert match_description("NET BANKING FEE", sort_rules([NETFLIX, NET])) == "Internet"


def test_match_is_case_insensitive() -> None:
    rules = [KeywordRule(keyword="NetFlix", category_name="Entertainment", priority=1)]
    assert match_description("monthly NETFLIX.COM", rules) == "Entertainment"


def test_no_match_is_other() -> None:
    assert match_description("Unknown merchant 42", sort_rules([NETFLIX, NET])) == OTHER


def test_empty_rules_is_other() -> None:
    assert match_description("Netflix Payment", []) == OTHER


def test_empty_description_is_other() -> None:
    assert match_description("", [NETFLIX]) == OTHER
    assert match_description(None, [NETFLIX]) == OTHER


def test_empty_keyword_never_matches() -> None:
    rules = [KeywordRule(keyword="", category_name="Everything", priority=99), NETFLIX]
    assert match_description("Netflix Payment", rules) == "Entertainment"
    assert match_description("something else", rules) == OTHER


def test_deleted_rule_never_matches() -> None:
    deleted = KeywordRule(keyword="netflix", category_name="Old", priority=50, is_deleted=True)
    assert match_description("Netflix Payment", sort_rules([deleted, NETFLIX])) == "Entertainment"


def test_sort_keeps_input_order_on_ties() -> None:
    first = KeywordRule(keyword="a", category_name="First", priority=5)
    second = KeywordRule(keyword="a", category_name="Second", priority=5)
    assert sort_rules([first, second]) == [first, second]
    assert match_description("a", sort_rules([first, second])) == "First"


def test_rules_from_keywords_counts_down_from_top_priority() -> None:
    rules = rules_from_keywords({"A": ["x", "y"], "B": ["z"]})
    assert [(r.keyword, r.category_name, r.priority) for r in rules] == [
        ("x", "A", TOP_PRIORITY),
        ("y", "A", TOP_PRIORITY - 1),
        ("z", "B", TOP_PRIORITY - 2),
    ]


def test_default_table_streaming() -> None:
    assert match_description("Spotify Premium", DEFAULT_RULES) == "Entertainment"


def test_default_table_groceries() -> None:
    assert match_description("WHOLE FOODS MARKET #123", DEFAULT_RULES) == "Groceries"


def test_default_table_pharmacy() -> None:
    assert match_description("CVS Pharmacy", DEFAULT_RULES) == "Healthcare"


def test_default_table_rideshare() -> None:
    assert match_description("Uber trip", DEFAULT_RULES) == "Transportation"


def test_default_table_coffee() -> None:
    assert match_description("Starbucks", DEFAULT_RULES) == "Dining"


def test_default_table_online_course() -> None:
    assert match_description("Udemy course", DEFAULT_RULES) == "Education"


def test_default_table_unknown() -> None:
    assert match_description("Transfer to savings", DEFAULT_RULES) == OTHER
