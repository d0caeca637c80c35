"""Unit tests for the ordered rule reducers."""

from jobboard.rules import Rule, best_match, first_match

RULES = (
    Rule(r"consult", 5, "generic"),
    Rule(r"sustainability\s+consult", 30, "specific"),
    Rule(r"sustainability", 15, "broad"),
    Rule(r"esg", 30, "esg"),
)


def test_first_match_respects_list_order():
    assert first_match(RULES, "Sustainability Consultant").label == "generic"


def test_best_match_takes_highest_weight():
    assert best_match(RULES, "Sustainability Consultant").label == "specific"


def test_best_match_tie_goes_to_earlier_rule():
    assert best_match(RULES, "ESG Sustainability Consultant").label == "specific"


def test_matching_is_case_insensitive():
    assert Rule(r"esg\s+analyst").matches("Senior ESG ANALYST")


def test_no_match_and_empty_text():
    assert first_match(RULES, "Barista") is None
    assert best_match(RULES, "") is None
    assert first_match(RULES, None) is None
