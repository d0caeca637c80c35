"""Unit tests for SOC occupation inference, going rates and visa verdicts."""

import pytest

from jobboard.eligibility import evaluate, salary_threshold
from jobboard.models import VisaConfidence
from jobboard.occupation import GENERAL_THRESHOLD, UNMAPPED, going_rate, infer_code


@pytest.mark.parametrize(
    "title, code",
    [
        ("Senior Sustainability Consultant", "2431"),
        ("ESG Analyst", "3545"),
        ("Environmental Health Officer", "2463"),
        ("Biodiversity Officer", "2151"),
        ("Project Manager, Net Zero", "2424"),
        ("Climate Risk Modeller", "2425"),
    ],
)
def test_infer_code(title, code):
    assert infer_code(title).code == code


def test_infer_code_unmapped():
    assert infer_code("Barista") == UNMAPPED
    assert infer_code(None) == UNMAPPED


def test_going_rate_lookup():
    assert going_rate("2431").standard == 50_200
    assert going_rate("9999") is None
    assert going_rate(None) is None


def test_threshold_never_below_general_threshold():
    assert salary_threshold("2152") == GENERAL_THRESHOLD
    assert salary_threshold(None) == GENERAL_THRESHOLD


def test_unlisted_sponsor_is_red():
    verdict = evaluate(False, "2431", 90_000)
    assert verdict.confidence is VisaConfidence.RED
    assert verdict.reason == "Company not found on Home Office Register of Licensed Sponsors"


def test_undisclosed_salary_is_yellow():
    verdict = evaluate(True, "2431", None)
    assert verdict.confidence is VisaConfidence.YELLOW
    assert "£41,700" in verdict.reason


def test_salary_at_threshold_is_green():
    verdict = evaluate(True, "2431", 50_000)
    assert verdict.confidence is VisaConfidence.GREEN
    assert verdict.reason == (
        "Verified sponsor + salary £50,000 meets SOC 2431 (Management consultants) minimum of £41,700"
    )
    assert evaluate(True, None, GENERAL_THRESHOLD).confidence is VisaConfidence.GREEN


def test_salary_below_threshold_is_yellow_with_shortfall():
    verdict = evaluate(True, "3545", 38_000)
    assert verdict.confidence is VisaConfidence.YELLOW
    assert "£3,700 below" in verdict.reason
    assert "lower rate: £28,600" in verdict.reason


def test_below_threshold_unmapped_occupation():
    verdict = evaluate(True, None, 30_000)
    assert verdict.confidence is VisaConfidence.YELLOW
    assert "lower rate: varies" in verdict.reason
