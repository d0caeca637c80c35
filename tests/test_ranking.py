"""Unit tests for the success-probability blend."""

import pytest

from jobboard.models import VisaConfidence
from jobboard.ranking import success_probability


@pytest.mark.parametrize(
    "score, confidence, expected",
    [
        (73, VisaConfidence.GREEN, 84),
        (63, "green", 78),
        (50, VisaConfidence.YELLOW, 52),
        (0, VisaConfidence.RED, 6),
        (100, VisaConfidence.GREEN, 100),
        (0, VisaConfidence.UNKNOWN, 12),
    ],
)
def test_success_probability(score, confidence, expected):
    assert success_probability(score, confidence) == expected


def test_unrecognised_confidence_counts_as_unknown():
    assert success_probability(0, "purple") == success_probability(0, VisaConfidence.UNKNOWN)
