"""Success probability: match score blended with visa confidence."""
from __future__ import annotations

from jobboard.models import VisaConfidence

SCORE_WEIGHT = 0.6
VISA_WEIGHT = 0.4

VISA_MULTIPLIER: dict[VisaConfidence, float] = {
    VisaConfidence.GREEN: 1.0,
    VisaConfidence.YELLOW: 0.55,
    VisaConfidence.RED: 0.15,
    VisaConfidence.UNKNOWN: 0.3,
}


def success_probability(score: int, confidence: VisaConfidence | str) -> int:
    try:
        multiplier = VISA_MULTIPLIER[VisaConfidence(confidence)]
    except ValueError:
        multiplier = VISA_MULTIPLIER[VisaConfidence.UNKNOWN]
    # Halves round up.
    return int(score * SCORE_WEIGHT + multiplier * 100 * VISA_WEIGHT + 0.5)
