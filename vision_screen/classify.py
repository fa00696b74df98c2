"""Severity bands and left/right asymmetry for finished eye results.

Everything here is a pure function of already finalised
:class:`~vision_screen.staircase.EyeResult` objects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .protocols import TestType
from .staircase import Eye, EyeResult
from .thresholds import (
    ACUITY_THRESHOLDS,
    CONTRAST_INTERPRETATION_BANDS,
    CONTRAST_LOWEST_BAND,
    CONTRAST_THRESHOLDS,
    RECOMMENDATIONS,
    SCORE_TOLERANCE,
)


class Severity(str, Enum):
    NORMAL = "normal"
    FOLLOW_UP = "follow_up"
    SEE_DOCTOR = "see_doctor"
    UNDETERMINED = "undetermined"


_THRESHOLDS: Dict[TestType, Mapping[str, object]] = {
    TestType.VISUAL_ACUITY: ACUITY_THRESHOLDS,
    TestType.CONTRAST_SENSITIVITY: CONTRAST_THRESHOLDS,
}

# Worst first; an undetermined eye could not pass even the easiest level.
_SEVERITY_RANK = {
    Severity.NORMAL: 0,
    Severity.FOLLOW_UP: 1,
    Severity.SEE_DOCTOR: 2,
    Severity.UNDETERMINED: 3,
}


def _at_least(value: float, threshold: float) -> bool:
    return value >= threshold - SCORE_TOLERANCE


def _thresholds_for(test_type: Union[TestType, str]) -> Mapping[str, object]:
    return _THRESHOLDS[TestType(test_type)]


def _metric(result: EyeResult, thresholds: Mapping[str, object]) -> Optional[float]:
    """Return the value a test is classified on, or ``None`` if undetermined."""

    if not result.score.is_determined:
        return None
    if thresholds["metric"] == "levels_passed":
        return float(result.levels_passed)
    return float(result.score.value)


def classify(eye_result: EyeResult, test_type: Union[TestType, str]) -> Severity:
    """Assign a severity band to a single eye's result."""

    thresholds = _thresholds_for(test_type)
    value = _metric(eye_result, thresholds)
    if value is None:
        return Severity.UNDETERMINED
    if _at_least(value, float(thresholds["normal"])):
        return Severity.NORMAL
    if _at_least(value, float(thresholds["follow_up"])):
        return Severity.FOLLOW_UP
    return Severity.SEE_DOCTOR


def detect_asymmetry(
    left: Optional[EyeResult],
    right: Optional[EyeResult],
    test_type: Union[TestType, str],
) -> bool:
    """Return ``True`` when both eyes are measured and differ notably.

    A missing or undetermined eye yields ``False``.  That means "cannot
    compare", not "measured and symmetric"; callers that need the distinction
    must check which eyes are present themselves.
    """

    if left is None or right is None:
        return False
    thresholds = _thresholds_for(test_type)
    left_value = _metric(left, thresholds)
    right_value = _metric(right, thresholds)
    if left_value is None or right_value is None:
        return False
    return _at_least(abs(left_value - right_value), float(thresholds["asymmetry"]))


def interpret_contrast(log_cs: float) -> str:
    """Return the descriptive band for a logCS score."""

    for label, lower_bound in CONTRAST_INTERPRETATION_BANDS:
        if _at_least(log_cs, lower_bound):
            return label
    return CONTRAST_LOWEST_BAND


@dataclass(frozen=True)
class TestSummary:
    """Both eyes of one test reduced to what a report card shows."""

    __test__ = False  # not a pytest class

    test_type: TestType
    severities: Dict[Eye, Severity] = field(default_factory=dict)
    asymmetry: bool = False
    worst_severity: Optional[Severity] = None
    recommendations: Tuple[str, ...] = ()
    status: str = "pending"

    @property
    def eyes_measured(self) -> Tuple[Eye, ...]:
        return tuple(eye for eye in (Eye.LEFT, Eye.RIGHT) if eye in self.severities)

    def recommendation_texts(self) -> List[str]:
        return [RECOMMENDATIONS[key] for key in self.recommendations]

    def to_dict(self) -> Dict[str, object]:
        return {
            "test_type": self.test_type.value,
            "severities": {eye.value: sev.value for eye, sev in self.severities.items()},
            "asymmetry": self.asymmetry,
            "worst_severity": self.worst_severity.value if self.worst_severity else None,
            "recommendations": list(self.recommendations),
            "status": self.status,
        }


def summarize_test(
    test_type: Union[TestType, str],
    left: Optional[EyeResult] = None,
    right: Optional[EyeResult] = None,
) -> TestSummary:
    """Combine the available eyes of one test into a :class:`TestSummary`.

    The worst eye drives the recommendation; an asymmetry between the eyes adds
    a follow-up.  The card status is ``pending`` without any result,
    ``complete`` when every measured eye is normal and symmetric, otherwise
    ``warning``.
    """

    test_type = TestType(test_type)
    severities: Dict[Eye, Severity] = {}
    for eye, result in ((Eye.LEFT, left), (Eye.RIGHT, right)):
        if result is not None:
            severities[eye] = classify(result, test_type)

    if not severities:
        return TestSummary(test_type=test_type)

    worst = max(severities.values(), key=_SEVERITY_RANK.__getitem__)
    asymmetry = detect_asymmetry(left, right, test_type)

    recommendations: List[str] = []
    if worst in (Severity.SEE_DOCTOR, Severity.UNDETERMINED):
        recommendations.append("see_doctor")
    elif worst is Severity.FOLLOW_UP:
        recommendations.append("follow_up")
    if asymmetry and "follow_up" not in recommendations:
        recommendations.append("follow_up")
    if not recommendations:
        recommendations.append("none")

    status = "complete" if worst is Severity.NORMAL and not asymmetry else "warning"
    return TestSummary(
        test_type=test_type,
        severities=severities,
        asymmetry=asymmetry,
        worst_severity=worst,
        recommendations=tuple(recommendations),
        status=status,
    )


__all__ = [
    "Severity",
    "TestSummary",
    "classify",
    "detect_asymmetry",
    "interpret_contrast",
    "summarize_test",
]
