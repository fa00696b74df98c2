"""Per-test configuration bundles.

A :class:`ScreeningProtocol` ties together everything one staircase test needs:
its level table, the stimulus alphabet and the staircase constants.  The two
built-in protocols reproduce the acuity and contrast screens.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .config import StaircaseConfig
from .levels import ACUITY_LEVELS, CONTRAST_LEVELS, LevelTable
from .staircase import Eye, StaircaseSession, create_session
from .stimuli import DIRECTIONS, LETTERS


class TestType(str, Enum):
    __test__ = False  # not a pytest class

    VISUAL_ACUITY = "visual_acuity"
    CONTRAST_SENSITIVITY = "contrast_sensitivity"


@dataclass(frozen=True)
class ScreeningProtocol:
    """Static description of one staircase test."""

    test_type: TestType
    title: str
    level_table: LevelTable
    alphabet: Tuple[str, ...]
    staircase: StaircaseConfig = field(default_factory=StaircaseConfig)

    def create_session(
        self, eye: Union[Eye, str] = Eye.RIGHT, rng: Optional[random.Random] = None
    ) -> StaircaseSession:
        """Start a fresh session for ``eye``."""

        return create_session(
            self.level_table,
            self.alphabet,
            config=self.staircase,
            eye=Eye(eye),
            rng=rng,
            test_type=self.test_type.value,
        )


PROTOCOLS: Dict[TestType, ScreeningProtocol] = {
    TestType.VISUAL_ACUITY: ScreeningProtocol(
        test_type=TestType.VISUAL_ACUITY,
        title="Tumbling E Visual Acuity Test",
        level_table=ACUITY_LEVELS,
        alphabet=DIRECTIONS,
    ),
    TestType.CONTRAST_SENSITIVITY: ScreeningProtocol(
        test_type=TestType.CONTRAST_SENSITIVITY,
        title="Contrast Sensitivity Letter Test",
        level_table=CONTRAST_LEVELS,
        alphabet=LETTERS,
    ),
}

_ALIASES: Dict[str, TestType] = {
    "acuity": TestType.VISUAL_ACUITY,
    "va": TestType.VISUAL_ACUITY,
    "contrast": TestType.CONTRAST_SENSITIVITY,
    "cs": TestType.CONTRAST_SENSITIVITY,
}


def get_protocol(name: Union[TestType, str]) -> ScreeningProtocol:
    """Look up a protocol by :class:`TestType`, its value, or a short alias."""

    if isinstance(name, TestType):
        return PROTOCOLS[name]
    key = str(name).strip().lower().replace("-", "_")
    test_type = _ALIASES.get(key)
    if test_type is None:
        try:
            test_type = TestType(key)
        except ValueError:
            available = sorted([t.value for t in TestType] + list(_ALIASES))
            raise KeyError(
                f"Unknown test '{name}'. Available: {', '.join(available)}"
            ) from None
    return PROTOCOLS[test_type]


__all__ = ["PROTOCOLS", "ScreeningProtocol", "TestType", "get_protocol"]
