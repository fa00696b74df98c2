from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from vision_screen.levels import ACUITY_LEVELS, CONTRAST_LEVELS
from vision_screen.scoring import map_score
from vision_screen.staircase import Eye, EyeResult, StaircaseSession

WRONG = "?"


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


def answer(session: StaircaseSession, *pattern: bool) -> None:
    """Submit one response per entry: the shown stimulus if True, a miss if False."""

    for correct in pattern:
        session.submit_response(session.current_stimulus if correct else WRONG)


def make_result(levels_passed: int, eye: Eye = Eye.LEFT, table=ACUITY_LEVELS) -> EyeResult:
    return EyeResult(
        eye=eye,
        levels_passed=levels_passed,
        score=map_score(levels_passed, table),
        max_level=table.level_count(),
        trial_history=(),
        completed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def make_contrast_result(levels_passed: int, eye: Eye = Eye.LEFT) -> EyeResult:
    return make_result(levels_passed, eye=eye, table=CONTRAST_LEVELS)
