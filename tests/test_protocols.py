import random

import pytest

from vision_screen.config import ScreeningConfig, StaircaseConfig
from vision_screen.protocols import PROTOCOLS, TestType, get_protocol
from vision_screen.simulate import SimulatedObserver, run_simulated_eye
from vision_screen.staircase import Eye, SessionStatus
from vision_screen.stimuli import DIRECTIONS, LETTERS


@pytest.mark.parametrize(
    "name, test_type",
    [
        ("acuity", TestType.VISUAL_ACUITY),
        ("visual_acuity", TestType.VISUAL_ACUITY),
        ("Visual-Acuity", TestType.VISUAL_ACUITY),
        ("contrast", TestType.CONTRAST_SENSITIVITY),
        (TestType.CONTRAST_SENSITIVITY, TestType.CONTRAST_SENSITIVITY),
    ],
)
def test_get_protocol(name, test_type):
    assert get_protocol(name) is PROTOCOLS[test_type]


def test_unknown_protocol():
    with pytest.raises(KeyError, match="Available"):
        get_protocol("color")


def test_builtin_protocols_use_default_constants():
    acuity = PROTOCOLS[TestType.VISUAL_ACUITY]
    contrast = PROTOCOLS[TestType.CONTRAST_SENSITIVITY]
    assert acuity.alphabet == DIRECTIONS
    assert contrast.alphabet == LETTERS
    assert acuity.staircase == StaircaseConfig(3, 2)
    assert contrast.staircase == StaircaseConfig(3, 2)


def test_protocol_session_carries_eye_and_test_type(rng):
    session = get_protocol("contrast").create_session("left", rng=rng)
    assert session.eye is Eye.LEFT
    assert session.test_type == "contrast_sensitivity"
    assert session.current_stimulus in LETTERS


def test_instructions_mention_answers():
    text = ScreeningConfig().instructions_text(get_protocol("acuity"))
    assert "right, down, left, up" in text
    assert "3 items" in text
    assert "Press SPACE if you cannot see the item." in text


@pytest.mark.parametrize("threshold", [0, 1, 5, 10, 12])
def test_simulated_observer_reaches_its_threshold(threshold, rng):
    result = run_simulated_eye(get_protocol("acuity"), Eye.RIGHT, threshold, rng=rng)
    assert result.levels_passed == min(threshold, 10)
    expected_status = SessionStatus.PASSED_ALL if threshold >= 10 else SessionStatus.STOPPED_ON_FAILURE
    assert result.status is expected_status


def test_guessing_observer_never_beats_perfect_vision():
    result = run_simulated_eye(
        get_protocol("contrast"), Eye.LEFT, 4, rng=random.Random(3), guess=True
    )
    assert 4 <= result.levels_passed <= 10


def test_observer_wrong_answer_differs_from_expected():
    observer = SimulatedObserver(0, DIRECTIONS)
    assert observer.respond(0, "up") != "up"
    assert observer.respond(0, "right") in DIRECTIONS


def test_negative_threshold_rejected():
    with pytest.raises(ValueError):
        SimulatedObserver(-1, DIRECTIONS)
