import pytest

from conftest import WRONG
from vision_screen.inbox import ResponseInbox
from vision_screen.levels import ACUITY_LEVELS
from vision_screen.staircase import StaircaseSession
from vision_screen.stimuli import FixedSequenceSelector


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return StaircaseSession(ACUITY_LEVELS, FixedSequenceSelector(["up", "left", "down"] * 5))


@pytest.fixture
def inbox(session, clock):
    return ResponseInbox(session, lockout_s=0.3, clock=clock)


def test_post_then_dispatch_scores_trial(inbox, session):
    assert inbox.post("up") is True
    assert inbox.pending == 1
    scored = inbox.dispatch()
    assert [trial.correct for trial in scored] == [True]
    assert len(session.history) == 1
    assert inbox.pending == 0


def test_second_channel_in_same_tick_is_dropped(inbox, session):
    assert inbox.post("up", source="keyboard") is True
    assert inbox.post("down", source="voice") is False
    scored = inbox.dispatch()
    assert len(scored) == 1
    assert session.history[0].observed == "up"


def test_lockout_window_blocks_input(inbox, session, clock):
    inbox.post("up")
    inbox.dispatch()
    assert inbox.locked
    clock.now += 0.1
    assert inbox.post("left") is False
    clock.now += 0.25
    assert not inbox.locked
    assert inbox.post("left") is True
    inbox.dispatch()
    assert [trial.observed for trial in session.history] == ["up", "left"]


def test_post_after_termination_is_dropped(inbox, session, clock):
    for _ in range(3):
        assert inbox.post(WRONG)
        inbox.dispatch()
        clock.now += 1.0
    assert session.is_terminal
    assert inbox.post("up") is False
    assert inbox.dispatch() == []


def test_stale_queued_response_is_dropped_not_raised(inbox, session):
    inbox.post("up", source="voice")
    # another caller answers the same trial directly
    session.submit_response("up")
    assert inbox.dispatch() == []
    assert len(session.history) == 1
