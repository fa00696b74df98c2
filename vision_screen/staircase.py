"""The adaptive staircase shared by the acuity and contrast tests.

A session starts at the easiest level and shows ``trials_per_level`` stimuli
per level.  After the last trial of a level it is scored:

* at least ``min_correct_to_pass`` correct answers pass the level.  The
  high-water mark becomes ``index + 1`` and the session moves one level
  harder, or finishes with :attr:`SessionStatus.PASSED_ALL` after the last
  level;
* anything less ends the session with
  :attr:`SessionStatus.STOPPED_ON_FAILURE`.  The score stays at the last level
  that was passed; a failed level is never retried.

Sessions are created fresh for every eye and every attempt and are never
reused once they reach a terminal status.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .config import StaircaseConfig
from .errors import InvalidStateError
from .levels import Level, LevelTable
from .scoring import ScoreValue, map_score
from .stimuli import FixedSequenceSelector, StimulusSelector

logger = logging.getLogger(__name__)

Selector = Union[StimulusSelector, FixedSequenceSelector]


class SessionStatus(str, Enum):
    RUNNING = "running"
    PASSED_ALL = "passed_all"
    STOPPED_ON_FAILURE = "stopped_on_failure"


class Eye(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Trial:
    """One stimulus/response pair."""

    level_index: int
    expected: str
    observed: str
    correct: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "level_index": self.level_index,
            "expected": self.expected,
            "observed": self.observed,
            "correct": self.correct,
        }


@dataclass(frozen=True)
class EyeResult:
    """Final, immutable outcome of one eye's session."""

    eye: Eye
    levels_passed: int
    score: ScoreValue
    max_level: int
    trial_history: Tuple[Trial, ...]
    completed_at: datetime
    test_type: Optional[str] = None
    status: SessionStatus = field(default=SessionStatus.STOPPED_ON_FAILURE)

    def to_dict(self) -> Dict[str, object]:
        """Return plain data suitable for JSON export."""

        return {
            "eye": self.eye.value,
            "test_type": self.test_type,
            "status": self.status.value,
            "levels_passed": self.levels_passed,
            "max_level": self.max_level,
            "score": self.score.value if self.score.is_determined else None,
            "score_label": str(self.score),
            "completed_at": self.completed_at.isoformat(),
            "trial_history": [trial.to_dict() for trial in self.trial_history],
        }


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StaircaseSession:
    """Mutable run state for a single eye."""

    def __init__(
        self,
        level_table: LevelTable,
        selector: Selector,
        config: Optional[StaircaseConfig] = None,
        *,
        eye: Eye = Eye.RIGHT,
        test_type: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.level_table = level_table
        self.config = (config or StaircaseConfig()).validate()
        self.eye = Eye(eye)
        self.test_type = test_type
        self._selector = selector
        self._clock = clock or _utc_now

        self._current_level_index = 0
        self._trials_at_level = 0
        self._correct_at_level = 0
        self._best_level_passed = 0
        self._history: List[Trial] = []
        self._status = SessionStatus.RUNNING
        self._result: Optional[EyeResult] = None
        self._current_stimulus = self._selector.next()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def current_level_index(self) -> int:
        return self._current_level_index

    @property
    def current_level(self) -> Level:
        return self.level_table.level_at(self._current_level_index)

    @property
    def current_stimulus(self) -> str:
        """Expected answer for the trial currently on screen."""

        return self._current_stimulus

    @property
    def trials_at_level(self) -> int:
        return self._trials_at_level

    @property
    def correct_at_level(self) -> int:
        return self._correct_at_level

    @property
    def best_level_passed(self) -> int:
        return self._best_level_passed

    @property
    def history(self) -> Tuple[Trial, ...]:
        return tuple(self._history)

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_terminal(self) -> bool:
        return self._status is not SessionStatus.RUNNING

    @property
    def progress(self) -> float:
        """Fraction of the longest possible run already completed."""

        if self.is_terminal:
            return 1.0
        per_level = self.config.trials_per_level
        done = self._current_level_index * per_level + self._trials_at_level
        return done / (self.level_table.level_count() * per_level)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def submit_response(self, observed: str, *, trial_number: Optional[int] = None) -> Trial:
        """Score ``observed`` against the current stimulus and advance the staircase.

        ``trial_number`` is the 0-based position of the trial the caller was
        answering.  When supplied it must match the next free slot, so a late
        duplicate from a second input channel is rejected instead of being
        counted against the following stimulus.
        """

        if self.is_terminal:
            raise InvalidStateError(
                f"session for {self.eye.value} eye already finished ({self._status.value})"
            )
        if trial_number is not None and trial_number != len(self._history):
            raise InvalidStateError(
                f"response for trial {trial_number} arrived after trial "
                f"{len(self._history)} became current"
            )

        trial = Trial(
            level_index=self._current_level_index,
            expected=self._current_stimulus,
            observed=observed,
            correct=observed == self._current_stimulus,
        )
        self._history.append(trial)
        self._trials_at_level += 1
        if trial.correct:
            self._correct_at_level += 1

        if self._trials_at_level < self.config.trials_per_level:
            self._current_stimulus = self._selector.next()
            return trial

        self._evaluate_level()
        return trial

    def _evaluate_level(self) -> None:
        index = self._current_level_index
        if self._correct_at_level >= self.config.min_correct_to_pass:
            self._best_level_passed = index + 1
            logger.debug(
                "%s eye passed level %d (%d/%d correct)",
                self.eye.value,
                index,
                self._correct_at_level,
                self._trials_at_level,
            )
            if index + 1 == self.level_table.level_count():
                self._status = SessionStatus.PASSED_ALL
                logger.info(
                    "%s eye passed all %d levels", self.eye.value, self._best_level_passed
                )
                return
            self._current_level_index = index + 1
            self._trials_at_level = 0
            self._correct_at_level = 0
            self._current_stimulus = self._selector.next()
            return

        self._status = SessionStatus.STOPPED_ON_FAILURE
        logger.info(
            "%s eye stopped at level %d (%d/%d correct); levels passed: %d",
            self.eye.value,
            index,
            self._correct_at_level,
            self._trials_at_level,
            self._best_level_passed,
        )

    def finalize(self) -> EyeResult:
        """Return the :class:`EyeResult` for a finished session.

        Repeated calls return the same object.
        """

        if not self.is_terminal:
            raise InvalidStateError(
                f"cannot finalize {self.eye.value} eye while the test is still running"
            )
        if self._result is None:
            self._result = EyeResult(
                eye=self.eye,
                levels_passed=self._best_level_passed,
                score=map_score(self._best_level_passed, self.level_table),
                max_level=self.level_table.level_count(),
                trial_history=tuple(self._history),
                completed_at=self._clock(),
                test_type=self.test_type,
                status=self._status,
            )
        return self._result


def create_session(
    level_table: LevelTable,
    stimulus_alphabet: Sequence[str],
    *,
    config: Optional[StaircaseConfig] = None,
    eye: Eye = Eye.RIGHT,
    rng: Optional[random.Random] = None,
    test_type: Optional[str] = None,
) -> StaircaseSession:
    """Start a new session drawing stimuli uniformly from ``stimulus_alphabet``."""

    return StaircaseSession(
        level_table,
        StimulusSelector(stimulus_alphabet, rng=rng),
        config,
        eye=eye,
        test_type=test_type,
    )


def replay_history(
    level_table: LevelTable,
    history: Sequence[Trial],
    config: Optional[StaircaseConfig] = None,
    *,
    eye: Eye = Eye.RIGHT,
) -> StaircaseSession:
    """Feed a recorded trial history through a fresh session.

    The replayed session sees the same stimuli and answers as the original, so
    its ``best_level_passed`` and status can be compared against a stored
    result.
    """

    session = StaircaseSession(
        level_table,
        FixedSequenceSelector(trial.expected for trial in history),
        config,
        eye=eye,
    )
    for trial in history:
        session.submit_response(trial.observed)
    return session


__all__ = [
    "Eye",
    "EyeResult",
    "SessionStatus",
    "StaircaseSession",
    "Trial",
    "create_session",
    "replay_history",
]
