"""Staircase vision screening package.

This package provides the adaptive staircase used by the tumbling-E acuity
and contrast sensitivity screens, the score and severity mapping applied to
finished sessions, and a PsychoPy front end for running the tests.  The
PsychoPy modules (:mod:`vision_screen.trial`, :mod:`vision_screen.experiment`)
are only imported when the experiment is launched, so the engine can be used
and tested without a display.
"""

from .classify import (
    Severity,
    TestSummary,
    classify,
    detect_asymmetry,
    interpret_contrast,
    summarize_test,
)
from .config import ScreeningConfig, StaircaseConfig
from .errors import ConfigurationError, InvalidStateError
from .inbox import ResponseInbox
from .levels import ACUITY_LEVELS, CONTRAST_LEVELS, Level, LevelTable
from .protocols import PROTOCOLS, ScreeningProtocol, TestType, get_protocol
from .results import ResultsStore
from .scoring import UNDETERMINED, Determined, Undetermined, map_score
from .simulate import SimulatedObserver, run_simulated_eye
from .staircase import (
    Eye,
    EyeResult,
    SessionStatus,
    StaircaseSession,
    Trial,
    create_session,
    replay_history,
)
from .stimuli import DIRECTIONS, LETTERS, StimulusSelector, normalize_response
from .cli import main as run_experiment

__all__ = [
    "ACUITY_LEVELS",
    "CONTRAST_LEVELS",
    "ConfigurationError",
    "DIRECTIONS",
    "Determined",
    "Eye",
    "EyeResult",
    "InvalidStateError",
    "LETTERS",
    "Level",
    "LevelTable",
    "PROTOCOLS",
    "ResponseInbox",
    "ResultsStore",
    "ScreeningConfig",
    "ScreeningProtocol",
    "SessionStatus",
    "Severity",
    "SimulatedObserver",
    "StaircaseConfig",
    "StaircaseSession",
    "StimulusSelector",
    "TestSummary",
    "TestType",
    "Trial",
    "UNDETERMINED",
    "Undetermined",
    "classify",
    "create_session",
    "detect_asymmetry",
    "get_protocol",
    "interpret_contrast",
    "map_score",
    "normalize_response",
    "replay_history",
    "run_experiment",
    "run_simulated_eye",
    "summarize_test",
]
