"""Configuration helpers for the vision screening tests.

:class:`StaircaseConfig` holds the two constants that drive the staircase
(how many trials are shown per level and how many must be answered correctly to
pass).  :class:`ScreeningConfig` stores the user-editable parameters for the
PsychoPy runner.  Keeping these values in a separate module makes it easy to
discover what can be tweaked without touching the session or data code.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .stimuli import CANT_SEE

if TYPE_CHECKING:
    from .protocols import ScreeningProtocol


TRIALS_PER_LEVEL: int = 3
MIN_CORRECT_TO_PASS: int = 2


@dataclass(frozen=True)
class StaircaseConfig:
    """Per-test staircase constants."""

    trials_per_level: int = TRIALS_PER_LEVEL
    min_correct_to_pass: int = MIN_CORRECT_TO_PASS

    def validate(self) -> "StaircaseConfig":
        """Return ``self`` or raise :class:`ConfigurationError`."""

        if self.trials_per_level < 1:
            raise ConfigurationError(
                f"trials_per_level must be at least 1 (got {self.trials_per_level})"
            )
        if self.min_correct_to_pass < 1:
            raise ConfigurationError(
                f"min_correct_to_pass must be at least 1 (got {self.min_correct_to_pass})"
            )
        if self.min_correct_to_pass > self.trials_per_level:
            raise ConfigurationError(
                "min_correct_to_pass "
                f"({self.min_correct_to_pass}) cannot exceed trials_per_level "
                f"({self.trials_per_level})"
            )
        return self


@dataclass
class ScreeningConfig:
    """Container for runner parameters and runtime options."""

    experiment_name: str = "vision_screen"
    test_name: str = "acuity"
    data_fields: List[str] = field(
        default_factory=lambda: [
            "participant",
            "test_type",
            "eye",
            "trial_index",
            "level_index",
            "expected",
            "observed",
            "correct",
            "levels_passed",
            "score",
        ]
    )
    eyes: Tuple[str, ...] = ("right", "left")
    feedback_duration_s: float = 0.3
    fixation_duration_s: float = 0.5
    results_directory: str = "data"
    screen_index: int = 0
    full_screen: bool = True
    window_size: Tuple[int, int] = (1280, 720)
    window_units: str = "pix"
    background_color: Sequence[float] = (1.0, 1.0, 1.0)
    contrast_background_color: Sequence[float] = (0.0, 0.0, 0.0)
    contrast_letter_height_px: float = 96.0
    quit_keys: Tuple[str, ...] = ("escape",)
    cant_see_keys: Tuple[str, ...] = ("space",)
    # Serial digits follow the numeric keypad arrows; the centre key is "can't see".
    serial_key_map: Dict[str, str] = field(
        default_factory=lambda: {
            "8": "up",
            "2": "down",
            "4": "left",
            "6": "right",
            "5": CANT_SEE,
        }
    )
    serial_port: Optional[str] = None
    serial_baud: int = 9600
    seed: Optional[int] = None
    debug_mode: bool = False
    debug_window_size: Tuple[int, int] = (1024, 768)

    def instructions_text(self, protocol: "ScreeningProtocol") -> str:
        """Return an instruction string for the on-screen dialog."""

        options = ", ".join(protocol.alphabet)
        staircase = protocol.staircase
        return (
            f"{protocol.title}\n\n"
            "Cover one eye as instructed and answer what you see.\n\n"
            f"Possible answers: {options}\n"
            f"Press {'/'.join(key.upper() for key in self.cant_see_keys)} "
            "if you cannot see the item.\n\n"
            f"Each level shows {staircase.trials_per_level} items; "
            f"{staircase.min_correct_to_pass} correct answers unlock the next level.\n"
            "The test ends at the first level you do not pass.\n"
            "Press ESC at any time to exit early.\n\n"
            "This is a screening tool only, not a medical diagnosis."
        )


__all__ = [
    "MIN_CORRECT_TO_PASS",
    "ScreeningConfig",
    "StaircaseConfig",
    "TRIALS_PER_LEVEL",
]
