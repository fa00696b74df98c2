"""Convert a count of passed levels into the reported clinical score."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .levels import LevelTable, ScoreLabel

UNDETERMINED_LABEL: str = "Unable to determine"


@dataclass(frozen=True)
class Determined:
    """A score read from the last level the participant passed."""

    value: ScoreLabel

    @property
    def is_determined(self) -> bool:
        return True

    def __str__(self) -> str:
        if isinstance(self.value, float):
            return f"{self.value:.2f}"
        return str(self.value)


@dataclass(frozen=True)
class Undetermined:
    """Sentinel for a test where no level was ever passed."""

    @property
    def is_determined(self) -> bool:
        return False

    def __str__(self) -> str:
        return UNDETERMINED_LABEL


UNDETERMINED = Undetermined()

ScoreValue = Union[Determined, Undetermined]


def map_score(levels_passed: int, level_table: LevelTable) -> ScoreValue:
    """Return the score for ``levels_passed`` levels confirmed from the bottom.

    ``levels_passed`` is a count, so the score comes from table index
    ``levels_passed - 1``: the last level passed, not the one that ended the
    test.
    """

    count = level_table.level_count()
    if not 0 <= levels_passed <= count:
        raise ValueError(
            f"levels_passed must be between 0 and {count} (got {levels_passed})"
        )
    if levels_passed == 0:
        return UNDETERMINED
    return Determined(level_table.level_at(levels_passed - 1).score_value)


__all__ = [
    "Determined",
    "ScoreValue",
    "UNDETERMINED",
    "UNDETERMINED_LABEL",
    "Undetermined",
    "map_score",
]
