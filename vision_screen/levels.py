"""Difficulty level tables for the staircase tests.

A :class:`LevelTable` is an ordered, immutable list of :class:`Level` entries.
Index 0 is the easiest (largest / most visible) stimulus and the last index is
the hardest.  Each level carries a rendering parameter, which only the
presentation layer interprets (optotype height in pixels, letter opacity), and
the clinical score awarded when that level is the last one passed.

The two built-in tables reproduce the levels used by the acuity and contrast
screens.  Additional tables can be built with :meth:`LevelTable.from_pairs`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

from .errors import ConfigurationError

ScoreLabel = Union[str, float]

_FRACTION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)\s*$")


@dataclass(frozen=True)
class Level:
    """A single difficulty step."""

    index: int
    render_param: object
    score_value: ScoreLabel


def _score_rank(score: ScoreLabel) -> Optional[float]:
    """Return a comparable number for ``score`` (higher is better vision).

    Numeric scores (log contrast sensitivity) are used as-is.  Snellen
    fractions such as ``"20/40"`` are converted to decimal acuity (0.5).
    Anything else cannot be ordered and returns ``None``.
    """

    if isinstance(score, bool):
        return None
    if isinstance(score, (int, float)):
        return float(score)
    if isinstance(score, str):
        match = _FRACTION_RE.match(score)
        if match:
            numerator, denominator = (float(part) for part in match.groups())
            if denominator > 0:
                return numerator / denominator
    return None


class LevelTable:
    """Immutable, ordered sequence of difficulty levels."""

    def __init__(self, levels: Iterable[Level], name: str = "") -> None:
        self._levels: Tuple[Level, ...] = tuple(levels)
        self.name = name
        self._validate()

    @classmethod
    def from_pairs(
        cls, name: str, pairs: Sequence[Tuple[object, ScoreLabel]]
    ) -> "LevelTable":
        """Build a table from ``(render_param, score_value)`` pairs, easiest first."""

        return cls(
            (Level(index, render, score) for index, (render, score) in enumerate(pairs)),
            name=name,
        )

    def _validate(self) -> None:
        label = self.name or "level table"
        if not self._levels:
            raise ConfigurationError(f"{label} must contain at least one level")

        for position, level in enumerate(self._levels):
            if level.index != position:
                raise ConfigurationError(
                    f"{label} indices must be contiguous from 0; "
                    f"found index {level.index} at position {position}"
                )

        ranks = [_score_rank(level.score_value) for level in self._levels]
        if any(rank is None for rank in ranks):
            return
        for previous, current, level in zip(ranks, ranks[1:], self._levels[1:]):
            if current <= previous:
                raise ConfigurationError(
                    f"{label} scores must improve with difficulty; level "
                    f"{level.index} ({level.score_value!r}) is not better than "
                    f"level {level.index - 1}"
                )

    def level_at(self, index: int) -> Level:
        """Return the level at ``index`` (0-based)."""

        if not 0 <= index < len(self._levels):
            raise IndexError(
                f"level index {index} out of range for {len(self._levels)} levels"
            )
        return self._levels[index]

    def level_count(self) -> int:
        return len(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self) -> Iterator[Level]:
        return iter(self._levels)

    def __repr__(self) -> str:
        return f"LevelTable(name={self.name!r}, levels={len(self._levels)})"


# ---------------------------------------------------------------------------
# Built-in tables
# ---------------------------------------------------------------------------

# Tumbling-E optotype height in pixels -> Snellen fraction.
ACUITY_LEVELS: LevelTable = LevelTable.from_pairs(
    "visual_acuity",
    [
        (120, "20/200"),
        (96, "20/100"),
        (72, "20/70"),
        (60, "20/50"),
        (48, "20/40"),
        (36, "20/30"),
        (28, "20/25"),
        (24, "20/20"),
        (18, "20/15"),
        (14, "20/10"),
    ],
)

# Letter opacity on a grey background -> log contrast sensitivity.
CONTRAST_LEVELS: LevelTable = LevelTable.from_pairs(
    "contrast_sensitivity",
    [
        (1.0, 0.0),
        (0.7, 0.15),
        (0.5, 0.3),
        (0.35, 0.45),
        (0.25, 0.6),
        (0.18, 0.75),
        (0.12, 0.9),
        (0.08, 1.05),
        (0.05, 1.2),
        (0.03, 1.35),
    ],
)


__all__ = [
    "ACUITY_LEVELS",
    "CONTRAST_LEVELS",
    "Level",
    "LevelTable",
    "ScoreLabel",
]
