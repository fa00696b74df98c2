"""In-memory results store and file export for finished eye results.

The :class:`ResultsStore` keeps the latest :class:`EyeResult` per test type and
eye (retesting an eye replaces its earlier result) and writes the trial history
as CSV and the summarised report as JSON.
"""
from __future__ import annotations

import csv
import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .classify import TestSummary, summarize_test
from .protocols import TestType
from .staircase import Eye, EyeResult

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def default_filename(experiment_name: str, participant: object, suffix: str) -> str:
    """Return ``<experiment>_<participant><suffix>`` with numeric ids zero-padded."""

    try:
        subject_code = f"{int(participant):03d}"
    except (TypeError, ValueError):
        subject_code = str(participant or "unknown")
    return f"{experiment_name}_{subject_code}{suffix}"


class ResultsStore:
    """Latest result per ``(test type, eye)``."""

    def __init__(self) -> None:
        self._results: Dict[Tuple[TestType, Eye], EyeResult] = {}

    # ------------------------------------------------------------------
    # Recording and lookup
    # ------------------------------------------------------------------
    def record(
        self, eye_result: EyeResult, test_type: Union[TestType, str, None] = None
    ) -> None:
        """Store ``eye_result``, replacing any earlier result for that eye."""

        kind = test_type if test_type is not None else eye_result.test_type
        if kind is None:
            raise ValueError("test_type is required when the result does not carry one")
        key = (TestType(kind), eye_result.eye)
        if key in self._results:
            logger.info("Replacing earlier %s result for %s eye", key[0].value, key[1].value)
        self._results[key] = eye_result

    def get(self, test_type: Union[TestType, str], eye: Union[Eye, str]) -> Optional[EyeResult]:
        return self._results.get((TestType(test_type), Eye(eye)))

    def pair(
        self, test_type: Union[TestType, str]
    ) -> Tuple[Optional[EyeResult], Optional[EyeResult]]:
        """Return ``(left, right)`` for ``test_type``; missing eyes are ``None``."""

        return self.get(test_type, Eye.LEFT), self.get(test_type, Eye.RIGHT)

    def summary(self, test_type: Union[TestType, str]) -> TestSummary:
        left, right = self.pair(test_type)
        return summarize_test(test_type, left=left, right=right)

    def completed_tests(self) -> List[TestType]:
        """Test types with at least one eye recorded, in definition order."""

        present = {kind for kind, _ in self._results}
        return [kind for kind in TestType if kind in present]

    def clear(self) -> None:
        self._results.clear()

    def __len__(self) -> int:
        return len(self._results)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def trial_rows(self, participant: str = "") -> List[Dict[str, object]]:
        """Flatten every stored history into one row per trial."""

        rows: List[Dict[str, object]] = []
        for (kind, eye), result in sorted(
            self._results.items(), key=lambda item: (item[0][0].value, item[0][1].value)
        ):
            for trial_index, trial in enumerate(result.trial_history, start=1):
                rows.append(
                    {
                        "participant": participant,
                        "test_type": kind.value,
                        "eye": eye.value,
                        "trial_index": trial_index,
                        "level_index": trial.level_index,
                        "expected": trial.expected,
                        "observed": trial.observed,
                        "correct": trial.correct,
                        "levels_passed": result.levels_passed,
                        "score": str(result.score),
                    }
                )
        return rows

    def report(self, participant_info: Optional[Mapping[str, object]] = None) -> Dict[str, object]:
        """Return the full report as plain data."""

        tests: Dict[str, object] = {}
        for kind in self.completed_tests():
            left, right = self.pair(kind)
            tests[kind.value] = {
                "left": left.to_dict() if left else None,
                "right": right.to_dict() if right else None,
                "summary": self.summary(kind).to_dict(),
            }
        return {"participant": dict(participant_info or {}), "tests": tests}

    def save_trials_csv(
        self,
        path: PathLike,
        data_fields: Sequence[str],
        participant: str = "",
    ) -> Path:
        """Write :meth:`trial_rows` to ``path`` with ``data_fields`` as header."""

        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        rows: Iterable[Dict[str, object]] = self.trial_rows(participant)
        with output.open("w", newline="", encoding="utf-8") as csv_file:
            writer = csv.DictWriter(csv_file, fieldnames=list(data_fields), extrasaction="ignore")
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
        logger.info("Saved trial data to %s", output)
        return output

    def save_report_json(
        self, path: PathLike, participant_info: Optional[Mapping[str, object]] = None
    ) -> Path:
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as report_file:
            json.dump(self.report(participant_info), report_file, indent=2)
        logger.info("Saved report to %s", output)
        return output


__all__ = ["ResultsStore", "default_filename"]
