"""Simulated observers for exercising the staircase without a display."""
from __future__ import annotations

import random
from typing import Optional, Sequence, Tuple, Union

from .protocols import ScreeningProtocol
from .staircase import Eye, EyeResult


class SimulatedObserver:
    """Answers correctly on every level below ``threshold_level``.

    At or above the threshold the observer either guesses uniformly from the
    alphabet (``guess=True``) or always picks a wrong answer, which makes the
    outcome fully predictable: ``threshold_level`` levels passed (capped at the
    table length).
    """

    def __init__(
        self,
        threshold_level: int,
        alphabet: Sequence[str],
        rng: Optional[random.Random] = None,
        guess: bool = False,
    ) -> None:
        if threshold_level < 0:
            raise ValueError("threshold_level must be non-negative")
        self.threshold_level = threshold_level
        self.alphabet: Tuple[str, ...] = tuple(alphabet)
        self.guess = guess
        self._rng = rng or random.Random()

    def respond(self, level_index: int, expected: str) -> str:
        if level_index < self.threshold_level:
            return expected
        if self.guess:
            return self._rng.choice(self.alphabet)
        wrong = [option for option in self.alphabet if option != expected]
        return wrong[0] if wrong else expected


def run_simulated_eye(
    protocol: ScreeningProtocol,
    eye: Union[Eye, str],
    threshold_level: int,
    rng: Optional[random.Random] = None,
    guess: bool = False,
) -> EyeResult:
    """Run one complete session against a :class:`SimulatedObserver`."""

    rng = rng or random.Random()
    session = protocol.create_session(eye, rng=rng)
    observer = SimulatedObserver(threshold_level, protocol.alphabet, rng=rng, guess=guess)
    while not session.is_terminal:
        answer = observer.respond(session.current_level_index, session.current_stimulus)
        session.submit_response(answer)
    return session.finalize()


__all__ = ["SimulatedObserver", "run_simulated_eye"]
