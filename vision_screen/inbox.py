"""Single ordered entry point for participant responses.

Keys, the serial keypad and spoken commands may all produce an answer for the
same trial within one frame.  Every channel posts into one
:class:`ResponseInbox`; the inbox accepts at most one answer per trial slot,
ignores input during the short feedback lockout that follows each answer and
hands accepted answers to the session in arrival order.
"""
from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List

from .errors import InvalidStateError
from .staircase import StaircaseSession, Trial

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingResponse:
    observed: str
    trial_number: int
    source: str


class ResponseInbox:
    """Serialise responses from several input channels into one session."""

    def __init__(
        self,
        session: StaircaseSession,
        lockout_s: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session = session
        self.lockout_s = lockout_s
        self._clock = clock
        self._queue: Deque[PendingResponse] = deque()
        self._locked_until = float("-inf")

    @property
    def locked(self) -> bool:
        return self._clock() < self._locked_until

    @property
    def pending(self) -> int:
        return len(self._queue)

    def post(self, observed: str, source: str = "keyboard") -> bool:
        """Queue ``observed`` for the current trial; return ``False`` if dropped.

        The check runs synchronously on the caller's tick, so two channels
        firing in the same frame cannot both be accepted.
        """

        if self.session.is_terminal:
            logger.info("Ignoring %s response %r: session finished", source, observed)
            return False
        if self.locked:
            logger.debug("Ignoring %s response %r during feedback lockout", source, observed)
            return False
        trial_number = len(self.session.history)
        if any(item.trial_number == trial_number for item in self._queue):
            logger.debug(
                "Ignoring duplicate %s response %r for trial %d", source, observed, trial_number
            )
            return False
        self._queue.append(PendingResponse(observed, trial_number, source))
        return True

    def dispatch(self) -> List[Trial]:
        """Submit queued responses in order and return the scored trials.

        A response the session rejects as out of order is logged and dropped;
        it never reaches the participant as an error.
        """

        scored: List[Trial] = []
        while self._queue:
            item = self._queue.popleft()
            try:
                trial = self.session.submit_response(
                    item.observed, trial_number=item.trial_number
                )
            except InvalidStateError as exc:
                logger.warning("Dropped stray %s response %r: %s", item.source, item.observed, exc)
                continue
            self._locked_until = self._clock() + self.lockout_s
            scored.append(trial)
        return scored


__all__ = ["PendingResponse", "ResponseInbox"]
