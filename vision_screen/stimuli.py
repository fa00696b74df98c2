"""Stimulus selection and response normalisation.

The selector decides what the participant is shown on each trial: a direction
for the tumbling "E" or a letter for the contrast chart.  Every draw is
independent and uniform, so the same stimulus may appear several times in a
row.

Responses arrive from several input channels.  :func:`response_from_key`
handles keyboard key names, :func:`normalize_response` handles serial keypad
values and typed answers, and each of them reduces the input to one value
that can be compared against the stimulus.  The PsychoPy runner has no
microphone input; :func:`match_spoken_command` is the adapter for an external
speech recogniser that posts transcripts into the same
:class:`~vision_screen.inbox.ResponseInbox`.
"""
from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import ConfigurationError, InvalidStateError

DIRECTIONS: Tuple[str, ...] = ("right", "down", "left", "up")
# Sloan letters used on the Pelli-Robson chart.
LETTERS: Tuple[str, ...] = ("C", "D", "H", "K", "N", "O", "R", "S", "V", "Z")

CANT_SEE: str = "cantSee"

SPOKEN_COMMANDS: Dict[str, str] = {
    "left": "left",
    "right": "right",
    "up": "up",
    "down": "down",
    "yes": "yes",
    "no": "no",
    "next": "next",
    "back": "back",
    "start": "start",
    "stop": "stop",
    "can't see": CANT_SEE,
    "cannot see": CANT_SEE,
}


class StimulusSelector:
    """Draw stimuli uniformly at random from a fixed alphabet."""

    def __init__(self, alphabet: Sequence[str], rng: Optional[random.Random] = None) -> None:
        self.alphabet: Tuple[str, ...] = tuple(alphabet)
        if not self.alphabet:
            raise ConfigurationError("stimulus alphabet must not be empty")
        self._rng = rng or random.Random()

    def next(self) -> str:
        return self._rng.choice(self.alphabet)


class FixedSequenceSelector:
    """Yield a pre-recorded sequence of stimuli, e.g. to replay a saved history."""

    def __init__(self, values: Iterable[str]) -> None:
        self._values: List[str] = list(values)
        self._position = 0

    def next(self) -> str:
        if self._position >= len(self._values):
            raise InvalidStateError(
                f"recorded stimulus sequence exhausted after {len(self._values)} draws"
            )
        value = self._values[self._position]
        self._position += 1
        return value


def normalize_response(raw: object, alphabet: Sequence[str]) -> Optional[str]:
    """Map a raw key name or typed answer onto ``alphabet``.

    Matching ignores surrounding whitespace and case, so ``"c"`` becomes
    ``"C"`` for the letter chart and ``"Left"`` becomes ``"left"`` for the
    tumbling E.  The spoken "can't see" command is passed through unchanged.
    Returns ``None`` when the input is not a valid answer.
    """

    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if text == CANT_SEE:
        return CANT_SEE
    folded = text.casefold()
    for option in alphabet:
        if option.casefold() == folded:
            return option
    return None


def response_from_key(
    key_name: str, alphabet: Sequence[str], cant_see_keys: Sequence[str] = ()
) -> Optional[str]:
    """Translate a PsychoPy key name into a response.

    Keys listed in ``cant_see_keys`` answer :data:`CANT_SEE`; everything else
    goes through :func:`normalize_response`.
    """

    if key_name in cant_see_keys:
        return CANT_SEE
    return normalize_response(key_name, alphabet)


def match_spoken_command(transcript: str) -> Optional[str]:
    """Return the command contained in a speech transcript, if any.

    Longer phrases are tried first so that "cannot see" is not mistaken for
    "no".
    """

    text = transcript.lower().strip()
    if not text:
        return None
    for phrase, command in sorted(
        SPOKEN_COMMANDS.items(), key=lambda item: len(item[0]), reverse=True
    ):
        if phrase in text:
            return command
    return None


__all__ = [
    "CANT_SEE",
    "DIRECTIONS",
    "FixedSequenceSelector",
    "LETTERS",
    "SPOKEN_COMMANDS",
    "StimulusSelector",
    "match_spoken_command",
    "normalize_response",
    "response_from_key",
]
