from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from psychopy import core, visual
from psychopy.hardware import keyboard

from .config import ScreeningConfig
from .inbox import ResponseInbox
from .levels import Level
from .protocols import ScreeningProtocol, TestType
from .serial_keypad import SerialResponsePad
from .staircase import StaircaseSession, Trial
from .stimuli import normalize_response, response_from_key


class ScreeningAbort(Exception):
    """Raised when the participant issues a quit command (e.g., presses ESC)."""


# PsychoPy orientation is clockwise in degrees; the "E" glyph opens to the right.
DIRECTION_ORIENTATION: Dict[str, float] = {
    "right": 0.0,
    "down": 90.0,
    "left": 180.0,
    "up": 270.0,
}


def response_key_names(
    protocol: ScreeningProtocol, cant_see_keys: Sequence[str] = ()
) -> List[str]:
    """Return the PsychoPy key names that answer ``protocol``'s stimuli."""

    return [option.lower() for option in protocol.alphabet] + list(cant_see_keys)


def _fixation_height(win: visual.Window) -> float:
    if win.units == "pix":
        return 40.0
    return 0.1


def _draw_fixation(win: visual.Window, duration: float) -> None:
    """Draw a fixation cross for ``duration`` seconds."""

    if duration <= 0:
        return
    fixation = visual.TextStim(win, text="+", height=_fixation_height(win), color="black")
    fixation.draw()
    win.flip()
    core.wait(duration)


def _make_stimulus(
    win: visual.Window,
    protocol: ScreeningProtocol,
    level: Level,
    stimulus: str,
    config: ScreeningConfig,
) -> visual.TextStim:
    """Create the TextStim for one trial from the level's render parameter."""

    if protocol.test_type is TestType.VISUAL_ACUITY:
        return visual.TextStim(
            win,
            text="E",
            font="Arial",
            bold=True,
            height=float(level.render_param),
            ori=DIRECTION_ORIENTATION[stimulus],
            color="black",
        )
    return visual.TextStim(
        win,
        text=stimulus,
        font="Arial",
        bold=True,
        height=config.contrast_letter_height_px,
        opacity=float(level.render_param),
        color="black",
    )


def _progress_text(win: visual.Window, session: StaircaseSession) -> visual.TextStim:
    staircase = session.config
    label = (
        f"Level {session.current_level_index + 1}/{session.level_table.level_count()}   "
        f"Item {session.trials_at_level + 1}/{staircase.trials_per_level}"
    )
    height = 20 if win.units == "pix" else 0.05
    y_pos = win.size[1] * 0.4 if win.units == "pix" else 0.4
    return visual.TextStim(win, text=label, height=height, pos=(0, y_pos), color="grey")


def _show_feedback(
    win: visual.Window, stim: visual.TextStim, correct: bool, duration: float
) -> None:
    """Tint the screen green/red around the stimulus for the lockout window."""

    if duration <= 0:
        return
    tint = visual.Rect(
        win,
        width=win.size[0] if win.units == "pix" else 2,
        height=win.size[1] if win.units == "pix" else 2,
        fillColor="green" if correct else "red",
        lineColor=None,
        opacity=0.15,
    )
    tint.draw()
    stim.draw()
    win.flip()
    core.wait(duration)


def _check_quit(quit_device: Optional[keyboard.Keyboard], quit_keys: Sequence[str]) -> None:
    quit_list = list(quit_keys)
    if quit_device is None or not quit_list:
        return
    for key in quit_device.getKeys(quit_list, waitRelease=False):
        if key.name in quit_list:
            raise ScreeningAbort(f"Quit key '{key.name}' pressed")


def run_staircase_trial(
    *,
    win: visual.Window,
    protocol: ScreeningProtocol,
    session: StaircaseSession,
    inbox: ResponseInbox,
    config: ScreeningConfig,
    response_kb: Optional[keyboard.Keyboard],
    quit_kb: Optional[keyboard.Keyboard],
    serial_pad: Optional[SerialResponsePad] = None,
) -> Trial:
    """Present the current stimulus, collect one answer and score it.

    Every input channel posts into ``inbox``; the first accepted answer is
    submitted to ``session`` and followed by a feedback flash lasting
    ``config.feedback_duration_s``.  Input arriving during the flash is
    discarded.
    """

    level = session.current_level
    _draw_fixation(win, config.fixation_duration_s)

    stim = _make_stimulus(win, protocol, level, session.current_stimulus, config)
    progress = _progress_text(win, session)
    key_names = response_key_names(protocol, config.cant_see_keys)
    quit_device = quit_kb or response_kb
    if response_kb:
        response_kb.clearEvents()
    if quit_kb and quit_kb is not response_kb:
        quit_kb.clearEvents()
    if serial_pad:
        serial_pad.clear()

    scored: List[Trial] = []
    while not scored:
        stim.draw()
        progress.draw()
        win.flip()

        if response_kb:
            for key in response_kb.getKeys(key_names, waitRelease=False):
                answer = response_from_key(key.name, protocol.alphabet, config.cant_see_keys)
                if answer is not None:
                    inbox.post(answer, source="keyboard")
        if serial_pad:
            answer = normalize_response(serial_pad.poll(), protocol.alphabet)
            if answer is not None:
                inbox.post(answer, source="serial")
        _check_quit(quit_device, config.quit_keys)

        scored = inbox.dispatch()
        if not scored:
            core.wait(0.005)

    trial = scored[0]
    _show_feedback(win, stim, trial.correct, config.feedback_duration_s)
    if response_kb:
        response_kb.clearEvents()
    if serial_pad:
        serial_pad.clear()
    return trial


__all__ = ["ScreeningAbort", "run_staircase_trial", "response_key_names"]
