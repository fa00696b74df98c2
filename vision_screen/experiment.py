"""High-level PsychoPy orchestration for the staircase screening tests."""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Dict, Optional

from psychopy import core, event, gui, visual
from psychopy.hardware import keyboard

from .classify import classify, interpret_contrast
from .config import ScreeningConfig
from .inbox import ResponseInbox
from .protocols import ScreeningProtocol, TestType, get_protocol
from .results import ResultsStore, default_filename
from .serial_keypad import SerialResponsePad
from .staircase import Eye, EyeResult
from .trial import ScreeningAbort, run_staircase_trial

logger = logging.getLogger(__name__)


class VisionScreeningExperiment:
    """Run one staircase test for each configured eye and save the results."""

    def __init__(
        self,
        config: ScreeningConfig | None = None,
        protocol: ScreeningProtocol | None = None,
        store: ResultsStore | None = None,
    ):
        self.config = config or ScreeningConfig()
        self.protocol = protocol or get_protocol(self.config.test_name)
        self.store = store or ResultsStore()
        self._rng = random.Random(self.config.seed)
        self._global_keys_registered = False
        self._window: Optional[visual.Window] = None

    # ------------------------------------------------------------------
    # GUI helpers
    # ------------------------------------------------------------------
    def collect_participant_info(self) -> Dict[str, str]:
        """Display an info dialog to collect participant metadata."""

        info = {
            "Participant ID": "",
            "Session": "1",
        }
        dialog = gui.DlgFromDict(info, title=self.protocol.title, fixed=["Session"])
        if not dialog.OK:
            core.quit()
        instruction_dialog = gui.Dlg(title="Instructions")
        instruction_dialog.addText(self.config.instructions_text(self.protocol))
        instruction_dialog.show()
        return info

    def create_window(self) -> visual.Window:
        """Create the PsychoPy window for the active protocol."""

        background = (
            self.config.contrast_background_color
            if self.protocol.test_type is TestType.CONTRAST_SENSITIVITY
            else self.config.background_color
        )
        if self.config.debug_mode:
            size, fullscr = list(self.config.debug_window_size), False
        else:
            size, fullscr = list(self.config.window_size), self.config.full_screen
        window = visual.Window(
            size=size,
            fullscr=fullscr,
            screen=self.config.screen_index,
            units=self.config.window_units,
            color=list(background),
            allowGUI=self.config.debug_mode,
        )
        self._window = window
        self._register_global_quit_handler()
        return window

    def _create_serial_pad(self) -> SerialResponsePad | None:
        """Instantiate the serial response pad if configured."""

        port = self.config.serial_port
        if not port:
            return None
        try:
            return SerialResponsePad(
                port=port,
                baudrate=self.config.serial_baud,
                key_map=self.config.serial_key_map,
            )
        except (OSError, RuntimeError) as exc:
            logger.warning("Could not open serial response pad on %s: %s", port, exc)
            return None

    def _register_global_quit_handler(self) -> None:
        """Install a global key hook so ESC always shuts down safely."""

        if self._global_keys_registered:
            return

        def _handle_global_quit() -> None:
            logger.info("Global quit key detected. Closing window and exiting.")
            if self._window is not None:
                self._window.close()
            core.quit()

        for key in self.config.quit_keys:
            event.globalKeys.add(key=key, func=_handle_global_quit)
        self._global_keys_registered = True

    def _show_message(self, win: visual.Window, text: str, continue_key: str = "space") -> None:
        """Show ``text`` until ``continue_key`` (or a quit key) is pressed."""

        wrap = win.size[0] * 0.8 if win.units == "pix" else None
        message = visual.TextStim(
            win,
            text=f"{text}\n\nPress {continue_key.upper()} to continue.",
            color="black" if self.protocol.test_type is TestType.VISUAL_ACUITY else "white",
            height=28 if win.units == "pix" else 0.07,
            wrapWidth=wrap,
        )
        message.draw()
        win.flip()
        keys = event.waitKeys(keyList=[continue_key, *self.config.quit_keys])
        if keys and keys[0] in self.config.quit_keys:
            raise ScreeningAbort(f"Quit key '{keys[0]}' pressed")

    def describe_result(self, result: EyeResult) -> str:
        severity = classify(result, self.protocol.test_type)
        lines = [
            f"{result.eye.value.capitalize()} eye: {result.score}",
            f"Level {result.levels_passed} of {result.max_level}",
        ]
        if (
            self.protocol.test_type is TestType.CONTRAST_SENSITIVITY
            and result.score.is_determined
        ):
            lines.append(f"Contrast reading: {interpret_contrast(float(result.score.value))}")
        lines.append(f"Result: {severity.value.replace('_', ' ')}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Trial scheduling
    # ------------------------------------------------------------------
    def run_eye(
        self,
        win: visual.Window,
        eye: Eye,
        *,
        response_kb: keyboard.Keyboard,
        serial_pad: SerialResponsePad | None,
    ) -> EyeResult:
        """Run a complete session for ``eye`` and return its result."""

        session = self.protocol.create_session(eye, rng=self._rng)
        inbox = ResponseInbox(session, lockout_s=self.config.feedback_duration_s)
        while not session.is_terminal:
            trial = run_staircase_trial(
                win=win,
                protocol=self.protocol,
                session=session,
                inbox=inbox,
                config=self.config,
                response_kb=response_kb,
                quit_kb=response_kb,
                serial_pad=serial_pad,
            )
            logger.debug(
                "%s eye trial %d: %s", eye.value, len(session.history), trial.to_dict()
            )
        return session.finalize()

    # ------------------------------------------------------------------
    # Data persistence
    # ------------------------------------------------------------------
    def save_results(self, participant_info: Dict[str, str]) -> Path:
        """Save trial CSV and JSON report for this participant."""

        output_dir = Path(self.config.results_directory)
        participant = participant_info.get("Participant ID", "unknown")
        session = participant_info.get("Session", "1")
        base = default_filename(self.config.experiment_name, participant, f"_{session}")
        csv_path = self.store.save_trials_csv(
            output_dir / f"{base}.csv",
            self.config.data_fields,
            participant=participant,
        )
        self.store.save_report_json(output_dir / f"{base}.json", participant_info)
        return csv_path

    # ------------------------------------------------------------------
    # Experiment entry point
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Execute the full screening pipeline."""

        participant_info = self.collect_participant_info()
        serial_pad = self._create_serial_pad()
        win = self.create_window()
        response_kb = keyboard.Keyboard()
        try:
            for eye_name in self.config.eyes:
                eye = Eye(eye_name)
                other = Eye.LEFT if eye is Eye.RIGHT else Eye.RIGHT
                self._show_message(
                    win,
                    f"{self.protocol.title}\n\nCover your {other.value} eye and "
                    f"test your {eye.value} eye.",
                )
                result = self.run_eye(win, eye, response_kb=response_kb, serial_pad=serial_pad)
                self.store.record(result)
                self._show_message(win, self.describe_result(result))
        except ScreeningAbort:
            # the unfinished eye is never finalised; finished eyes are kept
            logger.info("Screening aborted by participant.")
        finally:
            win.close()
            if serial_pad:
                serial_pad.close()

        if len(self.store):
            self.save_results(participant_info)

        core.quit()


__all__ = ["VisionScreeningExperiment"]
