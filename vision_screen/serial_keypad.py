"""Serial response pad used as a second input channel."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class SerialResponsePad:
    """Non-blocking reader for a keypad that sends ASCII characters over serial.

    ``key_map`` translates the characters the pad sends into test responses,
    e.g. ``{"8": "up", "2": "down"}`` for arrow keys on a numeric keypad.
    """

    port: str
    baudrate: int = 9600
    key_map: Dict[str, str] = field(default_factory=dict)
    timeout_s: float = 0.0
    encoding: str = "ascii"

    def __post_init__(self) -> None:
        try:
            import serial  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime environment specific
            raise RuntimeError(
                "pyserial is required for SerialResponsePad support. Install it via 'pip install pyserial'."
            ) from exc

        self._device = serial.Serial(
            port=self.port,
            baudrate=self.baudrate,
            timeout=self.timeout_s,
        )
        self._buffer = ""
        logger.info("Opened serial response pad on %s at %d baud", self.port, self.baudrate)

    def close(self) -> None:
        """Close the underlying serial port."""

        try:
            self._device.close()
        except OSError as exc:
            logger.warning("Could not close serial port %s: %s", self.port, exc)

    def clear(self) -> None:
        """Discard anything pressed so far (e.g. during feedback)."""

        self._read_all()
        self._buffer = ""

    def poll(self) -> Optional[str]:
        """Return the response for the first mapped key pressed since the last poll."""

        self._buffer += self._read_all()
        for idx, char in enumerate(self._buffer):
            if char in self.key_map:
                self._buffer = self._buffer[idx + 1 :]
                return self.key_map[char]
        # nothing mapped yet; unmapped characters are noise
        self._buffer = ""
        return None

    def _read_all(self) -> str:
        """Read and decode any bytes currently waiting on the serial buffer."""

        try:
            waiting = self._device.in_waiting
            data = self._device.read(waiting) if waiting else b""
        except OSError as exc:
            logger.warning("Serial read failed on %s: %s", self.port, exc)
            return ""
        return data.decode(self.encoding, errors="ignore") if data else ""


__all__ = ["SerialResponsePad"]
