"""
Serial link to the frame's microcontroller.

Each LED update is one frame: the LED index in decimal ASCII followed by a
single color byte, with no separator or terminator. LED 3 in MVFR is sent as
b"3b". The microcontroller reads digits until a color byte arrives, applies
the color to that LED and resets.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

import serial

from errors import SerialOpenError, SerialWriteError
from flight_rules import ColorCode


logger = logging.getLogger(__name__)

FRAME_RE = re.compile(rb'([0-9]+)([prbg])')

# start + 8 data + stop bits on an 8-N-1 line
BITS_PER_BYTE = 10


@dataclass(frozen=True)
class Assignment:
    led_index: int
    color: ColorCode


def encode_frame(assignment: Assignment) -> bytes:
    if assignment.led_index < 1:
        raise ValueError(f"LED index must be positive, got {assignment.led_index}")
    return f"{assignment.led_index}{assignment.color.value}".encode('ascii')


def decode_frames(data: bytes) -> list[Assignment]:
    """Split a byte stream back into assignments, as the microcontroller does."""
    assignments = []
    pos = 0
    while pos < len(data):
        m = FRAME_RE.match(data, pos)
        if not m:
            raise ValueError(f"malformed frame at offset {pos}: {data[pos:pos + 8]!r}")
        led_index = int(m.group(1))
        if led_index < 1:
            raise ValueError(f"LED index must be positive at offset {pos}")
        assignments.append(Assignment(led_index, ColorCode(m.group(2).decode('ascii'))))
        pos = m.end()
    return assignments


def write_budget_bytes(baud_rate: int, timeout_ms: int) -> int:
    """Bytes that fit into one write before the write timeout expires."""
    return baud_rate * timeout_ms // (BITS_PER_BYTE * 1000)


class SerialEmitter:
    """
    Owns the serial port for one refresh tick.

    Use as a context manager; the port is closed on every exit path.
    """

    def __init__(self, port: str, baud_rate: int, write_timeout: float):
        self.port = port
        self.baud_rate = baud_rate
        self.write_timeout = write_timeout
        self._serial: Optional[serial.Serial] = None

    def open(self):
        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baud_rate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                write_timeout=self.write_timeout,
            )
        except (serial.SerialException, ValueError) as e:
            raise SerialOpenError(f"failed to open serial device {self.port}: {e}") from e
        logger.debug("Opened %s at %d baud", self.port, self.baud_rate)

    def close(self):
        if self._serial is not None:
            try:
                self._serial.close()
            finally:
                self._serial = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def emit(self, assignment: Assignment) -> None:
        """Write one framed assignment."""
        if self._serial is None:
            raise SerialWriteError("serial device is not open")

        frame = encode_frame(assignment)
        try:
            written = self._serial.write(frame)
        except serial.SerialTimeoutException as e:
            raise SerialWriteError(f"timed out writing {frame!r} to {self.port}") from e
        except serial.SerialException as e:
            raise SerialWriteError(f"failed to write {frame!r} to {self.port}: {e}") from e

        if written is not None and written != len(frame):
            raise SerialWriteError(f"short write to {self.port}: {written}/{len(frame)} bytes of {frame!r}")
        logger.debug("Wrote %r", frame)
