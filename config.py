# config.py - Runtime configuration for metar-frame

from dataclasses import dataclass
from typing import Optional

from errors import ConfigError


# ===== Serial link to the microcontroller =====
DEFAULT_SERIAL_PORT = "/dev/ttyACM0"
DEFAULT_BAUD_RATE = 9600
DEFAULT_SERIAL_TIMEOUT_MS = 500   # per write

# ===== METAR refresh =====
DEFAULT_REFRESH_INTERVAL_S = 300
DEFAULT_HTTP_TIMEOUT_S = 20.0


@dataclass(frozen=True)
class Config:
    serial_port: str = DEFAULT_SERIAL_PORT
    baud_rate: int = DEFAULT_BAUD_RATE
    serial_timeout_ms: int = DEFAULT_SERIAL_TIMEOUT_MS
    refresh_interval_s: float = DEFAULT_REFRESH_INTERVAL_S
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    roster_path: Optional[str] = None
    conservative_ceilings: bool = False

    def __post_init__(self):
        if not self.serial_port:
            raise ConfigError("serial port must not be empty")
        if self.baud_rate <= 0:
            raise ConfigError(f"baud rate must be positive, got {self.baud_rate}")
        if self.serial_timeout_ms <= 0:
            raise ConfigError(f"serial timeout must be positive, got {self.serial_timeout_ms} ms")
        if self.refresh_interval_s <= 0:
            raise ConfigError(f"refresh interval must be positive, got {self.refresh_interval_s} s")
        if self.http_timeout_s <= 0:
            raise ConfigError(f"HTTP timeout must be positive, got {self.http_timeout_s} s")

    @property
    def serial_timeout_s(self) -> float:
        return self.serial_timeout_ms / 1000.0
