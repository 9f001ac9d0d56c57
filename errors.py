"""
Exceptions raised along the observation-to-signal pipeline.

Per-airport failures (fetch, parse, classification) are recovered by the
refresh loop: logged, and the airport is skipped for the current tick.
Only SerialOpenError aborts a tick.
"""


class MetarFrameError(Exception):
    """Base class for all errors raised by metar-frame."""


class FetchError(MetarFrameError):
    """Fetching an observation for one airport failed."""

    def __init__(self, airport: str, reason: str):
        self.airport = airport
        self.reason = reason
        super().__init__(f"{airport}: {reason}")


class TransportError(FetchError):
    """The HTTP request failed or its body was not text."""


class MissingMetarLine(FetchError):
    """The response body had no METAR line after the timestamp header."""


class ParseError(FetchError):
    """The METAR line was rejected by the parser."""


class ClassificationError(MetarFrameError):
    """An observation could not be turned into flight rules."""


class VisibilityMissing(ClassificationError):
    def __init__(self):
        super().__init__("missing visibility")


class UnsupportedUnit(ClassificationError):
    def __init__(self, unit):
        self.unit = unit
        super().__init__(f"unsupported visibility distance unit: {unit}")


class SerialOpenError(MetarFrameError):
    """The serial device could not be opened."""


class SerialWriteError(MetarFrameError):
    """A frame could not be written to the serial device."""


class RosterError(MetarFrameError, ValueError):
    """The airport roster is malformed."""


class ConfigError(MetarFrameError, ValueError):
    """A configuration value is out of range."""
