"""
Airport roster: which LED on the frame shows which airport.

The roster is fixed for the lifetime of the process. It is either the
built-in DEFAULT_ROSTER or read from a CSV file with one ICAO,LED row per
airport:

    # icao,led
    KOAK,1
    KSFO,2
"""
import csv
import re
from collections.abc import Mapping
from typing import Iterator

from errors import RosterError


ICAO_RE = re.compile(r'^[A-Z0-9]{4}$')

# LED 0 is reserved by the serial framing
MIN_LED = 1
MAX_LED = 65535

DEFAULT_ROSTER = {
    'KOAK': 1,
    'KSFO': 2,
    'KHAF': 3,
    'KSQL': 4,
    'KSJC': 5,
}


class Roster(Mapping):
    """Immutable mapping of ICAO identifier to LED index."""

    def __init__(self, entries: Mapping):
        leds = {}
        for airport, led in entries.items():
            if not isinstance(airport, str) or not ICAO_RE.match(airport):
                raise RosterError(f"invalid ICAO identifier: {airport!r}")
            if isinstance(led, bool) or not isinstance(led, int):
                raise RosterError(f"LED index for {airport} must be an integer, got {led!r}")
            if not MIN_LED <= led <= MAX_LED:
                raise RosterError(f"LED index for {airport} out of range [{MIN_LED}, {MAX_LED}]: {led}")
            if led in leds:
                raise RosterError(f"LED{led} assigned to both {leds[led]} and {airport}")
            leds[led] = airport
        self._entries = dict(entries)

    def __getitem__(self, airport: str) -> int:
        return self._entries[airport]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Roster({self._entries!r})"

    def by_led(self) -> list[tuple[str, int]]:
        """Entries sorted by LED index, for display."""
        return sorted(self._entries.items(), key=lambda item: item[1])


def load_roster(path: str) -> Roster:
    """Read a roster from a CSV file of ICAO,LED rows."""
    entries = {}
    # header is optional and only allowed before the first data row
    seen_row = False
    try:
        with open(path, newline='', encoding='utf-8') as f:
            reader = csv.reader(f)
            for lineno, row in enumerate(reader, 1):
                row = [cell.strip() for cell in row]
                if not row or not row[0] or row[0].startswith('#'):
                    continue
                if not seen_row and row[0].lower() == 'icao':
                    seen_row = True
                    continue
                seen_row = True
                if len(row) < 2:
                    raise RosterError(f"{path}:{lineno}: expected ICAO,LED")
                airport = row[0]
                try:
                    led = int(row[1])
                except ValueError:
                    raise RosterError(f"{path}:{lineno}: invalid LED index {row[1]!r}") from None
                if airport in entries:
                    raise RosterError(f"{path}:{lineno}: duplicate airport {airport}")
                entries[airport] = led
    except OSError as e:
        raise RosterError(f"cannot read roster {path}: {e}") from e

    if not entries:
        raise RosterError(f"roster {path} has no airports")
    return Roster(entries)
