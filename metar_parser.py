"""
METAR decoder

Turns one raw METAR line (as found on the NOAA tgftp station files) into an
Observation. Only the groups needed for flight rules are decoded: station,
observation time, prevailing visibility and cloud layers. Everything after
RMK is ignored.
"""
import re
from typing import Optional

from observation import CloudCoverage, CloudLayer, DistanceUnit, Observation, Visibility


STATION_RE = re.compile(r'^[A-Z0-9]{4}$')
TIME_RE = re.compile(r'^\d{6}Z$')

# 10SM, 3/4SM, P6SM, M1/4SM, ////SM
VIS_SM_RE = re.compile(r'^([PM])?(\d+(?:/\d+)?|/+)SM$')
# 9999, 0800, 9999NDV, 4000SW, ////
VIS_METRES_RE = re.compile(r'^(\d{4}|////)(NDV|[NSEW]{1,2})?$')
VIS_KM_RE = re.compile(r'^(\d{1,2})KM$')

CLOUD_RE = re.compile(r'^(FEW|SCT|BKN|OVC)(\d{3}|///)(CB|TCU|///)?$')
CLEAR_SKY = {'SKC', 'CLR', 'NSC', 'NCD'}

CAVOK_METRES = 9999.0


class MetarDecodeError(ValueError):
    """Raised when a line cannot be read as a METAR."""


def _parse_fraction(text: str) -> float:
    if '/' in text:
        num, denom = text.split('/', 1)
        if float(denom) == 0:
            raise MetarDecodeError(f"invalid visibility fraction: {text}")
        return float(num) / float(denom)
    return float(text)


def _parse_visibility(tokens: list[str], i: int) -> tuple[Optional[Visibility], bool]:
    """
    Try to read a visibility group at tokens[i].

    Returns (visibility, matched). A matched group reported as slashes gives
    (None, True).
    """
    tok = tokens[i]

    sm = VIS_SM_RE.match(tok)
    if sm:
        prefix, value = sm.groups()
        if value.startswith('/'):
            return None, True
        miles = _parse_fraction(value)
        # '1 1/2SM' is split over two groups
        prev = tokens[i - 1] if i > 0 else ''
        if '/' in value and prev.isdigit() and len(prev) == 1:
            miles += float(prev)
        return Visibility(miles, DistanceUnit.STATUTE_MILES), True

    metres = VIS_METRES_RE.match(tok)
    if metres:
        if metres.group(1) == '////':
            return None, True
        return Visibility(float(metres.group(1)), DistanceUnit.METRES), True

    km = VIS_KM_RE.match(tok)
    if km:
        return Visibility(float(km.group(1)), DistanceUnit.KILOMETRES), True

    return None, False


def _parse_cloud(tok: str) -> Optional[CloudLayer]:
    m = CLOUD_RE.match(tok)
    if not m:
        return None
    coverage, height, cloud_type = m.groups()
    altitude = None if height == '///' else int(height)
    if cloud_type == '///':
        cloud_type = None
    return CloudLayer(CloudCoverage(coverage), altitude, cloud_type)


def parse_metar(line: str) -> Observation:
    """Parse a raw METAR line into an Observation."""
    if not line or not line.strip():
        raise MetarDecodeError("empty METAR")

    raw = ' '.join(line.split())
    tokens = raw.upper().split()
    if 'RMK' in tokens:
        tokens = tokens[:tokens.index('RMK')]

    if tokens and tokens[0] in ('METAR', 'SPECI'):
        tokens = tokens[1:]

    if len(tokens) < 2:
        raise MetarDecodeError(f"truncated METAR: {raw!r}")

    station, obs_time = tokens[0], tokens[1]
    if not STATION_RE.match(station):
        raise MetarDecodeError(f"invalid station identifier: {station!r}")
    if not TIME_RE.match(obs_time):
        raise MetarDecodeError(f"invalid observation time: {obs_time!r}")

    visibility = None
    visibility_seen = False
    layers = []

    for i in range(2, len(tokens)):
        tok = tokens[i]

        if tok == 'CAVOK':
            visibility = Visibility(CAVOK_METRES, DistanceUnit.METRES)
            visibility_seen = True
            continue

        if not visibility_seen:
            vis, matched = _parse_visibility(tokens, i)
            if matched:
                visibility = vis
                visibility_seen = True
                continue

        if tok in CLEAR_SKY:
            continue

        layer = _parse_cloud(tok)
        if layer is not None:
            layers.append(layer)

    return Observation(
        station=station,
        visibility=visibility,
        cloud_layers=tuple(layers),
        raw=raw,
    )
