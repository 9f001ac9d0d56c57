"""
Fetch the latest METAR for a station from NOAA tgftp.

The station file has two lines: an observation timestamp, then the raw
METAR. Example body:

    2024/05/12 17:56
    KSFO 121756Z 29014KT 10SM FEW012 16/11 A3002
"""
import logging
from typing import Optional

import httpx

from errors import MissingMetarLine, ParseError, TransportError
from metar_parser import MetarDecodeError, parse_metar
from observation import Observation


logger = logging.getLogger(__name__)

TGFTP_METAR_URL = "https://tgftp.nws.noaa.gov/data/observations/metar/stations/{icao}.TXT"
USER_AGENT = "metar-frame/1.0 (+https://tgftp.nws.noaa.gov)"


def make_client(timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """HTTP client shared by all fetches of a run."""
    return httpx.AsyncClient(
        timeout=timeout,
        headers={'User-Agent': USER_AGENT},
        transport=transport,
    )


def metar_line(airport: str, body: str) -> str:
    """Return the METAR line of a station file, skipping the timestamp header."""
    lines = body.splitlines()
    if len(lines) < 2:
        raise MissingMetarLine(airport, "missing METAR line")
    return lines[1].strip()


async def fetch_observation(client: httpx.AsyncClient, airport: str) -> Observation:
    """Fetch and parse the current observation for one airport."""
    url = TGFTP_METAR_URL.format(icao=airport)
    logger.debug("GET %s", url)

    try:
        resp = await client.get(url)
        resp.raise_for_status()
        body = resp.content.decode(resp.encoding or 'utf-8')
    except httpx.HTTPError as e:
        raise TransportError(airport, f"failed to fetch METAR: {e}") from e
    except (UnicodeDecodeError, LookupError) as e:
        raise TransportError(airport, f"failed to decode METAR response: {e}") from e

    line = metar_line(airport, body)

    try:
        observation = parse_metar(line)
    except MetarDecodeError as e:
        raise ParseError(airport, f"failed to parse METAR: {e}") from e

    logger.debug("%s METAR: %s", airport, observation.raw)
    return observation
