"""
Tests for the METAR fetch adaptor, using httpx.MockTransport in place of
the NOAA server.
"""

import asyncio

import httpx
import pytest

from errors import MissingMetarLine, ParseError, TransportError
from fetch import TGFTP_METAR_URL, USER_AGENT, fetch_observation, make_client, metar_line
from observation import DistanceUnit


STATION_FILE = "2024/05/12 17:56\nKSFO 121756Z 29014KT 10SM FEW012 16/11 A3002\n"


def fetch(handler, airport="KSFO"):
    async def go():
        async with make_client(5.0, httpx.MockTransport(handler)) as client:
            return await fetch_observation(client, airport)
    return asyncio.run(go())


class TestMetarLine:
    def test_second_line(self):
        assert metar_line("KSFO", STATION_FILE).startswith("KSFO 121756Z")

    @pytest.mark.parametrize("body", ["", "2024/05/12 17:56", "2024/05/12 17:56\n"])
    def test_missing(self, body):
        with pytest.raises(MissingMetarLine) as exc:
            metar_line("KSFO", body)
        assert exc.value.airport == "KSFO"


class TestFetchObservation:
    def test_success(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['agent'] = request.headers.get('user-agent')
            return httpx.Response(200, text=STATION_FILE)

        obs = fetch(handler)
        assert seen['url'] == TGFTP_METAR_URL.format(icao="KSFO")
        assert seen['agent'] == USER_AGENT
        assert obs.station == "KSFO"
        assert obs.visibility.value == 10.0
        assert obs.visibility.unit is DistanceUnit.STATUTE_MILES

    def test_http_error_status(self):
        with pytest.raises(TransportError) as exc:
            fetch(lambda request: httpx.Response(404, text="Not Found"), airport="KXXX")
        assert exc.value.airport == "KXXX"
        assert "KXXX" in str(exc.value)

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            fetch(handler)

    def test_undecodable_body(self):
        def handler(request):
            return httpx.Response(200, content=b"2024/05/12 17:56\n\xff\xfe\xfa",
                                  headers={'Content-Type': 'text/plain; charset=utf-8'})

        with pytest.raises(TransportError, match="decode"):
            fetch(handler)

    def test_missing_metar_line(self):
        with pytest.raises(MissingMetarLine):
            fetch(lambda request: httpx.Response(200, text="2024/05/12 17:56\n"))

    def test_parse_error(self):
        with pytest.raises(ParseError) as exc:
            fetch(lambda request: httpx.Response(200, text="2024/05/12 17:56\nnot a metar\n"))
        assert exc.value.airport == "KSFO"
