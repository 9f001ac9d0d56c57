"""
Unit tests for the METAR decoder.
"""

import pytest

from metar_parser import MetarDecodeError, parse_metar
from observation import CloudCoverage, CloudLayer, DistanceUnit, Visibility


class TestStationAndTime:
    def test_basic_report(self):
        obs = parse_metar("KSFO 121756Z 29014KT 10SM FEW012 SCT200 16/11 A3002")
        assert obs.station == "KSFO"
        assert obs.visibility == Visibility(10.0, DistanceUnit.STATUTE_MILES)
        assert obs.cloud_layers == (
            CloudLayer(CloudCoverage.FEW, 12),
            CloudLayer(CloudCoverage.SCATTERED, 200),
        )

    def test_metar_keyword_and_auto(self):
        obs = parse_metar("METAR KOAK 121753Z AUTO 00000KT 3SM BR OVC008 12/11 A3001")
        assert obs.station == "KOAK"
        assert obs.visibility.value == 3.0
        assert obs.cloud_layers == (CloudLayer(CloudCoverage.OVERCAST, 8),)

    @pytest.mark.parametrize("line", ["", "   ", "KSFO", "KSFO 1756Z 10SM", "K$FO 121756Z 10SM"])
    def test_rejects_garbage(self, line):
        with pytest.raises(MetarDecodeError):
            parse_metar(line)


class TestVisibility:
    @pytest.mark.parametrize("group, miles", [
        ("10SM", 10.0),
        ("1/2SM", 0.5),
        ("P6SM", 6.0),
        ("M1/4SM", 0.25),
    ])
    def test_statute_miles(self, group, miles):
        obs = parse_metar(f"KSJC 121753Z 31008KT {group} CLR 18/09 A3002")
        assert obs.visibility == Visibility(miles, DistanceUnit.STATUTE_MILES)

    def test_whole_and_fraction(self):
        obs = parse_metar("KHAF 121755Z AUTO 00000KT 1 1/2SM BR BKN004 11/11 A3003")
        assert obs.visibility.value == 1.5

    def test_metres(self):
        obs = parse_metar("LFRN 121800Z 27010KT 0800 FG OVC002 10/10 Q1015")
        assert obs.visibility == Visibility(800.0, DistanceUnit.METRES)

    @pytest.mark.parametrize("group", ["4000SW", "6000N", "9999NDV"])
    def test_metres_with_direction(self, group):
        obs = parse_metar(f"LFRN 121800Z 27010KT {group} BKN010 10/08 Q1015")
        assert obs.visibility.unit is DistanceUnit.METRES
        assert obs.visibility.value == float(group[:4])
        assert obs.cloud_layers == (CloudLayer(CloudCoverage.BROKEN, 10),)

    def test_cavok(self):
        obs = parse_metar("LFRB 121800Z 27010KT CAVOK 15/08 Q1020")
        assert obs.visibility.unit is DistanceUnit.METRES
        assert obs.cloud_layers == ()

    def test_missing(self):
        obs = parse_metar("KSQL 121747Z AUTO 00000KT ////SM BKN010 A3002")
        assert obs.visibility is None

    def test_absent(self):
        obs = parse_metar("KSQL 121747Z AUTO 00000KT BKN010 A3002")
        assert obs.visibility is None

    def test_remarks_ignored(self):
        obs = parse_metar("KSFO 121756Z 29014KT BKN010 16/11 A3002 RMK AO2 2SM")
        assert obs.visibility is None


class TestClouds:
    def test_unknown_height_and_type(self):
        obs = parse_metar("KSJC 121753Z 31008KT 5SM BKN/// OVC020CB SCT015/// A3002")
        assert obs.cloud_layers == (
            CloudLayer(CloudCoverage.BROKEN, None),
            CloudLayer(CloudCoverage.OVERCAST, 20, "CB"),
            CloudLayer(CloudCoverage.SCATTERED, 15),
        )

    def test_vertical_visibility_not_a_layer(self):
        obs = parse_metar("KSFO 121756Z 00000KT 1/4SM FG VV001 12/12 A3002")
        assert obs.cloud_layers == ()

    def test_clear_sky(self):
        obs = parse_metar("KOAK 121753Z 28012KT 10SM SKC 20/10 A2999")
        assert obs.cloud_layers == ()
