"""Station directory and reverse geocoder tests"""

from unittest.mock import Mock

import googlemaps
import requests

from moyori.geocoding import ReverseGeocoder
from moyori.station_directory import HEARTRAILS_API_BASE, PREFECTURES, StationDirectory
from moyori.stations import Station


def _session(payload):
    session = Mock()
    response = Mock()
    response.json.return_value = payload
    session.get.return_value = response
    return session


TOKYO_RAW = {'name': '東京', 'prefecture': '東京都', 'line': 'JR山手線', 'x': '139.767125', 'y': '35.681236'}


class TestStationDirectory:

    def test_prefectures(self):
        assert len(PREFECTURES) == 47
        assert '東京都' in PREFECTURES

    def test_get_routes(self):
        session = _session({'response': {'line': ['JR山手線', 'JR中央線', '東京メトロ丸ノ内線']}})
        directory = StationDirectory(session=session)

        assert directory.get_routes('東京都') == ['JR山手線', 'JR中央線', '東京メトロ丸ノ内線']
        session.get.assert_called_once_with(
            HEARTRAILS_API_BASE, params={'method': 'getLines', 'prefecture': '東京都'}, timeout=10
        )

    def test_get_routes_missing_line(self):
        directory = StationDirectory(session=_session({'response': {'other': 'data'}}))
        assert directory.get_routes('東京都') == []

    def test_get_routes_network_error(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError('Network error')

        assert StationDirectory(session=session).get_routes('東京都') == []

    def test_get_stations(self):
        directory = StationDirectory(session=_session({'response': {'station': [TOKYO_RAW]}}))

        assert directory.get_stations('JR山手線') == [
            Station('東京', 35.681236, 139.767125, '東京都', 'JR山手線')
        ]

    def test_get_stations_empty(self):
        directory = StationDirectory(session=_session({'response': {}}))
        assert directory.get_stations('JR山手線') == []

    def test_bad_payload(self):
        session = _session(None)
        session.get.return_value.json.side_effect = ValueError('not json')

        assert StationDirectory(session=session).get_stations('JR山手線') == []

    def test_search_stations(self):
        session = _session({'response': {'station': [TOKYO_RAW]}})
        directory = StationDirectory(session=session)

        result = directory.search_stations(' 東京 ')

        assert [s.name for s in result] == ['東京']
        assert session.get.call_args.kwargs['params'] == {'method': 'getStations', 'name': '東京'}

    def test_search_blank_query_skips_request(self):
        session = Mock()
        assert StationDirectory(session=session).search_stations('  ') == []
        session.get.assert_not_called()

    def test_get_nearest_station(self):
        session = _session({'response': {'station': [dict(TOKYO_RAW, distance='120m')]}})
        directory = StationDirectory(session=session)

        station = directory.get_nearest_station(35.68, 139.76)

        assert station.name == '東京'
        assert session.get.call_args.kwargs['params'] == {'method': 'getStations', 'x': 139.76, 'y': 35.68}

    def test_get_nearest_station_none(self):
        directory = StationDirectory(session=_session({'response': {'station': []}}))
        assert directory.get_nearest_station(0.0, 0.0) is None


GEOCODE_RESULT = [{
    'address_components': [
        {'long_name': '1丁目', 'types': ['political', 'sublocality', 'sublocality_level_4']},
        {'long_name': '丸の内', 'types': ['political', 'sublocality', 'sublocality_level_2']},
        {'long_name': '千代田区', 'types': ['locality', 'political']},
        {'long_name': '東京都', 'types': ['administrative_area_level_1', 'political']},
        {'long_name': '100-0005', 'types': ['postal_code']},
    ]
}]


class TestReverseGeocoder:

    def test_without_key(self):
        assert ReverseGeocoder(None).reverse_geocode(35.68, 139.76) is None

    def test_address(self):
        client = Mock()
        client.reverse_geocode.return_value = GEOCODE_RESULT

        address = ReverseGeocoder(None, client=client).reverse_geocode(35.681236, 139.767125)

        assert address == {'prefecture': '東京都', 'city': '千代田区', 'town': '1丁目', 'postal': '100-0005'}
        client.reverse_geocode.assert_called_once_with((35.681236, 139.767125), language='ja')

    def test_prefers_sublocality_level_1(self):
        client = Mock()
        components = GEOCODE_RESULT[0]['address_components'] + [
            {'long_name': '丸の内一', 'types': ['political', 'sublocality', 'sublocality_level_1']},
        ]
        client.reverse_geocode.return_value = [{'address_components': components}]

        address = ReverseGeocoder(None, client=client).reverse_geocode(35.68, 139.76)

        assert address['town'] == '丸の内一'

    def test_no_result(self):
        client = Mock()
        client.reverse_geocode.return_value = []

        assert ReverseGeocoder(None, client=client).reverse_geocode(0.0, 0.0) is None

    def test_api_error(self):
        client = Mock()
        client.reverse_geocode.side_effect = googlemaps.exceptions.ApiError('REQUEST_DENIED')

        assert ReverseGeocoder(None, client=client).reverse_geocode(35.68, 139.76) is None
