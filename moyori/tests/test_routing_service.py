"""Routing provider tests (no network: sessions and clients are mocked)"""

import datetime as _dt
from unittest.mock import Mock

import googlemaps
import pytest
import requests

from moyori.config import Settings
from moyori.routing_service import (
    GoogleTransitRoutingService,
    NavitimeRoutingService,
    RouteSummary,
    RoutingError,
    create_routing_service,
)
from moyori.travel_time import TravelTimeMatrixBuilder


def _response(payload=None, ok=True, status_code=200, reason='OK'):
    response = Mock()
    response.ok = ok
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = payload
    return response


NAVITIME_PAYLOAD = {
    'items': [
        {'summary': {'move': {'time': 14, 'fare': {'unit_0': 210, 'unit_48': 208}}}},
        {'summary': {'move': {'time': 20, 'fare': {'unit_0': 180}}}},
    ]
}


class TestNavitimeRoutingService:

    def test_has_credentials(self):
        assert NavitimeRoutingService('key', session=Mock()).has_credentials
        assert not NavitimeRoutingService(None, session=Mock()).has_credentials
        assert not NavitimeRoutingService('', session=Mock()).has_credentials

    def test_best_route(self, tokyo, shinjuku):
        session = Mock()
        session.get.return_value = _response(NAVITIME_PAYLOAD)
        service = NavitimeRoutingService('secret', session=session)

        summary = service.route(tokyo, shinjuku)

        assert summary == RouteSummary(minutes=14, fare=210)
        url = session.get.call_args.args[0]
        kwargs = session.get.call_args.kwargs
        assert url == 'https://navitime-route-totalnavi.p.rapidapi.com/route_transit'
        assert kwargs['params'] == {
            'start': '35.681236,139.767125',
            'goal': '35.690921,139.700258',
            'shape': 'false',
        }
        assert kwargs['headers']['x-rapidapi-key'] == 'secret'
        assert kwargs['headers']['x-rapidapi-host'] == 'navitime-route-totalnavi.p.rapidapi.com'

    def test_departure_time_format(self, tokyo, shinjuku):
        session = Mock()
        session.get.return_value = _response(NAVITIME_PAYLOAD)
        service = NavitimeRoutingService('secret', session=session)

        service.route(tokyo, shinjuku, _dt.datetime(2025, 4, 1, 9, 5, 0))

        assert session.get.call_args.kwargs['params']['start_time'] == '2025-04-01T09:05:00'

    def test_missing_fare(self, tokyo, shinjuku):
        session = Mock()
        session.get.return_value = _response({'items': [{'summary': {'move': {'time': 30}}}]})

        summary = NavitimeRoutingService('k', session=session).route(tokyo, shinjuku)

        assert summary == RouteSummary(minutes=30, fare=None)

    @pytest.mark.parametrize('move', [{}, {'time': None}, {'time': '14'}, {'time': True}])
    def test_malformed_summary_raises(self, tokyo, yotsuya, move):
        session = Mock()
        session.get.return_value = _response({'items': [{'summary': {'move': move}}]})

        with pytest.raises(RoutingError) as exc_info:
            NavitimeRoutingService('k', session=session).route(tokyo, yotsuya)

        assert str(exc_info.value) == 'Malformed route response'

    def test_malformed_summary_is_a_failed_pair(self, tokyo, yotsuya):
        session = Mock()
        session.get.return_value = _response({'items': [{'summary': {'move': {}}}]})
        builder = TravelTimeMatrixBuilder(NavitimeRoutingService('k', session=session), delay_seconds=0)

        result = builder.calculate_travel_time(tokyo, yotsuya)

        assert result.success is False
        assert result.error == 'Malformed route response'

    def test_no_items_means_no_route(self, tokyo, hakata):
        session = Mock()
        session.get.return_value = _response({'items': []})

        assert NavitimeRoutingService('k', session=session).route(tokyo, hakata) is None

    def test_error_status(self, tokyo, shinjuku):
        session = Mock()
        session.get.return_value = _response(ok=False, status_code=429, reason='Too Many Requests')

        with pytest.raises(RoutingError) as exc_info:
            NavitimeRoutingService('k', session=session).route(tokyo, shinjuku)

        assert exc_info.value.status_code == 429
        assert str(exc_info.value) == 'API request failed: 429 Too Many Requests'

    def test_network_error(self, tokyo, shinjuku):
        session = Mock()
        session.get.side_effect = requests.ConnectionError('connection refused')

        with pytest.raises(RoutingError):
            NavitimeRoutingService('k', session=session).route(tokyo, shinjuku)


class TestGoogleTransitRoutingService:

    def test_no_key_has_no_client(self):
        service = GoogleTransitRoutingService(None)
        assert service.client is None
        assert not service.has_credentials

    def test_best_route(self, tokyo, shinjuku):
        client = Mock()
        client.directions.return_value = [{
            'legs': [{'duration': {'value': 1500}}],
            'fare': {'currency': 'JPY', 'value': 210, 'text': '¥210'},
        }]
        service = GoogleTransitRoutingService('AIza-test', client=client)

        summary = service.route(tokyo, shinjuku)

        assert summary == RouteSummary(minutes=25, fare=210)
        kwargs = client.directions.call_args.kwargs
        assert kwargs['mode'] == 'transit'
        assert kwargs['origin'] == '35.681236,139.767125'
        assert kwargs['alternatives'] is False

    def test_no_fare(self, tokyo, shinjuku):
        client = Mock()
        client.directions.return_value = [{'legs': [{'duration': {'value': 600}}, {'duration': {'value': 300}}]}]

        summary = GoogleTransitRoutingService('AIza-test', client=client).route(tokyo, shinjuku)

        assert summary == RouteSummary(minutes=15, fare=None)

    def test_fractional_fare(self, tokyo, shinjuku):
        client = Mock()
        client.directions.return_value = [{
            'legs': [{'duration': {'value': 1500}}],
            'fare': {'currency': 'USD', 'value': 2.75, 'text': '$2.75'},
        }]

        summary = GoogleTransitRoutingService('AIza-test', client=client).route(tokyo, shinjuku)

        assert summary.fare == 2.75

    def test_empty_result(self, tokyo, hakata):
        client = Mock()
        client.directions.return_value = []

        assert GoogleTransitRoutingService('AIza-test', client=client).route(tokyo, hakata) is None

    def test_api_error(self, tokyo, shinjuku):
        client = Mock()
        client.directions.side_effect = googlemaps.exceptions.ApiError('OVER_QUERY_LIMIT')

        with pytest.raises(RoutingError):
            GoogleTransitRoutingService('AIza-test', client=client).route(tokyo, shinjuku)


class TestCreateRoutingService:

    def test_default_is_navitime(self):
        service = create_routing_service(Settings(rapidapi_key='k'))
        assert isinstance(service, NavitimeRoutingService)
        assert service.api_key == 'k'

    def test_google(self):
        service = create_routing_service(Settings(routing_provider='google'))
        assert isinstance(service, GoogleTransitRoutingService)
        assert not service.has_credentials
