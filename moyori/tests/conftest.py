import threading
import time

import pytest

from moyori.routing_service import RouteSummary
from moyori.stations import Station


class FakeRoutingService:
    """
    Routing stand-in driven by a table of (from_name, to_name) -> value.
    value is (minutes, fare), None for "no route", or an Exception to raise.
    Pairs missing from the table have no route.
    """

    def __init__(self, table=None, has_credentials=True, latency=0.0):
        self.table = table or {}
        self.has_credentials = has_credentials
        self.latency = latency
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def route(self, origin, destination, departure_time=None):
        with self._lock:
            self.calls.append((origin.name, destination.name, departure_time))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.latency:
                time.sleep(self.latency)
            value = self.table.get((origin.name, destination.name))
            if isinstance(value, Exception):
                raise value
            if value is None:
                return None
            minutes, fare = value
            return RouteSummary(minutes=minutes, fare=fare)
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def tokyo():
    return Station('東京', 35.681236, 139.767125, '東京都', 'JR東海道本線')


@pytest.fixture
def shinjuku():
    return Station('新宿', 35.690921, 139.700258, '東京都', 'JR山手線')


@pytest.fixture
def shibuya():
    return Station('渋谷', 35.658034, 139.701636, '東京都', 'JR山手線')


@pytest.fixture
def yotsuya():
    return Station('四ツ谷', 35.686041, 139.730644, '東京都', 'JR中央線')


@pytest.fixture
def ichigaya():
    return Station('市ケ谷', 35.691173, 139.735813, '東京都', 'JR中央線')


@pytest.fixture
def hakata():
    return Station('博多', 33.590355, 130.420590, '福岡県', 'JR鹿児島本線')


@pytest.fixture
def fake_routing():
    return FakeRoutingService
