import logging
import datetime as _dt
from dataclasses import dataclass
from typing import Optional

import googlemaps
import requests


logger = logging.getLogger(__name__)

RAPIDAPI_HOST = 'navitime-route-totalnavi.p.rapidapi.com'
NAVITIME_BASE_URL = f"https://{RAPIDAPI_HOST}"


class RoutingError(Exception):
    """A routing request failed (transport error or non-2xx response)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class RouteSummary:
    """Best single route between two points"""
    minutes: float
    fare: Optional[float] = None


def _fmt(point) -> str:
    return f"{point.lat},{point.lng}"


class NavitimeRoutingService:
    """Transit routing through the NAVITIME Route (totalnavi) API on RapidAPI"""

    def __init__(self, api_key: Optional[str], session: Optional[requests.Session] = None,
                 base_url: str = NAVITIME_BASE_URL):
        self.api_key = api_key
        self.base_url = base_url
        self.session = session or requests.Session()

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    def route(self, origin, destination, departure_time: Optional[_dt.datetime] = None) -> Optional[RouteSummary]:
        """
        Return the best route's total minutes and fare, or None when no route exists.
        Raises RoutingError on transport failures or error responses.
        """
        params = {
            'start': _fmt(origin),
            'goal': _fmt(destination),
            'shape': 'false',
        }
        if departure_time is not None:
            params['start_time'] = departure_time.strftime('%Y-%m-%dT%H:%M:%S')

        headers = {
            'x-rapidapi-key': self.api_key,
            'x-rapidapi-host': RAPIDAPI_HOST,
            'Accept': 'application/json',
        }

        try:
            response = self.session.get(f"{self.base_url}/route_transit", params=params, headers=headers)
        except requests.RequestException as e:
            raise RoutingError(f"Network error: {e}") from e

        if not response.ok:
            raise RoutingError(
                f"API request failed: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        data = response.json()
        items = data.get('items') or []
        if not items:
            return None

        move = items[0].get('summary', {}).get('move', {})
        minutes = move.get('time')
        if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
            raise RoutingError("Malformed route response")
        fare = (move.get('fare') or {}).get('unit_0')
        return RouteSummary(minutes=minutes, fare=fare)


class GoogleTransitRoutingService:
    """Transit routing through the Google Maps Directions API"""

    def __init__(self, api_key: Optional[str], client: Optional[googlemaps.Client] = None):
        self.api_key = api_key
        # googlemaps.Client refuses an empty key, so only build it when we have one
        self.client = client
        if self.client is None and api_key:
            self.client = googlemaps.Client(key=api_key)

    @property
    def has_credentials(self) -> bool:
        return self.client is not None

    def route(self, origin, destination, departure_time: Optional[_dt.datetime] = None) -> Optional[RouteSummary]:
        try:
            directions_result = self.client.directions(
                origin=_fmt(origin),
                destination=_fmt(destination),
                mode="transit",
                departure_time=departure_time,
                alternatives=False
            )
        except googlemaps.exceptions.ApiError as e:
            raise RoutingError(f"Directions API error: {e.status}") from e
        except (googlemaps.exceptions.TransportError, googlemaps.exceptions.Timeout) as e:
            raise RoutingError(f"Network error: {e}") from e

        if not directions_result:
            return None

        route = directions_result[0]
        # Duration across all legs (usually 1)
        total_duration = 0
        for leg in route.get('legs', []):
            if 'duration' in leg and 'value' in leg['duration']:
                total_duration += leg['duration']['value']

        fare = route.get('fare', {}).get('value')
        return RouteSummary(minutes=round(total_duration / 60), fare=fare)


def create_routing_service(settings):
    """Pick the routing provider named in settings"""
    if settings.routing_provider == 'google':
        logger.info("Using Google Directions for transit routing")
        return GoogleTransitRoutingService(settings.google_maps_api_key)
    logger.info("Using NAVITIME for transit routing")
    return NavitimeRoutingService(settings.rapidapi_key)
