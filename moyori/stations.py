import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from moyori.geo_math import Coordinate, InvalidInput, centroid, distance_km


# --- Module-level constants ---
MAX_STATIONS = 10               # upper bound on anchors per request
DEFAULT_CANDIDATE_LIMIT = 30    # caps the O(N^2) travel-time matrix
DEFAULT_SEARCH_RADIUS_KM = 5.0

StationKey = Tuple[str, str]


class EmptyPool(InvalidInput):
    """Raised when a nearest-station search is given no stations"""


@dataclass(frozen=True)
class Station:
    name: str
    lat: float
    lng: float
    prefecture: str = ''
    line: str = ''

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)

    @property
    def key(self) -> StationKey:
        """Matrix identity; same-named stations on different lines stay distinct"""
        return (self.name, self.line)

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'lat': self.lat,
            'lng': self.lng,
            'prefecture': self.prefecture,
            'line': self.line,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Station':
        """
        Build a Station from a JSON-ish dict.
        Accepts 'lng' or 'lon'; string coordinates are converted to float.
        """
        if not isinstance(data, dict):
            raise InvalidInput("Station must be an object")
        name = data.get('name')
        if not name:
            raise InvalidInput("Station name is required")
        lng = data.get('lng', data.get('lon'))
        if data.get('lat') is None or lng is None:
            raise InvalidInput(f"Station '{name}' must have lat and lng properties")
        try:
            lat = float(data['lat'])
            lng = float(lng)
        except (TypeError, ValueError):
            raise InvalidInput(f"Station '{name}' has non-numeric coordinates")
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidInput(f"Station '{name}' has non-finite coordinates")
        if not -90 <= lat <= 90:
            raise InvalidInput(f"Station '{name}' latitude must be in the [-90, 90] range")
        return cls(
            name=str(name),
            lat=lat,
            lng=lng,
            prefecture=data.get('prefecture') or '',
            line=data.get('line') or '',
        )


def find_nearest_station(point, pool: Sequence[Station]) -> Station:
    """
    Linear scan for the station closest to point.
    Ties go to the first station in pool order.
    """
    if not pool:
        raise EmptyPool("No station data available")

    nearest_station = pool[0]
    min_distance = distance_km(point, nearest_station)

    for station in pool[1:]:
        distance = distance_km(point, station)
        if distance < min_distance:
            min_distance = distance
            nearest_station = station

    return nearest_station


def candidates_in_range(
    anchors: Sequence[Station],
    pool: Sequence[Station],
    max_distance_km: float,
    limit: Optional[int] = None,
) -> List[Station]:
    """
    Stations from pool within max_distance_km of the anchors' centroid,
    skipping any whose name matches an anchor. Keeps pool order.
    An empty result is a normal outcome.
    """
    center = centroid(anchors)
    anchor_names = {anchor.name for anchor in anchors}

    candidates: List[Station] = []
    for station in pool:
        if limit is not None and len(candidates) >= limit:
            break
        if station.name in anchor_names:
            continue
        if distance_km(center, station) <= max_distance_km:
            candidates.append(station)
    return candidates
