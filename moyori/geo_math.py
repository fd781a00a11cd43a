import math
from dataclasses import dataclass
from typing import Dict, Sequence


EARTH_RADIUS_KM = 6371.0


class InvalidInput(ValueError):
    """Raised when a geometric primitive is given input it cannot work with"""


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def to_dict(self) -> Dict:
        return {'lat': self.lat, 'lng': self.lng}


def centroid(points: Sequence) -> Coordinate:
    """
    Arithmetic mean of latitudes and longitudes.
    Accepts anything with .lat/.lng (Coordinate, Station).
    This is a planar mean, fine for points that sit in the same region.
    """
    if not points:
        raise InvalidInput("No stations selected")

    total_lat = sum(point.lat for point in points)
    total_lng = sum(point.lng for point in points)
    count = len(points)

    return Coordinate(lat=total_lat / count, lng=total_lng / count)


def distance_km(a, b) -> float:
    """Great-circle distance in kilometres (Haversine, spherical earth)"""
    lat1, lng1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lng2 = math.radians(b.lat), math.radians(b.lng)

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # rounding can push h just outside [0, 1]
    h = min(1.0, max(0.0, h))

    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
