import asyncio
import logging
import datetime as _dt
from typing import Dict, List, Optional, Sequence

from moyori.equal_time import InsufficientAnchors, evaluate_equal_travel_time, select_optimal
from moyori.geo_math import InvalidInput, centroid, distance_km
from moyori.stations import (
    DEFAULT_CANDIDATE_LIMIT,
    DEFAULT_SEARCH_RADIUS_KM,
    MAX_STATIONS,
    Station,
    candidates_in_range,
    find_nearest_station,
)
from moyori.travel_time import SEQUENTIAL, TravelTimeMatrixBuilder, failed_pairs


logger = logging.getLogger(__name__)

DEFAULT_MAX_TRAVEL_TIME_MINUTES = 60
NO_MEETING_POINT_MESSAGE = 'No suitable meeting point found'


def _check_anchors(anchors: Sequence[Station]):
    if len(anchors) < 2:
        raise InsufficientAnchors("At least two stations are required")
    if len(anchors) > MAX_STATIONS:
        raise InvalidInput(f"At most {MAX_STATIONS} stations can be selected")


class MeetingPointFinder:
    """Main service for finding a meeting station for a group"""

    def __init__(self, matrix_builder: TravelTimeMatrixBuilder, station_pool: Sequence[Station]):
        self.matrix_builder = matrix_builder
        self.station_pool = list(station_pool)

    def find_centroid_meeting_point(self, anchors: Sequence[Station],
                                    pool: Optional[Sequence[Station]] = None) -> Dict:
        """
        Meeting point = station nearest to the geographic centroid of the anchors
        """
        result = {
            'success': False,
            'error': None,
            'data': {}
        }
        pool = self.station_pool if pool is None else pool

        try:
            _check_anchors(anchors)
            center = centroid(anchors)
            nearest = find_nearest_station(center, pool)
        except (InvalidInput, InsufficientAnchors) as e:
            result['error'] = str(e)
            return result

        result['success'] = True
        result['data'] = {
            'centroid': center.to_dict(),
            'meeting_point': nearest.to_dict(),
            'distance_km': round(distance_km(center, nearest), 3),
        }
        return result

    def find_equal_travel_time_meeting_point(self, anchors: Sequence[Station], **kwargs) -> Dict:
        """Synchronous wrapper for find_equal_travel_time_meeting_point_async"""
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(self.find_equal_travel_time_meeting_point_async(anchors, **kwargs))
        finally:
            loop.close()

    async def find_equal_travel_time_meeting_point_async(
        self,
        anchors: Sequence[Station],
        pool: Optional[Sequence[Station]] = None,
        max_distance_km: float = DEFAULT_SEARCH_RADIUS_KM,
        max_travel_time_minutes: float = DEFAULT_MAX_TRAVEL_TIME_MINUTES,
        departure_time: Optional[_dt.datetime] = None,
        weights: Optional[Dict[str, float]] = None,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
        policy: str = SEQUENTIAL,
    ) -> Dict:
        """
        Meeting point = candidate station the anchors reach in the most nearly
        equal time, chosen by weighted variance / average time / fare.
        """
        result = {
            'success': False,
            'error': None,
            'data': {}
        }
        pool = self.station_pool if pool is None else pool

        try:
            _check_anchors(anchors)
        except (InvalidInput, InsufficientAnchors) as e:
            result['error'] = str(e)
            return result
        if not pool:
            result['error'] = "No station data available"
            return result

        center = centroid(anchors)
        candidates = candidates_in_range(anchors, pool, max_distance_km, limit=candidate_limit)
        logger.info(f"{len(candidates)} candidate stations within {max_distance_km} km of centroid")

        result['success'] = True
        result['data'] = {
            'centroid': center.to_dict(),
            'candidates_considered': len(candidates),
            'optimal_meeting_point': None,
            'ranked_results': [],
            'failed_pairs': [],
            'message': None,
        }

        if not candidates:
            result['data']['message'] = NO_MEETING_POINT_MESSAGE
            return result

        matrix = await self.matrix_builder.build_matrix_async(
            list(anchors) + candidates, departure_time=departure_time, policy=policy
        )
        evaluated = evaluate_equal_travel_time(anchors, candidates, matrix, max_travel_time_minutes)
        best = select_optimal(evaluated, weights)

        failures: List[Dict] = [
            {
                'from': r.from_station.name,
                'to': r.to_station.name,
                'error': r.error,
            }
            for r in failed_pairs(matrix)
        ]

        result['data']['ranked_results'] = [r.to_dict() for r in evaluated]
        result['data']['failed_pairs'] = failures
        if best is None:
            result['data']['message'] = NO_MEETING_POINT_MESSAGE
        else:
            result['data']['optimal_meeting_point'] = best.to_dict()
        return result
