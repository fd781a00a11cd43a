import asyncio
import logging
import concurrent.futures
import datetime as _dt
from dataclasses import dataclass
from time import perf_counter
from typing import Dict, List, Optional, Sequence

from moyori.stations import Station, StationKey


logger = logging.getLogger(__name__)

# Scheduling policies
CONCURRENT = 'concurrent'
SEQUENTIAL = 'sequential'

DEFAULT_DELAY_SECONDS = 0.1
DEFAULT_MAX_WORKERS = 10


@dataclass
class TravelTimeResult:
    """Outcome of one routing query for an ordered station pair"""
    from_station: Station
    to_station: Station
    travel_time_minutes: float
    success: bool
    fare: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'from_station': self.from_station.to_dict(),
            'to_station': self.to_station.to_dict(),
            'travel_time_minutes': self.travel_time_minutes,
            'fare': self.fare,
            'success': self.success,
            'error': self.error,
        }


# from key -> to key -> result; a missing entry means the pair was never attempted
TravelTimeMatrix = Dict[StationKey, Dict[StationKey, TravelTimeResult]]


def find_shortest_travel_time(matrix: TravelTimeMatrix, from_station: Station) -> Optional[Dict]:
    """Fastest successful destination from from_station, or None"""
    routes = matrix.get(from_station.key)
    if not routes:
        return None

    best = None
    for result in routes.values():
        if result.success and (best is None or result.travel_time_minutes < best.travel_time_minutes):
            best = result

    if best is None:
        return None
    return {'to_station': best.to_station, 'travel_time': best.travel_time_minutes}


class TravelTimeMatrixBuilder:
    """
    Builds a directed travel-time/fare matrix between stations by querying
    a routing service once per ordered pair.

    Two scheduling policies produce the same matrix shape:
      - CONCURRENT: every pair is submitted to a bounded thread pool at once
      - SEQUENTIAL: one call at a time with a fixed delay after each call,
        to stay under the provider's per-second quota

    A failing pair is recorded with success=False and never aborts the batch.
    """

    def __init__(self, routing_service, max_workers: int = DEFAULT_MAX_WORKERS,
                 delay_seconds: float = DEFAULT_DELAY_SECONDS):
        self.routing_service = routing_service
        self.delay_seconds = delay_seconds
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)

    def cleanup(self):
        """Clean up resources"""
        if hasattr(self, 'executor'):
            self.executor.shutdown(wait=True)

    def calculate_travel_time(self, from_station: Station, to_station: Station,
                              departure_time: Optional[_dt.datetime] = None) -> TravelTimeResult:
        if not self.routing_service.has_credentials:
            return TravelTimeResult(from_station, to_station, 0, success=False,
                                    error='API key not configured')

        try:
            summary = self.routing_service.route(from_station, to_station, departure_time)
        except Exception as e:
            logger.warning(f"Travel time {from_station.name} -> {to_station.name} failed: {e}")
            return TravelTimeResult(from_station, to_station, 0, success=False, error=str(e))

        if summary is None:
            return TravelTimeResult(from_station, to_station, 0, success=False, error='No route found')

        return TravelTimeResult(from_station, to_station, summary.minutes, success=True, fare=summary.fare)

    async def calculate_travel_time_async(self, from_station: Station, to_station: Station,
                                          departure_time: Optional[_dt.datetime] = None) -> TravelTimeResult:
        """Async wrapper for calculate_travel_time"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor, self.calculate_travel_time, from_station, to_station, departure_time
        )

    async def build_matrix_async(self, stations: Sequence[Station],
                                 departure_time: Optional[_dt.datetime] = None,
                                 policy: str = SEQUENTIAL) -> TravelTimeMatrix:
        if policy not in (CONCURRENT, SEQUENTIAL):
            raise ValueError(f"Unknown scheduling policy: {policy}")

        matrix: TravelTimeMatrix = {station.key: {} for station in stations}
        pairs = [
            (stations[i], stations[j])
            for i in range(len(stations))
            for j in range(len(stations))
            if i != j
        ]
        logger.info(f"Building travel time matrix: {len(stations)} stations, {len(pairs)} pairs, policy={policy}")
        start = perf_counter()

        if policy == CONCURRENT:
            results = await asyncio.gather(*[
                self.calculate_travel_time_async(a, b, departure_time) for a, b in pairs
            ])
            for result in results:
                matrix[result.from_station.key][result.to_station.key] = result
        else:
            for a, b in pairs:
                result = await self.calculate_travel_time_async(a, b, departure_time)
                matrix[a.key][b.key] = result
                if self.delay_seconds > 0:
                    await asyncio.sleep(self.delay_seconds)

        failed = sum(1 for row in matrix.values() for r in row.values() if not r.success)
        logger.info(
            "Travel time matrix done: pairs=%d failed=%d duration_ms=%.1f",
            len(pairs), failed, (perf_counter() - start) * 1000.0,
        )
        return matrix

    def build_matrix(self, stations: Sequence[Station],
                     departure_time: Optional[_dt.datetime] = None,
                     policy: str = SEQUENTIAL) -> TravelTimeMatrix:
        """Synchronous entry point; runs build_matrix_async on a private event loop"""
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(self.build_matrix_async(stations, departure_time, policy))
        finally:
            loop.close()


def failed_pairs(matrix: TravelTimeMatrix) -> List[TravelTimeResult]:
    return [result for row in matrix.values() for result in row.values() if not result.success]
