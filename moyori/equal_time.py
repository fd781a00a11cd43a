from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from moyori.stations import Station
from moyori.travel_time import TravelTimeMatrix


# --- Module-level constants ---
VARIANCE_WEIGHT = 0.7
AVERAGE_TIME_WEIGHT = 0.2
FARE_WEIGHT = 0.1
DEFAULT_WEIGHTS = {
    'variance': VARIANCE_WEIGHT,
    'average_time': AVERAGE_TIME_WEIGHT,
    'fare': FARE_WEIGHT,
}


class InsufficientAnchors(ValueError):
    """Raised when fewer than two anchors are given to travel-time evaluation"""


@dataclass
class EqualTravelTimeResult:
    station: Station
    average_travel_time: float
    travel_time_variance: float
    travel_times: List[float] = field(default_factory=list)
    total_fare: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            'station': self.station.to_dict(),
            'average_travel_time': round(self.average_travel_time, 1),
            'travel_time_variance': round(self.travel_time_variance, 2),
            'travel_times': self.travel_times,
            'total_fare': self.total_fare,
        }


def evaluate_equal_travel_time(
    anchors: Sequence[Station],
    candidates: Sequence[Station],
    matrix: TravelTimeMatrix,
    max_travel_time_minutes: float,
) -> List[EqualTravelTimeResult]:
    """
    Score each candidate by how evenly the anchors can reach it.

    A candidate is admitted only if every anchor has a successful leg to it
    within max_travel_time_minutes; otherwise it is silently dropped.
    Results are sorted by ascending population variance of the leg times.
    """
    if len(anchors) < 2:
        raise InsufficientAnchors("At least two stations are required")

    results: List[EqualTravelTimeResult] = []

    for candidate in candidates:
        travel_times: List[float] = []
        fares: List[float] = []
        admitted = True

        for anchor in anchors:
            leg = matrix.get(anchor.key, {}).get(candidate.key)
            if leg is None or not leg.success or leg.travel_time_minutes > max_travel_time_minutes:
                admitted = False
                break
            travel_times.append(leg.travel_time_minutes)
            if leg.fare:
                fares.append(leg.fare)

        if not admitted:
            continue

        count = len(travel_times)
        average = sum(travel_times) / count
        variance = sum((t - average) ** 2 for t in travel_times) / count
        # a fare sum of 0 is indistinguishable from "no fare data"
        total_fare = sum(fares) or None

        results.append(EqualTravelTimeResult(
            station=candidate,
            average_travel_time=average,
            travel_time_variance=variance,
            travel_times=travel_times,
            total_fare=total_fare,
        ))

    results.sort(key=lambda r: r.travel_time_variance)
    return results


def _normalize(values: List[float]) -> List[float]:
    """Min-max to [0, 1]; all zeros when there is nothing to discriminate"""
    lo, hi = min(values), max(values)
    if hi == lo:
        return [0.0] * len(values)
    return [(v - lo) / (hi - lo) for v in values]


def select_optimal(
    results: Sequence[EqualTravelTimeResult],
    weights: Optional[Dict[str, float]] = None,
) -> Optional[EqualTravelTimeResult]:
    """
    Pick the result with the lowest weighted sum of normalized variance,
    average time and total fare. Ties keep the earlier result.
    """
    if not results:
        return None
    weights = {**DEFAULT_WEIGHTS, **(weights or {})}

    variances = _normalize([r.travel_time_variance for r in results])
    averages = _normalize([r.average_travel_time for r in results])
    fares = _normalize([r.total_fare or 0 for r in results])

    best = None
    best_score = float('inf')
    for i, result in enumerate(results):
        score = (
            variances[i] * weights['variance']
            + averages[i] * weights['average_time']
            + fares[i] * weights['fare']
        )
        if score < best_score:
            best_score = score
            best = result
    return best
