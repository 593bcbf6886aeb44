"""
GeoMetric - distance and proximity primitives.

Both duplicate detection and nearby queries MUST use the same strategy
instance so that "is a duplicate" and "is nearby" never disagree.

The default strategy is a planar approximation over raw degree deltas,
valid only at the sub-city scale this system targets. A haversine strategy
is available, but it changes which issues count as duplicates/nearby
(noticeably near the poles and at larger radii), so it is opt-in.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type
import logging
import math

from app.core.settings import settings

logger = logging.getLogger(__name__)


class DistanceStrategy(ABC):
    """
    Contract:
    - distance() is pure and never raises for valid coordinates
    - thresholds are expressed in the same unit distance() returns
    """

    name: str = "abstract"

    @abstractmethod
    def distance(self, lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def duplicate_threshold(self) -> float:
        """Maximum distance at which two reports count as the same spot (~50 m)."""
        raise NotImplementedError

    @abstractmethod
    def radius_threshold(self, radius_km: float) -> float:
        """Convert a user-facing km radius into this strategy's distance unit."""
        raise NotImplementedError

    def is_duplicate_distance(self, a, b) -> bool:
        return self.distance(a.lat, a.lng, b.lat, b.lng) <= self.duplicate_threshold()

    def is_within_radius(self, lat: float, lng: float, point, radius_km: float) -> bool:
        return self.distance(lat, lng, point.lat, point.lng) <= self.radius_threshold(radius_km)


class PlanarDegreeDistance(DistanceStrategy):
    """
    Euclidean distance over (lat, lng) degree deltas: sqrt(Δlat² + Δlng²).
    Not geodesic.
    """

    name = "planar"

    DUPLICATE_THRESHOLD_DEGREES = 0.0005  # ~50 m
    KM_TO_DEGREES = 0.01  # rough km → degree conversion for radius queries

    def distance(self, lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        lat_diff = abs(lat1 - lat2)
        lng_diff = abs(lng1 - lng2)
        return math.sqrt(lat_diff * lat_diff + lng_diff * lng_diff)

    def duplicate_threshold(self) -> float:
        return self.DUPLICATE_THRESHOLD_DEGREES

    def radius_threshold(self, radius_km: float) -> float:
        return radius_km * self.KM_TO_DEGREES


class HaversineDistance(DistanceStrategy):
    """Great-circle distance in kilometres."""

    name = "haversine"

    EARTH_RADIUS_KM = 6371.0
    DUPLICATE_THRESHOLD_KM = 0.05

    def distance(self, lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        phi1 = math.radians(lat1)
        phi2 = math.radians(lat2)
        delta_phi = math.radians(lat2 - lat1)
        delta_lambda = math.radians(lng2 - lng1)
        a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return self.EARTH_RADIUS_KM * c

    def duplicate_threshold(self) -> float:
        return self.DUPLICATE_THRESHOLD_KM

    def radius_threshold(self, radius_km: float) -> float:
        return radius_km


STRATEGIES: Dict[str, Type[DistanceStrategy]] = {
    PlanarDegreeDistance.name: PlanarDegreeDistance,
    HaversineDistance.name: HaversineDistance,
}

_strategy_instance: Optional[DistanceStrategy] = None


def get_distance_strategy() -> DistanceStrategy:
    """
    Resolve the active distance strategy from settings.

    Unknown names raise ValueError.
    """
    global _strategy_instance
    if _strategy_instance is not None:
        return _strategy_instance

    name = (settings.DISTANCE_STRATEGY or PlanarDegreeDistance.name).lower()
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown DISTANCE_STRATEGY '{settings.DISTANCE_STRATEGY}'. "
            f"Expected one of: {sorted(STRATEGIES)}"
        )

    _strategy_instance = strategy_cls()
    logger.info(f"Distance strategy initialized: {name}")
    return _strategy_instance
