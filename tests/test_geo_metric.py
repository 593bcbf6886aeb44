import math

import pytest

from app.core.settings import settings
from app.models.issue import Location
from app.services import geo_metric
from app.services.geo_metric import HaversineDistance, PlanarDegreeDistance, get_distance_strategy


def test_planar_distance_is_euclidean_over_degrees():
    planar = PlanarDegreeDistance()
    assert planar.distance(0.0, 0.0, 3.0, 4.0) == pytest.approx(5.0)
    assert planar.distance(28.6139, 77.2090, 28.6139, 77.2090) == 0.0
    # symmetric
    assert planar.distance(1.0, 2.0, 1.5, 2.5) == planar.distance(1.5, 2.5, 1.0, 2.0)


def test_planar_thresholds():
    planar = PlanarDegreeDistance()
    assert planar.duplicate_threshold() == 0.0005
    assert planar.radius_threshold(5) == pytest.approx(0.05)


def test_planar_duplicate_distance():
    planar = PlanarDegreeDistance()
    a = Location(lat=28.6139, lng=77.2090)
    assert planar.is_duplicate_distance(a, Location(lat=28.6140, lng=77.2091))
    assert not planar.is_duplicate_distance(a, Location(lat=28.6149, lng=77.2090))


def test_planar_radius():
    planar = PlanarDegreeDistance()
    assert planar.is_within_radius(10.0, 10.0, Location(lat=10.049, lng=10.0), 5)
    assert not planar.is_within_radius(10.0, 10.0, Location(lat=10.06, lng=10.0), 5)


def test_haversine_distance_in_km():
    haversine = HaversineDistance()
    # One degree of latitude is ~111.19 km on a 6371 km sphere.
    assert haversine.distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(math.radians(1) * 6371.0)
    assert haversine.duplicate_threshold() == 0.05
    assert haversine.radius_threshold(5) == 5


def test_strategies_disagree_near_the_poles():
    # 0.002 degrees of longitude at 80°N is ~39 m on the ground.
    planar = PlanarDegreeDistance()
    haversine = HaversineDistance()
    here = Location(lat=80.0, lng=10.0)
    there = Location(lat=80.0, lng=10.002)
    assert not planar.is_duplicate_distance(here, there)
    assert haversine.is_duplicate_distance(here, there)


def test_get_distance_strategy_from_settings(monkeypatch):
    monkeypatch.setattr(geo_metric, "_strategy_instance", None)
    monkeypatch.setattr(settings, "DISTANCE_STRATEGY", "haversine")
    assert isinstance(get_distance_strategy(), HaversineDistance)


def test_get_distance_strategy_rejects_unknown(monkeypatch):
    monkeypatch.setattr(geo_metric, "_strategy_instance", None)
    monkeypatch.setattr(settings, "DISTANCE_STRATEGY", "manhattan")
    with pytest.raises(ValueError):
        get_distance_strategy()
