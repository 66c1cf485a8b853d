from types import SimpleNamespace

import pytest

from streetsafety.services.proximity.distance import (
    EARTH_RADIUS_KM,
    haversine_distance,
    haversine_km,
    haversine_m,
)
from streetsafety.services.proximity import evaluator
from streetsafety.services.proximity.evaluator import (
    EMPTY_STATE_MESSAGE,
    find_nearest_record,
    find_radius_alerts,
    summarize_nearest,
)

# One degree of longitude on the equator
ONE_DEGREE_KM = EARTH_RADIUS_KM * 3.141592653589793 / 180


def record(lat, lng, upvotes=0, crime_type="Theft", address="1 Main St", severity="yellow"):
    return SimpleNamespace(
        id=f"{lat},{lng},{upvotes}",
        type=crime_type,
        location="Downtown",
        address=address,
        severity=severity,
        details=None,
        latitude=lat,
        longitude=lng,
        upvotes=upvotes,
        downvotes=0,
    )


class TestHaversine:
    @pytest.mark.parametrize("point", [(0.0, 0.0), (51.5, -0.12), (-33.9, 151.2), (90.0, 0.0)])
    def test_identical_points(self, point):
        assert haversine_m(*point, *point) == 0.0

    @pytest.mark.parametrize(
        "a,b",
        [((51.5, -0.12), (48.85, 2.35)), ((-33.9, 151.2), (40.7, -74.0)), ((0.0, 179.9), (0.0, -179.9))],
    )
    def test_symmetric(self, a, b):
        assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a))

    def test_known_distance_london_paris(self):
        assert haversine_km(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(343.5, abs=1.0)

    def test_antipodal_points(self):
        assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(EARTH_RADIUS_KM * 3.141592653589793)

    def test_units(self):
        assert haversine_m(0.0, 0.0, 0.0, 1.0) == pytest.approx(haversine_km(0.0, 0.0, 0.0, 1.0) * 1000)
        assert haversine_distance(0.0, 0.0, 0.0, 1.0) == pytest.approx(ONE_DEGREE_KM * 1000)


class TestNearestRecord:
    def test_no_records(self):
        assert find_nearest_record(0.0, 0.0, []) is None
        summary = summarize_nearest(None)
        assert summary["found"] is False
        assert summary["message"] == EMPTY_STATE_MESSAGE

    def test_closest_wins(self):
        near = record(0.0, 0.001)
        far = record(0.0, 0.01, upvotes=10)

        nearest = find_nearest_record(0.0, 0.0, [far, near])

        assert nearest.record is near

    def test_tie_prefers_more_upvotes(self):
        # Mirror images around the user are exactly equidistant
        delta = 1.0 / ONE_DEGREE_KM
        fewer = record(0.0, delta, upvotes=3)
        more = record(0.0, -delta, upvotes=5)

        nearest = find_nearest_record(0.0, 0.0, [fewer, more])

        assert nearest.record is more
        assert nearest.distance_km == pytest.approx(1.0)

    def test_full_tie_keeps_first(self):
        first = record(0.0, 0.01, upvotes=2)
        second = record(0.0, -0.01, upvotes=2)

        assert find_nearest_record(0.0, 0.0, [first, second]).record is first

    def test_rounding_noise_still_ties(self, monkeypatch):
        fewer = record(10.0, 20.01, upvotes=1)
        more = record(10.0, 19.99, upvotes=7)
        # Geometrically equal distances that differ in the last bits
        distances = {20.01: 1.0, 19.99: 1.0 + 1e-13}
        monkeypatch.setattr(evaluator, "haversine_km", lambda lat, lng, rlat, rlng: distances[rlng])

        assert find_nearest_record(10.0, 20.0, [fewer, more]).record is more

    def test_one_meter_closer_is_not_a_tie(self):
        closer = record(0.0, 0.01, upvotes=0)
        farther = record(0.0, -0.01 - 1.0 / (ONE_DEGREE_KM * 1000), upvotes=9)

        assert find_nearest_record(0.0, 0.0, [farther, closer]).record is closer

    def test_summary_is_renderable(self):
        crime = record(0.0, 0.01, upvotes=4, crime_type="Robbery", severity="red")

        summary = summarize_nearest(find_nearest_record(0.0, 0.0, [crime]))

        assert summary["found"] is True
        assert summary["crime"]["type"] == "Robbery"
        assert summary["crime"]["upvotes"] == 4
        assert summary["crime"]["distance_km"] == round(0.01 * ONE_DEGREE_KM, 2)

    def test_does_not_mutate_records(self):
        records = [record(0.0, 0.01, upvotes=1), record(0.0, 0.02)]
        before = [vars(r).copy() for r in records]

        find_nearest_record(0.0, 0.0, records)
        find_radius_alerts(0.0, 0.0, records)

        assert [vars(r) for r in records] == before


class TestRadiusAlerts:
    def test_alerts_for_every_record_within_radius(self):
        meter = 1.0 / (ONE_DEGREE_KM * 1000)
        close = record(0.0, 100 * meter, crime_type="Robbery", severity="red", address="A St")
        closer = record(0.0, -50 * meter, crime_type="Theft", address="B St")
        outside = record(0.0, 800 * meter)

        alerts = find_radius_alerts(0.0, 0.0, [close, outside, closer], radius_m=500.0)

        assert [alert.record for alert in alerts] == [closer, close]
        assert alerts[1].severity == "red"
        assert alerts[1].type == "Robbery"
        assert alerts[1].address == "A St"

    def test_threshold_boundary(self):
        meter = 1.0 / (ONE_DEGREE_KM * 1000)
        crime = record(0.0, 500 * meter)
        distance = haversine_m(0.0, 0.0, 0.0, 500 * meter)

        assert len(find_radius_alerts(0.0, 0.0, [crime], radius_m=distance)) == 1
        assert find_radius_alerts(0.0, 0.0, [crime], radius_m=distance - 0.01) == []

    def test_no_records(self):
        assert find_radius_alerts(0.0, 0.0, []) == []
