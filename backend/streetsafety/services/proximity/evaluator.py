"""
Proximity policies over a set of crime reports.

Two independent policies exist:

* nearest record: ranks every report by distance in kilometers and picks
  one for display, preferring the more upvoted report on equal distance.
* radius alert: emits one alert per report within a threshold in meters.

Both are pure: they only read `latitude`, `longitude`, `upvotes` and the
descriptive fields of the records they are given.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

from streetsafety.services.proximity.distance import haversine_km, haversine_m

DEFAULT_ALERT_RADIUS_M = 500.0
# Distances within a micrometer of each other count as equal
DISTANCE_TIE_TOLERANCE_KM = 1e-9
EMPTY_STATE_MESSAGE = "No crime reports yet. Nothing nearby to show."


class ProximityPolicy(str, Enum):
    NEAREST = "nearest"
    RADIUS = "radius"


@dataclass(frozen=True)
class NearestRecord:
    record: Any
    distance_km: float


@dataclass(frozen=True)
class RadiusAlert:
    record: Any
    distance_m: float

    @property
    def severity(self) -> str:
        return self.record.severity

    @property
    def type(self) -> str:
        return self.record.type

    @property
    def address(self) -> str:
        return self.record.address


def find_nearest_record(lat: float, lng: float, records: Sequence[Any]) -> Optional[NearestRecord]:
    """
    Select the report closest to (lat, lng).

    Equal distances are resolved by higher upvotes, then by input order.

    Returns:
        NearestRecord or None if there are no records
    """
    best: Optional[NearestRecord] = None
    for record in records:
        distance_km = haversine_km(lat, lng, record.latitude, record.longitude)
        if best is None:
            best = NearestRecord(record, distance_km)
            continue
        if math.isclose(distance_km, best.distance_km, rel_tol=0.0, abs_tol=DISTANCE_TIE_TOLERANCE_KM):
            if record.upvotes > best.record.upvotes:
                best = NearestRecord(record, distance_km)
        elif distance_km < best.distance_km:
            best = NearestRecord(record, distance_km)
    return best


def summarize_nearest(nearest: Optional[NearestRecord]) -> dict:
    """Renderable summary of the nearest report, or the empty-state message."""
    if nearest is None:
        return {"found": False, "message": EMPTY_STATE_MESSAGE, "crime": None}

    record = nearest.record
    return {
        "found": True,
        "message": f"Nearest reported crime: {record.type} at {record.address}",
        "crime": {
            "id": record.id,
            "type": record.type,
            "location": record.location,
            "address": record.address,
            "severity": record.severity,
            "details": record.details,
            "upvotes": record.upvotes,
            "downvotes": record.downvotes,
            "distance_km": round(nearest.distance_km, 2),
        },
    }


def find_radius_alerts(
    lat: float,
    lng: float,
    records: Sequence[Any],
    radius_m: float = DEFAULT_ALERT_RADIUS_M,
) -> List[RadiusAlert]:
    """
    One alert for every report within `radius_m` meters, nearest first.

    A report exactly on the threshold still triggers an alert.
    """
    alerts = []
    for record in records:
        distance_m = haversine_m(lat, lng, record.latitude, record.longitude)
        if distance_m <= radius_m:
            alerts.append(RadiusAlert(record, distance_m))
    alerts.sort(key=lambda alert: alert.distance_m)
    return alerts


def alert_to_dict(alert: RadiusAlert) -> dict:
    return {
        "crime_id": alert.record.id,
        "severity": alert.severity,
        "type": alert.type,
        "address": alert.address,
        "distance_m": round(alert.distance_m, 1),
    }
