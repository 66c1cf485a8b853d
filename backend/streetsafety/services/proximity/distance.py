import math

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = 6371000.0


def haversine_distance(
    lat1: float, lng1: float, lat2: float, lng2: float, radius: float = EARTH_RADIUS_M
) -> float:
    """
    Calculate Haversine distance between two points.

    Args:
        lat1, lng1: First point coordinates
        lat2, lng2: Second point coordinates
        radius: Earth radius in the unit the result should use

    Returns:
        Distance in the unit of `radius` (meters by default)
    """
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlng / 2) ** 2
    )
    # Rounding can push a slightly past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return radius * c


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    return haversine_distance(lat1, lng1, lat2, lng2, radius=EARTH_RADIUS_KM)


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    return haversine_distance(lat1, lng1, lat2, lng2, radius=EARTH_RADIUS_M)
