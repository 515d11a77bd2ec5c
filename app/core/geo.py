"""Great-circle distance between coordinates, used for geofenced attendance."""

import math

# Mean Earth radius in meters (spherical approximation)
EARTH_RADIUS_M = 6371000


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in meters between two points given in decimal degrees.

    Uses the haversine formula on a spherical Earth. Symmetric in its two points
    and zero for identical points.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def round_meters(distance: float) -> int:
    """Round half up to whole meters (the precision shown to users and stored on records)."""
    return int(math.floor(distance + 0.5))
