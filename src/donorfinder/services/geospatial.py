"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..config import settings
from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_km(
    lat1: float, lon1: float, lat2: float, lon2: float, radius_km: float = EARTH_RADIUS_KM
) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius_km * c


def distance_km(a: Coordinate, b: Coordinate, radius_km: float | None = None) -> float:
    """Great-circle distance between two coordinates on a spherical Earth.

    Uses the configured Earth radius unless one is passed explicitly. Inputs are
    assumed to be in range; ``Coordinate`` already enforces that on construction.
    """

    radius = radius_km if radius_km is not None else settings.earth_radius_km
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude, radius_km=radius)
