"""Geofence checks for punch location samples.

Distance is the haversine great-circle distance on a sphere of radius
6371 km. Allowed radius is ``geo_fence_radius`` plus ``grace_distance_feet``
added as stored, so a 30 m fence with 20 ft of grace admits positions up to
50 m away.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..core.constants import EARTH_RADIUS_KM, METERS_PER_KM
from ..core.enums import GeofenceVerdict
from ..jobs.model import Job, JobLocation
from .model import GeofenceResult, GeoPoint

logger = logging.getLogger(__name__)


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Float error can push h marginally past 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    return distance_km(a, b) * METERS_PER_KM


def allowed_radius_meters(location: Optional[JobLocation]) -> Optional[float]:
    """None when no usable radius is configured."""
    if location is None or location.geo_fence_radius is None:
        return None
    radius = float(location.geo_fence_radius)
    if radius <= 0:
        return None
    return radius + float(location.grace_distance_feet or 0)


def _usable_point(location: Optional[JobLocation]) -> Optional[GeoPoint]:
    if location is None or location.latitude is None or location.longitude is None:
        return None
    # (0, 0) is what an unconfigured job location looks like in stored data.
    if location.latitude == 0 and location.longitude == 0:
        return None
    return GeoPoint.from_raw(location.latitude, location.longitude)


def resolve_anchor(job: Job) -> Optional[GeoPoint]:
    """Job location coordinates, falling back to the venue coordinates."""
    return _usable_point(job.location) or _usable_point(job.venue_location)


def classify(current: GeoPoint, anchor: Optional[GeoPoint], allowed_meters: Optional[float]) -> GeofenceResult:
    if anchor is None or allowed_meters is None or allowed_meters <= 0:
        return GeofenceResult(verdict=GeofenceVerdict.UNDETERMINED)

    distance = distance_meters(current, anchor)
    verdict = GeofenceVerdict.WITHIN if distance <= allowed_meters else GeofenceVerdict.OUTSIDE
    return GeofenceResult(verdict=verdict, distance_meters=distance, allowed_meters=allowed_meters)


def check_job_position(job: Job, current: GeoPoint) -> GeofenceResult:
    anchor = resolve_anchor(job)
    allowed = allowed_radius_meters(job.location)
    result = classify(current, anchor, allowed)
    if result.verdict == GeofenceVerdict.UNDETERMINED:
        logger.debug("Geofence undetermined for job %s (anchor=%s, allowed=%s)", job.job_id, anchor, allowed)
    elif result.verdict == GeofenceVerdict.OUTSIDE:
        logger.info(
            "Position %.1fm from job %s exceeds allowed %.1fm",
            result.distance_meters,
            job.job_id,
            result.allowed_meters,
        )
    return result
