from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..common.validators import require_coordinate
from ..core.enums import GeofenceVerdict


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    @classmethod
    def from_raw(cls, latitude: Any, longitude: Any) -> "GeoPoint":
        return cls(
            latitude=require_coordinate(latitude, "latitude", limit=90.0),
            longitude=require_coordinate(longitude, "longitude", limit=180.0),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GeoPoint":
        return cls.from_raw(data.get("latitude"), data.get("longitude"))


@dataclass(frozen=True)
class GeofenceResult:
    verdict: GeofenceVerdict
    distance_meters: Optional[float] = None
    allowed_meters: Optional[float] = None

    @property
    def within_geofence(self) -> Optional[bool]:
        """True/False when decided, None when undetermined."""
        if self.verdict == GeofenceVerdict.UNDETERMINED:
            return None
        return self.verdict == GeofenceVerdict.WITHIN
