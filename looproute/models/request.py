from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from looproute.models.geo import GeoPoint


class RouteRequest(BaseModel):
    center: GeoPoint
    distance_km: float = Field(gt=0, allow_inf_nan=False)
    arc_spans: Optional[List[float]] = None

    @field_validator("arc_spans")
    @classmethod
    def _check_arc_spans(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is None:
            return value
        if not value:
            raise ValueError("arc_spans must not be empty")
        for arc in value:
            if not 0 < arc <= 360:
                raise ValueError(f"arc span {arc} outside (0, 360]")
        return value
