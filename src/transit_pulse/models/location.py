"""
Location Models
===============

Origin/destination endpoints for route optimization requests.

Coordinates follow the GeoJSON convention: [lng, lat].

Example Endpoint:
    {
        "name": "Central Station",
        "coordinates": [-74.0060, 40.7128]
    }
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def check_lng_lat(value: List[float]) -> List[float]:
    """
    Validate a [lng, lat] pair.

    Raises:
        ValueError: If either component is out of range
    """
    lng, lat = value
    if not -180.0 <= lng <= 180.0 or not -90.0 <= lat <= 90.0:
        raise ValueError("coordinates must be [lng, lat] within valid ranges")
    return value


class Location(BaseModel):
    """
    Route endpoint.

    At least one of `name` or `coordinates` must be supplied. Coordinates
    drive the base duration estimate; the name is woven into step text.

    Attributes:
        name: Human-readable place name
        coordinates: [lng, lat]
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    coordinates: Optional[List[float]] = Field(
        default=None,
        min_length=2,
        max_length=2,
        description="[lng, lat]",
    )

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is None:
            return value
        return check_lng_lat(value)

    @model_validator(mode="after")
    def check_identified(self) -> "Location":
        if self.name is None and self.coordinates is None:
            raise ValueError("location needs a name or coordinates")
        return self

    def same_place(self, other: "Location") -> bool:
        """True if both endpoints refer to the same place."""
        if self.coordinates is not None and other.coordinates is not None:
            return list(self.coordinates) == list(other.coordinates)
        if self.name is not None and other.name is not None:
            return self.name.strip().lower() == other.name.strip().lower()
        return False
