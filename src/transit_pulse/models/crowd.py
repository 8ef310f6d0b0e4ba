"""
Crowd Models
============

Pydantic models for crowd readings and their derived risk fields.

Core Concepts:
    - OccupancyReading: Raw people count against a location capacity
    - DensityTier: Bucketed occupancy percentage
    - RiskLevel: Operational danger from crowding (mirrors DensityTier today)
    - RiskAssessment: Level, factors, recommendations and score
    - CrowdReading: A fully derived, immutable reading for one location

Derivation:
    percentage = round(current / capacity * 100)    # unbounded above 100

    percentage < 30        -> low
    30 <= percentage < 60  -> medium
    60 <= percentage < 85  -> high
    percentage >= 85       -> critical

Example:
    from transit_pulse.models.crowd import OccupancyReading

    occupancy = OccupancyReading(current=285, capacity=300)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from transit_pulse.models.location import check_lng_lat


class DensityTier(str, Enum):
    """Bucketed occupancy percentage, ordered by severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    """
    Operational risk from crowding.

    Shares its buckets with DensityTier. Kept as a separate type so risk
    can take trend or location type into account without reshaping
    CrowdReading.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class LocationType(str, Enum):
    """Kind of place a reading was taken at."""

    STATION = "station"
    PLATFORM = "platform"
    VEHICLE = "vehicle"
    STOP = "stop"


class DataSource(str, Enum):
    """Where a reading came from."""

    CAMERA = "camera"
    SENSOR = "sensor"
    MANUAL = "manual"
    ESTIMATED = "estimated"


class TrendDirection(str, Enum):
    """Direction of occupancy change at a location."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class OccupancyReading(BaseModel):
    """
    People count against capacity.

    Values above capacity are legal and mean the location is over
    capacity; the derived percentage is never clamped.

    Attributes:
        current: People currently present
        capacity: Nominal capacity of the location (>= 1)
    """

    current: int = Field(..., ge=0, description="People currently present")
    capacity: int = Field(..., ge=1, description="Nominal location capacity")


class CrowdTrend(BaseModel):
    """
    Smoothed occupancy trend for a location.

    Attributes:
        direction: increasing, decreasing or stable
        rate_per_minute: Smoothed change in people per minute
        confidence: Confidence in the trend [0, 1]
    """

    direction: TrendDirection = Field(default=TrendDirection.STABLE)
    rate_per_minute: float = Field(default=0.0)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class CrowdPredictions(BaseModel):
    """Projected head counts for the next hour."""

    next_15min: int = Field(default=0, ge=0)
    next_30min: int = Field(default=0, ge=0)
    next_60min: int = Field(default=0, ge=0)


class RiskAssessment(BaseModel):
    """
    Full risk assessment derived from one occupancy reading.

    Attributes:
        percentage: Rounded occupancy percentage (may exceed 100)
        density: Density tier for the percentage
        level: Risk level
        factors: Risk factors, "crowd_density" always first
        recommendations: Machine-readable advice codes
        score: Bounded score in [0, 100] for cross-location ranking
    """

    percentage: int = Field(..., ge=0)
    density: DensityTier
    level: RiskLevel
    factors: List[str] = Field(default_factory=lambda: ["crowd_density"])
    recommendations: List[str] = Field(default_factory=list)
    score: int = Field(..., ge=0, le=100)

    class Config:
        """Pydantic model configuration."""

        frozen = True


class CrowdIngestRequest(BaseModel):
    """
    Inbound crowd reading from a sensor feed or the simulator.

    Only raw facts are accepted here. Every derived field is computed by
    the core when the reading is ingested.
    """

    location_id: str = Field(..., min_length=1)
    location_name: str = Field(..., min_length=1)
    location_type: LocationType
    coordinates: List[float] = Field(
        ...,
        min_length=2,
        max_length=2,
        description="[lng, lat]",
    )
    occupancy: OccupancyReading
    data_source: DataSource = Field(default=DataSource.CAMERA)

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, value: List[float]) -> List[float]:
        return check_lng_lat(value)

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "location_id": "central-station-platform-a",
                "location_name": "Central Station - Platform A",
                "location_type": "platform",
                "coordinates": [-74.0060, 40.7128],
                "occupancy": {"current": 285, "capacity": 300},
                "data_source": "camera",
            }
        }


class CrowdReading(BaseModel):
    """
    Immutable, fully derived crowd reading.

    `density` and `risk` are fixed at creation from the occupancy
    percentage and never change afterwards. Construction fails if the
    percentage, risk percentage or risk density disagree with the
    occupancy.
    """

    location_id: str
    location_name: str
    location_type: LocationType
    coordinates: List[float] = Field(..., min_length=2, max_length=2)
    occupancy: OccupancyReading
    percentage: int = Field(..., ge=0)
    density: DensityTier
    risk: RiskAssessment
    trend: CrowdTrend = Field(default_factory=CrowdTrend)
    predictions: CrowdPredictions = Field(default_factory=CrowdPredictions)
    data_source: DataSource = Field(default=DataSource.CAMERA)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    reading_id: Optional[str] = Field(default=None)

    @model_validator(mode="after")
    def check_derived_fields(self) -> "CrowdReading":
        """Derived fields must agree with the occupancy they came from."""
        # Imported here: crowd.density depends on this module
        from transit_pulse.crowd.density import occupancy_percentage

        expected = occupancy_percentage(self.occupancy.current, self.occupancy.capacity)
        if self.percentage != expected:
            raise ValueError(
                f"percentage {self.percentage} does not match occupancy "
                f"{self.occupancy.current}/{self.occupancy.capacity} ({expected})"
            )
        if self.risk.percentage != self.percentage:
            raise ValueError("risk.percentage must equal percentage")
        if self.risk.density != self.density:
            raise ValueError("risk.density must equal density")
        return self

    class Config:
        """Pydantic model configuration."""

        frozen = True
