"""
Alert Models
============

Service alerts consumed by the route adjuster.

Alerts are owned by the alerting collaborator. The core only reads
alerts whose status is still live (active or investigating) and matches
them against route step text by location name.

Example:
    {
        "alert_id": "alert-lq3k2-9f1c",
        "type": "warning",
        "severity": "high",
        "title": "Signal failure at Downtown Hub",
        "location_name": "Downtown Hub",
        "status": "active"
    }
"""

import secrets
import time
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class AlertType(str, Enum):
    """Alert category."""

    EMERGENCY = "emergency"
    WARNING = "warning"
    INFO = "info"
    MAINTENANCE = "maintenance"


class AlertSeverity(str, Enum):
    """Alert severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    """Alert lifecycle status."""

    ACTIVE = "active"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


LIVE_STATUSES = frozenset({AlertStatus.ACTIVE, AlertStatus.INVESTIGATING})


def generate_alert_id() -> str:
    """Build a unique alert id: alert-<base36 millis>-<8 hex chars>."""
    millis = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while millis:
        millis, rem = divmod(millis, 36)
        encoded = digits[rem] + encoded
    return f"alert-{encoded or '0'}-{secrets.token_hex(4)}"


class Alert(BaseModel):
    """
    Service alert.

    Attributes:
        alert_id: Unique identifier
        type: emergency, warning, info or maintenance
        severity: low, medium, high or critical
        title: Short headline, used as the route alert message
        description: Longer explanation
        location_name: Place the alert refers to, matched against step text
        status: Lifecycle status
        created_at: Creation time (UTC)
    """

    alert_id: str = Field(default_factory=generate_alert_id)
    type: AlertType
    severity: AlertSeverity
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    location_name: str = Field(..., min_length=1)
    status: AlertStatus = Field(default=AlertStatus.ACTIVE)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_live(self) -> bool:
        """True while the alert can still affect service."""
        return self.status in LIVE_STATUSES

    class Config:
        """Pydantic model configuration."""

        frozen = True


class AlertCreateRequest(BaseModel):
    """Inbound alert. Identity, status and timestamp are assigned on creation."""

    type: AlertType
    severity: AlertSeverity
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    location_name: str = Field(..., min_length=1)

    def to_alert(self) -> Alert:
        return Alert(**self.model_dump())


class AlertStatusUpdate(BaseModel):
    """Status change for an existing alert."""

    status: AlertStatus
