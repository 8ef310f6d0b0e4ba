"""
Crowd Module
============

Crowd density classification and risk derivation.

Components:
    - DensityClassifier: Occupancy percentage → DensityTier
    - CrowdRiskAssessor: Full risk assessment for one reading
    - TrendTracker: Per-location EMA occupancy trend
    - CrowdIngestor: Raw request → immutable CrowdReading
    - forecast helpers: Fixed-formula projections
"""

from transit_pulse.crowd.density import DensityClassifier, TierThresholds, occupancy_percentage
from transit_pulse.crowd.forecast import (
    forecast_occupancy,
    predict_segment_levels,
    project_from_trend,
)
from transit_pulse.crowd.ingest import CrowdIngestor
from transit_pulse.crowd.risk import (
    CrowdRiskAssessor,
    DensityRiskPolicy,
    RiskParameters,
    RiskPolicy,
)
from transit_pulse.crowd.trend import TrendTracker

__all__ = [
    "DensityClassifier",
    "TierThresholds",
    "occupancy_percentage",
    "CrowdRiskAssessor",
    "DensityRiskPolicy",
    "RiskParameters",
    "RiskPolicy",
    "TrendTracker",
    "CrowdIngestor",
    "forecast_occupancy",
    "predict_segment_levels",
    "project_from_trend",
]
