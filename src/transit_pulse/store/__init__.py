"""
Store Module
============

Repository ports and in-memory implementations.

Components:
    - CrowdRepository / InMemoryCrowdRepository: Bounded reading store
    - AlertRepository / InMemoryAlertRepository: Alert store
"""

from transit_pulse.store.alerts import AlertRepository, InMemoryAlertRepository
from transit_pulse.store.crowd import CrowdRepository, InMemoryCrowdRepository

__all__ = [
    "CrowdRepository",
    "InMemoryCrowdRepository",
    "AlertRepository",
    "InMemoryAlertRepository",
]
