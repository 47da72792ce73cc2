"""
Integration endpoint health monitoring.
"""

from core.health.probe import ping_server
from core.health.scheduler import AsyncioScheduler, Scheduler
from core.health.monitor import HealthMonitor, HealthStatus

__all__ = [
    "ping_server",
    "AsyncioScheduler",
    "Scheduler",
    "HealthMonitor",
    "HealthStatus",
]
