"""
Timer scheduling for health rounds.

The monitor never sleeps or creates timers directly; it asks a scheduler, so
tests can drive time by hand.

@.architecture
Incoming: core/health/monitor.py --- {float delay, zero-argument callback}
Processing: call_later(), cancel() --- {2 jobs: deferred_execution, cancellation}
Outgoing: asyncio event loop --- {ScheduledCall handles}
"""

import asyncio
from typing import Callable, Protocol


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall: ...


class AsyncioScheduler:
    """Scheduler backed by the running event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)
