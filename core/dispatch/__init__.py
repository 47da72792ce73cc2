"""
Execution dispatch: action items, step updates and the sequential dispatcher.
"""

from core.dispatch.models import (
    ActionItem,
    ExecutionState,
    ExecutionStep,
    ExecutionTracker,
    StepFailed,
    StepRunning,
    StepSkipped,
    StepSucceeded,
    StepUpdate,
    group_by_target,
)
from core.dispatch.dispatcher import ExecutionDispatcher

__all__ = [
    "ActionItem",
    "ExecutionState",
    "ExecutionStep",
    "ExecutionTracker",
    "StepFailed",
    "StepRunning",
    "StepSkipped",
    "StepSucceeded",
    "StepUpdate",
    "group_by_target",
    "ExecutionDispatcher",
]
