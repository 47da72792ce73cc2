"""
Dispatch Models - action items, step updates and execution state

@.architecture
Incoming: api/v1/endpoints/execute.py, core/venue/client.py, core/dispatch/dispatcher.py --- {raw action item dicts, StepUpdate events}
Processing: group_by_target(), ExecutionTracker.apply(), ExecutionTracker.finish() --- {3 jobs: action_validation, step_tracking, aggregate_status_derivation}
Outgoing: core/dispatch/dispatcher.py, api/v1/endpoints/execute.py --- {ActionItem, StepUpdate union, ExecutionState}
"""

from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from core.integrations.registry import IntegrationRegistry

Priority = Literal["critical", "high", "medium", "low"]
ExecutionStepStatus = Literal["pending", "running", "success", "error", "skipped"]
SkipReason = Literal["no_endpoint", "no_actions", "no_operation"]


class ActionItem(BaseModel):
    """One unit of work destined for a single integration."""
    target: str
    description: str
    priority: Priority = "medium"
    type: Optional[str] = None
    assignee: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


def group_by_target(items: Iterable[ActionItem]) -> Dict[str, List[ActionItem]]:
    """Group items by target, keeping first-seen target order and item order."""
    groups: Dict[str, List[ActionItem]] = {}
    for item in items:
        groups.setdefault(item.target, []).append(item)
    return groups


# =============================================================================
# Step Updates
# =============================================================================

class StepRunning(BaseModel):
    target: str
    status: Literal["running"] = "running"


class StepSucceeded(BaseModel):
    target: str
    status: Literal["success"] = "success"
    result: Any = None


class StepFailed(BaseModel):
    target: str
    status: Literal["error"] = "error"
    error: str


class StepSkipped(BaseModel):
    target: str
    status: Literal["skipped"] = "skipped"
    reason: SkipReason


StepUpdate = Annotated[
    Union[StepRunning, StepSucceeded, StepFailed, StepSkipped],
    Field(discriminator="status"),
]


# =============================================================================
# Execution State
# =============================================================================

class ExecutionStep(BaseModel):
    id: str
    label: str
    status: ExecutionStepStatus = "pending"
    result: Any = None
    error: Optional[str] = None
    skip_reason: Optional[SkipReason] = None


class ExecutionState(BaseModel):
    status: Literal["idle", "running", "complete", "error"]
    steps: List[ExecutionStep]


class ExecutionTracker:
    """
    Caller-side view of one execution batch.

    Pass the tracker as the dispatcher's update sink; it applies each update
    to its step and derives the aggregate status once the batch is over.
    """

    def __init__(self, registry: IntegrationRegistry):
        self._steps: Dict[str, ExecutionStep] = {
            d.id: ExecutionStep(id=d.id, label=d.name) for d in registry
        }
        self._status = "running"

    def __call__(self, update: StepUpdate) -> None:
        self.apply(update)

    def apply(self, update: StepUpdate) -> None:
        step = self._steps.get(update.target)
        if step is None:
            return
        step.status = update.status
        if isinstance(update, StepSucceeded):
            step.result = update.result
        elif isinstance(update, StepFailed):
            step.error = update.error
        elif isinstance(update, StepSkipped):
            step.skip_reason = update.reason

    def finish(self) -> ExecutionState:
        """Close the batch: any failed step makes the whole execution an error."""
        has_error = any(step.status == "error" for step in self._steps.values())
        self._status = "error" if has_error else "complete"
        return self.state()

    @property
    def status(self) -> str:
        return self._status

    @property
    def steps(self) -> List[ExecutionStep]:
        return list(self._steps.values())

    def state(self) -> ExecutionState:
        return ExecutionState(
            status=self._status,
            steps=[step.model_copy() for step in self._steps.values()],
        )
