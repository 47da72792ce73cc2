"""
Venue Client - connection lifecycle and single-operation calls

Owns the live venue connection and the asset resolver. Connecting deploys and
resolves operations once; disconnecting tears both down.

@.architecture
Incoming: core/coordination/service.py, core/venue/connection.py, core/venue/resolver.py, core/integrations/registry.py --- {str venue URL, connection factory, operation definitions, Configuration snapshot, meeting notes}
Processing: connect(), disconnect(), require_connection(), fetch_transcript(), analyze_meeting(), execute_full_workflow(), get_deployed_assets() --- {7 jobs: connection_lifecycle, asset_resolution, transcript_fetching, meeting_analysis, response_parsing, workflow_execution, inventory_listing}
Outgoing: core/dispatch/dispatcher.py, core/coordination/service.py --- {VenueConnection, ResolvedAssetMap, str transcript, MeetingAnalysis, Any workflow output}
"""

import json
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.dispatch.models import ActionItem
from core.integrations.registry import Configuration, IntegrationRegistry
from core.venue.connection import VenueConnection, open_connection
from core.venue.errors import (
    AnalysisParseError,
    NotConnectedError,
    OperationUnavailableError,
    VenueError,
)
from core.venue.resolver import EMPTY_ASSET_MAP, AssetRegistryResolver, ResolvedAssetMap

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[str], Awaitable[VenueConnection]]
MeetingType = Literal["standup", "planning", "retro", "ad_hoc"]

ANALYSIS_OPERATION = "langchain:openai"
ANALYSIS_MODEL = "gpt-4-turbo"
FULL_WORKFLOW_OPERATION = "pm:fullWorkflow"

MEETING_CONTEXT: Dict[str, str] = {
    "standup": "This is a daily standup meeting. Focus on daily tasks, blockers, and handoffs.",
    "planning": "This is a sprint/project planning meeting. Extract user stories, estimates, and assignments.",
    "retro": "This is a retrospective meeting. Capture action items from retrospective discussions.",
    "ad_hoc": "This is a general meeting. Extract all action items mentioned.",
}

ANALYSIS_SYSTEM_PROMPT = """You are an expert project manager assistant. Analyze the provided meeting notes and extract structured information.

Meeting context: {context}

You MUST respond with valid JSON only, no markdown or explanation. Use this exact schema:

{{
  "actionItems": [
    {{
      "type": "create_issue" | "review_pr" | "create_branch" | "send_notification",
      "description": "Clear description of the action",
      "assignee": "Person's name or null if unassigned",
      "priority": "critical" | "high" | "medium" | "low",
      "target": {targets},
      "metadata": {{ "any": "additional context" }}
    }}
  ],
  "blockers": ["List of blocking issues mentioned"],
  "decisions": ["List of decisions made in the meeting"]
}}

Use only the targets listed above, choosing the tool whose purpose best fits each action.

Respond with JSON only."""

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class MeetingAnalysis(BaseModel):
    """Structured result of analysing meeting notes."""
    action_items: List[ActionItem] = Field(default_factory=list, alias="actionItems")
    blockers: List[str] = Field(default_factory=list)
    decisions: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


def parse_analysis_response(result: Any) -> MeetingAnalysis:
    """
    Parse the language-model adapter's output into a MeetingAnalysis.

    Accepts a plain string or a {"response": str} dict. A markdown code fence
    around the JSON is stripped; missing or non-list sections become empty.

    Raises:
        VenueError: If the response is empty
        AnalysisParseError: If the response is not valid JSON
    """
    if isinstance(result, dict):
        text = result.get("response")
    else:
        text = result
    if not isinstance(text, str) or not text.strip():
        raise VenueError("No response from meeting analysis")

    match = _CODE_FENCE.search(text)
    if match:
        text = match.group(1).strip()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisParseError(f"Failed to parse analysis response: {e}") from e
    if not isinstance(parsed, dict):
        raise AnalysisParseError("Failed to parse analysis response: expected a JSON object")

    def _list(key: str) -> list:
        value = parsed.get(key)
        return value if isinstance(value, list) else []

    action_items = []
    for raw in _list("actionItems"):
        try:
            action_items.append(ActionItem.model_validate(raw))
        except ValueError as e:
            logger.warning(f"Dropping malformed action item {raw!r}: {e}")

    return MeetingAnalysis(
        action_items=action_items,
        blockers=[str(b) for b in _list("blockers")],
        decisions=[str(d) for d in _list("decisions")],
    )


class VenueClient:
    """
    Client for one venue at a time.

    Usage:
        client = VenueClient(registry, definitions)
        await client.connect("http://localhost:8080")
        transcript = await client.fetch_transcript("granola", "call-123", configuration)
        await client.disconnect()
    """

    def __init__(
        self,
        registry: IntegrationRegistry,
        definitions: List[Dict[str, Any]],
        connection_factory: Optional[ConnectionFactory] = None,
        resolver: Optional[AssetRegistryResolver] = None,
        namespace: str = "pm:",
    ):
        self.registry = registry
        self.definitions = definitions
        self.namespace = namespace
        self._connection_factory = connection_factory or open_connection
        self._resolver = resolver or AssetRegistryResolver(namespace=namespace)
        self._connection: Optional[VenueConnection] = None
        self._url: Optional[str] = None

    # =========================================================================
    # Connection Lifecycle
    # =========================================================================

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def venue_id(self) -> Optional[str]:
        return self._connection.venue_id if self._connection else None

    @property
    def connection(self) -> Optional[VenueConnection]:
        return self._connection

    @property
    def url(self) -> Optional[str]:
        return self._url if self._connection else None

    @property
    def asset_map(self) -> ResolvedAssetMap:
        return self._resolver.asset_map if self._connection else EMPTY_ASSET_MAP

    async def connect(self, url: str) -> ResolvedAssetMap:
        """
        Open a connection and deploy/resolve operations.

        Connecting again to the venue already connected is a no-op and
        returns the current map; only disconnect() allows a new deployment
        pass. A connection to another venue is closed first. On failure the
        client stays disconnected and the error propagates.

        Returns:
            Resolved asset map for the connection
        """
        if self._connection is not None:
            if url == self._url:
                logger.debug(f"Already connected to venue {self._connection.venue_id}, skipping deployment")
                return self.asset_map
            await self.disconnect()

        connection = await self._connection_factory(url)
        try:
            asset_map = await self._resolver.deploy_and_resolve(connection, self.definitions)
        except Exception:
            await connection.close()
            self._resolver.reset()
            raise

        self._connection = connection
        self._url = url
        logger.info(f"Venue {connection.venue_id} ready with {len(asset_map)} operations")
        return asset_map

    async def disconnect(self) -> None:
        """Close the connection and forget resolved operations."""
        connection, self._connection = self._connection, None
        self._url = None
        self._resolver.reset()
        if connection is not None:
            try:
                await connection.close()
            except Exception as e:
                logger.warning(f"Error closing venue connection: {e}")
            logger.info(f"Disconnected from venue {connection.venue_id}")

    def require_connection(self) -> VenueConnection:
        if self._connection is None:
            raise NotConnectedError()
        return self._connection

    def resolve(self, operation: str) -> str:
        """
        Look up the identifier of a logical operation.

        Raises:
            OperationUnavailableError: If the venue did not report the operation
        """
        operation_id = self.asset_map.get(operation)
        if operation_id is None:
            raise OperationUnavailableError(operation)
        return operation_id

    # =========================================================================
    # Operations
    # =========================================================================

    async def fetch_transcript(
        self,
        source: str,
        call_ref: str,
        configuration: Configuration,
    ) -> str:
        """
        Fetch a meeting transcript from a meeting tool.

        Args:
            source: Integration id of the meeting tool (e.g. "granola")
            call_ref: Provider reference of the meeting
            configuration: Configuration snapshot holding the tool's fields

        Returns:
            Transcript text

        Raises:
            NotConnectedError: If not connected
            OperationUnavailableError: If the tool has no transcript operation on the venue
            VenueError: If the invocation fails
        """
        connection = self.require_connection()
        descriptor = self.registry.get(source)
        if descriptor is None or not descriptor.transcript_operation:
            raise OperationUnavailableError(f"transcript fetch for '{source}'")

        operation_id = self.resolve(descriptor.transcript_operation)
        payload = {"callRef": call_ref, **descriptor.invocation_params(configuration)}

        try:
            result = await connection.invoke(operation_id, payload)
        except VenueError as e:
            raise VenueError(
                f"{descriptor.transcript_operation} failed: {e.message}",
                status_code=e.status_code,
            ) from e

        if isinstance(result, dict):
            transcript = result.get("transcript")
        else:
            transcript = result
        if not isinstance(transcript, str):
            raise VenueError(f"{descriptor.transcript_operation} returned no transcript")
        return transcript

    async def analyze_meeting(
        self,
        notes: str,
        meeting_type: MeetingType = "ad_hoc",
    ) -> MeetingAnalysis:
        """
        Extract action items, blockers and decisions from meeting notes.

        Action items are targeted only at integrations that have an
        execution operation.

        Raises:
            NotConnectedError: If not connected
            AnalysisParseError: If the model output is not valid JSON
        """
        connection = self.require_connection()
        targets = [d.id for d in self.registry if d.operation and not d.hidden]
        system_prompt = ANALYSIS_SYSTEM_PROMPT.format(
            context=MEETING_CONTEXT[meeting_type],
            targets=" | ".join(f'"{t}"' for t in targets),
        )

        # Adapter operations are addressed by name, not by asset id
        result = await connection.invoke(
            ANALYSIS_OPERATION,
            {"prompt": notes, "systemPrompt": system_prompt, "model": ANALYSIS_MODEL},
        )
        analysis = parse_analysis_response(result)
        logger.info(
            f"Meeting analysis: {len(analysis.action_items)} action items, "
            f"{len(analysis.blockers)} blockers, {len(analysis.decisions)} decisions"
        )
        return analysis

    async def execute_full_workflow(self, notes: str, configuration: Configuration) -> Any:
        """Run the venue-side end-to-end workflow with every configured field."""
        connection = self.require_connection()
        operation_id = self.resolve(FULL_WORKFLOW_OPERATION)
        payload = {"notes": notes, **{k: v for k, v in configuration.items() if v}}
        return await connection.invoke(operation_id, payload)

    async def get_deployed_assets(self) -> List[str]:
        """Names of the operations deployed in this client's namespace."""
        connection = self.require_connection()
        operations = await connection.list_operations()
        return [
            op["name"] for op in operations
            if (op.get("name") or "").startswith(self.namespace)
        ]
