"""
Pytest Configuration and Shared Fixtures

Provides a small integration registry, configuration factory, an in-memory
venue connection and a hand-driven scheduler for unit and integration tests.
"""

import os
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

# Test environment setup
os.environ["DELEGATE_ENVIRONMENT"] = "test"

from app import create_app
from config.settings import reload_settings
from core.coordination.service import CoordinationService
from core.health.monitor import HealthMonitor
from core.integrations.registry import (
    CategoryDef,
    Configuration,
    IntegrationDescriptor,
    IntegrationField,
    IntegrationRegistry,
    snapshot_configuration,
)
from core.venue.client import VenueClient
from core.venue.connection import VenueConnection
from core.venue.errors import AssetConflictError


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test component interactions"
    )


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings after each test."""
    yield
    reload_settings()


# =============================================================================
# Registry Fixtures
# =============================================================================

def _descriptor(
    id: str,
    name: str,
    category: str,
    prefix: str,
    extra: Optional[tuple] = None,
    **kwargs: Any,
) -> IntegrationDescriptor:
    fields = [IntegrationField(key=f"{prefix}Server", label="MCP Server URL", type="url", param="server")]
    if extra:
        key, param = extra
        fields.append(IntegrationField(key=key, label=param, type="text", param=param))
    fields.append(IntegrationField(key=f"{prefix}Token", label="Auth Token", type="token", param="token"))
    return IntegrationDescriptor(
        id=id,
        name=name,
        category=category,
        server_field=f"{prefix}Server",
        fields=fields,
        **kwargs,
    )


def build_registry() -> IntegrationRegistry:
    """Jira, GitHub, Slack, a hidden tracker and a meeting tool, in that order."""
    categories = [
        CategoryDef(id="issue-trackers", label="Issue Trackers", group="execution"),
        CategoryDef(id="vcs", label="Version Control", group="execution"),
        CategoryDef(id="communication", label="Communication", group="execution"),
        CategoryDef(id="meeting-tools", label="Meeting Tools", group="intelligence"),
    ]
    integrations = [
        _descriptor("jira", "Jira", "issue-trackers", "jira",
                    extra=("jiraProjectKey", "projectKey"), operation="pm:executeJiraActions"),
        _descriptor("github", "GitHub", "vcs", "github",
                    extra=("githubRepo", "repo"), operation="pm:executeGithubActions"),
        _descriptor("slack", "Slack", "communication", "slack",
                    extra=("slackChannel", "channel"), operation="pm:sendNotifications"),
        _descriptor("legacy", "Legacy Tracker", "issue-trackers", "legacy",
                    operation="pm:executeLegacyActions", hidden=True),
        _descriptor("granola", "Granola", "meeting-tools", "granola",
                    transcript_operation="pm:fetchGranolaNote"),
    ]
    return IntegrationRegistry(integrations, categories)


OPERATION_DEFINITIONS: List[Dict[str, Any]] = [
    {"name": "pm:executeJiraActions", "type": "operation"},
    {"name": "pm:executeGithubActions", "type": "operation"},
    {"name": "pm:sendNotifications", "type": "operation"},
    {"name": "pm:executeLegacyActions", "type": "operation"},
    {"name": "pm:fetchGranolaNote", "type": "operation"},
    {"name": "pm:fullWorkflow", "type": "operation"},
]


@pytest.fixture
def registry() -> IntegrationRegistry:
    return build_registry()


@pytest.fixture
def definitions() -> List[Dict[str, Any]]:
    return [dict(d) for d in OPERATION_DEFINITIONS]


@pytest.fixture
def make_configuration(registry) -> Callable[..., Configuration]:
    """Factory: make_configuration(jiraServer="http://...") -> full snapshot."""
    def _make(**values: str) -> Configuration:
        return snapshot_configuration(registry, values)
    return _make


# =============================================================================
# Venue Fixtures
# =============================================================================

class FakeVenueConnection(VenueConnection):
    """
    In-memory venue.

    Deploying assigns a stable id per name and reports a conflict when the
    name is deployed again. Invocation results are looked up per operation id;
    an Exception value is raised instead of returned.
    """

    def __init__(self, venue_id: str = "venue-test"):
        self._venue_id = venue_id
        self.assets: Dict[str, str] = {}
        self.deploy_calls: List[str] = []
        self.deploy_errors: Dict[str, Exception] = {}
        self.results: Dict[str, Any] = {}
        self.invocations: List[tuple] = []
        self.closed = False

    @property
    def venue_id(self) -> str:
        return self._venue_id

    async def deploy(self, definition: Dict[str, Any]) -> Optional[str]:
        name = definition["name"]
        self.deploy_calls.append(name)
        if name in self.deploy_errors:
            raise self.deploy_errors[name]
        if name in self.assets:
            raise AssetConflictError(f"Asset {name} already exists")
        self.assets[name] = f"id-{name}"
        return self.assets[name]

    async def list_operations(self) -> List[Dict[str, str]]:
        return [{"id": asset_id, "name": name} for name, asset_id in self.assets.items()]

    async def invoke(self, operation_id: str, input: Dict[str, Any]) -> Any:
        self.invocations.append((operation_id, input))
        result = self.results.get(operation_id, {"ok": True})
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_connection() -> FakeVenueConnection:
    return FakeVenueConnection()


@pytest.fixture
def make_connection() -> Callable[..., FakeVenueConnection]:
    """Factory for additional in-memory venues."""
    return FakeVenueConnection


@pytest.fixture
def connection_factory(fake_connection) -> AsyncMock:
    """Connection factory returning the shared fake connection."""
    return AsyncMock(return_value=fake_connection)


# =============================================================================
# Scheduler Fixtures
# =============================================================================

class ManualHandle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when advance() is called."""

    def __init__(self):
        self.now = 0.0
        self._handles: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds: float = 0.0) -> None:
        """Move the clock and run every callback that has come due, in time order."""
        self.now += seconds
        while True:
            due = sorted(
                (h for h in self._handles if not h.cancelled and h.when <= self.now),
                key=lambda h: h.when,
            )
            if not due:
                return
            handle = due[0]
            self._handles.remove(handle)
            handle.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()



# =============================================================================
# Service & API Fixtures
# =============================================================================

@pytest.fixture
def reachable_probe() -> AsyncMock:
    """Probe reporting every endpoint as reachable."""
    return AsyncMock(return_value=True)


@pytest.fixture
def service(registry, definitions, connection_factory, reachable_probe, scheduler) -> CoordinationService:
    """Coordination service wired to the fake venue and the manual scheduler."""
    client = VenueClient(registry, definitions, connection_factory=connection_factory)
    monitor = HealthMonitor(registry, probe=reachable_probe, scheduler=scheduler)
    return CoordinationService(registry, client, monitor, default_venue_url="http://venue.local")


@pytest_asyncio.fixture
async def client(service) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the app, with startup and shutdown run around each test."""
    app = create_app(service=service)
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
            yield http_client
