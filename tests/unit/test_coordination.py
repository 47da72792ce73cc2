"""
Unit Tests: Coordination Service

Tests for connection state tracking, configuration propagation and batch
execution through the single service object the API talks to.
"""

import pytest

from config.settings import get_settings
from core.coordination.service import ConnectionStatus, CoordinationService
from core.dispatch import ActionItem
from core.health import HealthStatus
from core.integrations.registry import RegistryError
from core.venue.errors import ConnectionFailedError, NotConnectedError, VenueError
from monitoring.logging import get_venue_id, set_venue_context


@pytest.fixture(autouse=True)
def clear_venue_context():
    yield
    set_venue_context(None)


# =============================================================================
# Connection Tests
# =============================================================================

class TestConnection:
    """Test connect and disconnect state."""

    @pytest.mark.asyncio
    async def test_connect_uses_default_url(self, service, connection_factory, definitions):
        state = await service.connect()

        connection_factory.assert_awaited_once_with("http://venue.local")
        assert state.status == ConnectionStatus.CONNECTED
        assert state.venue_id == "venue-test"
        assert state.operations == len(definitions)
        assert service.monitor.connected
        assert get_venue_id() == "venue-test"

    @pytest.mark.asyncio
    async def test_connect_explicit_url(self, service, connection_factory):
        state = await service.connect("http://other.local")

        connection_factory.assert_awaited_once_with("http://other.local")
        assert state.url == "http://other.local"

    @pytest.mark.asyncio
    async def test_repeated_connect_keeps_deployment(
        self, service, fake_connection, connection_factory, definitions, scheduler
    ):
        first = await service.connect()
        scheduler.advance(0)
        await service.monitor.wait_idle()

        second = await service.connect()

        connection_factory.assert_awaited_once()
        assert len(fake_connection.deploy_calls) == len(definitions)
        assert second == first
        assert second.status == ConnectionStatus.CONNECTED
        assert service.monitor.connected

    @pytest.mark.asyncio
    async def test_connect_failure_records_error(self, service, connection_factory):
        connection_factory.side_effect = ConnectionFailedError("Venue unreachable")

        with pytest.raises(ConnectionFailedError):
            await service.connect()

        state = service.connection_state
        assert state.status == ConnectionStatus.ERROR
        assert state.error == "Venue unreachable"
        assert not service.monitor.connected
        assert get_venue_id() is None

    @pytest.mark.asyncio
    async def test_disconnect(self, service, fake_connection, scheduler):
        await service.connect()

        state = await service.disconnect()
        scheduler.advance(0)

        assert state.status == ConnectionStatus.DISCONNECTED
        assert fake_connection.closed
        assert not service.monitor.connected
        assert dict(service.health) == {}
        assert get_venue_id() is None


# =============================================================================
# Configuration & Health Tests
# =============================================================================

class TestConfigurationAndHealth:
    """Test configuration changes and the health it drives."""

    def test_initial_configuration_is_empty(self, service, registry):
        assert set(service.configuration) == set(registry.field_keys)
        assert all(v == "" for v in service.configuration.values())

    def test_unknown_keys_rejected(self, service):
        with pytest.raises(RegistryError):
            service.update_configuration({"notionServer": "http://notion.local"})

    def test_update_reaches_monitor(self, service):
        configuration = service.update_configuration({"jiraServer": "http://jira.local"})

        assert service.monitor.configuration is configuration
        assert configuration["jiraServer"] == "http://jira.local"

    @pytest.mark.asyncio
    async def test_health_after_connect(self, service, scheduler, reachable_probe):
        service.update_configuration({"jiraServer": "http://jira.local"})

        await service.connect()
        scheduler.advance(0)
        await service.monitor.wait_idle()

        assert dict(service.health) == {"jira": HealthStatus.OK}
        reachable_probe.assert_awaited_once_with("http://jira.local")

    @pytest.mark.asyncio
    async def test_configuration_change_debounced(self, service, scheduler, reachable_probe):
        await service.connect()
        scheduler.advance(0)
        await service.monitor.wait_idle()

        service.update_configuration({"slackServer": "http://slack.local"})
        scheduler.advance(service.monitor.debounce_seconds)
        await service.monitor.wait_idle()

        assert dict(service.health) == {"slack": HealthStatus.OK}


# =============================================================================
# Execution Tests
# =============================================================================

class TestExecution:
    """Test batch execution and single-operation calls."""

    @pytest.mark.asyncio
    async def test_execute_requires_connection(self, service):
        with pytest.raises(NotConnectedError):
            await service.execute([ActionItem(target="jira", description="Create ticket")])

    @pytest.mark.asyncio
    async def test_execute_returns_final_state(self, service, fake_connection):
        service.update_configuration({
            "jiraServer": "http://jira.local",
            "githubServer": "http://github.local",
        })
        await service.connect()
        fake_connection.results["id-pm:executeJiraActions"] = VenueError("Jira is down")

        state = await service.execute(
            [
                ActionItem(target="jira", description="Create ticket"),
                ActionItem(target="github", description="Review PR"),
            ],
            notes="Planning notes",
        )

        steps = {s.id: s for s in state.steps}
        assert state.status == "error"
        assert steps["jira"].error == "Jira is down"
        assert steps["github"].status == "success"
        assert steps["slack"].skip_reason == "no_endpoint"

    @pytest.mark.asyncio
    async def test_fetch_transcript_uses_current_configuration(self, service, fake_connection):
        service.update_configuration({"granolaServer": "http://granola.local"})
        await service.connect()
        fake_connection.results["id-pm:fetchGranolaNote"] = {"transcript": "hello"}

        assert await service.fetch_transcript("granola", "call-1") == "hello"
        assert fake_connection.invocations[-1][1]["server"] == "http://granola.local"

    @pytest.mark.asyncio
    async def test_close(self, service, fake_connection):
        await service.connect()

        await service.close()

        assert fake_connection.closed
        assert service.connection_state.status == ConnectionStatus.DISCONNECTED
        assert not service.monitor.connected


# =============================================================================
# Construction Tests
# =============================================================================

class TestFromSettings:
    """Test building the service from application settings."""

    @pytest.mark.asyncio
    async def test_builds_from_bundled_files(self, connection_factory, scheduler):
        settings = get_settings()

        service = CoordinationService.from_settings(
            settings, connection_factory=connection_factory, scheduler=scheduler
        )

        assert service.registry.get("jira") is not None
        assert service.default_venue_url == settings.venue.url
        assert "pm:fullWorkflow" in [d["name"] for d in service.client.definitions]
        assert service.monitor.debounce_seconds == settings.health.debounce_seconds
