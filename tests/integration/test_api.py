"""
Integration Tests: API Endpoints

Tests for all v1 API endpoints including request/response validation and
error mapping, against the fake venue.
"""

import json

import pytest
from httpx import AsyncClient

from core.venue.client import ANALYSIS_OPERATION
from core.venue.errors import ConnectionFailedError, VenueError


async def connect(client: AsyncClient) -> None:
    response = await client.post("/v1/venue/connect")
    assert response.status_code == 200


# =============================================================================
# Health Endpoint Tests
# =============================================================================

class TestHealthEndpoints:
    """Test health check endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        """Test basic health check."""
        response = await client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["venue_status"] == "disconnected"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_request_id_header(self, client: AsyncClient):
        response = await client.get("/v1/health", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"


# =============================================================================
# Integration Registry Tests
# =============================================================================

class TestIntegrationEndpoints:
    """Test registry listing and integration health."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_integrations(self, client: AsyncClient):
        response = await client.get("/v1/integrations")

        assert response.status_code == 200
        data = response.json()
        assert [i["id"] for i in data["integrations"]] == ["jira", "github", "slack", "legacy", "granola"]
        assert data["integrations"][0]["server_field"] == "jiraServer"
        assert {c["id"] for c in data["categories"]} >= {"issue-trackers", "meeting-tools"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health_empty_while_disconnected(self, client: AsyncClient):
        response = await client.get("/v1/integrations/health")

        assert response.json() == {"connected": False, "health": {}}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health_after_connect(self, client: AsyncClient, service, scheduler):
        await client.put("/v1/settings", json={"values": {"jiraServer": "http://jira.local"}})
        await connect(client)
        scheduler.advance(0)
        await service.monitor.wait_idle()

        response = await client.get("/v1/integrations/health")

        assert response.json() == {"connected": True, "health": {"jira": "ok"}}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_recheck(self, client: AsyncClient, service, scheduler, reachable_probe):
        await client.put("/v1/settings", json={"values": {"jiraServer": "http://jira.local"}})
        await connect(client)
        scheduler.advance(0)
        await service.monitor.wait_idle()

        response = await client.post("/v1/integrations/health/recheck")
        await service.monitor.wait_idle()

        assert response.status_code == 202
        assert response.json()["health"] == {"jira": "checking"}
        assert reachable_probe.await_count == 2


# =============================================================================
# Settings Endpoint Tests
# =============================================================================

class TestSettingsEndpoints:
    """Test integration settings."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_settings(self, client: AsyncClient, registry):
        response = await client.get("/v1/settings")

        data = response.json()
        assert set(data["values"]) == set(registry.field_keys)
        assert data["configured"] == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_replace_settings(self, client: AsyncClient):
        response = await client.put(
            "/v1/settings",
            json={"values": {"jiraServer": "http://jira.local", "legacyServer": "http://legacy.local"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["values"]["jiraServer"] == "http://jira.local"
        assert data["configured"] == ["jira"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_key_is_bad_request(self, client: AsyncClient):
        response = await client.put("/v1/settings", json={"values": {"notionServer": "x"}})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "RegistryError"
        assert "notionServer" in error["message"]


# =============================================================================
# Venue Endpoint Tests
# =============================================================================

class TestVenueEndpoints:
    """Test the venue connection lifecycle."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_connect_and_status(self, client: AsyncClient, definitions):
        response = await client.post("/v1/venue/connect", json={"url": "http://venue.local:9000"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "connected"
        assert data["venue_id"] == "venue-test"
        assert data["operations"] == len(definitions)

        status = await client.get("/v1/venue/status")
        assert status.json()["url"] == "http://venue.local:9000"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_connect_failure_is_bad_gateway(self, client: AsyncClient, connection_factory):
        connection_factory.side_effect = ConnectionFailedError("Venue unreachable")

        response = await client.post("/v1/venue/connect")

        assert response.status_code == 502
        assert response.json()["error"]["type"] == "ConnectionFailedError"
        status = await client.get("/v1/venue/status")
        assert status.json()["status"] == "error"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_disconnect(self, client: AsyncClient, fake_connection):
        await connect(client)

        response = await client.post("/v1/venue/disconnect")

        assert response.json()["status"] == "disconnected"
        assert fake_connection.closed

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_assets(self, client: AsyncClient, definitions):
        await connect(client)

        response = await client.get("/v1/venue/assets")

        assert response.json()["assets"] == [d["name"] for d in definitions]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_assets_require_connection(self, client: AsyncClient):
        response = await client.get("/v1/venue/assets")

        assert response.status_code == 409
        assert response.json()["error"]["type"] == "NotConnectedError"


# =============================================================================
# Execution Endpoint Tests
# =============================================================================

class TestExecutionEndpoints:
    """Test action item dispatch and the full workflow."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_execute_requires_connection(self, client: AsyncClient, fake_connection):
        response = await client.post(
            "/v1/execute",
            json={"actions": [{"target": "jira", "description": "Create ticket"}]},
        )

        assert response.status_code == 409
        assert response.json()["error"]["hint"].startswith("Connect to a venue")
        assert fake_connection.invocations == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_execute(self, client: AsyncClient, fake_connection):
        await client.put("/v1/settings", json={"values": {
            "jiraServer": "http://jira.local",
            "githubServer": "http://github.local",
        }})
        await connect(client)
        fake_connection.results["id-pm:executeJiraActions"] = VenueError("Jira is down")
        fake_connection.results["id-pm:executeGithubActions"] = {"pr": 7}

        response = await client.post("/v1/execute", json={
            "notes": "Standup",
            "actions": [
                {"target": "jira", "description": "Create ticket", "priority": "high"},
                {"target": "github", "description": "Review PR"},
            ],
        })

        assert response.status_code == 200
        data = response.json()
        steps = {s["id"]: s for s in data["steps"]}
        assert data["status"] == "error"
        assert steps["jira"]["status"] == "error"
        assert steps["jira"]["error"] == "Jira is down"
        assert steps["github"]["result"] == {"pr": 7}
        assert steps["slack"]["skip_reason"] == "no_endpoint"
        assert steps["granola"]["status"] == "skipped"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_execute_validates_priority(self, client: AsyncClient):
        response = await client.post(
            "/v1/execute",
            json={"actions": [{"target": "jira", "description": "x", "priority": "urgent"}]},
        )

        assert response.status_code == 422

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_full_workflow(self, client: AsyncClient, fake_connection):
        await connect(client)
        fake_connection.results["id-pm:fullWorkflow"] = {"created": 2}

        response = await client.post("/v1/workflow", json={"notes": "Planning"})

        assert response.status_code == 200
        assert response.json() == {"result": {"created": 2}}


# =============================================================================
# Meeting Endpoint Tests
# =============================================================================

class TestMeetingEndpoints:
    """Test transcript fetching and meeting analysis."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_fetch_transcript(self, client: AsyncClient, fake_connection):
        await connect(client)
        fake_connection.results["id-pm:fetchGranolaNote"] = {"transcript": "Sam: hi"}

        response = await client.post(
            "/v1/transcripts/fetch", json={"source": "granola", "call_ref": "call-1"}
        )

        assert response.status_code == 200
        assert response.json() == {"source": "granola", "transcript": "Sam: hi"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_fetch_transcript_unsupported_source(self, client: AsyncClient):
        await connect(client)

        response = await client.post(
            "/v1/transcripts/fetch", json={"source": "jira", "call_ref": "call-1"}
        )

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "OperationUnavailableError"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_analyze(self, client: AsyncClient, fake_connection):
        await connect(client)
        fake_connection.results[ANALYSIS_OPERATION] = {"response": json.dumps({
            "actionItems": [{"target": "jira", "description": "Fix login", "priority": "high"}],
            "blockers": [],
            "decisions": ["Ship Friday"],
        })}

        response = await client.post("/v1/analyze", json={"notes": "Sam: fix login", "meeting_type": "retro"})

        assert response.status_code == 200
        data = response.json()
        assert data["actionItems"][0]["target"] == "jira"
        assert data["decisions"] == ["Ship Friday"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_analyze_unparsable_response(self, client: AsyncClient, fake_connection):
        await connect(client)
        fake_connection.results[ANALYSIS_OPERATION] = {"response": "I could not find any"}

        response = await client.post("/v1/analyze", json={"notes": "notes"})

        assert response.status_code == 502
        assert response.json()["error"]["type"] == "AnalysisParseError"


# =============================================================================
# OpenAPI Tests
# =============================================================================

class TestOpenAPI:
    """Test the published API description."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_error_responses_documented(self, client: AsyncClient):
        response = await client.get("/openapi.json")

        spec = response.json()
        assert "ErrorResponse" in spec["components"]["schemas"]
        execute_responses = spec["paths"]["/v1/execute"]["post"]["responses"]
        assert {"404", "409", "502"} <= set(execute_responses)
