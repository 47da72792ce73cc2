"""
Unit Tests: Asset Registry Resolver

Tests for idempotent deployment, conflict detection, per-connection caching
and loading of operation definitions.
"""

from pathlib import Path

import pytest

from config.settings import CONFIG_DIR
from core.venue.errors import AssetConflictError, VenueError
from core.venue.resolver import (
    AssetRegistryResolver,
    is_conflict,
    load_operation_definitions,
)


# =============================================================================
# Conflict Detection Tests
# =============================================================================

class TestIsConflict:
    """Test deploy failure classification."""

    def test_structured_conflict(self):
        assert is_conflict(AssetConflictError())

    def test_status_code_conflict(self):
        assert is_conflict(VenueError("boom", status_code=409))

    def test_status_code_wins_over_message(self):
        """A non-409 status code is not a conflict even if the text says so."""
        assert not is_conflict(VenueError("already exists", status_code=500))

    @pytest.mark.parametrize("message", [
        "HTTP 409 Conflict",
        "Asset pm:x Already Exists",
    ])
    def test_message_fallback(self, message):
        assert is_conflict(RuntimeError(message))

    def test_other_failures(self):
        assert not is_conflict(RuntimeError("connection reset"))


# =============================================================================
# Resolver Tests
# =============================================================================

class TestAssetRegistryResolver:
    """Test deployment and resolution."""

    @pytest.fixture
    def resolver(self):
        return AssetRegistryResolver(namespace="pm:")

    @pytest.mark.asyncio
    async def test_deploys_and_resolves_namespace(self, resolver, fake_connection, definitions):
        """Every definition is deployed and resolved to its venue id."""
        fake_connection.assets["langchain:openai"] = "id-langchain"

        asset_map = await resolver.deploy_and_resolve(fake_connection, definitions)

        assert fake_connection.deploy_calls == [d["name"] for d in definitions]
        assert asset_map["pm:executeJiraActions"] == "id-pm:executeJiraActions"
        assert "langchain:openai" not in asset_map
        assert len(asset_map) == len(definitions)
        assert resolver.is_resolved_for(fake_connection)

    @pytest.mark.asyncio
    async def test_existing_assets_are_not_failures(self, resolver, fake_connection, definitions):
        """Deploying onto a venue that already has the assets keeps them resolved."""
        fake_connection.assets["pm:executeJiraActions"] = "existing-jira"

        asset_map = await resolver.deploy_and_resolve(fake_connection, definitions)

        assert asset_map["pm:executeJiraActions"] == "existing-jira"

    @pytest.mark.asyncio
    async def test_failed_deploys_are_omitted(self, resolver, fake_connection, definitions):
        """An operation whose deploy failed is absent from the map."""
        fake_connection.deploy_errors["pm:sendNotifications"] = VenueError("500: boom", status_code=500)
        fake_connection.assets["pm:sendNotifications"] = "stale-id"

        asset_map = await resolver.deploy_and_resolve(fake_connection, definitions)

        assert "pm:sendNotifications" not in asset_map
        assert "pm:executeGithubActions" in asset_map

    @pytest.mark.asyncio
    async def test_cached_per_connection(self, resolver, fake_connection, definitions):
        """A second call with the same connection deploys nothing."""
        first = await resolver.deploy_and_resolve(fake_connection, definitions)
        second = await resolver.deploy_and_resolve(fake_connection, definitions)

        assert first is second
        assert len(fake_connection.deploy_calls) == len(definitions)

    @pytest.mark.asyncio
    async def test_new_connection_redeploys(self, resolver, fake_connection, make_connection, definitions):
        """A different connection triggers a fresh deploy."""
        await resolver.deploy_and_resolve(fake_connection, definitions)
        other = make_connection(venue_id="venue-other")

        asset_map = await resolver.deploy_and_resolve(other, definitions)

        assert other.deploy_calls == [d["name"] for d in definitions]
        assert resolver.is_resolved_for(other)
        assert not resolver.is_resolved_for(fake_connection)
        assert len(asset_map) == len(definitions)

    @pytest.mark.asyncio
    async def test_nameless_definitions_skipped(self, resolver, fake_connection):
        """Definitions without a name are not deployed."""
        asset_map = await resolver.deploy_and_resolve(
            fake_connection, [{"type": "operation"}, {"name": "pm:fullWorkflow"}]
        )

        assert fake_connection.deploy_calls == ["pm:fullWorkflow"]
        assert list(asset_map) == ["pm:fullWorkflow"]

    @pytest.mark.asyncio
    async def test_reset(self, resolver, fake_connection, definitions):
        """Reset forgets the map and the connection."""
        await resolver.deploy_and_resolve(fake_connection, definitions)

        resolver.reset()

        assert dict(resolver.asset_map) == {}
        assert not resolver.is_resolved_for(fake_connection)

    @pytest.mark.asyncio
    async def test_map_is_read_only(self, resolver, fake_connection, definitions):
        asset_map = await resolver.deploy_and_resolve(fake_connection, definitions)
        with pytest.raises(TypeError):
            asset_map["pm:new"] = "x"


# =============================================================================
# Definition Loading Tests
# =============================================================================

class TestLoadOperationDefinitions:
    """Test loading of operations.yaml."""

    def test_loads_bundled_definitions(self):
        definitions = load_operation_definitions(CONFIG_DIR / "operations.yaml")
        names = [d["name"] for d in definitions]

        assert "pm:executeJiraActions" in names
        assert "pm:fetchGranolaNote" in names
        assert names[-1] == "pm:fullWorkflow"
        assert all(name.startswith("pm:") for name in names)

    def test_missing_file_returns_empty(self, tmp_path: Path):
        assert load_operation_definitions(tmp_path / "absent.yaml") == []
