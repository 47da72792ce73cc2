"""
Integration Settings Schemas

Pydantic models for the integration configuration (endpoint URLs, project
keys, tokens), keyed by the field keys of the integration registry.

@.architecture
Incoming: api/v1/endpoints/settings.py, Frontend (HTTP PUT) --- {JSON configuration payloads}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/settings.py --- {SettingsResponse, SettingsUpdateRequest validated models}
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class SettingsUpdateRequest(BaseModel):
    """Full replacement of the integration configuration. Missing keys are cleared."""
    values: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "values": {
                    "jiraServer": "https://jira-mcp.example.com/mcp",
                    "jiraProjectKey": "PROJ",
                    "slackServer": "https://slack-mcp.example.com/mcp",
                    "slackChannel": "#engineering",
                }
            }
        }
    )


class SettingsResponse(BaseModel):
    """Current integration configuration."""
    values: Dict[str, str]
    configured: List[str] = Field(
        default_factory=list,
        description="Ids of non-hidden integrations whose endpoint URL is set",
    )
