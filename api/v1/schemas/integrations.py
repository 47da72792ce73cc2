"""
Integration Registry Schemas

@.architecture
Incoming: api/v1/endpoints/integrations.py, core/integrations/registry.py --- {IntegrationDescriptor, CategoryDef}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/integrations.py --- {RegistryResponse validated model}
"""

from typing import List

from pydantic import BaseModel

from core.integrations.registry import CategoryDef, IntegrationDescriptor


class RegistryResponse(BaseModel):
    """Every integration and category the backend knows about."""
    categories: List[CategoryDef]
    integrations: List[IntegrationDescriptor]
