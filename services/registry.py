import random
from types import MappingProxyType
from typing import Any, Dict, List, Optional

from models.provider_config import Catalog, ProviderConfig
from services.job_client import JobClient
from services.providers import ProviderAdapter, create_adapter


class ProviderRegistry:
    """Maps provider ids to adapters. Read-only once constructed."""

    def __init__(self, adapters: Dict[str, ProviderAdapter]):
        self._adapters = MappingProxyType(dict(adapters))

    @classmethod
    def from_catalog(cls, catalog: Catalog, job_client: JobClient, rng: Optional[random.Random] = None) -> "ProviderRegistry":
        return cls({
            provider_id: create_adapter(config, job_client, rng)
            for provider_id, config in catalog.providers.items()
        })

    def has(self, provider_id: Any) -> bool:
        return isinstance(provider_id, str) and provider_id in self._adapters

    def resolve(self, provider_id: str) -> ProviderAdapter:
        """Return the adapter for provider_id; callers must check has() first"""
        return self._adapters[provider_id]

    def config(self, provider_id: str) -> ProviderConfig:
        return self.resolve(provider_id).config

    def list_providers(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": adapter.config.id,
                "name": adapter.config.name,
                "requiresAuth": adapter.config.requires_auth,
                "authHeader": adapter.config.auth_header,
            }
            for adapter in self._adapters.values()
        ]

    def list_models(self, provider_id: str) -> List[Dict[str, Any]]:
        return [
            {"id": m.id, "name": m.name, "features": list(m.features)}
            for m in self.config(provider_id).models
        ]

    def list_all_models(self) -> List[Dict[str, Any]]:
        models = []
        for provider_id in self._adapters:
            for model in self.list_models(provider_id):
                model["provider"] = provider_id
                models.append(model)
        return models

    def auth_headers(self) -> List[str]:
        return sorted({a.config.auth_header for a in self._adapters.values()})
