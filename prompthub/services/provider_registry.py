import logging
from typing import List

from prompthub.core.errors import NotFound
from prompthub.services.providers import ProviderDescriptor

logger = logging.getLogger(__name__)

PROVIDERS = "llm_providers"


class ProviderRegistry:
    """Resolves provider ids to descriptors stored in `llm_providers`."""

    def __init__(self, store):
        self.store = store

    def lookup_providers(self, ids: List[str]) -> List[ProviderDescriptor]:
        """Descriptors in the same order as `ids`; unknown ids raise NotFound."""
        rows = self.store.select(PROVIDERS, {"id": list(ids), "is_active": True})
        by_id = {row["id"]: row for row in rows}

        missing = [provider_id for provider_id in ids if provider_id not in by_id]
        if missing:
            raise NotFound(f"Unknown providers: {', '.join(missing)}")

        return [ProviderDescriptor.from_record(by_id[provider_id]) for provider_id in ids]

    def list_providers(self) -> List[ProviderDescriptor]:
        rows = self.store.select(PROVIDERS, {"is_active": True}, order_by="id")
        return [ProviderDescriptor.from_record(row) for row in rows]
