"""
Dispatch coordinator: sends one prompt to several providers.

Provider calls are independent and run on a thread pool. A failing provider
only marks its own entry as unsuccessful; results always come back in the
order the provider ids were given.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from prompthub.core.errors import ValidationError
from prompthub.schemas.dispatch import ProviderResult

logger = logging.getLogger(__name__)


class DispatchCoordinator:
    def __init__(self, provider_registry, adapters, max_workers: int = 4):
        self.provider_registry = provider_registry
        self.adapters = adapters
        self.max_workers = max_workers

    def dispatch_to_providers(self, prompt_text: str, provider_ids: List[str]) -> List[ProviderResult]:
        # 1. Validate before touching the registry
        if not isinstance(prompt_text, str) or not prompt_text.strip():
            raise ValidationError("prompt", "Prompt is required")
        if isinstance(provider_ids, str) or not provider_ids:
            raise ValidationError("provider_ids", "At least one provider must be selected")
        if any(not isinstance(pid, str) or not pid.strip() for pid in provider_ids):
            raise ValidationError("provider_ids", "Provider ids must be non-empty strings")

        # 2. Resolve descriptors; a registry failure aborts the whole dispatch
        descriptors = self.provider_registry.lookup_providers(list(provider_ids))

        # 3. Fan out; map() yields results in input order
        logger.info("Dispatching prompt to %d providers", len(descriptors))
        workers = min(self.max_workers, len(descriptors))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dispatch") as pool:
            return list(pool.map(lambda d: self._invoke_one(d, prompt_text), descriptors))

    def _invoke_one(self, descriptor, prompt_text) -> ProviderResult:
        adapter = self.adapters.resolve(descriptor.adapter_kind)
        try:
            reply = adapter.invoke(descriptor, prompt_text)
        except Exception as e:
            logger.warning("Provider %s failed: %s", descriptor.id, e)
            return ProviderResult(
                provider_id=descriptor.id,
                provider_name=descriptor.name,
                model=descriptor.model,
                error_text=str(e) or e.__class__.__name__,
                success=False,
            )

        return ProviderResult(
            provider_id=descriptor.id,
            provider_name=descriptor.name,
            model=descriptor.model,
            response_text=reply.response_text,
            usage=reply.usage,
            success=True,
            mocked=reply.mocked,
        )
