"""
Provider adapters: one per LLM vendor.

Every adapter turns (descriptor, prompt_text) into that vendor's call and
returns a ProviderReply, or raises MissingCredential / ProviderError /
InvalidResponseShape. Adapters never retry; the SDK clients are built with
max_retries=0 so each call is attempted exactly once.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import anthropic
import httpx
import openai
from anthropic import Anthropic
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from openai import OpenAI

from prompthub.core.errors import InvalidResponseShape, MissingCredential, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
MOCK_PREVIEW_LENGTH = 50


@dataclass
class ProviderDescriptor:
    id: str
    name: str
    model: str
    endpoint: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    kind: Optional[str] = None

    @property
    def adapter_kind(self) -> str:
        return self.kind or self.id

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ProviderDescriptor":
        return cls(
            id=record["id"],
            name=record.get("name") or record["id"],
            model=record["model"],
            endpoint=record.get("endpoint"),
            max_tokens=record.get("max_tokens"),
            temperature=record.get("temperature"),
            kind=record.get("kind"),
        )


@dataclass
class ProviderReply:
    response_text: str
    usage: Optional[Dict[str, int]] = None
    mocked: bool = False
    model: Optional[str] = None


def _vendor_message(body, fallback: str) -> str:
    """Digs the human readable message out of a vendor error body."""
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    elif isinstance(body, str) and body.strip():
        return body.strip()
    return fallback


def _chat_base_url(endpoint: Optional[str]) -> Optional[str]:
    # Registries store either the base URL or the full chat completions URL
    if not endpoint:
        return None
    endpoint = endpoint.rstrip("/")
    if endpoint.endswith("/chat/completions"):
        endpoint = endpoint[: -len("/chat/completions")]
    return endpoint


class BaseAdapter(ABC):
    label = "Provider"
    credential: Optional[str] = None  # attribute name on Settings
    credential_env: Optional[str] = None
    default_max_tokens = 1024

    def __init__(self, settings, http_client: Optional[httpx.Client] = None, timeout: float = 60.0):
        self.settings = settings
        self.http_client = http_client
        self.timeout = timeout

    def api_key(self) -> Optional[str]:
        if self.credential is None:
            return None
        key = getattr(self.settings, self.credential, None)
        if not key:
            raise MissingCredential(self.label, self.credential_env or self.credential.upper())
        return key

    def options(self, descriptor: ProviderDescriptor):
        max_tokens = descriptor.max_tokens or self.default_max_tokens
        temperature = DEFAULT_TEMPERATURE if descriptor.temperature is None else descriptor.temperature
        return max_tokens, temperature

    def build_client(self, factory, **kwargs):
        # SDK constructors reject bad arguments with plain TypeError/ValueError
        try:
            return factory(**kwargs)
        except (TypeError, ValueError) as e:
            raise ProviderError(f"{self.label} client could not be created: {e}") from e

    @abstractmethod
    def invoke(self, descriptor: ProviderDescriptor, prompt_text: str) -> ProviderReply:
        """Send prompt_text to the vendor described by descriptor."""


# --- PROVIDER IMPLEMENTATIONS ---

class ChatCompletionAdapter(BaseAdapter):
    """OpenAI-compatible chat completions (OpenAI, Groq, DeepSeek, OpenRouter)."""

    def __init__(
        self,
        settings,
        label: str,
        credential: str,
        credential_env: str,
        base_url: str,
        default_max_tokens: int = 2048,
        client_factory=OpenAI,
        **kwargs,
    ):
        super().__init__(settings, **kwargs)
        self.label = label
        self.credential = credential
        self.credential_env = credential_env
        self.base_url = base_url
        self.default_max_tokens = default_max_tokens
        self.client_factory = client_factory

    def invoke(self, descriptor, prompt_text):
        max_tokens, temperature = self.options(descriptor)
        return self.complete(
            [{"role": "user", "content": prompt_text}],
            model=descriptor.model,
            max_tokens=max_tokens,
            temperature=temperature,
            base_url=_chat_base_url(descriptor.endpoint),
        )

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: str,
        max_tokens: int,
        temperature: float = DEFAULT_TEMPERATURE,
        base_url: Optional[str] = None,
        **extra,
    ) -> ProviderReply:
        api_key = self.api_key()
        client = self.build_client(
            self.client_factory,
            api_key=api_key,
            base_url=base_url or self.base_url,
            max_retries=0,
            timeout=self.timeout,
            http_client=self.http_client,
        )

        try:
            response = client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                **extra,
            )
        except openai.APIStatusError as e:
            message = _vendor_message(e.body, f"{self.label} API error: {e.status_code}")
            raise ProviderError(message, e.status_code, e.body) from e
        except openai.APIError as e:
            raise ProviderError(f"{self.label} request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        text = getattr(message, "content", None) if message else None
        if not text:
            raise InvalidResponseShape(f"No response generated from {self.label}")

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = {
                "input": response.usage.prompt_tokens or 0,
                "output": response.usage.completion_tokens or 0,
            }
        return ProviderReply(response_text=text, usage=usage, model=getattr(response, "model", None) or model)


class AnthropicAdapter(BaseAdapter):
    label = "Anthropic"
    credential = "anthropic_api_key"
    credential_env = "ANTHROPIC_API_KEY"
    default_max_tokens = 1024

    def __init__(self, settings, client_factory=Anthropic, **kwargs):
        super().__init__(settings, **kwargs)
        self.client_factory = client_factory

    def invoke(self, descriptor, prompt_text):
        api_key = self.api_key()
        max_tokens, temperature = self.options(descriptor)
        # Builds its own HTTP stack; the shared httpx client is not accepted
        client = self.build_client(
            self.client_factory,
            api_key=api_key,
            base_url=descriptor.endpoint or None,
            max_retries=0,
            timeout=self.timeout,
        )

        try:
            message = client.messages.create(
                model=descriptor.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt_text}],
            )
        except anthropic.APIStatusError as e:
            text = _vendor_message(e.body, f"Anthropic API error: {e.status_code}")
            raise ProviderError(text, e.status_code, e.body) from e
        except anthropic.APIError as e:
            raise ProviderError(f"Anthropic request failed: {e}") from e

        blocks = getattr(message, "content", None) or []
        text = next((b.text for b in blocks if getattr(b, "type", None) == "text" and b.text), None)
        if not text:
            raise InvalidResponseShape("No response generated from Anthropic")

        usage = None
        if getattr(message, "usage", None) is not None:
            usage = {"input": message.usage.input_tokens, "output": message.usage.output_tokens}
        return ProviderReply(response_text=text, usage=usage)


class GeminiAdapter(BaseAdapter):
    label = "Gemini"
    credential = "gemini_api_key"
    credential_env = "GEMINI_API_KEY"
    default_max_tokens = 2048

    def __init__(self, settings, client_factory=genai.Client, **kwargs):
        super().__init__(settings, **kwargs)
        self.client_factory = client_factory

    def invoke(self, descriptor, prompt_text):
        api_key = self.api_key()
        max_tokens, temperature = self.options(descriptor)
        http_options = genai_types.HttpOptions(
            base_url=descriptor.endpoint or None,
            timeout=int(self.timeout * 1000),
        )
        client = self.build_client(self.client_factory, api_key=api_key, http_options=http_options)

        try:
            response = client.models.generate_content(
                model=descriptor.model,
                contents=prompt_text,
                config=genai_types.GenerateContentConfig(
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                ),
            )
        except genai_errors.APIError as e:
            raise ProviderError(e.message or f"Gemini API error: {e.code}", e.code, e.details) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini request failed: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            raise InvalidResponseShape("No response generated from Gemini")

        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = {
                "input": metadata.prompt_token_count or 0,
                "output": metadata.candidates_token_count or 0,
            }
        return ProviderReply(response_text=text, usage=usage)


class HuggingFaceAdapter(BaseAdapter):
    """Text-generation inference: raw `inputs` in, `generated_text` out."""

    label = "Hugging Face"
    credential = "huggingface_api_key"
    credential_env = "HUGGINGFACE_API_KEY"
    default_max_tokens = 1024
    base_url = "https://api-inference.huggingface.co/models"

    def invoke(self, descriptor, prompt_text):
        api_key = self.api_key()
        max_tokens, temperature = self.options(descriptor)
        url = descriptor.endpoint or f"{self.base_url}/{descriptor.model}"
        payload = {
            "inputs": prompt_text,
            "parameters": {
                "max_new_tokens": max_tokens,
                "temperature": temperature,
                "return_full_text": False,
            },
        }
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}

        client = self.http_client or httpx.Client(timeout=self.timeout)
        try:
            response = client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(f"Hugging Face request failed: {e}") from e
        finally:
            if client is not self.http_client:
                client.close()

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            fallback = f"Hugging Face API error: {response.status_code}"
            raise ProviderError(_vendor_message(body, fallback), response.status_code, body)

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseShape("Hugging Face returned a non-JSON body") from e

        text = None
        if isinstance(data, dict):
            text = data.get("generated_text")
        elif isinstance(data, list) and data and isinstance(data[0], dict):
            text = data[0].get("generated_text")
        if not text:
            raise InvalidResponseShape("No response generated from Hugging Face")
        return ProviderReply(response_text=text)


class MockAdapter(BaseAdapter):
    """Stand-in for vendors that are registered but not integrated yet."""

    label = "Mock"

    def __init__(self, settings=None, **kwargs):
        super().__init__(settings, **kwargs)

    def invoke(self, descriptor, prompt_text):
        preview = prompt_text[:MOCK_PREVIEW_LENGTH]
        if len(prompt_text) > MOCK_PREVIEW_LENGTH:
            preview += "..."
        text = f"[Mock] {descriptor.name} is not integrated yet. Prompt received: {preview}"
        return ProviderReply(response_text=text, usage=None, mocked=True)


# --- REGISTRY ---

class AdapterRegistry:
    """Maps a provider kind to its adapter; unknown kinds get the mock."""

    def __init__(self, default: Optional[BaseAdapter] = None):
        self._adapters: Dict[str, BaseAdapter] = {}
        self.default = default or MockAdapter()

    def register(self, kind: str, adapter: BaseAdapter) -> None:
        self._adapters[kind.lower()] = adapter

    def resolve(self, kind: str) -> BaseAdapter:
        return self._adapters.get((kind or "").lower(), self.default)

    def kinds(self) -> List[str]:
        return sorted(self._adapters)

    def __contains__(self, kind) -> bool:
        return (kind or "").lower() in self._adapters


CHAT_VENDORS = {
    # kind: (label, settings attribute, env var, base url, default max_tokens)
    "groq": ("Groq", "groq_api_key", "PROMPT_GROQ_KEY", "https://api.groq.com/openai/v1", 1024),
    "openai": ("OpenAI", "openai_api_key", "OPENAI_API_KEY", "https://api.openai.com/v1", 2048),
    "deepseek": ("DeepSeek", "deepseek_api_key", "DEEPSEEK_API_KEY", "https://api.deepseek.com/v1", 2048),
    "openrouter": ("OpenRouter", "openrouter_api_key", "OPENROUTER_API_KEY", "https://openrouter.ai/api/v1", 2048),
}


def build_adapter_registry(settings, http_client: Optional[httpx.Client] = None) -> AdapterRegistry:
    timeout = settings.provider_timeout_seconds
    registry = AdapterRegistry(default=MockAdapter(settings))

    for kind, (label, credential, env, base_url, max_tokens) in CHAT_VENDORS.items():
        registry.register(
            kind,
            ChatCompletionAdapter(
                settings,
                label=label,
                credential=credential,
                credential_env=env,
                base_url=base_url,
                default_max_tokens=max_tokens,
                http_client=http_client,
                timeout=timeout,
            ),
        )
    registry.register("anthropic", AnthropicAdapter(settings, timeout=timeout))
    registry.register("gemini", GeminiAdapter(settings, timeout=timeout))
    registry.register("huggingface", HuggingFaceAdapter(settings, http_client=http_client, timeout=timeout))
    return registry
