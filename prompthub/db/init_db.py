import logging

from prompthub.core.errors import StoreConflict
from prompthub.db.base import Base

# Table registration
from prompthub.models.prompt import PromptMaster, PromptVersion  # noqa: F401
from prompthub.models.provider import LLMProvider  # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = [
    {"id": "groq", "name": "Groq", "model": "llama-3.1-8b-instant", "max_tokens": 1024},
    {"id": "openai", "name": "OpenAI", "model": "gpt-4o-mini", "max_tokens": 2048},
    {"id": "anthropic", "name": "Anthropic Claude", "model": "claude-3-5-haiku-latest", "max_tokens": 1024},
    {"id": "gemini", "name": "Google Gemini", "model": "gemini-2.0-flash", "max_tokens": 2048},
    {"id": "deepseek", "name": "DeepSeek", "model": "deepseek-chat", "max_tokens": 2048},
    {"id": "openrouter", "name": "OpenRouter", "model": "mistralai/mistral-7b-instruct", "max_tokens": 2048},
    {"id": "huggingface", "name": "Hugging Face", "model": "mistralai/Mistral-7B-Instruct-v0.3", "max_tokens": 1024},
]


def init_db(engine):
    Base.metadata.create_all(bind=engine)


def seed_providers(store, providers=None):
    """Inserts the built-in provider descriptors that are not registered yet."""
    providers = DEFAULT_PROVIDERS if providers is None else providers
    existing = {row["id"] for row in store.select("llm_providers")}

    created = 0
    for provider in providers:
        if provider["id"] in existing:
            continue
        try:
            store.insert("llm_providers", {**provider, "kind": provider.get("kind") or provider["id"]})
            created += 1
        except StoreConflict:
            # Another process seeded it first
            logger.debug("Provider %s already seeded", provider["id"])

    if created:
        logger.info("Seeded %d default providers", created)
    return created
