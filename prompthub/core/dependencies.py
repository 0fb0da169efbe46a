from fastapi import Request

from prompthub.services.dispatcher import DispatchCoordinator
from prompthub.services.prompt_tools import PromptTools
from prompthub.services.provider_registry import ProviderRegistry
from prompthub.services.providers import AdapterRegistry
from prompthub.services.version_store import VersionStore

# Services are built once in create_app() and live on app.state


def get_version_store(request: Request) -> VersionStore:
    return request.app.state.version_store


def get_provider_registry(request: Request) -> ProviderRegistry:
    return request.app.state.provider_registry


def get_adapters(request: Request) -> AdapterRegistry:
    return request.app.state.adapters


def get_dispatcher(request: Request) -> DispatchCoordinator:
    return request.app.state.dispatcher


def get_prompt_tools(request: Request) -> PromptTools:
    return request.app.state.prompt_tools
