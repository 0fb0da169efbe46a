from fastapi import APIRouter, Depends

from prompthub.core.dependencies import get_adapters, get_dispatcher, get_prompt_tools, get_provider_registry
from prompthub.schemas.dispatch import DispatchRequest, DispatchResponse, ProviderInfo
from prompthub.schemas.generate import FormatPromptRequest, FormatPromptResponse, GenerateRequest, GenerateResponse
from prompthub.services.dispatcher import DispatchCoordinator
from prompthub.services.prompt_tools import PromptTools
from prompthub.services.provider_registry import ProviderRegistry
from prompthub.services.providers import AdapterRegistry

router = APIRouter(prefix="/api/ai", tags=["AI"])


@router.get("/test")
def test_route():
    return {"success": True, "message": "AI routes are working!", "endpoint": "/api/ai/dispatch"}


@router.get("/providers", response_model=list[ProviderInfo])
def list_providers(
    registry: ProviderRegistry = Depends(get_provider_registry),
    adapters: AdapterRegistry = Depends(get_adapters),
):
    return [
        ProviderInfo(
            id=d.id,
            name=d.name,
            kind=d.adapter_kind,
            model=d.model,
            endpoint=d.endpoint,
            max_tokens=d.max_tokens,
            temperature=d.temperature,
            integrated=d.adapter_kind in adapters,
        )
        for d in registry.list_providers()
    ]


@router.post("/dispatch", response_model=DispatchResponse)
def dispatch(payload: DispatchRequest, dispatcher: DispatchCoordinator = Depends(get_dispatcher)):
    results = dispatcher.dispatch_to_providers(payload.prompt, payload.provider_ids)
    return DispatchResponse(results=results)


@router.post("/generate", response_model=GenerateResponse)
def generate(payload: GenerateRequest, tools: PromptTools = Depends(get_prompt_tools)):
    reply = tools.generate(payload.prompt, model=payload.model, max_tokens=payload.max_tokens)
    return GenerateResponse(generated_text=reply.response_text, usage=reply.usage, model=reply.model)


@router.post("/format-prompt", response_model=FormatPromptResponse)
def format_prompt(payload: FormatPromptRequest, tools: PromptTools = Depends(get_prompt_tools)):
    reply = tools.format_prompt(payload.prompt, payload.instruction)
    return FormatPromptResponse(formatted_prompt=reply.response_text, usage=reply.usage, model=reply.model)
