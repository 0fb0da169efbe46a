import logging

from fastapi import APIRouter, Depends

from prompthub.core.dependencies import get_version_store
from prompthub.schemas.prompt import (
    PromptCreate,
    PromptDetail,
    PromptHeaderResponse,
    PromptSummary,
    PromptUpdate,
    SavePromptResponse,
    SetActiveVersionRequest,
    UpdatePromptResponse,
    VersionResponse,
)
from prompthub.services.version_store import VersionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/db", tags=["Prompts"])


@router.get("/getPrompts", response_model=list[PromptSummary])
def list_prompts(store: VersionStore = Depends(get_version_store)):
    return store.list_prompts()


@router.get("/getPrompt/{prompt_id}", response_model=PromptDetail)
def get_prompt(prompt_id: str, store: VersionStore = Depends(get_version_store)):
    return store.get_prompt(prompt_id)


@router.get("/getPromptVersions/{prompt_id}", response_model=list[VersionResponse])
def list_prompt_versions(prompt_id: str, store: VersionStore = Depends(get_version_store)):
    return store.list_versions(prompt_id)


@router.put("/setActiveVersion", response_model=PromptHeaderResponse)
def set_active_version(payload: SetActiveVersionRequest, store: VersionStore = Depends(get_version_store)):
    prompt = store.set_active_version(payload.prompt_id, payload.version_id)
    return PromptHeaderResponse(message="Active version updated successfully", prompt=prompt)


@router.put("/updatePrompt/{prompt_id}", response_model=UpdatePromptResponse)
def update_prompt(prompt_id: str, payload: PromptUpdate, store: VersionStore = Depends(get_version_store)):
    logger.info("Creating new version for prompt %s", prompt_id)
    prompt = store.create_version(
        prompt_id,
        payload.prompt_text,
        created_by=payload.created_by,
        metadata=payload.metadata,
    )
    return UpdatePromptResponse(message="New version created successfully", prompt=prompt)


@router.post("/saveNewPrompt", response_model=SavePromptResponse, status_code=201)
def save_new_prompt(payload: PromptCreate, store: VersionStore = Depends(get_version_store)):
    result = store.create_prompt(
        title=payload.title,
        content=payload.content,
        description=payload.description,
        category=payload.category,
        created_by=payload.created_by,
        metadata=payload.metadata,
    )
    return SavePromptResponse(message="Prompt saved successfully", prompt=result["prompt"], source=result["source"])


@router.delete("/prompts/{prompt_id}", response_model=PromptHeaderResponse)
def archive_prompt(prompt_id: str, store: VersionStore = Depends(get_version_store)):
    prompt = store.archive_prompt(prompt_id)
    return PromptHeaderResponse(message="Prompt archived", prompt=prompt)
