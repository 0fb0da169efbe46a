from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional


# Required fields are validated by the version store so that missing values
# come back as structured ValidationErrors naming the field.
class PromptCreate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    created_by: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class PromptUpdate(BaseModel):
    prompt_text: Optional[str] = None
    created_by: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class SetActiveVersionRequest(BaseModel):
    prompt_id: Optional[str] = None
    version_id: Optional[str] = None


class VersionResponse(BaseModel):
    version_id: str
    prompt_id: str
    version_number: int
    prompt_text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_by: Optional[str] = None
    is_published: bool = True
    created_at: Optional[datetime] = None


class PromptHeader(BaseModel):
    prompt_id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    active_version_id: Optional[str] = None
    is_active: bool = True
    parent_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PromptSummary(PromptHeader):
    # Fields of the active version, empty when there is none
    version_id: Optional[str] = None
    version_number: Optional[int] = None
    prompt_text: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_by: Optional[str] = None
    is_published: Optional[bool] = None
    version_created_at: Optional[datetime] = None


class PromptDetail(PromptHeader):
    prompt_versions: List[VersionResponse] = Field(default_factory=list)


class SavePromptResponse(BaseModel):
    success: bool = True
    message: str
    prompt: PromptDetail
    source: Literal["read_back", "local"]


class UpdatePromptResponse(BaseModel):
    success: bool = True
    message: str
    prompt: PromptSummary


class PromptHeaderResponse(BaseModel):
    success: bool = True
    message: str
    prompt: PromptHeader
