from pydantic import BaseModel
from typing import Dict, List, Optional


class DispatchRequest(BaseModel):
    prompt: Optional[str] = None
    provider_ids: Optional[List[str]] = None


class ProviderResult(BaseModel):
    provider_id: str
    provider_name: str
    model: str

    # Exactly one of these is set
    response_text: Optional[str] = None
    error_text: Optional[str] = None

    usage: Optional[Dict[str, int]] = None
    success: bool
    mocked: bool = False


class DispatchResponse(BaseModel):
    success: bool = True
    results: List[ProviderResult]


class ProviderInfo(BaseModel):
    id: str
    name: str
    kind: str
    model: str
    endpoint: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    integrated: bool  # False means dispatch answers with a mock
