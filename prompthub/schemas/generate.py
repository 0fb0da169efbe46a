from pydantic import BaseModel
from typing import Dict, Optional


class GenerateRequest(BaseModel):
    prompt: Optional[str] = None
    model: str = "llama-3.1-8b-instant"
    max_tokens: int = 1024


class GenerateResponse(BaseModel):
    success: bool = True
    generated_text: str
    usage: Optional[Dict[str, int]] = None
    model: Optional[str] = None


class FormatPromptRequest(BaseModel):
    prompt: Optional[str] = None
    instruction: Optional[str] = None


class FormatPromptResponse(BaseModel):
    success: bool = True
    formatted_prompt: str
    usage: Optional[Dict[str, int]] = None
    model: Optional[str] = None
