from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime


class GenerateRequest(BaseModel):
    template_type: Optional[str] = None
    prompt: Optional[str] = None
    language: Optional[str] = "en"
    keywords: Optional[List[str]] = None
    options: Dict[str, Any] = {}  # template form fields, e.g. letter_type, recipient, platform


class GenerateResponse(BaseModel):
    id: Optional[str] = None
    generated_content: str
    word_count: int
    words_used: int
    words_limit: int


class GenerationResponse(BaseModel):
    id: str
    user_id: str
    template_type: str
    prompt: str
    generated_content: str
    word_count: int
    language: Optional[str] = None
    keywords: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
