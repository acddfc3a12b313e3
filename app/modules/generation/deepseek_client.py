import httpx
from fastapi import HTTPException
from app.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

MAX_TOKENS = 2048
TEMPERATURE = 0.7


class DeepSeekClient:
    """Chat-completion client for the content generation API."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.deepseek_api_key
        self.base_url = (base_url or settings.deepseek_base_url).rstrip("/")
        self.model = model or settings.deepseek_model

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the generated text for one system+user exchange"""
        if not self.api_key:
            logger.error("DeepSeek API key not found")
            raise HTTPException(status_code=500, detail="API key not configured")

        try:
            response = httpx.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    "max_tokens": MAX_TOKENS,
                    "temperature": TEMPERATURE,
                    "stream": False,
                },
                timeout=settings.deepseek_timeout_sec,
            )
        except httpx.HTTPError as e:
            logger.error(f"DeepSeek request failed: {str(e)}")
            raise HTTPException(status_code=502, detail="Generation service unavailable")

        if response.status_code >= 400:
            logger.error(f"DeepSeek API error: {response.status_code} {response.text}")
            raise HTTPException(status_code=502, detail=f"API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"DeepSeek returned a non-JSON body: {response.text[:200]}")
            raise HTTPException(status_code=502, detail="Unexpected API response format")
        if not isinstance(data, dict):
            logger.error(f"Unexpected API response structure: {data}")
            raise HTTPException(status_code=502, detail="Unexpected API response format")

        choices = data.get("choices") or []
        if not choices or not choices[0].get("message"):
            logger.error(f"Unexpected API response structure: {data}")
            raise HTTPException(status_code=502, detail="Unexpected API response format")
        return choices[0]["message"].get("content") or ""


def get_generation_client() -> DeepSeekClient:
    return DeepSeekClient()
