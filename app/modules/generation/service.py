from supabase import Client
from app.config.plans import DEFAULT_WORDS_LIMIT
from app.modules.generation.deepseek_client import DeepSeekClient
from app.modules.generation.prompts import build_system_prompt
from app.modules.generation.schemas import GenerateRequest, GenerateResponse, GenerationResponse
from app.modules.generation.templates import build_user_prompt
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService
from typing import List, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10


def word_count(text: str) -> int:
    return len((text or "").split())


def check_word_limit(profile: ProfileResponse) -> None:
    """Generation is blocked once words_used reaches words_limit"""
    words_used = profile.words_used or 0
    words_limit = profile.words_limit if profile.words_limit is not None else DEFAULT_WORDS_LIMIT
    if words_used >= words_limit:
        raise HTTPException(
            status_code=402,
            detail="Word limit reached. Please upgrade your plan to generate more content."
        )


class GenerationService:
    def __init__(self, supabase: Client, client: DeepSeekClient):
        self.supabase = supabase
        self.client = client
        self.profiles = ProfileService(supabase)

    def generate(self, user_data: Dict[str, Any], request: GenerateRequest) -> GenerateResponse:
        """Generate content for a template, record it and charge the words to the profile"""
        if not request.template_type or not request.prompt or not request.prompt.strip():
            raise HTTPException(status_code=400, detail="Template type and prompt are required")

        profile = self.profiles.ensure_profile(user_data)
        check_word_limit(profile)

        user_prompt = build_user_prompt(request.template_type, request.prompt.strip(), request.options)
        system_prompt = build_system_prompt(request.template_type, request.language, request.keywords)
        logger.info(f"Generating content for user {profile.user_id} with template: {request.template_type}")
        content = self.client.complete(system_prompt, user_prompt)
        count = word_count(content)

        try:
            result = self.supabase.table("content_generations").insert({
                "user_id": profile.user_id,
                "template_type": request.template_type,
                "prompt": request.prompt,
                "generated_content": content,
                "word_count": count,
                "language": request.language or "en",
                "keywords": request.keywords or None,
            }).execute()
            self.profiles.add_word_usage(profile.user_id, count)
        except Exception as e:
            logger.error(f"Error recording generation for {profile.user_id}: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

        generation_id = result.data[0]["id"] if result.data else None
        return GenerateResponse(
            id=generation_id,
            generated_content=content,
            word_count=count,
            words_used=(profile.words_used or 0) + count,
            words_limit=profile.words_limit if profile.words_limit is not None else DEFAULT_WORDS_LIMIT,
        )

    def list_recent(self, user_id: str, template_type: str, limit: int = RECENT_LIMIT) -> List[GenerationResponse]:
        """Latest generations for one template, newest first"""
        try:
            result = self.supabase.table("content_generations")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("template_type", template_type)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [GenerationResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_history(self, user_id: str, limit: int = 50, offset: int = 0) -> List[GenerationResponse]:
        try:
            result = self.supabase.table("content_generations")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [GenerationResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_generation(self, user_id: str, generation_id: str) -> bool:
        """Delete a generation owned by the user"""
        try:
            result = self.supabase.table("content_generations")\
                .delete()\
                .eq("id", generation_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Content not found")
        return True
