from supabase import Client
from app.config.plans import FREE_PLAN, DEFAULT_WORDS_LIMIT, get_words_limit
from app.modules.profiles.schemas import ProfileResponse, ProfileUpdate, UsageResponse
from typing import Dict, Any, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def compute_usage(profile: ProfileResponse) -> UsageResponse:
    """Word usage summary shown in the sidebar and usage page."""
    words_used = profile.words_used or 0
    words_limit = profile.words_limit if profile.words_limit is not None else DEFAULT_WORDS_LIMIT
    if words_limit > 0:
        percentage = min(words_used / words_limit * 100, 100.0)
    else:
        percentage = 100.0
    if percentage >= 90:
        level = "critical"
    elif percentage >= 70:
        level = "warning"
    else:
        level = "ok"
    return UsageResponse(
        subscription_plan=profile.subscription_plan or FREE_PLAN,
        words_used=words_used,
        words_limit=words_limit,
        words_remaining=max(0, words_limit - words_used),
        usage_percentage=round(percentage, 2),
        level=level,
        limit_reached=words_used >= words_limit,
    )


def display_name_for(user_data: Dict[str, Any]) -> str:
    metadata = user_data.get("user_metadata") or {}
    name = metadata.get("display_name") or metadata.get("full_name")
    if name:
        return name
    return user_data.get("email") or "User"


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Get profile by auth user id, None when it does not exist yet"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return ProfileResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_profile(self, user_id: str, display_name: str) -> ProfileResponse:
        """Create a free-plan profile"""
        try:
            result = self.supabase.table("profiles").insert({
                "user_id": user_id,
                "display_name": display_name,
                "subscription_plan": FREE_PLAN,
                "words_limit": get_words_limit(FREE_PLAN),
                "words_used": 0,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create profile")
            logger.info(f"Created free profile for user {user_id}")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def ensure_profile(self, user_data: Dict[str, Any]) -> ProfileResponse:
        """Return the user's profile, creating it on first sign-in"""
        profile = self.get_profile(user_data["id"])
        if profile:
            return profile
        return self.create_profile(user_data["id"], display_name_for(user_data))

    def require_profile(self, user_id: str) -> ProfileResponse:
        profile = self.get_profile(user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update display name / avatar"""
        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if profile_data.display_name is not None:
            update_data["display_name"] = profile_data.display_name
        if profile_data.avatar_url is not None:
            update_data["avatar_url"] = profile_data.avatar_url
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_word_usage(self, user_id: str, words: int) -> None:
        """Increment words_used through the update_word_usage RPC"""
        self.supabase.rpc("update_word_usage", {
            "user_uuid": user_id,
            "words_to_add": words,
        }).execute()
