from supabase import Client
from app.config.plans import list_plans
from app.core.timeutils import utcnow, parse_datetime
from app.modules.payments.schemas import (
    DiscountCodeCreate, DiscountCodeResponse, DiscountValidateResponse, PlanResponse
)
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class DiscountService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def redeem(self, user_id: str, code: str) -> DiscountValidateResponse:
        """Validate a code for this user, record its use and return discounted prices"""
        code = (code or "").strip().upper()
        if not code:
            raise HTTPException(status_code=400, detail="Discount code is required")

        result = self.supabase.table("discount_codes")\
            .select("*")\
            .eq("code", code)\
            .eq("is_active", True)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=400, detail="The discount code you entered is not valid or has expired.")
        discount = result.data[0]

        expires_at = parse_datetime(discount.get("expires_at"))
        if expires_at and expires_at < utcnow():
            raise HTTPException(status_code=400, detail="This discount code has expired.")

        used_count = discount.get("used_count") or 0
        if discount.get("max_uses") and used_count >= discount["max_uses"]:
            raise HTTPException(status_code=400, detail="This discount code has reached its usage limit.")

        usage = self.supabase.table("discount_code_usage")\
            .select("id")\
            .eq("discount_code_id", discount["id"])\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if usage.data:
            raise HTTPException(status_code=400, detail="You have already used this discount code.")

        try:
            self.supabase.table("discount_code_usage").insert({
                "discount_code_id": discount["id"],
                "user_id": user_id,
            }).execute()
            self.supabase.table("discount_codes")\
                .update({"used_count": used_count + 1})\
                .eq("id", discount["id"])\
                .execute()
        except Exception as e:
            logger.error(f"Error recording discount usage for {code}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to validate discount code. Please try again.")

        percent = discount["discount_percent"]
        logger.info(f"Discount code {code} ({percent}%) applied for user {user_id}")
        return DiscountValidateResponse(
            code=code,
            discount_percent=percent,
            plans=[PlanResponse(**p) for p in list_plans(percent)],
        )

    # Admin

    def list_codes(self) -> List[DiscountCodeResponse]:
        try:
            result = self.supabase.table("discount_codes")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [DiscountCodeResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_code(self, code_data: DiscountCodeCreate) -> DiscountCodeResponse:
        code = code_data.code.strip().upper()
        if not code:
            raise HTTPException(status_code=400, detail="Discount code is required")
        existing = self.supabase.table("discount_codes").select("id").eq("code", code).limit(1).execute()
        if existing.data:
            raise HTTPException(status_code=400, detail="Discount code already exists")
        try:
            result = self.supabase.table("discount_codes").insert({
                "code": code,
                "discount_percent": code_data.discount_percent,
                "max_uses": code_data.max_uses,
                "expires_at": code_data.expires_at.isoformat() if code_data.expires_at else None,
                "used_count": 0,
                "is_active": True,
            }).execute()
            logger.info(f"Discount code created: {code}")
            return DiscountCodeResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle_code(self, code_id: str) -> DiscountCodeResponse:
        result = self.supabase.table("discount_codes").select("*").eq("id", code_id).limit(1).execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Discount code not found")
        try:
            updated = self.supabase.table("discount_codes")\
                .update({"is_active": not result.data[0].get("is_active")})\
                .eq("id", code_id)\
                .execute()
            return DiscountCodeResponse(**updated.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
