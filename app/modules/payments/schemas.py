from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class PlanResponse(BaseModel):
    id: str
    name: str
    words_limit: int
    price: float
    discounted_price: float
    description: str


class CheckoutRequest(BaseModel):
    plan_id: Optional[str] = None


class DodoCheckoutResponse(BaseModel):
    success: bool = True
    checkout_url: Optional[str] = None
    session_id: Optional[str] = None


class PaddleCheckoutResponse(BaseModel):
    success: bool = True
    client_token: Optional[str] = None
    price_id: str
    custom_data: Dict[str, str]
    customer_email: Optional[str] = None


class FastSpringSessionResponse(BaseModel):
    success: bool = True
    session_id: Optional[str] = None
    product_path: str


class SubscriptionInfo(BaseModel):
    plan: str
    words_limit: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class SubscriptionResult(BaseModel):
    success: bool = True
    message: str
    plan: str
    words_limit: Optional[int] = None
    subscription: Optional[SubscriptionInfo] = None


class PaymentCaptureRequest(BaseModel):
    plan_id: Optional[str] = None
    payment_details: Optional[Dict[str, Any]] = None
    provider: str = "paypal"


class VerifyPaymentRequest(BaseModel):
    plan_id: Optional[str] = None


class DiscountValidateRequest(BaseModel):
    code: str


class DiscountValidateResponse(BaseModel):
    code: str
    discount_percent: int
    plans: List[PlanResponse]


class DiscountCodeCreate(BaseModel):
    code: str
    discount_percent: int = Field(..., ge=1, le=100)
    max_uses: Optional[int] = Field(None, ge=1)
    expires_at: Optional[datetime] = None


class DiscountCodeResponse(BaseModel):
    id: str
    code: str
    discount_percent: int
    max_uses: Optional[int] = None
    used_count: int = 0
    is_active: bool = True
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DowngradedUser(BaseModel):
    user_id: str
    previous_plan: Optional[str] = None
    expired_date: Optional[datetime] = None


class ExpiryResult(BaseModel):
    success: bool = True
    message: str
    processed: int
    downgraded_users: List[DowngradedUser] = []
