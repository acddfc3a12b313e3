from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin operations, webhooks and OTP signup

    # DeepSeek (content generation)
    deepseek_api_key: Optional[str] = None
    deepseek_base_url: str = "https://api.deepseek.com"
    deepseek_model: str = "deepseek-chat"
    deepseek_timeout_sec: float = 120.0

    # Resend (email)
    resend_api_key: Optional[str] = None
    resend_base_url: str = "https://api.resend.com"
    email_from: str = "PeakDraft <onboarding@resend.dev>"
    support_email: str = "support@peakdraft.app"

    # Dodo Payments
    dodo_payments_api_key: Optional[str] = None
    dodo_payments_base_url: str = "https://test.dodopayments.com"  # live.dodopayments.com in production
    dodo_payments_webhook_key: Optional[str] = None
    dodo_basic_product_id: Optional[str] = None
    dodo_pro_product_id: Optional[str] = None
    dodo_enterprise_product_id: Optional[str] = None

    # Paddle
    paddle_api_key: Optional[str] = None
    paddle_client_token: Optional[str] = None
    paddle_webhook_secret: Optional[str] = None
    paddle_basic_price_id: str = "pri_basic"
    paddle_pro_price_id: str = "pri_pro"
    paddle_enterprise_price_id: str = "pri_enterprise"

    # FastSpring
    fastspring_api_username: Optional[str] = None
    fastspring_api_password: Optional[str] = None
    fastspring_base_url: str = "https://api.fastspring.com"

    # PayPal
    paypal_secret_key: Optional[str] = None

    # AWS S3 (task attachments; reads uppercase env vars automatically)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # App
    app_name: str = "peakdraft-backend"
    app_url: str = "https://peakdraftapp.netlify.app"
    admin_emails: str = ""  # comma separated
    cron_secret: Optional[str] = None  # lets a scheduler call /payments/expire-subscriptions
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    # Background loops
    enable_reminder_dispatch: bool = True
    enable_subscription_expiry: bool = False
    subscription_expiry_interval_sec: int = 3600

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_admin_emails_list(self) -> List[str]:
        return [e.strip().lower() for e in self.admin_emails.split(",") if e.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
