"""
Core dependencies for route protection and admin checks
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Dict[str, Any]]:
    """Current user when a bearer token is sent, None for anonymous visitors"""
    if credentials is None:
        return None
    return auth_service.get_current_user(credentials.credentials)


def is_admin_email(email: str) -> bool:
    return bool(email) and email.lower() in settings.get_admin_emails_list()


def has_admin_role(user_id: str, supabase: Client) -> bool:
    try:
        result = supabase.table("user_roles")\
            .select("id")\
            .eq("user_id", user_id)\
            .eq("role", "admin")\
            .limit(1)\
            .execute()
        return bool(result.data)
    except Exception as e:
        logger.error(f"Error checking admin role for {user_id}: {e}")
        return False


def ensure_admin_role(user_id: str, supabase: Client) -> None:
    """Admin emails get a persisted admin role on first admin request"""
    if has_admin_role(user_id, supabase):
        return
    supabase.table("user_roles").insert({"user_id": user_id, "role": "admin"}).execute()
    logger.info(f"Admin role created for user: {user_id}")


def is_admin(user_data: Dict[str, Any], supabase: Client) -> bool:
    """Admin if the email is in the configured admin list or the user has an admin role row"""
    if is_admin_email(user_data.get("email") or ""):
        return True
    return has_admin_role(user_data["id"], supabase)


def require_admin(
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> Dict[str, Any]:
    """Dependency that only lets admins through"""
    if is_admin_email(user_data.get("email") or ""):
        ensure_admin_role(user_data["id"], supabase)
        return user_data
    if has_admin_role(user_data["id"], supabase):
        return user_data
    logger.info(f"Admin access denied for email: {user_data.get('email')}")
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Unauthorized: Admin access required"
    )


def get_request_origin(request: Request) -> str:
    """Origin used for checkout return URLs"""
    return (request.headers.get("origin") or settings.app_url).rstrip("/")
