from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.generation.deepseek_client import DeepSeekClient, get_generation_client
from app.modules.generation.schemas import GenerateRequest, GenerateResponse, GenerationResponse
from app.modules.generation.service import GenerationService
from app.modules.generation.templates import supported_templates
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/generations", tags=["generations"])


def get_generation_service(
    supabase: Client = Depends(get_supabase),
    client: DeepSeekClient = Depends(get_generation_client)
) -> GenerationService:
    return GenerationService(supabase, client)


@router.post("", response_model=GenerateResponse)
async def generate_content(
    request: GenerateRequest,
    user_data: Dict = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service)
):
    """Generate content for a template (charged against the word quota)"""
    return service.generate(user_data, request)


@router.get("/templates", response_model=List[str])
async def list_template_builders():
    """Template types with a dedicated prompt builder"""
    return supported_templates()


@router.get("", response_model=List[GenerationResponse])
async def list_generations(
    template_type: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service)
):
    """Recent content for one template (latest 10) or the full history"""
    if template_type:
        return service.list_recent(user_data["id"], template_type)
    return service.list_history(user_data["id"], limit=limit, offset=offset)


@router.delete("/{generation_id}", status_code=204)
async def delete_generation(
    generation_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service)
):
    service.delete_generation(user_data["id"], generation_id)
    return None
