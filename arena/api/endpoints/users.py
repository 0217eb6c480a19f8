from fastapi import APIRouter, Depends
from supabase import AsyncClient

from arena.api.dependencies import get_current_user_id, get_db
from arena.api.responses import unwrap
from arena.schemas import user_schemas
from arena.services import user_service

router = APIRouter()

@router.get("/me", response_model=user_schemas.UserRead)
async def read_current_user(
    db: AsyncClient = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    """Profile of the signed-in user, including the wallet balance."""
    result = await user_service.get_user(db, current_user_id)
    return unwrap(result, not_found_detail="User not found")
