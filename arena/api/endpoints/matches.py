from typing import List, Dict, Optional

from fastapi import APIRouter, Depends, status
from supabase import AsyncClient

from arena.api.dependencies import get_current_user_id, get_db, get_stores
from arena.api.responses import unwrap
from arena.schemas import match_schemas
from arena.services import match_service
from arena.services.store_sync import sync_store
from arena.stores import AppStores

router = APIRouter()

@router.get("", response_model=List[match_schemas.MatchWithPlayers])
async def list_matches_endpoint(
    tournament_id: Optional[str] = None,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.matches
    result = await sync_store(store, match_service.list_matches(db, tournament_id=tournament_id), store.set_items)
    return unwrap(result)

@router.post("", response_model=match_schemas.MatchRead, status_code=status.HTTP_201_CREATED)
async def create_match_endpoint(
    match_in: match_schemas.MatchCreate,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    current_user_id: str = Depends(get_current_user_id),
):
    store = stores.matches
    result = await sync_store(store, match_service.create_match(db, match_in), store.add)
    return unwrap(result)

@router.get("/{match_id}", response_model=match_schemas.MatchWithPlayers)
async def get_match_endpoint(
    match_id: str,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.matches
    result = await sync_store(store, match_service.get_match(db, match_id), store.set_current)
    return unwrap(result, not_found_detail="Match not found")

@router.patch("/{match_id}", response_model=match_schemas.MatchRead)
async def update_match_endpoint(
    match_id: str,
    match_in: match_schemas.MatchUpdate,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    current_user_id: str = Depends(get_current_user_id),
):
    store = stores.matches
    result = await sync_store(store, match_service.update_match(db, match_id, match_in), store.update)
    return unwrap(result, not_found_detail="Match not found")

@router.delete("/{match_id}", response_model=Dict[str, str])
async def delete_match_endpoint(
    match_id: str,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    current_user_id: str = Depends(get_current_user_id),
):
    store = stores.matches
    result = await sync_store(store, match_service.delete_match(db, match_id), lambda _: store.remove(match_id))
    unwrap(result, not_found_detail="Match not found")
    return {"message": "Match deleted successfully"}
