from typing import List, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from supabase import AsyncClient

from arena.api.dependencies import get_current_user_id, get_db, get_stores
from arena.api.responses import unwrap
from arena.schemas import tournament_schemas
from arena.schemas.tournament_schemas import TournamentStatus
from arena.services import tournament_service
from arena.services.store_sync import sync_store
from arena.stores import AppStores

router = APIRouter()

@router.get("", response_model=List[tournament_schemas.TournamentRead])
async def list_tournaments_endpoint(
    status_filter: Optional[TournamentStatus] = Query(None, alias="status"),
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.tournaments
    result = await sync_store(
        store,
        tournament_service.list_tournaments(db, status=status_filter.value if status_filter else None),
        store.set_items,
    )
    return unwrap(result)

@router.post("", response_model=tournament_schemas.TournamentRead, status_code=status.HTTP_201_CREATED)
async def create_tournament_endpoint(
    tournament_in: tournament_schemas.TournamentCreate,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    current_user_id: str = Depends(get_current_user_id),
):
    store = stores.tournaments
    result = await sync_store(store, tournament_service.create_tournament(db, tournament_in), store.add)
    return unwrap(result)

@router.get("/{tournament_id}", response_model=tournament_schemas.TournamentWithMatches)
async def get_tournament_endpoint(
    tournament_id: str,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.tournaments
    result = await sync_store(store, tournament_service.get_tournament(db, tournament_id), store.set_current)
    return unwrap(result, not_found_detail="Tournament not found")

@router.patch("/{tournament_id}", response_model=tournament_schemas.TournamentRead)
async def update_tournament_endpoint(
    tournament_id: str,
    tournament_in: tournament_schemas.TournamentUpdate,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    current_user_id: str = Depends(get_current_user_id),
):
    store = stores.tournaments
    result = await sync_store(
        store, tournament_service.update_tournament(db, tournament_id, tournament_in), store.update
    )
    return unwrap(result, not_found_detail="Tournament not found")

@router.delete("/{tournament_id}", response_model=Dict[str, str])
async def delete_tournament_endpoint(
    tournament_id: str,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    current_user_id: str = Depends(get_current_user_id),
):
    store = stores.tournaments
    result = await sync_store(
        store, tournament_service.delete_tournament(db, tournament_id), lambda _: store.remove(tournament_id)
    )
    unwrap(result, not_found_detail="Tournament not found")
    return {"message": "Tournament deleted successfully"}
