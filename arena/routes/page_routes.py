from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from supabase import AsyncClient

from arena.api.dependencies import get_auth_store, get_db, get_stores
from arena.core.exceptions import NotFoundError
from arena.schemas import match_schemas, tournament_schemas
from arena.services import match_service, tournament_service, user_service
from arena.services.store_sync import sync_store
from arena.stores import AppStores, AuthStore
from arena.routes.common import flash, form_errors, render

router = APIRouter()

# Paths below are only reachable with a live session (see SessionGuardMiddleware)


@router.get("/", include_in_schema=False)
async def home():
    return RedirectResponse(url="/dashboard", status_code=303)


@router.get("/dashboard", summary="Overview of the signed-in user")
async def dashboard(
    request: Request,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    auth: AuthStore = Depends(get_auth_store),
):
    profile = await user_service.get_user(db, auth.user.id)
    if profile.error is not None and not isinstance(profile.error, NotFoundError):
        flash(request, profile.error.message)

    store = stores.tournaments
    result = await sync_store(store, tournament_service.list_tournaments(db, status="upcoming"), store.set_items)
    if result.error is not None:
        flash(request, result.error.message)
    return render(request, "dashboard.html", {"profile": profile.data, "upcoming": store.tournaments})


# --- Tournaments ---

@router.get("/tournaments", summary="Tournament list")
async def tournaments_page(
    request: Request,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.tournaments
    result = await sync_store(store, tournament_service.list_tournaments(db), store.set_items)
    if result.error is not None:
        flash(request, result.error.message)
    return render(request, "tournaments.html", {"tournaments": store.tournaments})


@router.get("/tournaments/new", summary="Create tournament form")
async def new_tournament_page(request: Request):
    return render(request, "tournament_form.html", {"form": {}, "errors": {}})


@router.post("/tournaments/new", summary="Create a tournament")
async def create_tournament(
    request: Request,
    title: str = Form(""),
    game_type: str = Form(""),
    entry_fee: str = Form("0"),
    prize_pool: str = Form("0"),
    max_players: str = Form(""),
    start_time: str = Form(""),
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    form = {
        "title": title, "game_type": game_type, "entry_fee": entry_fee,
        "prize_pool": prize_pool, "max_players": max_players, "start_time": start_time,
    }
    try:
        tournament_in = tournament_schemas.TournamentCreate(**form)
    except ValidationError as e:
        return render(request, "tournament_form.html", {"form": form, "errors": form_errors(e)}, status_code=422)

    store = stores.tournaments
    result = await sync_store(store, tournament_service.create_tournament(db, tournament_in), store.add)
    if result.error is not None:
        flash(request, result.error.message)
        return render(request, "tournament_form.html", {"form": form, "errors": {}}, status_code=400)

    flash(request, "Tournament created", "success")
    return RedirectResponse(url=f"/tournaments/{result.data.id}", status_code=303)


@router.get("/tournaments/{tournament_id}", summary="Tournament details with matches")
async def tournament_detail_page(
    request: Request,
    tournament_id: str,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.tournaments
    result = await sync_store(store, tournament_service.get_tournament(db, tournament_id), store.set_current)
    if result.error is not None:
        flash(request, "Tournament not found" if isinstance(result.error, NotFoundError) else result.error.message)
        return RedirectResponse(url="/tournaments?error=not_found", status_code=303)

    stores.matches.set_items(result.data.matches)
    return render(request, "tournament_detail.html", {
        "tournament": result.data,
        "matches": stores.matches.matches,
        "statuses": [s.value for s in tournament_schemas.TournamentStatus],
    })


@router.post("/tournaments/{tournament_id}/status", summary="Change tournament status")
async def update_tournament_status(
    request: Request,
    tournament_id: str,
    status: str = Form(...),
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    try:
        update = tournament_schemas.TournamentUpdate(status=status)
    except ValidationError:
        flash(request, f"Unknown status: {status}")
        return RedirectResponse(url=f"/tournaments/{tournament_id}", status_code=303)

    store = stores.tournaments
    result = await sync_store(store, tournament_service.update_tournament(db, tournament_id, update), store.update)
    flash(request, result.error.message if result.error else "Tournament updated", "error" if result.error else "success")
    return RedirectResponse(url=f"/tournaments/{tournament_id}", status_code=303)


@router.post("/tournaments/{tournament_id}/delete", summary="Delete a tournament")
async def delete_tournament(
    request: Request,
    tournament_id: str,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.tournaments
    result = await sync_store(
        store, tournament_service.delete_tournament(db, tournament_id), lambda _: store.remove(tournament_id)
    )
    if result.error is not None:
        flash(request, result.error.message)
        return RedirectResponse(url=f"/tournaments/{tournament_id}", status_code=303)
    flash(request, "Tournament deleted", "success")
    return RedirectResponse(url="/tournaments", status_code=303)


@router.post("/tournaments/{tournament_id}/matches", summary="Add a match to a tournament")
async def create_match(
    request: Request,
    tournament_id: str,
    player1_id: str = Form(""),
    player2_id: str = Form(""),
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    match_in = match_schemas.MatchCreate(
        tournament_id=tournament_id,
        player1_id=player1_id or None,
        player2_id=player2_id or None, # empty slot
    )
    store = stores.matches
    result = await sync_store(store, match_service.create_match(db, match_in), store.add)
    flash(request, result.error.message if result.error else "Match created", "error" if result.error else "success")
    return RedirectResponse(url=f"/tournaments/{tournament_id}", status_code=303)


# --- Matches ---

@router.get("/matches", summary="Match list")
async def matches_page(
    request: Request,
    tournament_id: Optional[str] = None,
    mine: bool = False,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
    auth: AuthStore = Depends(get_auth_store),
):
    store = stores.matches
    result = await sync_store(store, match_service.list_matches(db, tournament_id=tournament_id), store.set_items)
    if result.error is not None:
        flash(request, result.error.message)
    matches = store.for_player(auth.user.id) if mine else store.matches
    return render(request, "matches.html", {"matches": matches, "tournament_id": tournament_id, "mine": mine})


@router.get("/matches/{match_id}", summary="Match details")
async def match_detail_page(
    request: Request,
    match_id: str,
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.matches
    result = await sync_store(store, match_service.get_match(db, match_id), store.set_current)
    if result.error is not None:
        flash(request, "Match not found" if isinstance(result.error, NotFoundError) else result.error.message)
        return RedirectResponse(url="/matches?error=not_found", status_code=303)
    return render(request, "match_detail.html", {
        "match": result.data,
        "statuses": [s.value for s in match_schemas.MatchStatus],
        "errors": {},
    })


@router.post("/matches/{match_id}/result", summary="Report a match result")
async def submit_match_result(
    request: Request,
    match_id: str,
    score: str = Form(""),
    winner_id: str = Form(""),
    status: str = Form(match_schemas.MatchStatus.COMPLETED.value),
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    try:
        update = match_schemas.MatchUpdate(score=score or None, winner_id=winner_id or None, status=status)
    except ValidationError as e:
        flash(request, "; ".join(form_errors(e).values()))
        return RedirectResponse(url=f"/matches/{match_id}", status_code=303)

    # The winner is checked against the stored match by the service
    store = stores.matches
    result = await sync_store(store, match_service.update_match(db, match_id, update), store.update)
    flash(request, result.error.message if result.error else "Result saved", "error" if result.error else "success")
    return RedirectResponse(url=f"/matches/{match_id}", status_code=303)


@router.post("/matches/{match_id}/delete", summary="Delete a match")
async def delete_match(
    request: Request,
    match_id: str,
    tournament_id: str = Form(""),
    db: AsyncClient = Depends(get_db),
    stores: AppStores = Depends(get_stores),
):
    store = stores.matches
    result = await sync_store(store, match_service.delete_match(db, match_id), lambda _: store.remove(match_id))
    flash(request, result.error.message if result.error else "Match deleted", "error" if result.error else "success")
    return RedirectResponse(url=f"/tournaments/{tournament_id}" if tournament_id else "/matches", status_code=303)


# --- Wallet ---

@router.get("/wallet", summary="Wallet balance")
async def wallet_page(
    request: Request,
    db: AsyncClient = Depends(get_db),
    auth: AuthStore = Depends(get_auth_store),
):
    result = await user_service.get_user(db, auth.user.id)
    if result.error is not None:
        flash(request, result.error.message)
    return render(request, "wallet.html", {"profile": result.data})
