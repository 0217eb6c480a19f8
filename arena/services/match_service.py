from typing import List, Optional

from supabase import AsyncClient

from arena.core.exceptions import ArenaError
from arena.schemas import match_schemas
from arena.schemas.result_schemas import Result
from arena.services.query import first_row, run_query

TABLE = "matches"

PLAYER_FIELDS = "id, username, game_id"

# Each player column is a foreign key to users; embed the public profile fields
MATCH_WITH_PLAYERS_SELECT = (
    "*, "
    f"player1:users!player1_id ({PLAYER_FIELDS}), "
    f"player2:users!player2_id ({PLAYER_FIELDS}), "
    f"winner:users!winner_id ({PLAYER_FIELDS})"
)

async def list_matches(db: AsyncClient, tournament_id: Optional[str] = None) -> Result[List[match_schemas.MatchWithPlayers]]:
    query = db.table(TABLE).select(MATCH_WITH_PLAYERS_SELECT)
    if tournament_id:
        query = query.eq("tournament_id", tournament_id)
    query = query.order("created_at")
    return await run_query(
        "fetching matches",
        query.execute,
        lambda rows: [match_schemas.MatchWithPlayers.model_validate(row) for row in rows],
    )

async def get_match(db: AsyncClient, match_id: str) -> Result[match_schemas.MatchWithPlayers]:
    query = db.table(TABLE).select(MATCH_WITH_PLAYERS_SELECT).eq("id", match_id).single()
    return await run_query(
        f"fetching match {match_id}",
        query.execute,
        match_schemas.MatchWithPlayers.model_validate,
    )

async def create_match(db: AsyncClient, match: match_schemas.MatchCreate) -> Result[match_schemas.MatchRead]:
    query = db.table(TABLE).insert(match.model_dump(mode="json"))
    return await run_query(
        "creating match",
        query.execute,
        lambda rows: match_schemas.MatchRead.model_validate(first_row(rows, "Match")),
    )

async def update_match(db: AsyncClient, match_id: str, match_update: match_schemas.MatchUpdate) -> Result[match_schemas.MatchRead]:
    update_data = match_update.model_dump(mode="json", exclude_unset=True)
    if not update_data:
        return Result.failure(ArenaError("No fields to update"))

    if {"player1_id", "player2_id", "winner_id"} & update_data.keys():
        checked = await check_winner(db, match_id, update_data)
        if checked.error is not None:
            return Result.failure(checked.error)

    query = db.table(TABLE).update(update_data).eq("id", match_id)
    return await run_query(
        f"updating match {match_id}",
        query.execute,
        lambda rows: match_schemas.MatchRead.model_validate(first_row(rows, "Match")),
    )

async def check_winner(db: AsyncClient, match_id: str, update_data: dict) -> Result[None]:
    """
    Checks the winner the match would have after applying update_data against
    the players it would have. Fields missing from update_data keep their
    stored values.
    """
    current = await get_match(db, match_id)
    if current.error is not None:
        return Result.failure(current.error)

    match = current.data
    player1_id = update_data.get("player1_id", match.player1_id)
    player2_id = update_data.get("player2_id", match.player2_id)
    winner_id = update_data.get("winner_id", match.winner_id)
    if winner_id is not None and winner_id not in (player1_id, player2_id):
        return Result.failure(ArenaError(match_schemas.WINNER_NOT_A_PLAYER))
    return Result.success(None)

async def delete_match(db: AsyncClient, match_id: str) -> Result[None]:
    query = db.table(TABLE).delete().eq("id", match_id)
    return await run_query(f"deleting match {match_id}", query.execute, lambda rows: None)
