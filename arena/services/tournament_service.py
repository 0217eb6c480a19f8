from typing import List, Optional

from supabase import AsyncClient

from arena.core.exceptions import ArenaError
from arena.schemas import tournament_schemas
from arena.schemas.result_schemas import Result
from arena.services.match_service import MATCH_WITH_PLAYERS_SELECT
from arena.services.query import first_row, run_query

TABLE = "tournaments"

TOURNAMENT_WITH_MATCHES_SELECT = f"*, matches ({MATCH_WITH_PLAYERS_SELECT})"

async def list_tournaments(db: AsyncClient, status: Optional[str] = None) -> Result[List[tournament_schemas.TournamentRead]]:
    query = db.table(TABLE).select("*")
    if status:
        query = query.eq("status", status)
    query = query.order("start_time")
    return await run_query(
        "fetching tournaments",
        query.execute,
        lambda rows: [tournament_schemas.TournamentRead.model_validate(row) for row in rows],
    )

async def get_tournament(db: AsyncClient, tournament_id: str) -> Result[tournament_schemas.TournamentWithMatches]:
    query = db.table(TABLE).select(TOURNAMENT_WITH_MATCHES_SELECT).eq("id", tournament_id).single()
    return await run_query(
        f"fetching tournament {tournament_id}",
        query.execute,
        tournament_schemas.TournamentWithMatches.model_validate,
    )

async def create_tournament(db: AsyncClient, tournament: tournament_schemas.TournamentCreate) -> Result[tournament_schemas.TournamentRead]:
    # id, timestamps and current_players are assigned by the database
    query = db.table(TABLE).insert(tournament.model_dump(mode="json"))
    return await run_query(
        "creating tournament",
        query.execute,
        lambda rows: tournament_schemas.TournamentRead.model_validate(first_row(rows, "Tournament")),
    )

async def update_tournament(db: AsyncClient, tournament_id: str, tournament_update: tournament_schemas.TournamentUpdate) -> Result[tournament_schemas.TournamentRead]:
    update_data = tournament_update.model_dump(mode="json", exclude_unset=True)
    if not update_data:
        return Result.failure(ArenaError("No fields to update"))

    query = db.table(TABLE).update(update_data).eq("id", tournament_id)
    return await run_query(
        f"updating tournament {tournament_id}",
        query.execute,
        lambda rows: tournament_schemas.TournamentRead.model_validate(first_row(rows, "Tournament")),
    )

async def delete_tournament(db: AsyncClient, tournament_id: str) -> Result[None]:
    # Deleting a row that is already gone is not an error: a retried delete may
    # have succeeded on the server before the connection dropped.
    query = db.table(TABLE).delete().eq("id", tournament_id)
    return await run_query(f"deleting tournament {tournament_id}", query.execute, lambda rows: None)
