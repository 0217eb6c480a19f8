from supabase import AsyncClient

from arena.schemas import user_schemas
from arena.schemas.result_schemas import Result
from arena.services.query import run_query

TABLE = "users"

async def get_user(db: AsyncClient, user_id: str) -> Result[user_schemas.UserRead]:
    query = db.table(TABLE).select("*").eq("id", user_id).single()
    return await run_query(f"fetching user {user_id}", query.execute, user_schemas.UserRead.model_validate)

async def email_registered(db: AsyncClient, email: str) -> Result[bool]:
    query = db.table(TABLE).select("id").eq("email", email)
    return await run_query("checking email", query.execute, lambda rows: bool(rows))
