import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from supabase import AuthApiError, PostgrestAPIError

from arena.core.config import Settings, settings
from arena.main import create_app
from tests.factories import make_token


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- In-memory stand-in for the Supabase async client ---

class FakeQuery:
    """Records one fluent table query and runs it against FakeSupabase.tables."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.descending = False
        self.single_row = False

    def select(self, columns: str = "*"):
        self.action = "select"
        self.columns = columns
        return self

    def insert(self, payload: dict):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = column
        self.descending = desc
        return self

    def single(self):
        self.single_row = True
        return self

    async def execute(self):
        self.db.executed.append((self.table, self.action))
        if self.db.failures:
            raise self.db.failures.pop(0)
        return SimpleNamespace(data=self._run())

    def _matching(self):
        rows = self.db.tables[self.table]
        return [row for row in rows.values() if all(row.get(col) == value for col, value in self.filters)]

    def _run(self):
        rows = self.db.tables[self.table]

        if self.action == "insert":
            row = dict(self.payload)
            row["id"] = str(uuid.uuid4())
            row["created_at"] = row["updated_at"] = _now()
            if self.table == "tournaments":
                row.setdefault("current_players", 0)
            rows[row["id"]] = row
            return [dict(row)]

        if self.action == "update":
            updated = []
            for row in self._matching():
                row.update(self.payload)
                row["updated_at"] = _now()
                updated.append(dict(row))
            return updated

        if self.action == "delete":
            removed = self._matching()
            for row in removed:
                del rows[row["id"]]
            return [dict(row) for row in removed]

        result = [self.db.embed(self.table, dict(row), self.columns) for row in self._matching()]
        if self.order_by:
            result.sort(key=lambda r: r.get(self.order_by) or "", reverse=self.descending)
        if self.single_row:
            if len(result) != 1:
                raise PostgrestAPIError({
                    "message": "JSON object requested, multiple (or no) rows returned",
                    "code": "PGRST116",
                    "hint": None,
                    "details": f"The result contains {len(result)} rows",
                })
            return result[0]
        return result


class FakeAuth:
    def __init__(self, db: "FakeSupabase"):
        self.db = db
        self.accounts = {}  # email -> account
        self.access_tokens = {}  # token -> user id
        self.refresh_tokens = {}  # token -> user id
        self.codes = {}  # auth code -> user id
        self.calls = []
        self.failures = []
        self.current_token = None
        self.closed = 0

    def _record(self, name: str):
        self.calls.append(name)
        if self.failures:
            raise self.failures.pop(0)

    def add_account(self, email, password, username=None, confirmed=True, wallet_balance=0.0):
        user_id = str(uuid.uuid4())
        self.accounts[email] = {"id": user_id, "email": email, "password": password, "confirmed": confirmed}
        # Mirrors the database trigger that creates the public profile
        self.db.tables["users"][user_id] = {
            "id": user_id,
            "email": email,
            "username": username,
            "wallet_balance": wallet_balance,
            "game_id": None,
            "created_at": _now(),
            "updated_at": _now(),
        }
        return user_id

    def _user(self, user_id):
        account = next(a for a in self.accounts.values() if a["id"] == user_id)
        return SimpleNamespace(id=account["id"], email=account["email"])

    def issue_session(self, user_id, expires_in=3600):
        access_token = make_token(user_id, expires_in)
        refresh_token = uuid.uuid4().hex
        self.access_tokens[access_token] = user_id
        self.refresh_tokens[refresh_token] = user_id
        return SimpleNamespace(access_token=access_token, refresh_token=refresh_token, user=self._user(user_id))

    def issue_code(self, user_id):
        code = uuid.uuid4().hex
        self.codes[code] = user_id
        return code

    async def sign_up(self, credentials):
        self._record("sign_up")
        email = credentials["email"]
        if email in self.accounts:
            raise AuthApiError("User already registered", 422, "user_already_exists")
        username = credentials.get("options", {}).get("data", {}).get("username")
        user_id = self.add_account(email, credentials["password"], username=username, confirmed=False)
        self.last_sign_up = credentials
        return SimpleNamespace(user=self._user(user_id), session=None)

    async def sign_in_with_password(self, credentials):
        self._record("sign_in_with_password")
        account = self.accounts.get(credentials["email"])
        if account is None or account["password"] != credentials["password"]:
            raise AuthApiError("Invalid login credentials", 400, "invalid_credentials")
        if not account["confirmed"]:
            raise AuthApiError("Email not confirmed", 400, "email_not_confirmed")
        session = self.issue_session(account["id"])
        return SimpleNamespace(user=session.user, session=session)

    async def get_user(self, jwt_token=None):
        self._record("get_user")
        user_id = self.access_tokens.get(jwt_token)
        if user_id is None:
            raise AuthApiError("invalid JWT", 401, "bad_jwt")
        return SimpleNamespace(user=self._user(user_id))

    async def refresh_session(self, refresh_token=None):
        self._record("refresh_session")
        user_id = self.refresh_tokens.pop(refresh_token, None)
        if user_id is None:
            raise AuthApiError("Invalid Refresh Token", 400, "refresh_token_not_found")
        session = self.issue_session(user_id)
        return SimpleNamespace(user=session.user, session=session)

    async def exchange_code_for_session(self, params):
        self._record("exchange_code_for_session")
        user_id = self.codes.pop(params["auth_code"], None)
        if user_id is None:
            raise AuthApiError("invalid flow state, no valid flow state found", 404, "flow_state_not_found")
        session = self.issue_session(user_id)
        return SimpleNamespace(user=session.user, session=session)

    async def set_session(self, access_token, refresh_token):
        self._record("set_session")
        self.current_token = access_token

    async def sign_out(self, options=None):
        self._record("sign_out")
        self.access_tokens.pop(self.current_token, None)
        self.current_token = None


    async def close(self):
        self.closed += 1


class FakePostgrest:
    def __init__(self):
        self.closed = 0

    async def aclose(self):
        self.closed += 1


class FakeSupabase:
    def __init__(self):
        self.tables = {"users": {}, "tournaments": {}, "matches": {}}
        self.failures = []
        self.executed = []
        self.opened = 0
        self.auth = FakeAuth(self)
        self.postgrest = FakePostgrest()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail_next(self, *errors):
        self.failures.extend(errors)

    def _player(self, user_id):
        user = self.tables["users"].get(user_id)
        if user is None:
            return None
        return {"id": user["id"], "username": user["username"], "game_id": user["game_id"]}

    def embed(self, table, row, columns):
        if table == "matches" and "player1:users" in columns:
            for key in ("player1", "player2", "winner"):
                row[key] = self._player(row.get(f"{key}_id"))
        if table == "tournaments" and "matches (" in columns:
            matches = [dict(m) for m in self.tables["matches"].values() if m["tournament_id"] == row["id"]]
            matches.sort(key=lambda m: m["created_at"])
            row["matches"] = [self.embed("matches", m, "player1:users") for m in matches]
        return row


# --- Fixtures ---

@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setattr(settings, "RETRY_BASE_DELAY", 0)


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    async def client_factory(access_token=None):
        fake_db.opened += 1
        return fake_db

    app = create_app(settings=Settings(SECRET_KEY="test-secret-key"), client_factory=client_factory)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def player(fake_db):
    user_id = fake_db.auth.add_account("player@example.com", "secret123", username="player_one", wallet_balance=25.5)
    return SimpleNamespace(id=user_id, email="player@example.com", password="secret123")


@pytest.fixture
def signed_in_client(client, player):
    response = client.post(
        "/auth/login",
        data={"email": player.email, "password": player.password},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client
