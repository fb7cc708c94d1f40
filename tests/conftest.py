import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_http_client
from app.database.supabase_client import get_supabase
from app.modules.accounts.service import AccountService
from app.modules.installations.service import InstallationService
from app.modules.vercel.schemas import OAuthToken


# --- In-memory Supabase ---


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Supports the table(...).select/insert/upsert/update(...).eq(...) chains the services use."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Optional[Dict[str, Any]] = None
        self.on_conflict: Optional[str] = None
        self.filters: List[Tuple[str, Any]] = []
        self.single = False

    def select(self, *_columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def maybe_single(self):
        self.single = True
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        rows = self.db.tables.setdefault(self.table, [])
        if self.op == "insert":
            return FakeResponse([dict(self.db.insert_row(self.table, self.payload))])
        if self.op == "upsert":
            for row in rows:
                if row.get(self.on_conflict) == self.payload.get(self.on_conflict):
                    row.update(self.payload)
                    return FakeResponse([dict(row)])
            return FakeResponse([dict(self.db.insert_row(self.table, self.payload))])
        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        found = [dict(row) for row in rows if self._matches(row)]
        if self.single:
            # postgrest-py returns None for maybe_single() with no rows
            return FakeResponse(found[0]) if found else None
        return FakeResponse(found)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {"accounts": [], "installations": []}
        self._next_id: Dict[str, int] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def insert_row(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._next_id[table] = self._next_id.get(table, 0) + 1
        now = datetime.now(timezone.utc).isoformat()
        row = {"id": self._next_id[table], "uuid": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        row.update(payload)
        self.tables[table].append(row)
        return row


# --- Fake Vercel / GitHub APIs ---


class FakePlatform:
    """Routes httpx.MockTransport requests to canned Vercel and GitHub responses."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.token = {
            "access_token": "vercel-token-123",
            "token_type": "Bearer",
            "installation_id": "icfg_abc",
            "user_id": "user_1",
            "team_id": None,
        }
        self.configuration = {"id": "cfg_1", "projectSelection": "selected", "projects": ["prj_selected"], "scopes": []}
        self.projects = [{"id": "prj_first", "name": "first"}, {"id": "prj_second", "name": "second"}]
        self.env_failures: Dict[str, Tuple[int, Any]] = {}
        self.deployment = {"id": "dpl_1", "url": "assistant-server-abc.vercel.app", "readyState": "QUEUED"}
        self.repo_id = 987654

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/v2/oauth/access_token":
            return httpx.Response(200, json=self.token)
        if path.startswith("/v1/integrations/configuration/"):
            if isinstance(self.configuration, str):
                return httpx.Response(200, text=self.configuration)
            return httpx.Response(200, json=self.configuration)
        if path == "/v10/projects/import":
            body = json.loads(request.content)
            return httpx.Response(200, json={"id": "prj_imported", "name": body["name"]})
        if path == "/v9/projects":
            return httpx.Response(200, json={"projects": self.projects})
        if path.endswith("/env"):
            body = json.loads(request.content)
            if body["key"] in self.env_failures:
                status_code, payload = self.env_failures[body["key"]]
                return httpx.Response(status_code, json=payload)
            return httpx.Response(201, json={"created": body})
        if path == "/v13/deployments" and request.method == "POST":
            return httpx.Response(200, json=self.deployment)
        if path.startswith("/v13/deployments/") and request.method == "GET":
            return httpx.Response(200, json=self.deployment)
        if path.startswith("/repos/"):
            return httpx.Response(200, json={"id": self.repo_id})
        return httpx.Response(404, json={"error": {"code": "not_found", "message": "Not found"}})

    def requests_to(self, suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    def env_bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests_to("/env")]


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def http_client(platform: FakePlatform) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(platform.handler))


@pytest.fixture
def seeded_installation(fake_supabase: FakeSupabase):
    """Account with an encrypted token plus a pending installation for configuration cfg_1."""
    account = AccountService(fake_supabase).upsert_account(OAuthToken(
        access_token="vercel-token-123", installation_id="cfg_1", user_id="user_1", team_id="team_1"
    ))
    return InstallationService(fake_supabase).create_installation("cfg_1", account.id)


@pytest.fixture
def client(fake_supabase: FakeSupabase, http_client: httpx.AsyncClient):
    """Test client with Supabase and outbound HTTP replaced. Startup hooks are not run."""
    from app.main import app, limiter

    limiter.reset()
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_http_client] = lambda: http_client
    yield TestClient(app, follow_redirects=False)
    app.dependency_overrides.clear()
    limiter.reset()
