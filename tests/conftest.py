import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.dependencies import get_current_user, get_optional_user
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import clear_auth_cache
from app.modules.contact.email_sender import get_email_sender
from app.modules.generation.deepseek_client import get_generation_client
from app.modules.notifications.hub import notification_hub
from app.modules.payments.gateways import get_dodo_client
from app.modules.tasks.events import TaskEventBus, get_task_event_bus
from app.modules.tasks.storage import get_storage

USER = {
    "id": "user-1",
    "email": "writer@example.com",
    "user_metadata": {"display_name": "Writer"},
    "app_metadata": {},
}

_BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _as_datetime(value):
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and len(value) >= 10 and value[4] == "-" and value[7] == "-":
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def _comparable(left, right):
    left_dt, right_dt = _as_datetime(left), _as_datetime(right)
    if left_dt is not None and right_dt is not None:
        return left_dt, right_dt
    return left, right


def _literal(value: str):
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "null":
        return None
    return value


def _match(row, column, op, value):
    current = row.get(column)
    if op == "is":
        return current is None if value in (None, "null") else current == value
    if op == "in":
        return current in value
    if op == "eq":
        if isinstance(current, bool) or isinstance(value, bool):
            return current == value
        left, right = _comparable(current, value)
        return left == right
    if op == "neq":
        left, right = _comparable(current, value)
        return left != right
    if current is None:
        return False
    left, right = _comparable(current, value)
    if op == "lt":
        return left < right
    if op == "lte":
        return left <= right
    if op == "gt":
        return left > right
    if op == "gte":
        return left >= right
    raise ValueError(f"Unsupported operator {op}")


class FakeQuery:
    """Just enough of the postgrest builder for the services under test"""

    def __init__(self, db, table):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.orders = []
        self._limit = None
        self._offset = 0
        self._negate = False

    @property
    def rows(self):
        return self.db.tables.setdefault(self.table_name, [])

    # actions

    def select(self, *columns, **kwargs):
        self.action = "select"
        return self

    def insert(self, data):
        self.action = "insert"
        self.payload = data
        return self

    def update(self, data):
        self.action = "update"
        self.payload = data
        return self

    def delete(self):
        self.action = "delete"
        return self

    def upsert(self, data, on_conflict=None, **kwargs):
        self.action = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        return self

    # filters

    @property
    def not_(self):
        self._negate = True
        return self

    def _filter(self, column, op, value):
        negate, self._negate = self._negate, False
        if negate:
            self.filters.append(lambda row: not _match(row, column, op, value))
        else:
            self.filters.append(lambda row: _match(row, column, op, value))
        return self

    def eq(self, column, value):
        return self._filter(column, "eq", value)

    def neq(self, column, value):
        return self._filter(column, "neq", value)

    def lt(self, column, value):
        return self._filter(column, "lt", value)

    def lte(self, column, value):
        return self._filter(column, "lte", value)

    def gt(self, column, value):
        return self._filter(column, "gt", value)

    def gte(self, column, value):
        return self._filter(column, "gte", value)

    def in_(self, column, values):
        return self._filter(column, "in", list(values))

    def is_(self, column, value):
        return self._filter(column, "is", value)

    def or_(self, expression):
        clauses = []
        for part in expression.split(","):
            column, op, value = part.split(".", 2)
            clauses.append((column, op, _literal(value)))
        self.filters.append(lambda row: any(_match(row, c, o, v) for c, o, v in clauses))
        return self

    def order(self, column, desc=False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def offset(self, count):
        self._offset = count
        return self

    # execution

    def _matching(self):
        return [row for row in self.rows if all(f(row) for f in self.filters)]

    def execute(self):
        if self.action == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            return SimpleNamespace(data=[copy.deepcopy(self.db.add(self.table_name, item)) for item in items])
        if self.action == "upsert":
            return SimpleNamespace(data=[copy.deepcopy(self._upsert(self.payload))])
        if self.action == "update":
            updated = []
            for row in self._matching():
                row.update(copy.deepcopy(self.payload))
                updated.append(copy.deepcopy(row))
            return SimpleNamespace(data=updated)
        if self.action == "delete":
            doomed = self._matching()
            doomed_ids = {id(row) for row in doomed}
            self.db.tables[self.table_name] = [row for row in self.rows if id(row) not in doomed_ids]
            return SimpleNamespace(data=copy.deepcopy(doomed))

        rows = self._matching()
        for column, desc in reversed(self.orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: _comparable(r[column], r[column])[0], reverse=desc)
            rows = present + missing
        rows = rows[self._offset:]
        if self._limit is not None:
            rows = rows[:self._limit]
        return SimpleNamespace(data=copy.deepcopy(rows))

    def _upsert(self, item):
        keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
        for row in self.rows:
            if all(row.get(k) == item.get(k) for k in keys):
                row.update(copy.deepcopy(item))
                return row
        return self.db.add(self.table_name, item)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        if self.name == "update_word_usage":
            for row in self.db.tables.get("profiles", []):
                if row["user_id"] == self.params["user_uuid"]:
                    row["words_used"] = (row.get("words_used") or 0) + self.params["words_to_add"]
            return SimpleNamespace(data=None)
        raise ValueError(f"Unknown rpc {self.name}")


class FakeAuthAdmin:
    def __init__(self, auth):
        self.auth = auth

    def list_users(self, page=None, per_page=None):
        self.auth.list_calls.append(page)
        users = self.auth.users
        if page and per_page:
            users = users[(page - 1) * per_page:page * per_page]
        return [SimpleNamespace(id=u["id"], email=u["email"]) for u in users]

    def create_user(self, attributes):
        user = {
            "id": str(uuid.uuid4()),
            "email": attributes["email"],
            "password": attributes["password"],
            "user_metadata": attributes.get("user_metadata") or {},
        }
        self.auth.users.append(user)
        return SimpleNamespace(user=SimpleNamespace(id=user["id"], email=user["email"]))

    def get_user_by_id(self, user_id):
        for u in self.auth.users:
            if u["id"] == user_id:
                return SimpleNamespace(user=SimpleNamespace(id=u["id"], email=u["email"]))
        return None


class FakeAuth:
    def __init__(self):
        self.users = []
        self.tokens = {}
        self.list_calls = []
        self.admin = FakeAuthAdmin(self)

    def get_user(self, jwt=None):
        user = self.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(
            id=user["id"], email=user["email"],
            user_metadata=user.get("user_metadata"), app_metadata={},
        ))

    def sign_in_with_password(self, credentials):
        for u in self.users:
            if u["email"] == credentials["email"] and u["password"] == credentials["password"]:
                token = f"token-{u['id']}"
                self.tokens[token] = u
                return SimpleNamespace(
                    user=SimpleNamespace(id=u["id"], email=u["email"]),
                    session=SimpleNamespace(access_token=token),
                )
        raise Exception("Invalid login credentials")


class FakeSupabase:
    """In-memory stand-in for supabase.Client"""

    def __init__(self):
        self.tables = {}
        self.auth = FakeAuth()
        self._counter = 0

    def add(self, table, item):
        self._counter += 1
        row = copy.deepcopy(item)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", (_BASE_TIME + timedelta(seconds=self._counter)).isoformat())
        self.tables.setdefault(table, []).append(row)
        return row

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    def rows(self, table):
        return self.tables.get(table, [])


class FakeEmailSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, html, sender=None, reply_to=None):
        self.sent.append({"to": to, "subject": subject, "html": html, "reply_to": reply_to})
        return {"id": f"email-{len(self.sent)}"}


class FakeGenerationClient:
    def __init__(self, content="One two three four five"):
        self.content = content
        self.calls = []

    def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        return self.content


class FakeDodoClient:
    def __init__(self):
        self.calls = []

    def create_checkout(self, **kwargs):
        self.calls.append(kwargs)
        return {"id": "cks_123", "checkout_url": "https://checkout.example/cks_123"}


class FakeStorage:
    bucket_name = "attachments"

    def __init__(self):
        self.objects = {}

    def url_for(self, key):
        return f"s3://{self.bucket_name}/{key}"

    def key_from_url(self, url):
        return url[len(f"s3://{self.bucket_name}/"):]

    def upload_file(self, file_content, key, content_type="application/octet-stream"):
        self.objects[key] = file_content
        return self.url_for(key)

    def delete_file(self, key):
        return self.objects.pop(key, None) is not None

    def get_download_url(self, key, expires_in=3600):
        return f"https://signed.example/{key}?expires={expires_in}"


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def current_user():
    return dict(USER)


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def generation_client():
    return FakeGenerationClient()


@pytest.fixture
def dodo_client():
    return FakeDodoClient()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def event_bus():
    return TaskEventBus()


@pytest.fixture
def client(fake_db, current_user, email_sender, generation_client, dodo_client, storage, event_bus):
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_service_supabase] = lambda: fake_db
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_optional_user] = lambda: current_user
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_generation_client] = lambda: generation_client
    app.dependency_overrides[get_dodo_client] = lambda: dodo_client
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_task_event_bus] = lambda: event_bus
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_state():
    clear_auth_cache()
    notification_hub.clear()
    yield
    notification_hub.clear()


def add_profile(db, user_id="user-1", **fields):
    row = {
        "user_id": user_id,
        "display_name": "Writer",
        "subscription_plan": "free",
        "words_used": 0,
        "words_limit": 500,
    }
    row.update(fields)
    return db.add("profiles", row)


def add_task(db, user_id="user-1", **fields):
    row = {
        "user_id": user_id,
        "title": "Write launch post",
        "description": None,
        "priority": "medium",
        "status": "todo",
    }
    row.update(fields)
    return db.add("tasks", row)
