"""
Shared fixtures: team members and an in-memory stand-in for the Supabase
query builder (table/select/eq/range/upsert/execute).
"""

from types import SimpleNamespace

import pytest

from schedule import ScheduleSnapshot, User


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.op = "select"
        self.filters = []
        self.bounds = None
        self.payload = None
        self.on_conflict = None

    def select(self, columns="*"):
        self.op = "select"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def range(self, start, end):
        self.bounds = (start, end)
        return self

    def upsert(self, row, on_conflict=None):
        self.op = "upsert"
        self.payload = row
        self.on_conflict = on_conflict
        return self

    def execute(self):
        self.client.calls.append((self.table, self.op, list(self.filters)))
        if self.client.fail:
            raise RuntimeError("connection reset")
        rows = self.client.tables.setdefault(self.table, [])
        if self.op == "upsert":
            keys = (self.on_conflict or "id").split(",")
            for existing in rows:
                if all(existing.get(k) == self.payload.get(k) for k in keys):
                    existing.update(self.payload)
                    break
            else:
                rows.append(dict(self.payload))
            return SimpleNamespace(data=[dict(self.payload)])

        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]
        if self.bounds is not None:
            start, end = self.bounds
            matched = matched[start:end + 1]
        return SimpleNamespace(data=[dict(r) for r in matched])


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = tables or {}
        self.calls = []
        self.fail = False

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase(monkeypatch):
    import db

    client = FakeSupabase()
    monkeypatch.setattr(db, "get_supabase_client", lambda: client)
    return client


@pytest.fixture
def anna():
    return User(id="u-anna", name="Anna de Boer", email="anna.deboer@example.nl")


@pytest.fixture
def bram():
    return User(id="u-bram", name="Bram", email="bram@example.nl")


@pytest.fixture
def team(anna, bram):
    return [anna, bram]


@pytest.fixture
def empty_snapshot(team):
    return ScheduleSnapshot.from_rows([], team)
