from __future__ import annotations

import sys
from pathlib import Path

import pytest
import requests
from sqlalchemy import create_engine, text


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from hoursdash.clockify.client import ClockifyClient  # noqa: E402
from hoursdash.config import ClockifySettings  # noqa: E402

BASE_URL = "https://clockify.test/api/v1"


@pytest.fixture
def db_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'hoursdash.db'}")
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE customers (
                    id INTEGER PRIMARY KEY,
                    customer_name VARCHAR(255) NOT NULL,
                    company_name VARCHAR(255),
                    email VARCHAR(255),
                    hours_purchased NUMERIC(10, 2) NOT NULL DEFAULT 0,
                    hours_used NUMERIC(10, 2) NOT NULL DEFAULT 0,
                    created_at VARCHAR(64),
                    updated_at VARCHAR(64)
                )
                """
            )
        )
    yield engine
    engine.dispose()


@pytest.fixture
def add_customer(db_engine):
    def _add(customer_id, customer_name, company_name=None, hours_purchased=0, hours_used=0,
             updated_at="2000-01-01T00:00:00+00:00"):
        with db_engine.begin() as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO customers (id, customer_name, company_name, hours_purchased, hours_used, updated_at)
                    VALUES (:id, :name, :company, :purchased, :used, :updated_at)
                    """
                ),
                {
                    "id": customer_id,
                    "name": customer_name,
                    "company": company_name,
                    "purchased": hours_purchased,
                    "used": hours_used,
                    "updated_at": updated_at,
                },
            )
    return _add


def read_customer(engine, customer_id) -> dict:
    with engine.connect() as conn:
        row = conn.execute(
            text("SELECT id, hours_used, updated_at FROM customers WHERE id = :id"),
            {"id": customer_id},
        ).mappings().first()
    return dict(row)


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = str(payload)

    def json(self):
        return self._payload


class FakeSession:
    """Serves canned responses keyed by path; records every request."""

    def __init__(self, routes: dict | None = None):
        self.headers: dict = {}
        self.routes = routes or {}
        self.calls: list[tuple[str, dict]] = []

    def get(self, url, params=None, timeout=None):
        path = url.replace(BASE_URL, "", 1)
        self.calls.append((path, dict(params or {})))
        handler = self.routes.get(path)
        if handler is None:
            return FakeResponse({"message": "not found"}, status_code=404)
        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            return handler(params or {})
        return FakeResponse(handler)

    def paths(self) -> list[str]:
        return [p for p, _ in self.calls]


def paged(items: list, page_size: int):
    """Route handler that slices ``items`` by the page/page-size query."""

    def handler(params):
        page = int(params["page"])
        size = int(params["page-size"])
        assert size == page_size
        return FakeResponse(items[(page - 1) * size: page * size])

    return handler


@pytest.fixture
def make_client():
    def _make(routes=None, **settings):
        opts = {"api_key": "test-key", "base_url": BASE_URL}
        opts.update(settings)
        session = FakeSession(routes)
        return ClockifyClient(ClockifySettings(**opts), session=session), session
    return _make


@pytest.fixture
def timeout_error():
    return requests.exceptions.Timeout("read timed out")
