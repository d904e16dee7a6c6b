"""
Test configuration: puts the repo root on sys.path and builds isolated apps.

Every test gets its own in-memory store, its own clock and its own app, so no
state leaks between tests.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
  sys.path.insert(0, str(REPO_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from auth import AuthGate  # noqa: E402
from config import Settings  # noqa: E402
from db import init_db, make_engine  # noqa: E402
from generators import SyntheticProjectFeed  # noqa: E402
from main import create_app  # noqa: E402
from store import EntityStore  # noqa: E402

ALICE = {"username": "alice", "email": "alice@example.com", "password": "s3cret-pass"}
BOB = {"username": "bob", "email": "bob@example.com", "password": "hunter2-pass"}


class FakeClock:
  """Callable clock the store and auth gate read instead of the wall clock."""

  def __init__(self, start: datetime):
    self.current = start

  def __call__(self) -> datetime:
    return self.current

  def advance(self, **kwargs) -> datetime:
    self.current = self.current + timedelta(**kwargs)
    return self.current


@pytest.fixture
def clock():
  return FakeClock(datetime(2026, 10, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
  engine = make_engine("sqlite://")
  init_db(engine)
  return EntityStore(engine, now=clock)


@pytest.fixture
def settings():
  return Settings(bcrypt_rounds=4, log_level="WARNING")


@pytest.fixture
def auth(store, settings):
  return AuthGate(store, ttl=settings.session_ttl, bcrypt_rounds=settings.bcrypt_rounds, now=store.now)


@pytest.fixture
def user(auth):
  return auth.register(**ALICE)


@pytest.fixture
def other_user(auth):
  return auth.register(**BOB)


@pytest.fixture
def app(settings, store):
  return create_app(settings=settings, store=store, live_feed=SyntheticProjectFeed(seed=7))


def _logged_in(app, creds):
  client = TestClient(app)
  assert client.post("/api/auth/register", json=creds).status_code == 201
  resp = client.post("/api/auth/login", json={"email": creds["email"], "password": creds["password"]})
  assert resp.status_code == 200
  return client


@pytest.fixture
def client(app):
  """Anonymous client."""
  return TestClient(app)


@pytest.fixture
def alice(app):
  return _logged_in(app, ALICE)


@pytest.fixture
def bob(app):
  return _logged_in(app, BOB)
