# db.py
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import models  # noqa: F401  registers the tables on SQLModel.metadata


def make_engine(database_url: str = "sqlite://") -> Engine:
  if database_url.startswith("sqlite"):
    kwargs = {"connect_args": {"check_same_thread": False}}
    # one shared connection, otherwise every checkout gets an empty in-memory db
    if database_url in ("sqlite://", "sqlite:///:memory:"):
      kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=False, **kwargs)
  return create_engine(database_url, echo=False, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
  SQLModel.metadata.create_all(engine)
