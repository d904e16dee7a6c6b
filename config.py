# config.py
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = "http://127.0.0.1:5173,http://localhost:5173"


def _env_bool(name: str, default: bool = False) -> bool:
  raw = os.getenv(name, "").strip().lower()
  if not raw:
    return default
  return raw in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
  raw = os.getenv(name, "").strip()
  if not raw:
    return default
  try:
    return int(raw)
  except ValueError:
    raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
  database_url: str = "sqlite://"
  cors_origins: List[str] = field(default_factory=lambda: DEFAULT_CORS_ORIGINS.split(","))
  session_cookie_name: str = "sid"
  session_ttl_days: int = 30
  session_cookie_secure: bool = False
  bcrypt_rounds: int = 12
  seed_demo_data: bool = False
  log_level: str = "INFO"

  @property
  def session_ttl(self) -> timedelta:
    return timedelta(days=self.session_ttl_days)

  @classmethod
  def from_env(cls) -> "Settings":
    origins = [
      x.strip()
      for x in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
      if x.strip()
    ]
    rounds = _env_int("BCRYPT_ROUNDS", 12)
    if not 4 <= rounds <= 31:
      raise RuntimeError("BCRYPT_ROUNDS must be between 4 and 31")
    return cls(
      database_url=os.getenv("DATABASE_URL", "").strip() or "sqlite://",
      cors_origins=origins,
      session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "").strip() or "sid",
      session_ttl_days=_env_int("SESSION_TTL_DAYS", 30),
      session_cookie_secure=_env_bool("SESSION_COOKIE_SECURE"),
      bcrypt_rounds=rounds,
      seed_demo_data=_env_bool("SEED_DEMO_DATA"),
      log_level=(os.getenv("LOG_LEVEL", "").strip() or "INFO").upper(),
    )
