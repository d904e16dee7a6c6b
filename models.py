# models.py
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field

# largest value a SQLite INTEGER primary key can hold
MAX_ID = 2**63 - 1


def utc_now() -> datetime:
  return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
  """Aware UTC; a naive value is taken to already be UTC."""
  if value.tzinfo is None:
    return value.replace(tzinfo=timezone.utc)
  return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
  """Stored as naive UTC, read back as aware UTC."""

  impl = DateTime
  cache_ok = True

  def process_bind_param(self, value, dialect):
    if value is None:
      return None
    return as_utc(value).replace(tzinfo=None)

  def process_result_value(self, value, dialect):
    if value is None:
      return None
    return as_utc(value)

class User(SQLModel, table=True):
  id: Optional[int] = Field(default=None, primary_key=True)
  username: str = Field(index=True, unique=True)
  email: str = Field(index=True, unique=True)
  password: str  # bcrypt hash
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  avatar: Optional[str] = None
  created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

class Project(SQLModel, table=True):
  id: Optional[int] = Field(default=None, primary_key=True)
  user_id: int = Field(foreign_key="user.id", index=True)
  title: str
  description: Optional[str] = None
  status: str = "active"  # active|in_progress|completed|on_hold|cancelled
  budget: Optional[str] = None
  deadline: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
  client_name: Optional[str] = None
  created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
  updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

class Proposal(SQLModel, table=True):
  id: Optional[int] = Field(default=None, primary_key=True)
  user_id: int = Field(foreign_key="user.id", index=True)
  project_id: Optional[int] = Field(default=None, foreign_key="project.id")
  title: str
  content: str
  status: str = "draft"  # draft|sent|accepted|rejected
  budget: Optional[str] = None
  client_email: Optional[str] = None
  sent_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
  created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

class Client(SQLModel, table=True):
  id: Optional[int] = Field(default=None, primary_key=True)
  user_id: int = Field(foreign_key="user.id", index=True)
  name: str
  email: str
  company: Optional[str] = None
  phone: Optional[str] = None
  notes: Optional[str] = None
  created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

class Invoice(SQLModel, table=True):
  id: Optional[int] = Field(default=None, primary_key=True)
  user_id: int = Field(foreign_key="user.id", index=True)
  project_id: Optional[int] = Field(default=None, foreign_key="project.id")
  client_id: Optional[int] = Field(default=None, foreign_key="client.id")
  client_email: Optional[str] = None
  invoice_number: str = Field(index=True, unique=True)  # INV-00012
  amount: str
  status: str = "draft"  # draft|pending|sent|paid|overdue|cancelled
  due_date: datetime = Field(sa_type=UTCDateTime)
  paid_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
  created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

class Task(SQLModel, table=True):
  id: Optional[int] = Field(default=None, primary_key=True)
  user_id: int = Field(foreign_key="user.id", index=True)
  project_id: Optional[int] = Field(default=None, foreign_key="project.id")
  title: str
  description: Optional[str] = None
  status: str = "todo"  # todo|in_progress|completed
  priority: str = "medium"  # low|medium|high
  due_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
  completed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
  created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

class AutomationSettings(SQLModel, table=True):
  id: Optional[int] = Field(default=None, primary_key=True)
  user_id: int = Field(foreign_key="user.id", index=True, unique=True)
  proposal_generation: bool = True
  client_outreach: bool = False
  invoice_reminders: bool = True
  task_management: bool = True
  settings: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
  updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

class AuthSession(SQLModel, table=True):
  token: str = Field(primary_key=True)
  user_id: int = Field(foreign_key="user.id", index=True)
  created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
  expires_at: datetime = Field(sa_type=UTCDateTime)


# entities a user creates through the CRUD routes
OWNED_MODELS = (Project, Proposal, Client, Invoice, Task)
