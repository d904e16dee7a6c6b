# store.py
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, select

from errors import ConflictError, ValidationError
from models import (
  MAX_ID, AuthSession, AutomationSettings, Client, Invoice, Project, Proposal, Task, User, as_utc, utc_now,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=SQLModel)

# never taken from a caller, always assigned here
SERVER_FIELDS = ("id", "created_at", "updated_at", "completed_at", "paid_at", "sent_at")

# status value -> timestamp stamped the first time an entity reaches it
STATUS_STAMPS = {
  Task: ("completed", "completed_at"),
  Invoice: ("paid", "paid_at"),
  Proposal: ("sent", "sent_at"),
}

# rows that point at a project and get detached when it is deleted
PROJECT_DEPENDANTS = (Task, Proposal, Invoice)


class Snapshot(NamedTuple):
  projects: List[Project]
  proposals: List[Proposal]
  invoices: List[Invoice]
  tasks: List[Task]
  clients: List[Client]


class EntityStore:
  """
  Process-lifetime storage for every entity type, scoped by owning user.

  One instance is built per app and handed to the routes. The backing engine is
  normally in-memory SQLite on a single shared connection, so every operation
  runs under one re-entrant lock. Returned objects are detached copies; change
  them through `update`, not by assignment.
  """

  def __init__(self, engine: Engine, now: Callable[[], datetime] = utc_now):
    self.engine = engine
    self.now = now
    self._lock = threading.RLock()

  @contextmanager
  def _session(self) -> Iterator[Session]:
    with self._lock:
      with Session(self.engine, expire_on_commit=False) as session:
        yield session

  # ----- generic CRUD -----

  def create(self, model: Type[M], payload: Dict[str, Any]) -> M:
    data = _utc_values({k: v for k, v in payload.items() if k not in SERVER_FIELDS})
    now = as_utc(self.now())
    for stamp in ("created_at", "updated_at"):
      if stamp in model.model_fields:
        data[stamp] = now

    with self._session() as session:
      if "user_id" in model.model_fields:
        owner = data.get("user_id")
        if owner is None or session.get(User, owner) is None:
          raise ValidationError(details=[{"field": "userId", "message": "unknown user"}])

      if model is Invoice:
        _check_invoice_client(data)
        number = data.get("invoice_number")
        if not number:
          data["invoice_number"] = self._next_invoice_number(session)
        elif self._invoice_number_taken(session, number):
          raise ConflictError("Invoice number already exists")

      obj = _validate(model, data)
      session.add(obj)
      try:
        session.commit()
      except IntegrityError:
        # unique column, e.g. two registrations racing for one email
        session.rollback()
        raise ValidationError(f"{model.__name__} already exists")
      session.refresh(obj)
      return obj

  def get(self, model: Type[M], entity_id: int) -> Optional[M]:
    if not _valid_id(entity_id):
      return None
    with self._session() as session:
      return session.get(model, entity_id)

  def list_by_user(self, model: Type[M], user_id: int) -> List[M]:
    with self._session() as session:
      return list(session.exec(select(model).where(model.user_id == user_id).order_by(model.id)))

  def update(self, model: Type[M], entity_id: int, fields: Dict[str, Any]) -> Optional[M]:
    data = _utc_values({k: v for k, v in fields.items() if k not in SERVER_FIELDS})
    unknown = [k for k in data if k not in model.model_fields]
    if unknown:
      raise ValidationError(details=[{"field": k, "message": "unknown field"} for k in unknown])
    if not _valid_id(entity_id):
      return None

    with self._session() as session:
      obj = session.get(model, entity_id)
      if obj is None:
        return None

      merged = {**obj.model_dump(), **data}
      if model is Invoice:
        _check_invoice_client(merged)
        if data.get("invoice_number") not in (None, obj.invoice_number):
          if self._invoice_number_taken(session, data["invoice_number"]):
            raise ConflictError("Invoice number already exists")

      _validate(model, merged)
      for key, value in data.items():
        setattr(obj, key, value)

      now = as_utc(self.now())
      if model in STATUS_STAMPS:
        status, stamp = STATUS_STAMPS[model]
        if data.get("status") == status and getattr(obj, stamp) is None:
          setattr(obj, stamp, now)
      if "updated_at" in model.model_fields:
        obj.updated_at = now

      session.add(obj)
      session.commit()
      session.refresh(obj)
      return obj

  def delete(self, model: Type[M], entity_id: int) -> bool:
    if not _valid_id(entity_id):
      return False
    with self._session() as session:
      obj = session.get(model, entity_id)
      if obj is None:
        return False

      if model is Client:
        in_use = session.exec(select(Invoice.id).where(Invoice.client_id == entity_id)).first()
        if in_use is not None:
          raise ConflictError("Client has invoices and cannot be deleted")

      if model is Project:
        detached = 0
        for dependant in PROJECT_DEPENDANTS:
          for row in session.exec(select(dependant).where(dependant.project_id == entity_id)):
            row.project_id = None
            session.add(row)
            detached += 1
        if detached:
          logger.info(f"Project {entity_id} deleted, detached {detached} dependant rows")

      session.delete(obj)
      session.commit()
      return True

  def latest(self, model: Type[M], user_id: int, limit: int = 5) -> List[M]:
    with self._session() as session:
      stmt = (
        select(model)
        .where(model.user_id == user_id)
        .order_by(model.created_at.desc(), model.id.desc())
        .limit(limit)
      )
      return list(session.exec(stmt))

  def list_by_project(self, model: Type[M], user_id: int, project_id: int) -> List[M]:
    if not _valid_id(project_id):
      return []
    with self._session() as session:
      stmt = select(model).where(model.user_id == user_id, model.project_id == project_id).order_by(model.id)
      return list(session.exec(stmt))

  def snapshot(self, user_id: int) -> Snapshot:
    # one lock for all five reads so a concurrent write can't land mid-way
    with self._lock:
      return Snapshot(
        projects=self.list_by_user(Project, user_id),
        proposals=self.list_by_user(Proposal, user_id),
        invoices=self.list_by_user(Invoice, user_id),
        tasks=self.list_by_user(Task, user_id),
        clients=self.list_by_user(Client, user_id),
      )

  # ----- users -----

  def create_user(self, payload: Dict[str, Any]) -> User:
    return self.create(User, payload)

  def get_user(self, user_id: int) -> Optional[User]:
    return self.get(User, user_id)

  def get_user_by_email(self, email: str) -> Optional[User]:
    with self._session() as session:
      return session.exec(select(User).where(User.email == email)).first()

  def get_user_by_username(self, username: str) -> Optional[User]:
    with self._session() as session:
      return session.exec(select(User).where(User.username == username)).first()

  def update_user(self, user_id: int, fields: Dict[str, Any]) -> Optional[User]:
    return self.update(User, user_id, fields)

  def count_users(self) -> int:
    with self._session() as session:
      return session.exec(select(func.count()).select_from(User)).one()

  # ----- automation settings -----

  def get_automation_settings(self, user_id: int) -> Optional[AutomationSettings]:
    with self._session() as session:
      return session.exec(select(AutomationSettings).where(AutomationSettings.user_id == user_id)).first()

  def update_automation_settings(self, user_id: int, fields: Dict[str, Any]) -> AutomationSettings:
    with self._lock:
      current = self.get_automation_settings(user_id)
      if current is None:
        current = self.create(AutomationSettings, {"user_id": user_id})
      return self.update(AutomationSettings, current.id, {k: v for k, v in fields.items() if k != "user_id"})

  # ----- sessions -----

  def create_session(self, user_id: int, token: str, expires_at: datetime) -> AuthSession:
    with self._session() as session:
      record = AuthSession(
        token=token, user_id=user_id, created_at=as_utc(self.now()), expires_at=as_utc(expires_at),
      )
      session.add(record)
      session.commit()
      session.refresh(record)
      return record

  def get_session_record(self, token: str) -> Optional[AuthSession]:
    with self._session() as session:
      return session.get(AuthSession, token)

  def touch_session(self, token: str, expires_at: datetime) -> Optional[AuthSession]:
    with self._session() as session:
      record = session.get(AuthSession, token)
      if record is None:
        return None
      record.expires_at = as_utc(expires_at)
      session.add(record)
      session.commit()
      session.refresh(record)
      return record

  def delete_session(self, token: str) -> bool:
    with self._session() as session:
      record = session.get(AuthSession, token)
      if record is None:
        return False
      session.delete(record)
      session.commit()
      return True

  def purge_expired_sessions(self, now: datetime) -> int:
    with self._session() as session:
      expired = list(session.exec(select(AuthSession).where(AuthSession.expires_at <= as_utc(now))))
      for record in expired:
        session.delete(record)
      session.commit()
      return len(expired)

  # ----- invoice numbers -----

  def _next_invoice_number(self, session: Session) -> str:
    n = (session.exec(select(func.max(Invoice.id))).one() or 0) + 1
    while self._invoice_number_taken(session, f"INV-{n:05d}"):
      n += 1
    return f"INV-{n:05d}"

  @staticmethod
  def _invoice_number_taken(session: Session, number: str) -> bool:
    return session.exec(select(Invoice.id).where(Invoice.invoice_number == number)).first() is not None


def _valid_id(entity_id: int) -> bool:
  return 0 < entity_id <= MAX_ID


def _utc_values(data: Dict[str, Any]) -> Dict[str, Any]:
  return {k: as_utc(v) if isinstance(v, datetime) else v for k, v in data.items()}


def _check_invoice_client(data: Dict[str, Any]) -> None:
  if data.get("client_id") is None and not data.get("client_email"):
    raise ValidationError(details=[{"field": "clientId", "message": "clientId or clientEmail is required"}])


def _validate(model: Type[M], data: Dict[str, Any]) -> M:
  try:
    return model.model_validate(data)
  except PydanticValidationError as exc:
    raise ValidationError.from_pydantic(exc)
