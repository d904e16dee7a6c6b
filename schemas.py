# schemas.py
"""
Wire schemas for the JSON API.

Everything is camelCase on the wire and snake_case in Python. Input models drop
the fields the server owns (ids, owner, timestamps) and then reject any other
key they don't know about.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import (
  AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints, field_validator, model_validator,
)
from pydantic.alias_generators import to_camel

from models import MAX_ID, as_utc

ProjectStatus = Literal["active", "in_progress", "completed", "on_hold", "cancelled"]
ProposalStatus = Literal["draft", "sent", "accepted", "rejected"]
InvoiceStatus = Literal["draft", "pending", "sent", "paid", "overdue", "cancelled"]
TaskStatus = Literal["todo", "in_progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]

SERVER_KEYS = {
  "id", "userId", "user_id",
  "createdAt", "created_at", "updatedAt", "updated_at",
  "completedAt", "completed_at", "paidAt", "paid_at", "sentAt", "sent_at",
}


def _money_to_str(v):
  if isinstance(v, bool):
    return v
  if isinstance(v, (int, float)):
    return format(Decimal(str(v)), "f")
  return v


Money = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\d+(\.\d{1,2})?$"), BeforeValidator(_money_to_str)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=254)]
Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# offsets are converted, naive values are read as UTC
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]
RefId = Annotated[int, Field(ge=1, le=MAX_ID)]


class ApiModel(BaseModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class InputModel(ApiModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

  @model_validator(mode="before")
  @classmethod
  def _drop_server_fields(cls, data):
    if isinstance(data, dict):
      return {k: v for k, v in data.items() if k not in SERVER_KEYS}
    return data

  def changes(self) -> Dict[str, Any]:
    """Only the fields the caller actually sent, snake_case keys."""
    return self.model_dump(exclude_unset=True)


T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
  ok: bool = True
  data: T


class MessageResponse(BaseModel):
  ok: bool = True
  message: str


# ===== Auth =====

class RegisterRequest(InputModel):
  username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]
  email: Email
  password: str = Field(min_length=6)
  first_name: Optional[str] = None
  last_name: Optional[str] = None

  @field_validator("email")
  @classmethod
  def _lower_email(cls, v: str) -> str:
    return v.lower()

  @field_validator("password")
  @classmethod
  def _bcrypt_limit(cls, v: str) -> str:
    if len(v.encode("utf-8")) > 72:
      raise ValueError("password must be at most 72 bytes")
    return v

class LoginRequest(InputModel):
  email: str
  password: str

  @field_validator("email")
  @classmethod
  def _lower_email(cls, v: str) -> str:
    return v.strip().lower()

class ProfileUpdate(InputModel):
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  avatar: Optional[str] = None

class UserOut(ApiModel):
  id: int
  username: str
  email: str
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  avatar: Optional[str] = None
  created_at: datetime

class UserResponse(BaseModel):
  message: Optional[str] = None
  user: UserOut


# ===== Projects =====

class ProjectCreate(InputModel):
  title: Text
  description: Optional[str] = None
  status: ProjectStatus = "active"
  budget: Optional[Money] = None
  deadline: Optional[UtcDateTime] = None
  client_name: Optional[str] = None

class ProjectUpdate(InputModel):
  title: Optional[Text] = None
  description: Optional[str] = None
  status: Optional[ProjectStatus] = None
  budget: Optional[Money] = None
  deadline: Optional[UtcDateTime] = None
  client_name: Optional[str] = None

class ProjectOut(ApiModel):
  id: int
  user_id: int
  title: str
  description: Optional[str] = None
  status: str
  budget: Optional[str] = None
  deadline: Optional[datetime] = None
  client_name: Optional[str] = None
  created_at: datetime
  updated_at: datetime


# ===== Proposals =====

class ProposalCreate(InputModel):
  project_id: Optional[RefId] = None
  title: Text
  content: Text
  status: ProposalStatus = "draft"
  budget: Optional[Money] = None
  client_email: Optional[Email] = None

class ProposalUpdate(InputModel):
  project_id: Optional[RefId] = None
  title: Optional[Text] = None
  content: Optional[Text] = None
  status: Optional[ProposalStatus] = None
  budget: Optional[Money] = None
  client_email: Optional[Email] = None

class ProposalOut(ApiModel):
  id: int
  user_id: int
  project_id: Optional[int] = None
  title: str
  content: str
  status: str
  budget: Optional[str] = None
  client_email: Optional[str] = None
  sent_at: Optional[datetime] = None
  created_at: datetime


# ===== Clients =====

class ClientCreate(InputModel):
  name: Text
  email: Email
  company: Optional[str] = None
  phone: Optional[str] = None
  notes: Optional[str] = None

class ClientUpdate(InputModel):
  name: Optional[Text] = None
  email: Optional[Email] = None
  company: Optional[str] = None
  phone: Optional[str] = None
  notes: Optional[str] = None

class ClientOut(ApiModel):
  id: int
  user_id: int
  name: str
  email: str
  company: Optional[str] = None
  phone: Optional[str] = None
  notes: Optional[str] = None
  created_at: datetime


# ===== Invoices =====

class InvoiceCreate(InputModel):
  project_id: Optional[RefId] = None
  client_id: Optional[RefId] = None
  client_email: Optional[Email] = None
  invoice_number: Optional[Text] = None
  amount: Money
  status: InvoiceStatus = "draft"
  due_date: UtcDateTime

  @model_validator(mode="after")
  def _needs_client(self):
    if self.client_id is None and not self.client_email:
      raise ValueError("clientId or clientEmail is required")
    return self

class InvoiceUpdate(InputModel):
  project_id: Optional[RefId] = None
  client_id: Optional[RefId] = None
  client_email: Optional[Email] = None
  invoice_number: Optional[Text] = None
  amount: Optional[Money] = None
  status: Optional[InvoiceStatus] = None
  due_date: Optional[UtcDateTime] = None

class InvoiceOut(ApiModel):
  id: int
  user_id: int
  project_id: Optional[int] = None
  client_id: Optional[int] = None
  client_email: Optional[str] = None
  invoice_number: str
  amount: str
  status: str
  due_date: datetime
  paid_at: Optional[datetime] = None
  created_at: datetime


# ===== Tasks =====

class TaskCreate(InputModel):
  project_id: Optional[RefId] = None
  title: Text
  description: Optional[str] = None
  status: TaskStatus = "todo"
  priority: TaskPriority = "medium"
  due_date: Optional[UtcDateTime] = None

class TaskUpdate(InputModel):
  project_id: Optional[RefId] = None
  title: Optional[Text] = None
  description: Optional[str] = None
  status: Optional[TaskStatus] = None
  priority: Optional[TaskPriority] = None
  due_date: Optional[UtcDateTime] = None

class TaskOut(ApiModel):
  id: int
  user_id: int
  project_id: Optional[int] = None
  title: str
  description: Optional[str] = None
  status: str
  priority: str
  due_date: Optional[datetime] = None
  completed_at: Optional[datetime] = None
  created_at: datetime


# ===== Automation =====

class AutomationUpdate(InputModel):
  proposal_generation: Optional[bool] = None
  client_outreach: Optional[bool] = None
  invoice_reminders: Optional[bool] = None
  task_management: Optional[bool] = None
  settings: Optional[Dict[str, Any]] = None

class AutomationOut(ApiModel):
  id: int
  user_id: int
  proposal_generation: bool
  client_outreach: bool
  invoice_reminders: bool
  task_management: bool
  settings: Optional[Dict[str, Any]] = None
  updated_at: datetime


# ===== Assistant =====

class ClientInfo(InputModel):
  name: Optional[str] = None
  email: Optional[str] = None

class GenerateProposalRequest(InputModel):
  job_description: Text
  client_info: Optional[ClientInfo] = None

class GeneratedProposalOut(ApiModel):
  title: str
  content: str
  budget: str

class LiveProjectOut(ApiModel):
  id: str
  title: str
  description: str
  budget: str
  deadline: str
  skills: List[str]
  platform: str
  url: str
  posted_time: str
  client_rating: float
  proposals_count: int
  verified: bool
  urgent: bool
  category: str

class LiveProjectsResponse(ApiModel):
  projects: List[LiveProjectOut]
  timestamp: datetime
  total_count: int
  sources: List[str]
