# entity_route.py
"""
CRUD routes for the per-user entities.

Every handler works on the session user's rows only. A row owned by somebody
else is reported exactly like a missing one (404), so ids never leak.
"""
from dataclasses import dataclass
from typing import List, Optional, Type

from fastapi import APIRouter, Depends, Query
from sqlmodel import SQLModel

from deps import current_user, get_store
from errors import NotFoundError, ValidationError
from models import MAX_ID, Client, Invoice, Project, Proposal, Task, User
from schemas import (
  ClientCreate, ClientOut, ClientUpdate, DataResponse, InvoiceCreate, InvoiceOut, InvoiceUpdate,
  MessageResponse, ProjectCreate, ProjectOut, ProjectUpdate, ProposalCreate, ProposalOut,
  ProposalUpdate, TaskCreate, TaskOut, TaskUpdate,
)
from store import EntityStore


@dataclass(frozen=True)
class Resource:
  path: str
  label: str
  model: Type[SQLModel]
  create: type
  update: type
  out: type


PROJECTS = Resource("projects", "Project", Project, ProjectCreate, ProjectUpdate, ProjectOut)
PROPOSALS = Resource("proposals", "Proposal", Proposal, ProposalCreate, ProposalUpdate, ProposalOut)
CLIENTS = Resource("clients", "Client", Client, ClientCreate, ClientUpdate, ClientOut)
INVOICES = Resource("invoices", "Invoice", Invoice, InvoiceCreate, InvoiceUpdate, InvoiceOut)
TASKS = Resource("tasks", "Task", Task, TaskCreate, TaskUpdate, TaskOut)

# foreign keys a payload may carry, checked against the caller's own rows
REFERENCES = (("project_id", "projectId", Project), ("client_id", "clientId", Client))


def owned_or_404(store: EntityStore, res: Resource, entity_id: int, user: User):
  obj = store.get(res.model, entity_id)
  if obj is None or obj.user_id != user.id:
    raise NotFoundError(res.label)
  return obj

def check_references(store: EntityStore, user: User, fields: dict) -> None:
  bad = []
  for key, alias, model in REFERENCES:
    ref = fields.get(key)
    if ref is None:
      continue
    obj = store.get(model, ref)
    if obj is None or obj.user_id != user.id:
      bad.append({"field": alias, "message": f"unknown {model.__name__.lower()}"})
  if bad:
    raise ValidationError(details=bad)


def add_crud_routes(router: APIRouter, res: Resource) -> None:
  has_project = "project_id" in res.model.model_fields

  @router.get(f"/{res.path}", response_model=DataResponse[List[res.out]], name=f"list_{res.path}")
  def list_entities(
    project_id: Optional[int] = Query(None, alias="projectId", ge=1, le=MAX_ID),
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
  ):
    if project_id is not None and has_project:
      return {"data": store.list_by_project(res.model, user.id, project_id)}
    return {"data": store.list_by_user(res.model, user.id)}

  @router.get(f"/{res.path}/{{entity_id}}", response_model=DataResponse[res.out], name=f"get_{res.path}")
  def get_entity(entity_id: int, user: User = Depends(current_user), store: EntityStore = Depends(get_store)):
    return {"data": owned_or_404(store, res, entity_id, user)}

  @router.post(f"/{res.path}", response_model=DataResponse[res.out], status_code=201, name=f"create_{res.path}")
  def create_entity(payload: res.create, user: User = Depends(current_user), store: EntityStore = Depends(get_store)):
    fields = payload.model_dump()
    check_references(store, user, fields)
    fields["user_id"] = user.id
    return {"data": store.create(res.model, fields)}

  @router.patch(f"/{res.path}/{{entity_id}}", response_model=DataResponse[res.out], name=f"update_{res.path}")
  def update_entity(
    entity_id: int,
    payload: res.update,
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
  ):
    owned_or_404(store, res, entity_id, user)
    fields = payload.changes()
    check_references(store, user, fields)
    updated = store.update(res.model, entity_id, fields)
    if updated is None:
      raise NotFoundError(res.label)
    return {"data": updated}

  @router.delete(f"/{res.path}/{{entity_id}}", response_model=MessageResponse, name=f"delete_{res.path}")
  def delete_entity(entity_id: int, user: User = Depends(current_user), store: EntityStore = Depends(get_store)):
    owned_or_404(store, res, entity_id, user)
    if not store.delete(res.model, entity_id):
      raise NotFoundError(res.label)
    return {"message": f"{res.label} deleted successfully"}


def add_latest_route(router: APIRouter, res: Resource, suffix: str) -> None:
  @router.get(f"/{res.path}/{suffix}", response_model=DataResponse[List[res.out]], name=f"{suffix}_{res.path}")
  def latest_entities(
    limit: int = Query(5, ge=1, le=50),
    user: User = Depends(current_user),
    store: EntityStore = Depends(get_store),
  ):
    return {"data": store.latest(res.model, user.id, limit)}


router = APIRouter(prefix="/api", tags=["entities"])

# fixed paths go first so "latest" / "recent" never hit the /{entity_id} routes
add_latest_route(router, PROJECTS, "latest")
add_latest_route(router, PROPOSALS, "recent")

for _res in (PROJECTS, PROPOSALS, CLIENTS, INVOICES, TASKS):
  add_crud_routes(router, _res)
