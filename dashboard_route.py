# dashboard_route.py
from typing import Optional

from fastapi import APIRouter, Depends

from deps import current_user, get_store
from models import User
from schemas import AutomationOut, AutomationUpdate, DataResponse
from stats import DashboardStats, compute_stats
from store import EntityStore

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard/stats", response_model=DataResponse[DashboardStats])
def dashboard_stats(user: User = Depends(current_user), store: EntityStore = Depends(get_store)):
  return {"data": compute_stats(store, user.id, now=store.now())}

@router.get("/automation", response_model=DataResponse[Optional[AutomationOut]])
def get_automation(user: User = Depends(current_user), store: EntityStore = Depends(get_store)):
  return {"data": store.get_automation_settings(user.id)}

@router.patch("/automation", response_model=DataResponse[AutomationOut])
def update_automation(
  req: AutomationUpdate,
  user: User = Depends(current_user),
  store: EntityStore = Depends(get_store),
):
  return {"data": store.update_automation_settings(user.id, req.changes())}
