# stats.py
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models import Invoice, as_utc, utc_now
from store import EntityStore

ACTIVE_PROJECT_STATUSES = ("active", "in_progress")


class DashboardStats(BaseModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

  total_revenue: float
  monthly_revenue: float
  active_projects: int
  pending_tasks: int
  total_projects: int
  completed_projects: int
  success_rate: int
  total_proposals: int
  accepted_proposals: int
  proposal_success_rate: int
  total_invoices: int
  paid_invoices: int
  total_clients: int


def parse_amount(raw) -> Decimal:
  """Decimal value of an amount string; anything unparsable counts as 0."""
  try:
    value = Decimal(str(raw).strip())
  except (InvalidOperation, ValueError):
    return Decimal(0)
  if not value.is_finite():
    return Decimal(0)
  return value


def percent(part: int, total: int) -> int:
  """part/total as a whole percentage, half rounded up; total floored at 1."""
  ratio = Decimal(part) * 100 / Decimal(max(total, 1))
  return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def paid_total(invoices: Iterable[Invoice]) -> Decimal:
  return sum((parse_amount(i.amount) for i in invoices if i.status == "paid"), Decimal(0))


def compute_stats(store: EntityStore, user_id: int, now: Optional[datetime] = None) -> DashboardStats:
  now = as_utc(now or utc_now())
  snap = store.snapshot(user_id)

  this_month = [
    i for i in snap.invoices
    if i.created_at.year == now.year and i.created_at.month == now.month
  ]
  completed = sum(1 for p in snap.projects if p.status == "completed")
  accepted = sum(1 for p in snap.proposals if p.status == "accepted")

  return DashboardStats(
    total_revenue=float(paid_total(snap.invoices)),
    monthly_revenue=float(paid_total(this_month)),
    active_projects=sum(1 for p in snap.projects if p.status in ACTIVE_PROJECT_STATUSES),
    pending_tasks=sum(1 for t in snap.tasks if t.status != "completed"),
    total_projects=len(snap.projects),
    completed_projects=completed,
    success_rate=percent(completed, len(snap.projects)),
    total_proposals=len(snap.proposals),
    accepted_proposals=accepted,
    proposal_success_rate=percent(accepted, len(snap.proposals)),
    total_invoices=len(snap.invoices),
    paid_invoices=sum(1 for i in snap.invoices if i.status == "paid"),
    total_clients=len(snap.clients),
  )
