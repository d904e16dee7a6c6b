"""Tests for the in-memory entity store."""

from datetime import datetime, timedelta, timezone

import pytest

from errors import ConflictError, ValidationError
from models import (
  AuthSession, AutomationSettings, Client, Invoice, Project, Proposal, Task, User, UTCDateTime,
)

DUE = datetime(2026, 11, 1, tzinfo=timezone.utc)


def _project(store, user_id, **overrides):
  payload = {"user_id": user_id, "title": "Landing page", "status": "active"}
  payload.update(overrides)
  return store.create(Project, payload)


class TestCreateAndGet:
  def test_create_then_get_round_trips_fields(self, store, user, clock):
    payload = {
      "user_id": user.id,
      "title": "Shop redesign",
      "description": "New theme",
      "status": "in_progress",
      "budget": "4200.50",
      "deadline": datetime(2026, 12, 1, tzinfo=timezone.utc),
      "client_name": "TechCorp Inc.",
    }
    created = store.create(Project, payload)
    fetched = store.get(Project, created.id)

    assert fetched is not None
    assert fetched.id == created.id
    assert fetched.created_at == clock()
    assert fetched.updated_at == clock()
    for key, value in payload.items():
      assert getattr(fetched, key) == value

  def test_server_fields_in_payload_are_ignored(self, store, user, clock):
    project = _project(store, user.id, id=999, created_at=datetime(2000, 1, 1, tzinfo=timezone.utc))
    assert project.id != 999
    assert project.created_at == clock()

  def test_missing_required_field_is_a_validation_error(self, store, user):
    with pytest.raises(ValidationError) as exc:
      store.create(Project, {"user_id": user.id})
    assert any(d["field"] == "title" for d in exc.value.details)

  def test_unknown_owner_is_rejected(self, store):
    with pytest.raises(ValidationError):
      store.create(Project, {"user_id": 4242, "title": "Orphan"})

  def test_get_missing_returns_none(self, store):
    assert store.get(Project, 12345) is None

  def test_ids_unique_within_type(self, store, user):
    ids = {_project(store, user.id, title=f"p{i}").id for i in range(5)}
    assert len(ids) == 5


class TestListByUser:
  def test_only_own_rows_in_insertion_order(self, store, user, other_user):
    first = _project(store, user.id, title="first")
    _project(store, other_user.id, title="not mine")
    second = _project(store, user.id, title="second")

    rows = store.list_by_user(Project, user.id)
    assert [r.id for r in rows] == [first.id, second.id]

  def test_list_by_project(self, store, user):
    project = _project(store, user.id)
    store.create(Task, {"user_id": user.id, "title": "wire it", "project_id": project.id})
    store.create(Task, {"user_id": user.id, "title": "loose"})

    rows = store.list_by_project(Task, user.id, project.id)
    assert [t.title for t in rows] == ["wire it"]

  def test_latest_is_newest_first_and_limited(self, store, user, clock):
    for i in range(7):
      _project(store, user.id, title=f"p{i}")
      clock.advance(minutes=1)

    latest = store.latest(Project, user.id, limit=5)
    assert [p.title for p in latest] == ["p6", "p5", "p4", "p3", "p2"]


class TestUpdate:
  def test_merges_fields_and_bumps_updated_at(self, store, user, clock):
    project = _project(store, user.id)
    later = clock.advance(hours=2)

    updated = store.update(Project, project.id, {"status": "on_hold"})
    assert updated.status == "on_hold"
    assert updated.title == "Landing page"
    assert updated.updated_at == later
    assert updated.created_at == project.created_at

  def test_missing_entity_returns_none(self, store):
    assert store.update(Project, 999, {"title": "x"}) is None

  def test_unknown_field_rejected(self, store, user):
    project = _project(store, user.id)
    with pytest.raises(ValidationError):
      store.update(Project, project.id, {"colour": "red"})

  def test_null_for_required_field_rejected(self, store, user):
    project = _project(store, user.id)
    with pytest.raises(ValidationError):
      store.update(Project, project.id, {"title": None})
    assert store.get(Project, project.id).title == "Landing page"

  def test_task_completed_at_stamped_once(self, store, user, clock):
    task = store.create(Task, {"user_id": user.id, "title": "ship it"})
    assert task.completed_at is None

    first = clock.advance(hours=1)
    done = store.update(Task, task.id, {"status": "completed"})
    assert done.completed_at == first

    clock.advance(hours=1)
    again = store.update(Task, task.id, {"status": "completed"})
    assert again.completed_at == first

  def test_task_other_status_leaves_completed_at_empty(self, store, user):
    task = store.create(Task, {"user_id": user.id, "title": "ship it"})
    moved = store.update(Task, task.id, {"status": "in_progress"})
    assert moved.completed_at is None

  def test_invoice_paid_at_and_proposal_sent_at(self, store, user, clock):
    invoice = store.create(Invoice, {
      "user_id": user.id, "amount": "100.00", "client_email": "a@b.co", "due_date": DUE,
    })
    proposal = store.create(Proposal, {"user_id": user.id, "title": "t", "content": "c"})
    now = clock.advance(days=1)

    assert store.update(Invoice, invoice.id, {"status": "paid"}).paid_at == now
    assert store.update(Proposal, proposal.id, {"status": "sent"}).sent_at == now


class TestDelete:
  def test_delete_then_missing(self, store, user):
    project = _project(store, user.id)
    assert store.delete(Project, project.id) is True
    assert store.get(Project, project.id) is None
    assert store.delete(Project, project.id) is False

  def test_project_delete_detaches_dependants(self, store, user):
    project = _project(store, user.id)
    task = store.create(Task, {"user_id": user.id, "title": "t", "project_id": project.id})
    invoice = store.create(Invoice, {
      "user_id": user.id, "project_id": project.id, "amount": "10", "client_email": "a@b.co",
      "due_date": DUE,
    })

    store.delete(Project, project.id)

    assert store.get(Task, task.id).project_id is None
    assert store.get(Invoice, invoice.id).project_id is None

  def test_client_with_invoices_cannot_be_deleted(self, store, user):
    client = store.create(Client, {"user_id": user.id, "name": "Acme", "email": "acme@example.com"})
    store.create(Invoice, {
      "user_id": user.id, "client_id": client.id, "amount": "10", "due_date": DUE,
    })
    with pytest.raises(ConflictError):
      store.delete(Client, client.id)
    assert store.get(Client, client.id) is not None


class TestInvoiceNumbers:
  def test_generated_when_missing(self, store, user):
    invoice = store.create(Invoice, {
      "user_id": user.id, "amount": "10", "client_email": "a@b.co", "due_date": DUE,
    })
    assert invoice.invoice_number == "INV-00001"

  def test_duplicate_number_conflicts(self, store, user):
    base = {"user_id": user.id, "amount": "10", "client_email": "a@b.co", "due_date": DUE}
    store.create(Invoice, {**base, "invoice_number": "INV-2026-1"})
    with pytest.raises(ConflictError):
      store.create(Invoice, {**base, "invoice_number": "INV-2026-1"})


class TestAutomationSettings:
  def test_absent_until_first_update(self, store, user):
    assert store.get_automation_settings(user.id) is None

  def test_lazily_created_with_defaults(self, store, user):
    settings = store.update_automation_settings(user.id, {"client_outreach": True})
    assert isinstance(settings, AutomationSettings)
    assert settings.client_outreach is True
    assert settings.proposal_generation is True
    assert settings.invoice_reminders is True

    again = store.update_automation_settings(user.id, {"settings": {"tone": "formal"}})
    assert again.id == settings.id
    assert again.client_outreach is True
    assert again.settings == {"tone": "formal"}


class TestTimestamps:
  def test_every_datetime_column_is_utc(self):
    for model in (User, Project, Proposal, Client, Invoice, Task, AutomationSettings, AuthSession):
      for column in model.__table__.columns:
        if column.name.endswith("_at") or column.name in ("deadline", "due_date"):
          assert isinstance(column.type, UTCDateTime), f"{model.__name__}.{column.name}"

  def test_offsets_converted_to_utc(self, store, user):
    plus_five = timezone(timedelta(hours=5))
    project = _project(store, user.id, deadline=datetime(2026, 11, 30, tzinfo=plus_five))

    fetched = store.get(Project, project.id)
    assert fetched.deadline == datetime(2026, 11, 29, 19, 0, tzinfo=timezone.utc)
    assert fetched.deadline.utcoffset() == timedelta(0)
    assert fetched.created_at.utcoffset() == timedelta(0)

  def test_naive_values_read_as_utc(self, store, user):
    project = _project(store, user.id, deadline=datetime(2026, 11, 30, 8, 0))
    assert store.get(Project, project.id).deadline == datetime(2026, 11, 30, 8, 0, tzinfo=timezone.utc)


class TestInvoiceClient:
  def test_create_without_client_rejected(self, store, user):
    with pytest.raises(ValidationError) as exc:
      store.create(Invoice, {"user_id": user.id, "amount": "10", "due_date": DUE})
    assert exc.value.details[0]["field"] == "clientId"

  def test_update_cannot_drop_the_only_client(self, store, user):
    invoice = store.create(Invoice, {"user_id": user.id, "amount": "10", "client_email": "a@b.co", "due_date": DUE})
    with pytest.raises(ValidationError):
      store.update(Invoice, invoice.id, {"client_email": None})
    assert store.get(Invoice, invoice.id).client_email == "a@b.co"

  def test_update_can_swap_email_for_client(self, store, user):
    client = store.create(Client, {"user_id": user.id, "name": "Acme", "email": "acme@example.com"})
    invoice = store.create(Invoice, {"user_id": user.id, "amount": "10", "client_email": "a@b.co", "due_date": DUE})

    updated = store.update(Invoice, invoice.id, {"client_email": None, "client_id": client.id})
    assert updated.client_id == client.id
    assert updated.client_email is None


class TestOutOfRangeIds:
  @pytest.mark.parametrize("entity_id", [0, -1, 2**63, 10**20])
  def test_treated_as_missing(self, store, user, entity_id):
    assert store.get(Project, entity_id) is None
    assert store.update(Project, entity_id, {"title": "x"}) is None
    assert store.delete(Project, entity_id) is False
    assert store.list_by_project(Task, user.id, entity_id) == []
