# seed.py
import logging
from datetime import timedelta

from auth import AuthGate
from models import Project, Proposal
from store import EntityStore

logger = logging.getLogger(__name__)

DEMO_EMAIL = "john@example.com"
DEMO_PASSWORD = "password123"


def seed_if_empty(store: EntityStore, auth: AuthGate) -> bool:
  # Seed only if there are no users yet
  if store.count_users():
    return False

  user = auth.register(
    username="john_doe",
    email=DEMO_EMAIL,
    password=DEMO_PASSWORD,
    first_name="John",
    last_name="Doe",
  )
  now = store.now()

  redesign = store.create(Project, {
    "user_id": user.id,
    "title": "E-commerce Website Redesign",
    "description": "Complete redesign of the client's e-commerce platform with modern UI/UX",
    "status": "active",
    "budget": "5000.00",
    "deadline": now + timedelta(days=30),
    "client_name": "TechCorp Inc.",
  })
  store.create(Project, {
    "user_id": user.id,
    "title": "Mobile App Development",
    "description": "React Native app for fitness tracking",
    "status": "completed",
    "budget": "8000.00",
    "deadline": now - timedelta(days=10),
    "client_name": "FitLife Solutions",
  })

  sent = store.create(Proposal, {
    "user_id": user.id,
    "project_id": redesign.id,
    "title": "E-commerce Redesign Proposal",
    "content": "I propose to redesign your e-commerce platform with modern design principles...",
    "budget": "5000.00",
    "client_email": "client@techcorp.com",
  })
  store.update(Proposal, sent.id, {"status": "sent"})
  store.create(Proposal, {
    "user_id": user.id,
    "title": "Brand Identity Package",
    "content": "Complete brand identity design including logo, colors, and guidelines...",
    "budget": "2500.00",
    "client_email": "contact@startup.io",
  })

  logger.info(f"Seeded demo data for {DEMO_EMAIL}")
  return True
