# main.py
import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assistant_route import router as assistant_router
from auth import AuthGate
from auth_route import router as auth_router
from config import Settings
from dashboard_route import router as dashboard_router
from db import init_db, make_engine
from entity_route import router as entity_router
from errors import AppError, field_errors
from generators import LiveProjectFeed, ProposalGenerator, SyntheticProjectFeed, TemplateProposalGenerator
from seed import seed_if_empty
from store import EntityStore

logger = logging.getLogger(__name__)


def create_app(
  settings: Optional[Settings] = None,
  store: Optional[EntityStore] = None,
  proposal_generator: Optional[ProposalGenerator] = None,
  live_feed: Optional[LiveProjectFeed] = None,
) -> FastAPI:
  settings = settings or Settings.from_env()
  logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

  if store is None:
    engine = make_engine(settings.database_url)
    init_db(engine)
    store = EntityStore(engine)
  auth = AuthGate(store, ttl=settings.session_ttl, bcrypt_rounds=settings.bcrypt_rounds, now=store.now)

  app = FastAPI(title="Freelance Dashboard Backend", version="1.0.0")
  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )

  app.state.settings = settings
  app.state.store = store
  app.state.auth = auth
  app.state.proposal_generator = proposal_generator or TemplateProposalGenerator()
  app.state.live_feed = live_feed or SyntheticProjectFeed()

  @app.exception_handler(AppError)
  async def app_error(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())

  @app.exception_handler(RequestValidationError)
  async def request_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Validation error", "details": field_errors(exc.errors())})

  @app.exception_handler(Exception)
  async def unhandled_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

  @app.get("/health")
  def health():
    return {"ok": True, "version": app.version}

  app.include_router(auth_router)
  app.include_router(dashboard_router)
  app.include_router(entity_router)
  app.include_router(assistant_router)

  if settings.seed_demo_data:
    seed_if_empty(store, auth)

  return app


if __name__ == "__main__":
  import uvicorn
  port = int(os.getenv("PORT", 8000))
  uvicorn.run(create_app(), host="0.0.0.0", port=port)
