# deps.py
from fastapi import Depends, Request, Response

from auth import AuthGate
from config import Settings
from errors import AuthError
from generators import LiveProjectFeed, ProposalGenerator
from models import User
from store import EntityStore


def get_settings(request: Request) -> Settings:
  return request.app.state.settings

def get_store(request: Request) -> EntityStore:
  return request.app.state.store

def get_auth(request: Request) -> AuthGate:
  return request.app.state.auth

def get_proposal_generator(request: Request) -> ProposalGenerator:
  return request.app.state.proposal_generator

def get_live_feed(request: Request) -> LiveProjectFeed:
  return request.app.state.live_feed


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
  response.set_cookie(
    key=settings.session_cookie_name,
    value=token,
    max_age=int(settings.session_ttl.total_seconds()),
    httponly=True,
    samesite="lax",
    secure=settings.session_cookie_secure,
  )

def clear_session_cookie(response: Response, settings: Settings) -> None:
  response.delete_cookie(
    key=settings.session_cookie_name,
    httponly=True,
    samesite="lax",
    secure=settings.session_cookie_secure,
  )


def current_user(
  request: Request,
  response: Response,
  auth: AuthGate = Depends(get_auth),
  settings: Settings = Depends(get_settings),
) -> User:
  token = request.cookies.get(settings.session_cookie_name)
  user_id = auth.require_session(token)
  user = auth.store.get_user(user_id)
  if user is None:
    raise AuthError("unauthenticated")
  # rolling session: re-issue the cookie with a fresh max-age
  set_session_cookie(response, settings, token)
  return user
