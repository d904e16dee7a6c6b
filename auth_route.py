# auth_route.py
import logging

from fastapi import APIRouter, Depends, Request, Response

from auth import AuthGate
from config import Settings
from deps import clear_session_cookie, current_user, get_auth, get_settings, get_store, set_session_cookie
from models import User
from schemas import LoginRequest, MessageResponse, ProfileUpdate, RegisterRequest, UserResponse
from store import EntityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
def register(req: RegisterRequest, auth: AuthGate = Depends(get_auth)):
  user = auth.register(
    username=req.username,
    email=req.email,
    password=req.password,
    first_name=req.first_name,
    last_name=req.last_name,
  )
  return {"message": "User created successfully", "user": user}

@router.post("/login", response_model=UserResponse)
def login(
  req: LoginRequest,
  response: Response,
  auth: AuthGate = Depends(get_auth),
  settings: Settings = Depends(get_settings),
):
  user, token = auth.login(req.email, req.password)
  set_session_cookie(response, settings, token)
  return {"message": "Login successful", "user": user}

@router.post("/logout", response_model=MessageResponse)
def logout(
  request: Request,
  response: Response,
  auth: AuthGate = Depends(get_auth),
  settings: Settings = Depends(get_settings),
):
  auth.logout(request.cookies.get(settings.session_cookie_name))
  clear_session_cookie(response, settings)
  return {"message": "Logout successful"}

@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(current_user)):
  return {"user": user}

@router.patch("/me", response_model=UserResponse)
def update_me(
  req: ProfileUpdate,
  user: User = Depends(current_user),
  store: EntityStore = Depends(get_store),
):
  updated = store.update_user(user.id, req.changes())
  return {"message": "Profile updated", "user": updated}
