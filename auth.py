# auth.py
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

import bcrypt

from errors import AuthError, ValidationError
from models import User, as_utc, utc_now
from store import EntityStore

logger = logging.getLogger(__name__)


class AuthGate:
  """
  Password login and cookie sessions on top of the entity store.

  Sessions have a rolling TTL: every successful `require_session` pushes the
  expiry out to now + ttl. An expired or logged-out token behaves exactly like
  one that never existed.
  """

  def __init__(
    self,
    store: EntityStore,
    ttl: timedelta = timedelta(days=30),
    bcrypt_rounds: int = 12,
    now: Callable[[], datetime] = utc_now,
  ):
    self.store = store
    self.ttl = ttl
    self.bcrypt_rounds = bcrypt_rounds
    self.now = now
    # checked against when the email is unknown so both failure paths cost a bcrypt round
    self._dummy_hash = self.hash_password(secrets.token_urlsafe(16))

  def hash_password(self, password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(self.bcrypt_rounds)).decode("utf-8")

  @staticmethod
  def verify_password(password: str, hashed: str) -> bool:
    try:
      return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
      # malformed hash or over-long password
      return False

  def register(
    self,
    username: str,
    email: str,
    password: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
  ) -> User:
    if self.store.get_user_by_email(email):
      raise ValidationError("User already exists with this email")
    if self.store.get_user_by_username(username):
      raise ValidationError("User already exists with this username")

    user = self.store.create_user({
      "username": username,
      "email": email,
      "password": self.hash_password(password),
      "first_name": first_name,
      "last_name": last_name,
    })
    logger.info(f"Registered user {user.id} ({user.username})")
    return user

  def login(self, email: str, password: str) -> Tuple[User, str]:
    user = self.store.get_user_by_email(email)
    if user is None:
      self.verify_password(password, self._dummy_hash)
      logger.warning(f"Login failed for {email}: no such user")
      raise AuthError("invalid_credentials")
    if not self.verify_password(password, user.password):
      logger.warning(f"Login failed for {email}: wrong password")
      raise AuthError("invalid_credentials")

    now = as_utc(self.now())
    purged = self.store.purge_expired_sessions(now)
    if purged:
      logger.info(f"Purged {purged} expired sessions")

    token = secrets.token_urlsafe(32)
    self.store.create_session(user.id, token, now + self.ttl)
    logger.info(f"User {user.id} logged in")
    return user, token

  def require_session(self, token: Optional[str]) -> int:
    if not token:
      raise AuthError("unauthenticated")
    record = self.store.get_session_record(token)
    if record is None:
      raise AuthError("unauthenticated")

    now = as_utc(self.now())
    if as_utc(record.expires_at) <= now:
      self.store.delete_session(token)
      raise AuthError("unauthenticated")

    # logged out since the read above
    if self.store.touch_session(token, now + self.ttl) is None:
      raise AuthError("unauthenticated")
    return record.user_id

  def logout(self, token: Optional[str]) -> None:
    if token and self.store.delete_session(token):
      logger.info("Session closed")
