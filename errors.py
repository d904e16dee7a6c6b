# errors.py
from typing import Any, Dict, List, Optional


class AppError(Exception):
  status_code = 500
  message = "Internal server error"

  def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
    super().__init__(message or self.message)
    self.message = message or self.message
    self.details = details

  def to_body(self) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": self.message}
    if self.details:
      body["details"] = self.details
    return body


class ValidationError(AppError):
  status_code = 400
  message = "Validation error"

  @classmethod
  def from_pydantic(cls, exc) -> "ValidationError":
    return cls(details=field_errors(exc.errors()))


class AuthError(AppError):
  status_code = 401
  MESSAGES = {
    "invalid_credentials": "Invalid email or password",
    "unauthenticated": "Authentication required",
  }

  def __init__(self, code: str):
    super().__init__(self.MESSAGES.get(code, "Authentication required"))
    self.code = code


class NotFoundError(AppError):
  status_code = 404

  def __init__(self, entity: str = "Resource"):
    super().__init__(f"{entity} not found")


class ConflictError(AppError):
  status_code = 409
  message = "Conflict"


def field_errors(errors) -> List[Dict[str, Any]]:
  out = []
  for err in errors:
    loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
    out.append({"field": ".".join(loc) or None, "message": err.get("msg", "invalid value")})
  return out
