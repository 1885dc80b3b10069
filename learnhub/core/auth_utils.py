# learnhub/core/auth_utils.py
from enum import Enum
from typing import Optional

from fastapi import Depends, Header
from jose import JWTError, jwt
from pydantic import BaseModel

from learnhub import config
from learnhub.core.errors import Forbidden, Unauthorized


class Role(str, Enum):
    STUDENT = "STUDENT"
    INSTRUCTOR = "INSTRUCTOR"
    ADMIN = "ADMIN"


class AuthUser(BaseModel):
    """
    Identity taken from a verified bearer token.
    Trusted as-is; credentials are never re-checked here.
    """
    user_id: str
    role: Role = Role.STUDENT
    email: Optional[str] = None


def _decode_jwt_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired token")


def _user_from_payload(payload: dict) -> AuthUser:
    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        raise Unauthorized("Invalid token: missing user id")

    role = payload.get("role", Role.STUDENT.value)
    if role not in Role.__members__:
        raise Unauthorized("Invalid token: unknown role")

    return AuthUser(user_id=user_id, role=Role(role), email=payload.get("email"))


def get_current_user(authorization: str = Header(None)) -> AuthUser:
    """Bearer auth is mandatory"""
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("No token provided")

    token = authorization.split(" ", 1)[1].strip()
    return _user_from_payload(_decode_jwt_token(token))


def get_optional_user(authorization: str = Header(None)) -> Optional[AuthUser]:
    """
    Bearer auth is optional: no header means anonymous,
    but a header that is present must carry a valid token.
    """
    if not authorization:
        return None
    return get_current_user(authorization)


def require_roles(*roles: Role):
    """Dependency factory restricting an endpoint to the given roles"""

    def checker(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.role not in roles:
            raise Forbidden("Insufficient permissions")
        return user

    return checker
