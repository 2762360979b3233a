"""
Actor identity and role-based access for FastAPI endpoints.
"""
import logging
from typing import Callable, List, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError, AuthenticationError
from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.auth import Actor
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    if not token:
        raise AuthenticationError()

    payload = auth_service.decode_access_token(token)
    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise AuthenticationError("Could not validate credentials")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise AuthenticationError("TOKEN_EXPIRED")

    if payload.get("type") != "access" or payload.get("user_id") is None:
        logger.warning("Authentication failed: Invalid token type or subject")
        raise AuthenticationError("Invalid token")

    user = db.get(User, payload["user_id"])
    if user is None:
        logger.warning(f"Authentication failed: User {payload.get('sub')} not found in database")
        raise AuthenticationError("User not found")
    if not user.is_active:
        logger.warning(f"Authentication failed: User {user.email} is inactive")
        raise AccessDeniedError("User is inactive")
    return user


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor(user_id=user.id, role=user.role, company_id=user.company_id)


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the actor has one of the allowed roles.

    Usage:
        @router.post("/companies")
        def create(actor: Actor = Depends(require_role([UserRole.SUPER_ADMIN]))):
            ...
    """
    def role_checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed_roles:
            raise AccessDeniedError(
                f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return actor
    return role_checker


def require_super_admin():
    return require_role([UserRole.SUPER_ADMIN])


def require_admin():
    """Super admins and company admins."""
    return require_role([UserRole.SUPER_ADMIN, UserRole.ADMIN])


def can_access_company(actor: Actor, company_id: int, write: bool = False) -> bool:
    """
    Tenant isolation:
    - SUPER_ADMIN: every company
    - ADMIN: read and write within their own company
    - EMPLOYEE: read-only within their own company
    """
    match actor.role:
        case UserRole.SUPER_ADMIN:
            return True
        case UserRole.ADMIN:
            return actor.company_id == company_id
        case UserRole.EMPLOYEE:
            return actor.company_id == company_id and not write
        case _:
            return False


def ensure_company_access(actor: Actor, company_id: int, write: bool = False) -> None:
    if not can_access_company(actor, company_id, write):
        raise AccessDeniedError("Access denied: company belongs to a different tenant.")
