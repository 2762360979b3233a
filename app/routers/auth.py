import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError, AuthenticationError
from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user
from app.schemas.auth import LoginRequest, Token, UserResponse
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)

@router.post("/login", response_model=ApiResponse[Token])
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, login_data.email, login_data.password)
    if user is None:
        logger.warning(f"Failed login for {login_data.email}")
        raise AuthenticationError("Incorrect email or password")
    if not user.is_active:
        raise AccessDeniedError("User is inactive")

    token = Token(
        access_token=auth_service.token_for_user(user),
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )
    logger.info(f"User {user.id} logged in")
    return ApiResponse.ok(token)

@router.get("/me", response_model=ApiResponse[UserResponse])
def me(current_user: User = Depends(get_current_user)):
    return ApiResponse.ok(UserResponse.model_validate(current_user))
