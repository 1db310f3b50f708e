"""Current user, admin user creation and logout."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.access import get_access_token, get_current_identity
from app.core.database import get_db
from app.models import User
from app.schemas.auth import Identity
from app.schemas.common import ErrorResponse, StatusResponse
from app.schemas.users import CreateUserRequest, UserResponse
from app.services.auth import get_current_user, logout, logout_all, register_user

router = APIRouter()


def _to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, email=user.email, roles=[user.role])


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
def read_current_user(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Return the authenticated user's profile."""
    return _to_response(get_current_user(db, identity))


@router.post(
    "/create",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def create_user(
    body: CreateUserRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Create a user (admin only). The role is stored as given."""
    user = register_user(db, identity, body.username, body.email, body.password, body.role)
    return _to_response(user)


@router.post("/logout", response_model=StatusResponse, responses={500: {"model": ErrorResponse}})
def logout_user(
    identity: Annotated[Identity, Depends(get_current_identity)],
    token: Annotated[str, Depends(get_access_token)],
    db: Annotated[Session, Depends(get_db)],
    scope: Literal["all", "current"] = "all",
) -> StatusResponse:
    """
    Revoke the caller's tokens. scope=all (default) revokes every active token of
    the authenticated user; scope=current revokes only the presented token.
    """
    if scope == "current":
        logout(db, token)
    else:
        logout_all(db, identity.username)
    return StatusResponse(status="success", message="Logged out successfully")
