"""Login endpoint: exchange username and password for an opaque bearer token."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.auth import LoginRequest, LoginResponse
from app.schemas.common import ErrorResponse
from app.services.auth import authenticate

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns a bearer token valid for TOKEN_EXPIRATION_MS.
    Include the token in the Authorization header as: Bearer <token>
    """
    settings = get_settings()
    token = authenticate(db, body.username, body.password, token_ttl=settings.token_ttl)
    return LoginResponse(token=token)
