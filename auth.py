# auth.py
from fastapi import APIRouter, Depends, status

from db import get_store
from db.base import ScoreboardStore
from schemas import AuthResponse, UserCreate, UserLogin, UserPublic
import security
import services

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    store: ScoreboardStore = Depends(get_store),
    issuer: security.TokenIssuer = Depends(security.get_token_issuer),
):
    """Register a new user and log them in."""
    db_user, token = services.register_user(store, issuer, user.username, user.email, user.password)
    return AuthResponse(
        message="User created successfully",
        token=token,
        user=UserPublic.model_validate(db_user),
    )


@router.post("/login", response_model=AuthResponse)
def login_for_access_token(
    form_data: UserLogin,
    store: ScoreboardStore = Depends(get_store),
    issuer: security.TokenIssuer = Depends(security.get_token_issuer),
):
    """Exchange a username and password for a bearer token."""
    db_user, token = services.authenticate_user(store, issuer, form_data.username, form_data.password)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserPublic.model_validate(db_user),
    )
