# security.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from db import get_store
from db.base import ScoreboardStore
from errors import HashingError, InvalidCredential, InvalidToken, MissingCredential
from schemas import Identity, User

logger = logging.getLogger(__name__)

# --- Password hashing ---
BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def get_password_hash(password: str) -> str:
    """Salted bcrypt hash of a plaintext password."""
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    try:
        return pwd_context.hash(password)
    except Exception as exc:
        raise HashingError("password hashing failed") from exc


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored hash. Never raises."""
    if not isinstance(plain_password, str) or not isinstance(hashed_password, str):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Malformed or unrecognised stored hash.
        return False


def dummy_verify() -> None:
    """Spend the cost of one verification without a stored hash."""
    pwd_context.dummy_verify()


# --- Bearer tokens ---

class TokenIssuer:
    """Signs and verifies stateless JWT bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 0):
        if not secret:
            raise ValueError("a signing secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "iat": int(now.timestamp()),
        }
        if self.expire_minutes > 0:
            claims["exp"] = int((now + timedelta(minutes=self.expire_minutes)).timestamp())
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc

        subject_id = payload.get("sub")
        username = payload.get("username")
        if not isinstance(subject_id, str) or not subject_id or not isinstance(username, str):
            raise InvalidToken("token is missing identity claims")
        return Identity(subject_id=subject_id, username=username)


# --- Authorization gate ---

def authorize(authorization: Optional[str], issuer: TokenIssuer) -> Identity:
    """
    Decide whether a request carrying this Authorization header may proceed.

    No header, or a header without a token, is a MissingCredential. A scheme
    other than Bearer, or a token the issuer rejects, is an InvalidCredential.
    """
    if not authorization or not authorization.strip():
        raise MissingCredential()

    parts = authorization.split()
    if len(parts) < 2:
        raise MissingCredential()

    scheme, token = parts[0], parts[1]
    if scheme.lower() != "bearer":
        raise InvalidCredential()

    try:
        return issuer.verify(token)
    except InvalidToken as exc:
        logger.info("[AUTH] Rejected bearer token: %s", exc)
        raise InvalidCredential() from exc


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_current_identity(
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Identity:
    return authorize(authorization, issuer)


def get_current_user(
    identity: Identity = Depends(get_current_identity),
    store: ScoreboardStore = Depends(get_store),
) -> User:
    """Verified identity whose subject still exists in the credential store."""
    user = store.find_by_id(identity.subject_id)
    if user is None:
        logger.info("[AUTH] Token subject %s no longer exists", identity.subject_id)
        raise InvalidCredential()
    return user
