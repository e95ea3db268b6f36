# services.py
import logging
import math
import re
from typing import Any, List, Optional, Tuple

from db.base import ScoreboardStore
from errors import AuthenticationFailed, ValidationError
from schemas import Score, User
from security import TokenIssuer, dummy_verify, get_password_hash, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Scores are stored as signed 64-bit integers by every backend.
MIN_SCORE = -(2 ** 63)
MAX_SCORE = 2 ** 63 - 1

_NUMBER_RE = re.compile(r"^([+-]?\d+)(?:\.\d*)?$")


def _present(value: Optional[Any]) -> bool:
    return isinstance(value, str) and value != ""


# --- Accounts ---

def register_user(
    store: ScoreboardStore,
    issuer: TokenIssuer,
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> Tuple[User, str]:
    """Create an account and return it together with a fresh token."""
    if not (_present(username) and _present(email) and _present(password)):
        raise ValidationError("All fields are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if "\x00" in password:
        raise ValidationError("Password must not contain NUL characters")

    password_hash = get_password_hash(password)
    user = store.create(username, email, password_hash)
    logger.info("[AUTH] Registered user %s (%s)", user.id, user.username)
    return user, issuer.issue(user)


def authenticate_user(
    store: ScoreboardStore,
    issuer: TokenIssuer,
    username: Optional[str],
    password: Optional[str],
) -> Tuple[User, str]:
    """Check a username/password pair. Both failure paths raise the same error."""
    if not (_present(username) and _present(password)):
        raise ValidationError("Username and password are required")

    user = store.find_by_username(username)
    if user is None:
        dummy_verify()
        logger.info("[AUTH] Failed login for %r", username)
        raise AuthenticationFailed()
    if not verify_password(password, user.password_hash):
        logger.info("[AUTH] Failed login for %r", username)
        raise AuthenticationFailed()

    logger.info("[AUTH] User %s logged in", user.id)
    return user, issuer.issue(user)


# --- Scores ---

def coerce_score(value: Any) -> int:
    """
    Turn a submitted score into an int, or raise ValidationError.

    Numbers and numeric strings are truncated toward zero (4.5 -> 4, "-4.5" -> -4).
    """
    if isinstance(value, bool):
        raise ValidationError("Score must be a number")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError("Score must be a number")
        result = int(value)
    elif isinstance(value, str):
        match = _NUMBER_RE.match(value.strip())
        if not match:
            raise ValidationError("Score must be a number")
        if len(match.group(1).lstrip("+-").lstrip("0")) > 19:
            raise ValidationError("Score is out of range")
        result = int(match.group(1))
    else:
        raise ValidationError("Score must be a number")

    if not MIN_SCORE <= result <= MAX_SCORE:
        raise ValidationError("Score is out of range")
    return result


def _validate_score_input(player_name: Optional[str], score: Any) -> Tuple[str, int]:
    if not isinstance(player_name, str) or not player_name.strip() or score is None or score == "":
        raise ValidationError("Player name and score are required")
    return player_name, coerce_score(score)


def list_scores(store: ScoreboardStore, owner: User) -> List[Score]:
    return store.list_scores(owner.id)


def add_score(store: ScoreboardStore, owner: User, player_name: Optional[str], score: Any) -> Score:
    player_name, value = _validate_score_input(player_name, score)
    record = store.create_score(owner.id, player_name, value)
    logger.info("[SCORES] User %s added score %s", owner.id, record.id)
    return record


def update_score(
    store: ScoreboardStore, owner: User, score_id: str, player_name: Optional[str], score: Any
) -> Score:
    player_name, value = _validate_score_input(player_name, score)
    record = store.update_score(score_id, owner.id, player_name, value)
    logger.info("[SCORES] User %s updated score %s", owner.id, score_id)
    return record


def delete_score(store: ScoreboardStore, owner: User, score_id: str) -> None:
    store.delete_score(score_id, owner.id)
    logger.info("[SCORES] User %s deleted score %s", owner.id, score_id)
