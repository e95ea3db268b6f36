# db/base.py
from __future__ import annotations

from typing import List, Optional, Protocol

from schemas import Score, User


class CredentialStore(Protocol):
    """
    Persistence for user identities.

    Implementations must make the uniqueness check for username and email
    part of the same atomic step as the insert.
    """

    def find_by_username(self, username: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def create(self, username: str, email: str, password_hash: str) -> User:
        """Insert a new user. Raises DuplicateIdentity if username or email is taken."""
        ...


class ScoreRepository(Protocol):
    """
    Persistence for score records, always scoped to an owner.

    Every operation takes the owner's id and never touches a record that
    belongs to someone else. Unknown ids and foreign ids raise the same
    NotFoundOrUnauthorized error.
    """

    def list_scores(self, owner_id: str) -> List[Score]:
        """Owner's scores, highest first, ties in insertion order."""
        ...

    def create_score(self, owner_id: str, player_name: str, score: int) -> Score:
        ...

    def update_score(self, score_id: str, owner_id: str, player_name: str, score: int) -> Score:
        ...

    def delete_score(self, score_id: str, owner_id: str) -> None:
        ...


class ScoreboardStore(CredentialStore, ScoreRepository, Protocol):
    """A backend that holds both users and scores."""

    name: str

    def ping(self) -> bool:
        """Return True if the backend is reachable."""
        ...
