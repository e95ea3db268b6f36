# db/memory.py
from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from errors import DuplicateIdentity, NotFoundOrUnauthorized
from schemas import Score, User

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Process-local store for users and scores.

    Requests run on a thread pool, so every read and every check-then-write
    sequence happens under one lock.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self._scores: Dict[str, Score] = {}
        # Insertion sequence per score id, used as the ordering tie-break.
        self._score_seq: Dict[str, int] = {}
        self._user_ids = itertools.count(1)
        self._score_ids = itertools.count(1)

    def ping(self) -> bool:
        return True

    # --- Credentials ---

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user.model_copy()
        return None

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def create(self, username: str, email: str, password_hash: str) -> User:
        with self._lock:
            for existing in self._users.values():
                if existing.username == username or existing.email == email:
                    raise DuplicateIdentity()
            user = User(
                id=str(next(self._user_ids)),
                username=username,
                email=email,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            self._users[user.id] = user
            logger.debug("[STORE] memory: created user %s", user.id)
            return user.model_copy()

    # --- Scores ---

    def list_scores(self, owner_id: str) -> List[Score]:
        with self._lock:
            owned = [s for s in self._scores.values() if s.owner_id == owner_id]
            owned.sort(key=lambda s: (-s.score, self._score_seq[s.id]))
            return [s.model_copy() for s in owned]

    def create_score(self, owner_id: str, player_name: str, score: int) -> Score:
        with self._lock:
            seq = next(self._score_ids)
            record = Score(
                id=str(seq),
                owner_id=owner_id,
                player_name=player_name,
                score=score,
                created_at=datetime.now(timezone.utc),
            )
            self._scores[record.id] = record
            self._score_seq[record.id] = seq
            return record.model_copy()

    def _owned(self, score_id: str, owner_id: str) -> Score:
        record = self._scores.get(score_id)
        if record is None or record.owner_id != owner_id:
            raise NotFoundOrUnauthorized()
        return record

    def update_score(self, score_id: str, owner_id: str, player_name: str, score: int) -> Score:
        with self._lock:
            record = self._owned(score_id, owner_id)
            updated = record.model_copy(
                update={
                    "player_name": player_name,
                    "score": score,
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            self._scores[score_id] = updated
            return updated.model_copy()

    def delete_score(self, score_id: str, owner_id: str) -> None:
        with self._lock:
            self._owned(score_id, owner_id)
            del self._scores[score_id]
            del self._score_seq[score_id]
