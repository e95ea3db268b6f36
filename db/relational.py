# db/relational.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import BackendUnavailable, DuplicateIdentity, NotFoundOrUnauthorized
from schemas import Score, User

from .database import Base, make_engine, make_session_factory
from .models import ScoreRow, UserRow

logger = logging.getLogger(__name__)


class RelationalStore:
    """
    SQLAlchemy-backed store.

    Username and email uniqueness come from unique constraints, and every
    score mutation is a single statement filtered on both id and owner_id.
    """

    name = "relational"

    def __init__(self, database_url: str, create_tables: bool = True) -> None:
        self.engine = make_engine(database_url)
        self._session_factory = make_session_factory(self.engine)
        if create_tables:
            try:
                Base.metadata.create_all(bind=self.engine)
            except SQLAlchemyError as exc:
                logger.error("[STORE] relational: could not create tables: %s", exc)
                raise BackendUnavailable() from exc

    @staticmethod
    def _to_user(row: UserRow) -> User:
        return User.model_validate(row)

    @staticmethod
    def _to_score(row: ScoreRow) -> Score:
        return Score(
            id=str(row.id),
            owner_id=row.owner_id,
            player_name=row.player_name,
            score=row.score,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _parse_id(score_id: str) -> int:
        # Anything that cannot be an autoincrement key is simply not found.
        if not isinstance(score_id, str) or not score_id.isdecimal() or len(score_id) > 18:
            raise NotFoundOrUnauthorized()
        return int(score_id)

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    # --- Credentials ---

    def find_by_username(self, username: str) -> Optional[User]:
        try:
            with self._session_factory() as session:
                row = session.scalars(select(UserRow).where(UserRow.username == username)).first()
                return self._to_user(row) if row else None
        except SQLAlchemyError as exc:
            logger.error("[STORE] relational: user lookup failed: %s", exc)
            raise BackendUnavailable() from exc

    def find_by_id(self, user_id: str) -> Optional[User]:
        try:
            with self._session_factory() as session:
                row = session.get(UserRow, user_id)
                return self._to_user(row) if row else None
        except SQLAlchemyError as exc:
            logger.error("[STORE] relational: user lookup failed: %s", exc)
            raise BackendUnavailable() from exc

    def create(self, username: str, email: str, password_hash: str) -> User:
        row = UserRow(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        try:
            with self._session_factory() as session:
                session.add(row)
                session.commit()
                return self._to_user(row)
        except IntegrityError as exc:
            raise DuplicateIdentity() from exc
        except SQLAlchemyError as exc:
            logger.error("[STORE] relational: user insert failed: %s", exc)
            raise BackendUnavailable() from exc

    # --- Scores ---

    def list_scores(self, owner_id: str) -> List[Score]:
        stmt = (
            select(ScoreRow)
            .where(ScoreRow.owner_id == owner_id)
            .order_by(ScoreRow.score.desc(), ScoreRow.id.asc())
        )
        try:
            with self._session_factory() as session:
                return [self._to_score(row) for row in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            logger.error("[STORE] relational: score listing failed: %s", exc)
            raise BackendUnavailable() from exc

    def create_score(self, owner_id: str, player_name: str, score: int) -> Score:
        row = ScoreRow(
            owner_id=owner_id,
            player_name=player_name,
            score=score,
            created_at=datetime.now(timezone.utc),
        )
        try:
            with self._session_factory() as session:
                session.add(row)
                session.commit()
                return self._to_score(row)
        except SQLAlchemyError as exc:
            logger.error("[STORE] relational: score insert failed: %s", exc)
            raise BackendUnavailable() from exc

    def update_score(self, score_id: str, owner_id: str, player_name: str, score: int) -> Score:
        pk = self._parse_id(score_id)
        stmt = (
            update(ScoreRow)
            .where(ScoreRow.id == pk, ScoreRow.owner_id == owner_id)
            .values(player_name=player_name, score=score, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        try:
            with self._session_factory() as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    session.rollback()
                    raise NotFoundOrUnauthorized()
                row = session.get(ScoreRow, pk)
                session.commit()
                return self._to_score(row)
        except SQLAlchemyError as exc:
            logger.error("[STORE] relational: score update failed: %s", exc)
            raise BackendUnavailable() from exc

    def delete_score(self, score_id: str, owner_id: str) -> None:
        pk = self._parse_id(score_id)
        stmt = (
            delete(ScoreRow)
            .where(ScoreRow.id == pk, ScoreRow.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        try:
            with self._session_factory() as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    session.rollback()
                    raise NotFoundOrUnauthorized()
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("[STORE] relational: score delete failed: %s", exc)
            raise BackendUnavailable() from exc
