# db/models.py
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, String

from .database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)  # uuid4 text
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class ScoreRow(Base):
    __tablename__ = "scores"

    # Autoincrement id doubles as the insertion-order tie-break.
    id = Column(Integer, primary_key=True, autoincrement=True)
    # Plain back-reference; ownership is enforced by the queries, not a foreign key.
    owner_id = Column(String, nullable=False)
    player_name = Column(String, nullable=False)
    score = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_scores_owner_score", "owner_id", "score"),)
