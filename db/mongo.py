# db/mongo.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import BackendUnavailable, DuplicateIdentity, NotFoundOrUnauthorized
from schemas import Score, User

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "scoreboard"


class DocumentStore:
    """
    MongoDB-backed store with `users` and `scores` collections.

    Unique indexes on username and email make registration a single insert,
    and score mutations filter on both `_id` and `user_id` in one command.
    """

    name = "document"

    def __init__(self, database: Database) -> None:
        self.db = database
        self.users = database["users"]
        self.scores = database["scores"]
        self._ensure_indexes()

    @classmethod
    def from_url(cls, mongo_uri: str, server_selection_timeout_ms: int = 2000) -> "DocumentStore":
        client = MongoClient(mongo_uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
        return cls(client.get_default_database(default=DEFAULT_DB_NAME))

    def _ensure_indexes(self) -> None:
        try:
            self.users.create_index([("username", ASCENDING)], unique=True)
            self.users.create_index([("email", ASCENDING)], unique=True)
            self.scores.create_index([("user_id", ASCENDING)])
        except PyMongoError as exc:
            logger.error("[STORE] document: could not create indexes: %s", exc)
            raise BackendUnavailable() from exc

    @staticmethod
    def _to_user(doc: dict) -> User:
        return User(
            id=str(doc["_id"]),
            username=doc["username"],
            email=doc["email"],
            password_hash=doc["password"],
            created_at=doc["created_at"],
        )

    @staticmethod
    def _to_score(doc: dict) -> Score:
        return Score(
            id=str(doc["_id"]),
            owner_id=doc["user_id"],
            player_name=doc["player_name"],
            score=doc["score"],
            created_at=doc["created_at"],
            updated_at=doc.get("updated_at"),
        )

    @staticmethod
    def _object_id(value: str) -> Optional[ObjectId]:
        try:
            return ObjectId(value)
        except (InvalidId, TypeError):
            return None

    def ping(self) -> bool:
        try:
            self.db.command("ping")
            return True
        except PyMongoError:
            return False

    # --- Credentials ---

    def find_by_username(self, username: str) -> Optional[User]:
        try:
            doc = self.users.find_one({"username": username})
        except PyMongoError as exc:
            logger.error("[STORE] document: user lookup failed: %s", exc)
            raise BackendUnavailable() from exc
        return self._to_user(doc) if doc else None

    def find_by_id(self, user_id: str) -> Optional[User]:
        oid = self._object_id(user_id)
        if oid is None:
            return None
        try:
            doc = self.users.find_one({"_id": oid})
        except PyMongoError as exc:
            logger.error("[STORE] document: user lookup failed: %s", exc)
            raise BackendUnavailable() from exc
        return self._to_user(doc) if doc else None

    def create(self, username: str, email: str, password_hash: str) -> User:
        doc = {
            "username": username,
            "email": email,
            "password": password_hash,
            "created_at": datetime.now(timezone.utc),
        }
        try:
            result = self.users.insert_one(doc)
        except DuplicateKeyError as exc:
            raise DuplicateIdentity() from exc
        except PyMongoError as exc:
            logger.error("[STORE] document: user insert failed: %s", exc)
            raise BackendUnavailable() from exc
        doc["_id"] = result.inserted_id
        return self._to_user(doc)

    # --- Scores ---

    def list_scores(self, owner_id: str) -> List[Score]:
        try:
            cursor = self.scores.find({"user_id": owner_id}).sort([("score", DESCENDING), ("_id", ASCENDING)])
            return [self._to_score(doc) for doc in cursor]
        except PyMongoError as exc:
            logger.error("[STORE] document: score listing failed: %s", exc)
            raise BackendUnavailable() from exc

    def create_score(self, owner_id: str, player_name: str, score: int) -> Score:
        doc = {
            "user_id": owner_id,
            "player_name": player_name,
            "score": score,
            "created_at": datetime.now(timezone.utc),
        }
        try:
            result = self.scores.insert_one(doc)
        except PyMongoError as exc:
            logger.error("[STORE] document: score insert failed: %s", exc)
            raise BackendUnavailable() from exc
        doc["_id"] = result.inserted_id
        return self._to_score(doc)

    def update_score(self, score_id: str, owner_id: str, player_name: str, score: int) -> Score:
        oid = self._object_id(score_id)
        if oid is None:
            raise NotFoundOrUnauthorized()
        try:
            doc = self.scores.find_one_and_update(
                {"_id": oid, "user_id": owner_id},
                {"$set": {"player_name": player_name, "score": score, "updated_at": datetime.now(timezone.utc)}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            logger.error("[STORE] document: score update failed: %s", exc)
            raise BackendUnavailable() from exc
        if doc is None:
            raise NotFoundOrUnauthorized()
        return self._to_score(doc)

    def delete_score(self, score_id: str, owner_id: str) -> None:
        oid = self._object_id(score_id)
        if oid is None:
            raise NotFoundOrUnauthorized()
        try:
            result = self.scores.delete_one({"_id": oid, "user_id": owner_id})
        except PyMongoError as exc:
            logger.error("[STORE] document: score delete failed: %s", exc)
            raise BackendUnavailable() from exc
        if result.deleted_count == 0:
            raise NotFoundOrUnauthorized()
