# schemas.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


# --- Stored records ---

class User(BaseModel):
    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Score(BaseModel):
    id: str
    owner_id: str
    player_name: str
    score: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Identity carried by a bearer token ---

class Identity(BaseModel):
    subject_id: str
    username: str


# --- Request bodies ---
# Fields are optional here so that missing values come back as a 400 with a
# readable message from the service layer instead of a 422.

class UserCreate(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ScoreIn(BaseModel):
    player_name: Optional[str] = None
    score: Any = None


# --- Responses ---

class UserPublic(BaseModel):
    id: str
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


class Message(BaseModel):
    message: str


class Health(BaseModel):
    status: str
    backend: str
    database: str
