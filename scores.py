# scores.py
from typing import List

from fastapi import APIRouter, Depends, status

from db import get_store
from db.base import ScoreboardStore
from schemas import Message, Score, ScoreIn, User
from security import get_current_user
import services

# Every route here runs behind the bearer-token gate.
router = APIRouter()


@router.get("", response_model=List[Score])
def get_scores(
    current_user: User = Depends(get_current_user),
    store: ScoreboardStore = Depends(get_store),
):
    return services.list_scores(store, current_user)


@router.post("", response_model=Score, status_code=status.HTTP_201_CREATED)
def add_score(
    payload: ScoreIn,
    current_user: User = Depends(get_current_user),
    store: ScoreboardStore = Depends(get_store),
):
    return services.add_score(store, current_user, payload.player_name, payload.score)


@router.put("/{score_id}", response_model=Score)
def update_score(
    score_id: str,
    payload: ScoreIn,
    current_user: User = Depends(get_current_user),
    store: ScoreboardStore = Depends(get_store),
):
    return services.update_score(store, current_user, score_id, payload.player_name, payload.score)


@router.delete("/{score_id}", response_model=Message)
def delete_score(
    score_id: str,
    current_user: User = Depends(get_current_user),
    store: ScoreboardStore = Depends(get_store),
):
    services.delete_score(store, current_user, score_id)
    return Message(message="Score deleted successfully")
