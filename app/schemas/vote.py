# app/schemas/vote.py
from datetime import datetime
from typing import Optional
from pydantic import Field

from app.schemas.base import CamelModel, IdStr

class VoteCast(CamelModel):
    """투표 요청 (평점 방식이면 score 필수)"""
    competition_id: IdStr
    participant_id: IdStr
    dish_id: IdStr
    score: Optional[int] = Field(None, ge=1, le=10)

class VoteRead(CamelModel):
    competition_id: IdStr
    participant_id: IdStr

class VoteRecord(CamelModel):
    id: str
    competition_id: str
    participant_id: str
    dish_id: str
    score: int
    created_at: Optional[datetime] = None

class VoteCastResponse(CamelModel):
    vote: VoteRecord

class VoteCount(CamelModel):
    dish_id: str
    count: int

class DishScoreItem(CamelModel):
    dish_id: str
    avg: float
    count: int

class MyRating(CamelModel):
    dish_id: str
    score: int

class VoteStateResponse(CamelModel):
    """1인 1표 방식 조회 결과"""
    my_voted_dish_id: Optional[str] = None
    my_dish_id: Optional[str] = None
    vote_counts: list[VoteCount]

class RatingStateResponse(CamelModel):
    """평점 방식 조회 결과"""
    my_ratings: list[MyRating]
    my_dish_id: Optional[str] = None
    dish_scores: list[DishScoreItem]
