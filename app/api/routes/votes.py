# app/api/routes/votes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas.vote import (
    RatingStateResponse,
    VoteCast,
    VoteCastResponse,
    VoteRead,
    VoteRecord,
    VoteStateResponse,
)
from app.services import vote_service

router = APIRouter(prefix="/api/v1/votes", tags=["voti"])

@router.post("/cast", response_model=VoteCastResponse)
def cast_vote(data: VoteCast, db: Session = Depends(get_db)):
    """투표 (이전 투표는 덮어씀)"""
    vote = vote_service.cast_vote(db, data.competition_id, data.participant_id, data.dish_id, data.score)
    return VoteCastResponse(vote=VoteRecord.model_validate(vote))

@router.post("/read")
def read_votes(data: VoteRead, db: Session = Depends(get_db)):
    """내 투표 + 집계 (응답 형태는 투표 방식에 따라 다름)"""
    state = vote_service.read_vote_state(db, data.competition_id, data.participant_id)
    
    if settings.voting_model == "rating":
        return RatingStateResponse(**state).model_dump(by_alias=True)
    return VoteStateResponse(**state).model_dump(by_alias=True)
