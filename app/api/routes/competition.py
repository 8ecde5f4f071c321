# app/api/routes/competition.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_event_bus
from app.core.events import EventBus
from app.database import get_db
from app.models.competition import RankingMode
from app.schemas.base import UUID_PATTERN
from app.schemas.competition import (
    AdvancePhaseAction,
    CompetitionCreate,
    CompetitionCreateResponse,
    CompetitionJoin,
    CompetitionJoinResponse,
    CompetitionResponse,
    ParticipantResponse,
    PhaseResponse,
    RankingModeResponse,
    ResetVotesAction,
    ResetVotesResponse,
    SettingsAction,
)
from app.schemas.ranking import RankingResponse
from app.services import competition_service, vote_service

router = APIRouter(prefix="/api/v1/competitions", tags=["gare"])

@router.post("", response_model=CompetitionCreateResponse, status_code=status.HTTP_201_CREATED)
def create_competition(data: CompetitionCreate, db: Session = Depends(get_db)):
    """대회 생성 (생성자가 관리자)"""
    return competition_service.create_competition(
        db,
        name=data.name,
        nickname=data.nickname,
        pin_hash=data.pin_hash,
        allow_guests=data.allow_guests,
        max_participants=data.max_participants
    )

@router.post("/join", response_model=CompetitionJoinResponse)
def join_competition(data: CompetitionJoin, response: Response, db: Session = Depends(get_db)):
    """대회 참가 / 재인증 (새 참가자면 201)"""
    payload, created = competition_service.join_competition(
        db, code=data.code, nickname=data.nickname, pin_hash=data.pin_hash
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return payload

@router.post("/settings", response_model=PhaseResponse | ResetVotesResponse | RankingModeResponse)
def competition_settings(
    action: SettingsAction,
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """관리자 설정 (단계 진행, 투표 초기화, 순위 방식)"""
    if isinstance(action, AdvancePhaseAction):
        phase = competition_service.advance_phase(db, action.competition_id, action.participant_id, events)
        return PhaseResponse(phase=phase)
    
    if isinstance(action, ResetVotesAction):
        deleted = competition_service.reset_votes(db, action.competition_id, action.participant_id, events)
        return ResetVotesResponse(success=True, deleted_count=deleted)
    
    mode = competition_service.set_ranking_mode(
        db, action.competition_id, action.participant_id, action.mode, events
    )
    return RankingModeResponse(ranking_mode=mode)

@router.get("/by-code/{code}", response_model=CompetitionResponse)
def get_competition_by_code(code: str, db: Session = Depends(get_db)):
    """코드로 대회 조회 (대소문자 무시)"""
    return competition_service.get_competition_by_code(db, code)

@router.get("/{competition_id}", response_model=CompetitionResponse)
def get_competition(competition_id: str, db: Session = Depends(get_db)):
    """대회 상태 조회 (단계 변경 폴링용)"""
    return competition_service.get_competition(db, competition_id)

@router.get("/{competition_id}/participants", response_model=list[ParticipantResponse])
def list_participants(
    competition_id: str,
    participant_id: str = Query(..., alias="participantId", pattern=UUID_PATTERN),
    db: Session = Depends(get_db)
):
    """참가자 목록 (관리자 전용)"""
    return competition_service.list_participants(db, competition_id, participant_id)

@router.get("/{competition_id}/ranking", response_model=RankingResponse)
def get_ranking(
    competition_id: str,
    participant_id: str = Query(..., alias="participantId", pattern=UUID_PATTERN),
    mode: Optional[RankingMode] = Query(None, description="미리보기 방식 (저장 안 함)"),
    db: Session = Depends(get_db)
):
    """순위 조회"""
    return vote_service.competition_ranking(db, competition_id, participant_id, mode)
