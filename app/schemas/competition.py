# app/schemas/competition.py
from datetime import datetime
from typing import Literal, Optional, Union, Annotated
from pydantic import Field, PositiveInt

from app.models.competition import CompetitionPhase, RankingMode
from app.schemas.base import CamelModel, IdStr

class CompetitionCreate(CamelModel):
    """대회 생성 요청"""
    name: str = Field(..., min_length=1, max_length=100)
    nickname: str = Field(..., min_length=1, max_length=50)
    pin_hash: str = Field(..., min_length=1)
    allow_guests: bool = True
    max_participants: Optional[PositiveInt] = None

class CompetitionCreateResponse(CamelModel):
    code: str
    competition_id: str
    participant_id: str
    nickname: str
    role: str
    session_token: str

class CompetitionJoin(CamelModel):
    """대회 참가 / 재인증 요청"""
    code: str = Field(..., min_length=1)
    nickname: str = Field(..., min_length=1, max_length=50)
    pin_hash: str = Field(..., min_length=1)

class CompetitionJoinResponse(CamelModel):
    competition_id: str
    participant_id: str
    nickname: str
    role: str
    competition_name: str
    session_token: str

class CompetitionResponse(CamelModel):
    """공개 대회 상태 (폴링용)"""
    id: str
    code: str
    name: str
    phase: CompetitionPhase
    ranking_mode: RankingMode
    allow_guests: bool
    max_participants: Optional[int] = None
    created_at: Optional[datetime] = None

class ParticipantResponse(CamelModel):
    id: str
    nickname: str
    role: str
    joined_at: Optional[datetime] = None
    has_dish: bool = False

# ===== 관리자 설정 액션 =====

class AdvancePhaseAction(CamelModel):
    action: Literal["advance_phase"]
    competition_id: IdStr
    participant_id: IdStr

class ResetVotesAction(CamelModel):
    action: Literal["reset_votes"]
    competition_id: IdStr
    participant_id: IdStr

class SetRankingModeAction(CamelModel):
    action: Literal["set_ranking_mode"]
    competition_id: IdStr
    participant_id: IdStr
    mode: RankingMode

SettingsAction = Annotated[
    Union[AdvancePhaseAction, ResetVotesAction, SetRankingModeAction],
    Field(discriminator="action"),
]

class PhaseResponse(CamelModel):
    phase: CompetitionPhase

class ResetVotesResponse(CamelModel):
    success: bool = True
    deleted_count: int

class RankingModeResponse(CamelModel):
    ranking_mode: RankingMode
