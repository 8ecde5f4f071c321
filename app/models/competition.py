# app/models/competition.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid
import enum

class CompetitionPhase(str, enum.Enum):
    """대회 단계 (앞으로만 진행)"""
    PREPARATION = "preparation"  # 요리 등록
    VOTING = "voting"            # 투표 중
    FINISHED = "finished"        # 종료

class RankingMode(str, enum.Enum):
    """공식 순위 계산 방식"""
    SIMPLE = "simple"
    BAYESIAN = "bayesian"

# 다음 단계 (finished는 없음)
NEXT_PHASE = {
    CompetitionPhase.PREPARATION: CompetitionPhase.VOTING,
    CompetitionPhase.VOTING: CompetitionPhase.FINISHED,
}

def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

class Competition(Base):
    """요리 대회 모델"""
    __tablename__ = "competitions"
    
    # 기본 필드
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    code = Column(String(6), unique=True, index=True, nullable=False)  # 참가 코드 (대문자+숫자 6자)
    name = Column(String, nullable=False)
    admin_pin_hash = Column(String, nullable=False)
    
    # 진행 상태
    phase = Column(
        SQLEnum(CompetitionPhase, name="competition_phase", values_callable=_enum_values),
        nullable=False,
        default=CompetitionPhase.PREPARATION
    )
    ranking_mode = Column(
        SQLEnum(RankingMode, name="ranking_mode", values_callable=_enum_values),
        nullable=False,
        default=RankingMode.SIMPLE
    )
    
    # 참가 설정
    allow_guests = Column(Boolean, nullable=False, default=True)
    max_participants = Column(Integer, nullable=True)  # None이면 제한 없음
    
    # 타임스탬프
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    # 관계
    participants = relationship(
        "Participant", back_populates="competition",
        cascade="all, delete-orphan", passive_deletes=True
    )
    dishes = relationship(
        "Dish", back_populates="competition",
        cascade="all, delete-orphan", passive_deletes=True
    )
    
    def __repr__(self):
        return f"<Competition {self.code} - {self.phase}>"
