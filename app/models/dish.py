# app/models/dish.py
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid

class Dish(Base):
    """요리 모델 (참가자당 대회별 1개)"""
    __tablename__ = "dishes"
    __table_args__ = (
        # participant_id가 NULL이면 (관리자가 대신 등록) 제약 대상 아님
        UniqueConstraint("competition_id", "participant_id", name="uq_dishes_competition_participant"),
    )
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    competition_id = Column(String, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(String, ForeignKey("participants.id", ondelete="SET NULL"), nullable=True, index=True)
    
    # 요리 정보
    name = Column(String(100), nullable=False)
    chef_name = Column(String(50), nullable=False)
    ingredients = Column(Text, nullable=True)
    recipe = Column(Text, nullable=True)
    story = Column(Text, nullable=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    # 관계 (요리 삭제 시 사진/투표도 삭제)
    competition = relationship("Competition", back_populates="dishes")
    photos = relationship(
        "Photo", back_populates="dish", order_by="Photo.order",
        cascade="all, delete-orphan", passive_deletes=True
    )
    votes = relationship("Vote", cascade="all, delete-orphan", passive_deletes=True)
    
    def __repr__(self):
        return f"<Dish {self.name}>"
