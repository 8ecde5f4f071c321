# app/models/photo.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid

class Photo(Base):
    """요리 사진 모델 (URL만 저장, 파일은 외부 스토리지)"""
    __tablename__ = "photos"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    dish_id = Column(String, ForeignKey("dishes.id", ondelete="CASCADE"), nullable=False, index=True)
    
    url = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)  # 표시 순서
    is_extra = Column(Boolean, nullable=False, default=False)  # 투표 중 추가된 사진
    
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    dish = relationship("Dish", back_populates="photos")
    
    def __repr__(self):
        return f"<Photo {self.order}: {self.url}>"
