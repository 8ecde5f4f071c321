# app/api/routes/dishes.py
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_event_bus, get_photo_storage
from app.core.events import EventBus
from app.database import get_db
from app.schemas.base import UUID_PATTERN
from app.schemas.dish import DishDelete, DishResponse, DishView, DishWrite, DishWriteResponse, PhotoResponse
from app.services import dish_service
from app.services.storage_service import PhotoStorage

router = APIRouter(prefix="/api/v1/dishes", tags=["piatti"])

@router.post("/write", response_model=DishWriteResponse)
def write_dish(data: DishWrite, response: Response, db: Session = Depends(get_db)):
    """요리 등록(201) / 수정(200)"""
    dish, created = dish_service.write_dish(db, data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    
    return DishWriteResponse(
        dish=DishResponse.model_validate(dish),
        photos=[PhotoResponse.model_validate(photo) for photo in dish.photos]
    )

@router.post("/delete")
def delete_dish(
    data: DishDelete,
    db: Session = Depends(get_db),
    storage: PhotoStorage | None = Depends(get_photo_storage),
    events: EventBus = Depends(get_event_bus)
):
    """요리 삭제 (관리자 전용)"""
    dish_service.delete_dish(db, data.competition_id, data.participant_id, data.dish_id, storage, events)
    return {"success": True}

@router.get("", response_model=list[DishView])
def list_dishes(
    competition_id: str = Query(..., alias="competitionId", pattern=UUID_PATTERN),
    participant_id: str = Query(..., alias="participantId", pattern=UUID_PATTERN),
    db: Session = Depends(get_db)
):
    """요리 목록 (대회 종료 전에는 셰프 정보 숨김)"""
    return dish_service.list_dishes(db, competition_id, participant_id)
