# app/schemas/dish.py
from datetime import datetime
from typing import Optional
from pydantic import Field, HttpUrl, TypeAdapter, field_validator

from app.schemas.base import CamelModel, IdStr

MAX_PHOTOS = 10
_url_adapter = TypeAdapter(HttpUrl)

class DishWrite(CamelModel):
    """요리 등록/수정 요청 (dish_id 있으면 수정)"""
    competition_id: IdStr
    participant_id: IdStr
    dish_id: Optional[IdStr] = None
    name: str = Field(..., min_length=1, max_length=100)
    chef_name: str = Field(..., min_length=1, max_length=50)
    ingredients: str = Field("", max_length=2000)
    recipe: str = Field("", max_length=5000)
    story: str = Field("", max_length=2000)
    photo_urls: list[str] = Field(default_factory=list, max_length=MAX_PHOTOS)
    is_extra: bool = False
    
    @field_validator("photo_urls")
    def validate_photo_urls(cls, urls):
        # 원본 문자열은 그대로 저장 (스토리지 경로 추출에 사용)
        for url in urls:
            try:
                _url_adapter.validate_python(url)
            except ValueError:
                raise ValueError(f"URL non valido: {url}")
        return urls

class DishDelete(CamelModel):
    competition_id: IdStr
    participant_id: IdStr
    dish_id: IdStr

class PhotoResponse(CamelModel):
    id: str
    dish_id: str
    url: str
    order: int
    is_extra: bool
    created_at: Optional[datetime] = None

class DishResponse(CamelModel):
    id: str
    competition_id: str
    participant_id: Optional[str] = None
    name: str
    chef_name: str
    ingredients: Optional[str] = None
    recipe: Optional[str] = None
    story: Optional[str] = None
    created_at: Optional[datetime] = None

class DishWriteResponse(CamelModel):
    dish: DishResponse
    photos: list[PhotoResponse]

class DishView(CamelModel):
    """목록용 요리 (공개 화면에서는 셰프 정보가 가려질 수 있음)"""
    id: str
    competition_id: str
    participant_id: Optional[str] = None
    name: str
    chef_name: Optional[str] = None
    ingredients: Optional[str] = None
    recipe: Optional[str] = None
    story: Optional[str] = None
    photos: list[PhotoResponse] = []
    is_mine: bool = False
