# app/schemas/ranking.py
from typing import Optional

from app.models.competition import RankingMode
from app.schemas.base import CamelModel

class RankedDish(CamelModel):
    rank: int
    dish_id: str
    name: str
    chef_name: Optional[str] = None
    score: float
    avg: float
    count: int

class RankingResponse(CamelModel):
    """순위 (mode: 이번 계산 방식, official_mode: 대회에 저장된 방식)"""
    mode: RankingMode
    official_mode: RankingMode
    dishes: list[RankedDish]
