# app/services/ranking_service.py
"""
순위 계산

- simple: 평균 점수 그대로
- bayesian: (C·m + n·avg) / (C + n)
    m = 전체 가중 평균 (투표가 하나도 없으면 5)
    n = 해당 요리의 투표 수
    C = 투표 수 중앙값 (최소 2)
  투표가 적은 요리는 전체 평균 쪽으로 당겨진다.
"""
import unicodedata
from typing import Iterable, Mapping, NamedTuple

from app.models.competition import RankingMode

DEFAULT_GLOBAL_MEAN = 5.0  # 1~10점의 중간
MIN_CONFIDENCE = 2

class DishScore(NamedTuple):
    avg: float
    count: int

def bayesian_score(avg: float, count: int, global_mean: float, threshold: float) -> float:
    return (threshold * global_mean + count * avg) / (threshold + count)

def global_mean(dish_scores: Mapping[str, DishScore]) -> float:
    """투표 수로 가중한 전체 평균"""
    total_score = 0.0
    total_count = 0
    for score in dish_scores.values():
        if score.count > 0:
            total_score += score.avg * score.count
            total_count += score.count
    return total_score / total_count if total_count > 0 else DEFAULT_GLOBAL_MEAN

def confidence_threshold(dish_scores: Mapping[str, DishScore]) -> int:
    """정렬된 투표 수의 가운데 값 (index = n // 2), 최소 2"""
    counts = sorted(score.count for score in dish_scores.values())
    if not counts:
        return MIN_CONFIDENCE
    return max(counts[len(counts) // 2], MIN_CONFIDENCE)

def compute_ranking_scores(
    dish_scores: Mapping[str, DishScore],
    mode: RankingMode | str,
) -> dict[str, float]:
    """dish_id → 정렬에 쓸 점수"""
    mode = RankingMode(mode)
    
    if mode == RankingMode.SIMPLE:
        return {dish_id: score.avg for dish_id, score in dish_scores.items()}
    
    if not dish_scores:
        return {}
    
    m = global_mean(dish_scores)
    c = confidence_threshold(dish_scores)
    return {
        dish_id: bayesian_score(score.avg, score.count, m, c)
        for dish_id, score in dish_scores.items()
    }

def name_sort_key(name: str | None) -> tuple[str, str]:
    """악센트/대소문자 무시 비교 (동점일 때 이름순)"""
    name = name or ""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name

def rank_dishes(
    dishes: Iterable[Mapping],
    dish_scores: Mapping[str, DishScore],
    mode: RankingMode | str,
) -> list[dict]:
    """
    요리 목록을 점수 내림차순으로 정렬
    
    dishes: {"id", "name", ...} 형태. 투표가 없는 요리는 점수 0으로 맨 뒤.
    """
    scores = compute_ranking_scores(dish_scores, mode)
    
    ranked = []
    for dish in dishes:
        dish_score = dish_scores.get(dish["id"], DishScore(0.0, 0))
        ranked.append({
            **dish,
            "score": scores.get(dish["id"], 0.0),
            "avg": dish_score.avg,
            "count": dish_score.count,
        })
    
    ranked.sort(key=lambda item: (-item["score"], name_sort_key(item.get("name"))))
    
    for index, item in enumerate(ranked):
        item["rank"] = index + 1
    
    return ranked
