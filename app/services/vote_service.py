# app/services/vote_service.py
from datetime import datetime, timezone
import uuid

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.errors import Forbidden, Internal, InvalidInput, NotFound
from app.core.logger import logger
from app.models.competition import CompetitionPhase, RankingMode
from app.models.dish import Dish
from app.models.vote import Vote
from app.services.competition_service import get_competition, get_member
from app.services.ranking_service import DishScore, rank_dishes

_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _upsert_vote(db: Session, competition_id: str, participant_id: str, dish_id: str, score: int) -> None:
    """
    (competition_id, participant_id) 기준 INSERT ... ON CONFLICT DO UPDATE

    동시에 두 번 투표해도 DB 유니크 제약이 한 줄만 남긴다.
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"지원하지 않는 DB: {dialect}")

    stmt = insert(Vote).values(
        id=str(uuid.uuid4()),
        competition_id=competition_id,
        participant_id=participant_id,
        dish_id=dish_id,
        score=score,
        created_at=datetime.now(timezone.utc)
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Vote.competition_id, Vote.participant_id],
        set_={
            "dish_id": stmt.excluded.dish_id,
            "score": stmt.excluded.score,
            "created_at": stmt.excluded.created_at,
        }
    )
    db.execute(stmt)


def _resolve_score(score: int | None) -> int:
    """배포 설정의 투표 방식에 맞는 점수"""
    if settings.voting_model == "rating":
        if score is None:
            raise InvalidInput("Voto mancante (1-10)")
        return score

    if score is not None:
        raise InvalidInput("Questa gara non prevede punteggi")
    return 1


def cast_vote(db: Session, competition_id: str, participant_id: str, dish_id: str, score: int | None = None) -> Vote:
    """투표 (이미 투표했으면 덮어쓰기)"""
    get_member(db, competition_id, participant_id)

    competition = get_competition(db, competition_id)
    if competition.phase != CompetitionPhase.VOTING:
        raise InvalidInput("Votazione non in corso")

    dish = db.query(Dish).filter(Dish.id == dish_id).first()
    if not dish:
        raise NotFound("Piatto non trovato")
    if dish.competition_id != competition_id:
        raise InvalidInput("Piatto non in questa gara")

    # 자기 요리 투표 금지
    if dish.participant_id == participant_id:
        raise InvalidInput("Non puoi votare il tuo piatto")

    value = _resolve_score(score)

    try:
        _upsert_vote(db, competition_id, participant_id, dish_id, value)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"투표 저장 실패 {participant_id} -> {dish_id}: {e}")
        raise Internal("Errore durante il voto")

    vote = db.query(Vote)\
        .filter(
            Vote.competition_id == competition_id,
            Vote.participant_id == participant_id
        )\
        .one()

    logger.info(f"투표: {participant_id} -> {dish_id} ({value})")
    return vote


def aggregate_dish_scores(db: Session, competition_id: str) -> dict[str, DishScore]:
    """요리별 평균/투표 수 (조회 시점에 GROUP BY)"""
    rows = db.query(Vote.dish_id, func.avg(Vote.score), func.count(Vote.id))\
        .filter(Vote.competition_id == competition_id)\
        .group_by(Vote.dish_id)\
        .all()

    return {
        dish_id: DishScore(avg=float(avg), count=int(count))
        for dish_id, avg, count in rows
    }


def read_vote_state(db: Session, competition_id: str, participant_id: str) -> dict:
    """내 투표, 내 요리, 전체 집계"""
    get_member(db, competition_id, participant_id)

    my_vote = db.query(Vote)\
        .filter(
            Vote.competition_id == competition_id,
            Vote.participant_id == participant_id
        )\
        .first()

    my_dish = db.query(Dish.id)\
        .filter(
            Dish.competition_id == competition_id,
            Dish.participant_id == participant_id
        )\
        .first()
    my_dish_id = my_dish[0] if my_dish else None

    scores = aggregate_dish_scores(db, competition_id)

    if settings.voting_model == "rating":
        return {
            "my_ratings": [{"dish_id": my_vote.dish_id, "score": my_vote.score}] if my_vote else [],
            "my_dish_id": my_dish_id,
            "dish_scores": [
                {"dish_id": dish_id, "avg": score.avg, "count": score.count}
                for dish_id, score in scores.items()
            ],
        }

    return {
        "my_voted_dish_id": my_vote.dish_id if my_vote else None,
        "my_dish_id": my_dish_id,
        "vote_counts": [
            {"dish_id": dish_id, "count": score.count}
            for dish_id, score in scores.items()
        ],
    }


def competition_ranking(db: Session, competition_id: str, participant_id: str, mode: str | None = None) -> dict:
    """
    대회 순위

    mode가 없으면 대회에 저장된 공식 방식 사용 (있으면 미리보기, 저장 안 함).
    참가자는 대회 종료 후에만 조회 가능. 1인 1표 방식은 득표수로 정렬.
    """
    viewer = get_member(db, competition_id, participant_id)
    competition = get_competition(db, competition_id)

    if not viewer.is_admin and competition.phase != CompetitionPhase.FINISHED:
        raise Forbidden("Classifica disponibile a gara conclusa")

    selected = RankingMode(mode) if mode else competition.ranking_mode
    scores = aggregate_dish_scores(db, competition_id)

    if settings.voting_model == "vote":
        # 득표수를 평균 자리에 넣으면 simple 정렬이 곧 득표순
        scores = {dish_id: DishScore(avg=float(s.count), count=s.count) for dish_id, s in scores.items()}
        selected_for_scoring = RankingMode.SIMPLE
    else:
        selected_for_scoring = selected

    dishes = db.query(Dish)\
        .filter(Dish.competition_id == competition_id)\
        .all()
    reveal = viewer.is_admin or competition.phase == CompetitionPhase.FINISHED

    ranked = rank_dishes(
        [
            {"id": dish.id, "name": dish.name, "chef_name": dish.chef_name if reveal else None}
            for dish in dishes
        ],
        scores,
        selected_for_scoring
    )

    return {
        "mode": selected,
        "official_mode": competition.ranking_mode,
        "dishes": [
            {
                "rank": item["rank"],
                "dish_id": item["id"],
                "name": item["name"],
                "chef_name": item["chef_name"],
                "score": item["score"],
                "avg": item["avg"],
                "count": item["count"],
            }
            for item in ranked
        ],
    }
