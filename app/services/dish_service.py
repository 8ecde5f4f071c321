# app/services/dish_service.py
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import httpx

from app.core.errors import Forbidden, Internal, NotFound
from app.core.events import EventBus
from app.core.logger import logger
from app.models.competition import Competition, CompetitionPhase
from app.models.dish import Dish
from app.models.participant import Participant
from app.models.photo import Photo
from app.schemas.dish import DishWrite
from app.services.competition_service import get_competition, get_member, require_admin
from app.services.storage_service import PhotoStorage

NOT_YOUR_DISH = "Non puoi modificare il piatto di un altro partecipante"


def _find_dish(db: Session, dish_id: str | None) -> Dish | None:
    if not dish_id:
        return None
    return db.query(Dish).filter(Dish.id == dish_id).first()


def _check_participant_write(
    db: Session,
    competition: Competition,
    participant: Participant,
    data: DishWrite,
    existing: Dish | None,
) -> None:
    """일반 참가자 권한 체크 (관리자는 호출하지 않음)"""

    # 투표 중 사진 추가: 본인 요리만
    if data.is_extra and competition.phase == CompetitionPhase.VOTING and data.dish_id:
        if not existing or existing.participant_id != participant.id:
            raise Forbidden(NOT_YOUR_DISH)
        return

    if competition.phase != CompetitionPhase.PREPARATION:
        raise Forbidden("Piatti modificabili solo in fase preparazione")

    if existing is None:
        # 참가자당 1개
        already = db.query(Dish.id)\
            .filter(
                Dish.competition_id == competition.id,
                Dish.participant_id == participant.id
            )\
            .first()
        if already:
            raise Forbidden("Hai già aggiunto un piatto per questa gara")
    elif existing.participant_id != participant.id:
        raise Forbidden(NOT_YOUR_DISH)


def _replace_photos(db: Session, dish: Dish, urls: list[str], is_extra: bool) -> None:
    """
    사진 전체 교체 (삭제 후 순서대로 다시 저장)

    실패해도 요리 자체는 이미 저장됐으므로 로그만 남긴다.
    """
    # 기존 사진의 추가 사진 여부는 유지
    previous_flags = {photo.url: photo.is_extra for photo in dish.photos}

    try:
        db.query(Photo).filter(Photo.dish_id == dish.id).delete(synchronize_session=False)
        for index, url in enumerate(urls):
            db.add(Photo(
                dish_id=dish.id,
                url=url,
                order=index,
                is_extra=previous_flags.get(url, is_extra)
            ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"사진 저장 실패 (요리 {dish.id}): {e}")

    db.expire(dish, ["photos"])


def write_dish(db: Session, data: DishWrite) -> tuple[Dish, bool]:
    """
    요리 등록/수정

    dish_id가 있어도 아직 없는 요리면 그 id로 새로 만든다
    (클라이언트가 미리 만든 id로 사진을 업로드하기 때문).

    Returns:
        (요리, 새로 만들었는지 여부)
    """
    participant = get_member(db, data.competition_id, data.participant_id)
    competition = get_competition(db, data.competition_id)

    existing = _find_dish(db, data.dish_id)
    if existing and existing.competition_id != competition.id:
        raise NotFound("Piatto non trovato")

    if not participant.is_admin:
        _check_participant_write(db, competition, participant, data, existing)

    fields = {
        "name": data.name,
        "chef_name": data.chef_name,
        "ingredients": data.ingredients or None,
        "recipe": data.recipe or None,
        "story": data.story or None,
    }

    if existing is None:
        dish = Dish(
            competition_id=competition.id,
            # 관리자가 대신 등록한 요리는 주인 없음
            participant_id=None if participant.is_admin else participant.id,
            **fields
        )
        if data.dish_id:
            dish.id = data.dish_id
        try:
            db.add(dish)
            db.commit()
            db.refresh(dish)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"요리 생성 실패: {e}")
            raise Internal("Errore durante la creazione del piatto")

        logger.info(f"요리 등록: {dish.name} ({competition.code})")
        created = True
    else:
        dish = existing
        for key, value in fields.items():
            setattr(dish, key, value)
        try:
            db.commit()
            db.refresh(dish)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"요리 수정 실패 {dish.id}: {e}")
            raise Internal("Errore durante l'aggiornamento del piatto")

        logger.info(f"요리 수정: {dish.name} ({competition.code}){' +extra' if data.is_extra else ''}")
        created = False

    if created and not data.photo_urls:
        return dish, created

    _replace_photos(db, dish, data.photo_urls, data.is_extra)
    return dish, created


def delete_dish(
    db: Session,
    competition_id: str,
    participant_id: str,
    dish_id: str,
    storage: PhotoStorage | None,
    events: EventBus,
) -> None:
    """요리 삭제 (관리자 전용, 사진/투표는 CASCADE)"""
    require_admin(db, competition_id, participant_id)

    dish = _find_dish(db, dish_id)
    if not dish or dish.competition_id != competition_id:
        raise NotFound("Piatto non trovato")

    # DB 삭제 전에 스토리지 파일 정리 (실패해도 계속)
    urls = [photo.url for photo in dish.photos]
    if urls and storage is not None:
        try:
            removed = storage.remove_urls(urls)
            logger.info(f"스토리지 사진 삭제: {removed}개 (요리 {dish_id})")
        except httpx.HTTPError as e:
            logger.error(f"스토리지 삭제 실패 (무시): {e}")

    try:
        db.delete(dish)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"요리 삭제 실패 {dish_id}: {e}")
        raise Internal("Errore durante l'eliminazione del piatto")

    logger.info(f"요리 삭제: {dish_id} ({competition_id})")
    events.publish("dish_deleted", {"competition_id": competition_id, "dish_id": dish_id})


# ===== 화면용 =====

def project_dish(dish: Dish, phase: CompetitionPhase, viewer: Participant) -> dict:
    """
    요리 → 화면용 dict

    관리자: 전부 보임
    참가자: 대회 종료 전에는 셰프 정보 숨김 (본인 요리는 보임)
    """
    is_mine = dish.participant_id is not None and dish.participant_id == viewer.id
    reveal = viewer.is_admin or is_mine or phase == CompetitionPhase.FINISHED

    return {
        "id": dish.id,
        "competition_id": dish.competition_id,
        "participant_id": dish.participant_id if reveal else None,
        "name": dish.name,
        "chef_name": dish.chef_name if reveal else None,
        "ingredients": dish.ingredients,
        "recipe": dish.recipe,
        "story": dish.story,
        "photos": list(dish.photos),
        "is_mine": is_mine,
    }


def list_dishes(db: Session, competition_id: str, participant_id: str) -> list[dict]:
    viewer = get_member(db, competition_id, participant_id)
    competition = get_competition(db, competition_id)

    dishes = db.query(Dish)\
        .filter(Dish.competition_id == competition_id)\
        .order_by(Dish.created_at, Dish.name)\
        .all()

    return [project_dish(dish, competition.phase, viewer) for dish in dishes]
