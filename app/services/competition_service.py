# app/services/competition_service.py
import secrets
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.errors import Forbidden, Internal, InvalidInput, NotFound, Unauthorized
from app.core.events import EventBus
from app.core.logger import logger
from app.core.security import create_session_token, hash_pin, verify_pin
from app.models.competition import Competition, CompetitionPhase, RankingMode, NEXT_PHASE
from app.models.dish import Dish
from app.models.participant import Participant, ROLE_ADMIN, ROLE_PARTICIPANT
from app.models.vote import Vote
from app.services import rate_limit_service

CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
CODE_LENGTH = 6

def generate_code() -> str:
    """대문자+숫자 6자리 참가 코드"""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))

def allocate_code(db: Session) -> str:
    """중복 없는 코드 생성 (최대 N번 시도)"""
    for _ in range(settings.code_generation_attempts):
        candidate = generate_code()
        exists = db.query(Competition.id).filter(Competition.code == candidate).first()
        if not exists:
            return candidate

    logger.error("대회 코드 생성 실패: 모든 시도가 중복")
    raise Internal("Impossibile generare un codice univoco. Riprova.")

def issue_session_token(competition: Competition, participant: Participant) -> str:
    return create_session_token({
        "sub": participant.id,
        "competition_id": competition.id,
        "competition_code": competition.code,
        "nickname": participant.nickname,
        "role": participant.role,
    })

# ===== 조회 =====

def get_competition(db: Session, competition_id: str) -> Competition:
    competition = db.query(Competition).filter(Competition.id == competition_id).first()
    if not competition:
        raise NotFound("Gara non trovata")
    return competition

def get_competition_by_code(db: Session, code: str) -> Competition:
    competition = db.query(Competition).filter(Competition.code == code.upper()).first()
    if not competition:
        raise NotFound("Gara non trovata")
    return competition

def get_member(db: Session, competition_id: str, participant_id: str) -> Participant:
    """참가자 조회 + 해당 대회 소속인지 확인"""
    participant = db.query(Participant).filter(Participant.id == participant_id).first()
    if not participant:
        raise NotFound("Partecipante non trovato")

    if participant.competition_id != competition_id:
        raise Forbidden("Non autorizzato")

    return participant

def require_admin(db: Session, competition_id: str, participant_id: str) -> Participant:
    participant = get_member(db, competition_id, participant_id)

    if not participant.is_admin:
        raise Forbidden("Accesso negato: solo l'admin puo eseguire questa azione")

    return participant

# ===== 생성 / 참가 =====

def create_competition(
    db: Session,
    name: str,
    nickname: str,
    pin_hash: str,
    allow_guests: bool = True,
    max_participants: int | None = None,
) -> dict:
    """
    대회 생성 + 관리자 참가자 생성

    참가자 생성이 실패하면 방금 만든 대회를 지운다 (고아 대회 방지).
    """
    code = allocate_code(db)

    competition = Competition(
        code=code,
        name=name,
        admin_pin_hash=hash_pin(pin_hash),
        phase=CompetitionPhase.PREPARATION,
        allow_guests=allow_guests,
        max_participants=max_participants
    )
    try:
        db.add(competition)
        db.commit()
        db.refresh(competition)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"대회 생성 실패: {e}")
        raise Internal("Errore durante la creazione della gara")

    try:
        admin = Participant(
            competition_id=competition.id,
            nickname=nickname,
            pin_hash=hash_pin(pin_hash),
            role=ROLE_ADMIN
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"관리자 생성 실패, 대회 {code} 롤백: {e}")
        db.query(Competition).filter(Competition.id == competition.id).delete()
        db.commit()
        raise Internal("Errore durante la creazione del partecipante")

    logger.info(f"대회 생성: {code} ({name}) by {nickname}")

    return {
        "code": code,
        "competition_id": competition.id,
        "participant_id": admin.id,
        "nickname": admin.nickname,
        "role": ROLE_ADMIN,
        "session_token": issue_session_token(competition, admin),
    }

def join_competition(db: Session, code: str, nickname: str, pin_hash: str) -> tuple[dict, bool]:
    """
    대회 참가 또는 재인증

    Returns:
        (응답 dict, 새 참가자 여부)
    """
    upper_code = code.upper()
    competition = get_competition_by_code(db, upper_code)

    # 참가자 조회 전에 시도 횟수 제한
    rate_limit_service.check_join_limit(db, upper_code, nickname)

    existing = _find_participant(db, competition.id, nickname)

    if existing:
        return _reauthenticate(competition, existing, pin_hash), False

    # 새 참가자
    if competition.max_participants is not None:
        participant_count = db.query(func.count(Participant.id))\
            .filter(Participant.competition_id == competition.id)\
            .scalar()
        if participant_count >= competition.max_participants:
            raise Forbidden("Gara al completo")

    participant = Participant(
        competition_id=competition.id,
        nickname=nickname,
        pin_hash=hash_pin(pin_hash),
        role=ROLE_PARTICIPANT
    )
    try:
        db.add(participant)
        db.commit()
        db.refresh(participant)
    except IntegrityError:
        # 같은 닉네임이 동시에 먼저 등록됨 → 재인증으로 처리
        db.rollback()
        racer = _find_participant(db, competition.id, nickname)
        if racer is None:
            logger.error(f"참가자 등록 실패 {upper_code}/{nickname}: 제약 위반")
            raise Internal("Errore durante la registrazione")
        logger.warning(f"동시 참가 충돌: {upper_code}/{nickname}")
        return _reauthenticate(competition, racer, pin_hash), False
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"참가자 등록 실패 {upper_code}/{nickname}: {e}")
        raise Internal("Errore durante la registrazione")

    logger.info(f"새 참가자: {upper_code}/{nickname}")
    return _join_payload(competition, participant), True

def _find_participant(db: Session, competition_id: str, nickname: str) -> Participant | None:
    return db.query(Participant)\
        .filter(
            Participant.competition_id == competition_id,
            Participant.nickname == nickname
        )\
        .first()

def _reauthenticate(competition: Competition, participant: Participant, pin_hash: str) -> dict:
    """재인증: 본인 PIN 또는 관리자 PIN"""
    if not (verify_pin(pin_hash, participant.pin_hash) or verify_pin(pin_hash, competition.admin_pin_hash)):
        raise Unauthorized("PIN errato")

    logger.info(f"재인증: {competition.code}/{participant.nickname}")
    return _join_payload(competition, participant)

def _join_payload(competition: Competition, participant: Participant) -> dict:
    return {
        "competition_id": competition.id,
        "participant_id": participant.id,
        "nickname": participant.nickname,
        "role": participant.role,
        "competition_name": competition.name,
        "session_token": issue_session_token(competition, participant),
    }

# ===== 관리자 설정 =====

def advance_phase(db: Session, competition_id: str, participant_id: str, events: EventBus) -> CompetitionPhase:
    """preparation → voting → finished (되돌리기 없음)"""
    require_admin(db, competition_id, participant_id)
    competition = get_competition(db, competition_id)

    if competition.phase == CompetitionPhase.FINISHED:
        raise InvalidInput("Gara gia conclusa")

    next_phase = NEXT_PHASE.get(competition.phase)
    if next_phase is None:
        raise InvalidInput("Fase non valida")

    previous = competition.phase
    competition.phase = next_phase
    db.commit()

    logger.info(f"단계 변경: {competition.code} {previous.value} → {next_phase.value}")
    events.publish("phase_changed", {
        "competition_id": competition_id,
        "previous": previous.value,
        "phase": next_phase.value,
    })

    return next_phase

def reset_votes(db: Session, competition_id: str, participant_id: str, events: EventBus) -> int:
    """대회의 모든 투표 삭제 (단계는 그대로)"""
    require_admin(db, competition_id, participant_id)
    get_competition(db, competition_id)

    deleted = db.query(Vote)\
        .filter(Vote.competition_id == competition_id)\
        .delete(synchronize_session=False)
    db.commit()

    logger.info(f"투표 초기화: {competition_id} ({deleted}건)")
    events.publish("votes_reset", {"competition_id": competition_id, "deleted_count": deleted})

    return deleted

def set_ranking_mode(
    db: Session,
    competition_id: str,
    participant_id: str,
    mode: RankingMode,
    events: EventBus,
) -> RankingMode:
    """공식 순위 방식 저장 (미리보기는 저장하지 않음)"""
    require_admin(db, competition_id, participant_id)
    competition = get_competition(db, competition_id)

    competition.ranking_mode = RankingMode(mode)
    db.commit()

    logger.info(f"순위 방식 변경: {competition.code} → {competition.ranking_mode.value}")
    events.publish("ranking_mode_changed", {
        "competition_id": competition_id,
        "ranking_mode": competition.ranking_mode.value,
    })

    return competition.ranking_mode

def list_participants(db: Session, competition_id: str, participant_id: str) -> list[dict]:
    """참가자 목록 (관리자 전용)"""
    require_admin(db, competition_id, participant_id)

    participants = db.query(Participant)\
        .filter(Participant.competition_id == competition_id)\
        .order_by(Participant.joined_at, Participant.nickname)\
        .all()

    owners = {
        row[0] for row in db.query(Dish.participant_id)
        .filter(Dish.competition_id == competition_id, Dish.participant_id.isnot(None))
        .all()
    }

    return [
        {
            "id": p.id,
            "nickname": p.nickname,
            "role": p.role,
            "joined_at": p.joined_at,
            "has_dish": p.id in owners,
        }
        for p in participants
    ]
