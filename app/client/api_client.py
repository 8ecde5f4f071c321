# app/client/api_client.py
"""
Fornelli API 클라이언트

- 세션은 SessionStore에 대회 코드별로 보관
- 실패/성공 알림은 주입받은 EventBus의 "toast" 토픽으로 발행
  (세션 만료 시 "reauth_required")
"""
import hashlib
from typing import Any, Mapping, Optional

import httpx

from app.client.session_store import ClientSession, SessionStore
from app.core.events import EventBus
from app.services.ranking_service import DishScore, rank_dishes


def pin_hash(pin: str) -> str:
    """PIN은 평문으로 보내지 않음"""
    return hashlib.sha256(pin.encode("utf-8")).hexdigest()


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class SessionRequired(Exception):
    """세션 없음/만료 → 재인증 필요"""

    def __init__(self, code: str):
        super().__init__(f"세션 없음: {code}")
        self.code = code


class FornelliClient:
    def __init__(
        self,
        base_url: str = "",
        store: SessionStore | None = None,
        events: EventBus | None = None,
        http: httpx.Client | None = None,
    ):
        self.store = store or SessionStore()
        self.events = events or EventBus()
        self._http = http or httpx.Client(base_url=base_url, timeout=15.0)

    # ===== 공통 =====

    def _toast(self, kind: str, message: str) -> None:
        self.events.publish("toast", {"kind": kind, "message": message})

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self._http.request(method, path, **kwargs)

        if response.is_success:
            return response.json()

        try:
            message = response.json().get("detail", response.text)
        except ValueError:
            message = response.text

        if response.status_code == 401:
            self.events.publish("reauth_required", {"message": message})
        self._toast("error", message)
        raise ApiError(response.status_code, message)

    def session(self, code: str) -> ClientSession:
        session = self.store.get(code)
        if session is None:
            self.events.publish("reauth_required", {"code": code.upper()})
            raise SessionRequired(code.upper())
        return session

    def _ids(self, code: str) -> dict:
        session = self.session(code)
        return {"competitionId": session.competition_id, "participantId": session.participant_id}

    # ===== 인증 =====

    def create_competition(
        self,
        name: str,
        nickname: str,
        pin: str,
        allow_guests: bool = True,
        max_participants: Optional[int] = None,
    ) -> ClientSession:
        body = {
            "name": name,
            "nickname": nickname,
            "pinHash": pin_hash(pin),
            "allowGuests": allow_guests,
        }
        if max_participants is not None:
            body["maxParticipants"] = max_participants

        data = self._request("POST", "/api/v1/competitions", json=body)
        session = ClientSession(
            competition_id=data["competitionId"],
            competition_code=data["code"],
            competition_name=name,
            participant_id=data["participantId"],
            nickname=data["nickname"],
            role=data["role"],
            authenticated_at=self.store.now(),
            session_token=data.get("sessionToken"),
        )
        self.store.add(session)
        self._toast("success", f"Gara creata: {data['code']}")
        return session

    def join(self, code: str, nickname: str, pin: str) -> ClientSession:
        return self._join(code, nickname, pin_hash(pin))

    def _join(self, code: str, nickname: str, hashed_pin: str) -> ClientSession:
        data = self._request("POST", "/api/v1/competitions/join", json={
            "code": code,
            "nickname": nickname,
            "pinHash": hashed_pin,
        })
        session = ClientSession(
            competition_id=data["competitionId"],
            competition_code=code.upper(),
            competition_name=data["competitionName"],
            participant_id=data["participantId"],
            nickname=data["nickname"],
            role=data["role"],
            authenticated_at=self.store.now(),
            session_token=data.get("sessionToken"),
        )
        self.store.add(session)
        return session

    def reauthenticate(self, code: str, pin: str) -> ClientSession:
        """저장된 닉네임으로 다시 참가 (만료된 세션도 닉네임은 사용)"""
        previous = self.store.peek(code)
        if previous is None:
            raise SessionRequired(code.upper())
        return self._join(previous.competition_code, previous.nickname, pin_hash(pin))

    # ===== 관리자 =====

    def _settings(self, code: str, action: str, **extra) -> dict:
        return self._request("POST", "/api/v1/competitions/settings", json={
            "action": action, **self._ids(code), **extra
        })

    def advance_phase(self, code: str) -> str:
        phase = self._settings(code, "advance_phase")["phase"]
        self._toast("success", f"Fase: {phase}")
        return phase

    def reset_votes(self, code: str) -> int:
        return self._settings(code, "reset_votes")["deletedCount"]

    def set_ranking_mode(self, code: str, mode: str) -> str:
        return self._settings(code, "set_ranking_mode", mode=mode)["rankingMode"]

    def participants(self, code: str) -> list[dict]:
        session = self.session(code)
        return self._request(
            "GET",
            f"/api/v1/competitions/{session.competition_id}/participants",
            params={"participantId": session.participant_id},
        )

    # ===== 요리 =====

    def competition(self, code: str) -> dict:
        return self._request("GET", f"/api/v1/competitions/by-code/{code}")

    def dishes(self, code: str) -> list[dict]:
        return self._request("GET", "/api/v1/dishes", params=self._ids(code))

    def write_dish(
        self,
        code: str,
        name: str,
        chef_name: str,
        dish_id: Optional[str] = None,
        ingredients: str = "",
        recipe: str = "",
        story: str = "",
        photo_urls: Optional[list[str]] = None,
        is_extra: bool = False,
    ) -> dict:
        body = {
            **self._ids(code),
            "name": name,
            "chefName": chef_name,
            "ingredients": ingredients,
            "recipe": recipe,
            "story": story,
            "photoUrls": photo_urls or [],
            "isExtra": is_extra,
        }
        if dish_id:
            body["dishId"] = dish_id
        return self._request("POST", "/api/v1/dishes/write", json=body)

    def delete_dish(self, code: str, dish_id: str) -> None:
        self._request("POST", "/api/v1/dishes/delete", json={**self._ids(code), "dishId": dish_id})
        self._toast("success", "Piatto eliminato")

    # ===== 투표 / 순위 =====

    def cast_vote(self, code: str, dish_id: str, score: Optional[int] = None) -> dict:
        body = {**self._ids(code), "dishId": dish_id}
        if score is not None:
            body["score"] = score
        return self._request("POST", "/api/v1/votes/cast", json=body)["vote"]

    def read_votes(self, code: str) -> dict:
        return self._request("POST", "/api/v1/votes/read", json=self._ids(code))

    def ranking(self, code: str, mode: Optional[str] = None) -> dict:
        session = self.session(code)
        params = {"participantId": session.participant_id}
        if mode:
            params["mode"] = mode
        return self._request("GET", f"/api/v1/competitions/{session.competition_id}/ranking", params=params)

    @staticmethod
    def preview_ranking(dishes: list[Mapping], dish_scores: list[Mapping], mode: str) -> list[dict]:
        """
        로컬 미리보기 (서버 저장 없음)

        dish_scores: votes/read 응답의 dishScores ({dishId, avg, count})
        """
        scores = {
            item["dishId"]: DishScore(avg=float(item["avg"]), count=int(item["count"]))
            for item in dish_scores
        }
        return rank_dishes(dishes, scores, mode)
