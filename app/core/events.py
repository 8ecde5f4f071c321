# app/core/events.py
"""
간단한 이벤트 버스

전역 콜백 대신 호출하는 쪽에 주입해서 쓴다 (서버: 단계 변경 등 알림,
클라이언트: 토스트 메시지). 테스트에서는 RecordingEventBus로 바꿔 끼운다.
"""
from collections import defaultdict
from typing import Any, Callable

from app.core.logger import logger

Handler = Callable[[str, dict], Any]


class EventBus:
    """토픽별 구독/발행"""

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """구독 등록, 해제 함수 반환 ("*"는 모든 토픽)"""
        self._handlers[topic].append(handler)

        def unsubscribe():
            if handler in self._handlers[topic]:
                self._handlers[topic].remove(handler)

        return unsubscribe

    def publish(self, topic: str, payload: dict | None = None) -> None:
        payload = payload or {}
        handlers = list(self._handlers.get(topic, [])) + list(self._handlers.get("*", []))
        for handler in handlers:
            try:
                handler(topic, payload)
            except Exception:
                # 구독자 오류가 요청 처리를 막으면 안 됨
                logger.exception(f"이벤트 핸들러 실패: {topic}")


class RecordingEventBus(EventBus):
    """발행된 이벤트를 순서대로 기록"""

    def __init__(self):
        super().__init__()
        self.events: list[tuple[str, dict]] = []

    def publish(self, topic: str, payload: dict | None = None) -> None:
        self.events.append((topic, payload or {}))
        super().publish(topic, payload)

    def topics(self) -> list[str]:
        return [topic for topic, _ in self.events]


# 앱 전체에서 쓰는 기본 인스턴스 (deps.get_event_bus로 주입)
event_bus = EventBus()
