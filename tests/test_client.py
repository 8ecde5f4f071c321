"""Tests for the client session cache and the API client wrapper."""

import pytest

from app.client.api_client import ApiError, FornelliClient, SessionRequired, pin_hash
from app.client.session_store import ClientSession, SessionStore
from app.core.events import RecordingEventBus


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_session(code="ABC123", authenticated_at=1_000_000.0, nickname="Luigi", **extra):
    return ClientSession(
        competition_id="c-1",
        competition_code=code,
        participant_id="p-1",
        nickname=nickname,
        role="participant",
        authenticated_at=authenticated_at,
        **extra,
    )


class TestSessionStore:
    def test_session_valid_within_two_hours(self):
        clock = FakeClock()
        store = SessionStore(clock=clock)
        store.add(make_session())

        clock.advance(2 * 3600 - 1)
        assert store.get("abc123").nickname == "Luigi"

    def test_expired_session_is_purged_on_read(self):
        clock = FakeClock()
        store = SessionStore(clock=clock)
        store.add(make_session())

        clock.advance(2 * 3600 + 1)
        assert store.get("ABC123") is None
        assert store.all_sessions() == []
        # 닉네임은 재인증용으로 남음
        assert store.peek("abc123").nickname == "Luigi"

    def test_clear_expired(self):
        clock = FakeClock()
        store = SessionStore(clock=clock)
        store.add(make_session("OLD111", authenticated_at=clock.now - 3 * 3600))
        store.add(make_session("NEW222"))

        assert [s.competition_code for s in store.all_sessions()] == ["NEW222"]
        store.clear_expired()
        assert store.get("OLD111") is None
        assert store.get("NEW222") is not None

    def test_new_login_replaces_expired_entry(self):
        clock = FakeClock()
        store = SessionStore(clock=clock)
        store.add(make_session())
        clock.advance(3 * 3600)
        assert store.get("ABC123") is None

        store.add(make_session(authenticated_at=clock.now, nickname="Peach"))
        assert store.get("ABC123").nickname == "Peach"

    def test_remove_forgets_expired_entry(self):
        clock = FakeClock()
        store = SessionStore(clock=clock)
        store.add(make_session())
        clock.advance(3 * 3600)
        store.get("ABC123")

        store.remove("abc123")
        assert store.peek("ABC123") is None


class TestPinHash:
    def test_not_plain_text(self):
        assert pin_hash("1234") != "1234"
        assert pin_hash("1234") == pin_hash("1234")
        assert pin_hash("1234") != pin_hash("1235")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client_events():
    return RecordingEventBus()


@pytest.fixture
def api(client, clock, client_events):
    return FornelliClient(store=SessionStore(clock=clock), events=client_events, http=client)


class TestFornelliClient:
    def test_create_and_join(self, api, client, clock, client_events):
        admin = api.create_competition("Cena", "Nonna", "9999")
        assert admin.role == "admin"
        assert api.store.get(admin.competition_code) == admin
        assert ("toast", {"kind": "success", "message": f"Gara creata: {admin.competition_code}"}) in client_events.events

        other = FornelliClient(store=SessionStore(clock=clock), http=client)
        luigi = other.join(admin.competition_code.lower(), "Luigi", "1111")
        assert luigi.role == "participant"
        assert luigi.competition_name == "Cena"
        assert other.store.get(admin.competition_code).participant_id == luigi.participant_id

    def test_wrong_pin_publishes_reauth(self, api, client, clock, client_events):
        admin = api.create_competition("Cena", "Nonna", "9999")
        luigi = FornelliClient(store=SessionStore(clock=clock), events=client_events, http=client)
        luigi.join(admin.competition_code, "Luigi", "1111")

        with pytest.raises(ApiError) as exc_info:
            luigi.join(admin.competition_code, "Luigi", "0000")
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "PIN errato"
        assert "reauth_required" in client_events.topics()
        assert client_events.events[-1] == ("toast", {"kind": "error", "message": "PIN errato"})

    def test_missing_session(self, api, client_events):
        with pytest.raises(SessionRequired):
            api.dishes("NOPE00")
        assert client_events.events[-1] == ("reauth_required", {"code": "NOPE00"})

    def test_reauthenticate_after_expiry(self, api, clock):
        admin = api.create_competition("Cena", "Nonna", "9999")
        code = admin.competition_code

        clock.advance(2 * 3600 + 1)
        session = api.reauthenticate(code, "9999")
        assert session.participant_id == admin.participant_id
        assert session.authenticated_at == clock.now
        assert api.session(code) == session

    def test_reauthenticate_after_expired_request(self, api, clock, client_events):
        admin = api.create_competition("Cena", "Nonna", "9999")
        code = admin.competition_code

        clock.advance(2 * 3600 + 1)
        with pytest.raises(SessionRequired):
            api.dishes(code)
        assert client_events.events[-1] == ("reauth_required", {"code": code})

        session = api.reauthenticate(code, "9999")
        assert session.nickname == "Nonna"
        assert session.participant_id == admin.participant_id
        assert api.dishes(code) == []

    def test_reauthenticate_without_session(self, api):
        with pytest.raises(SessionRequired):
            api.reauthenticate("NOPE00", "1234")

    def test_full_round(self, api, client, clock):
        admin = api.create_competition("Cena", "Nonna", "9999")
        code = admin.competition_code

        luigi = FornelliClient(store=SessionStore(clock=clock), http=client)
        luigi.join(code, "Luigi", "1111")
        luigi_dish = luigi.write_dish(code, "Risotto", "Luigi")["dish"]
        admin_dish = api.write_dish(code, "Pane", "Nonna")["dish"]

        assert api.advance_phase(code) == "voting"
        assert luigi.cast_vote(code, admin_dish["id"], score=9)["score"] == 9
        api.cast_vote(code, luigi_dish["id"], score=6)

        state = api.read_votes(code)
        preview = FornelliClient.preview_ranking(api.dishes(code), state["dishScores"], "simple")
        assert [d["name"] for d in preview] == ["Pane", "Risotto"]

        assert api.set_ranking_mode(code, "bayesian") == "bayesian"
        assert api.ranking(code)["mode"] == "bayesian"
        assert {p["nickname"] for p in api.participants(code)} == {"Nonna", "Luigi"}

        assert api.reset_votes(code) == 2
        api.delete_dish(code, admin_dish["id"])
        assert [d["name"] for d in api.dishes(code)] == ["Risotto"]
