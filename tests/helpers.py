"""Request helpers and fakes shared by the API tests."""

import httpx

from app.services.storage_service import PhotoStorage

ADMIN_PIN = "admin-pin-hash"
STORAGE_URL = "https://storage.test"


class FakeStorage(PhotoStorage):
    """Records removed paths instead of calling the storage API."""

    def __init__(self, fail: bool = False):
        super().__init__(STORAGE_URL, "service-key", "dish-photos", client=httpx.Client())
        self.fail = fail
        self.removed: list[str] = []

    def remove(self, paths):
        if self.fail:
            raise httpx.ConnectError("storage down")
        self.removed.extend(paths)


def photo_url(name: str) -> str:
    return f"{STORAGE_URL}/storage/v1/object/public/dish-photos/{name}"


def create_competition(client, name="Cena di Natale", nickname="Nonna", pin=ADMIN_PIN, **extra):
    response = client.post("/api/v1/competitions", json={
        "name": name,
        "nickname": nickname,
        "pinHash": pin,
        **extra,
    })
    assert response.status_code == 201, response.text
    return response.json()


def join(client, code, nickname, pin):
    return client.post("/api/v1/competitions/join", json={
        "code": code,
        "nickname": nickname,
        "pinHash": pin,
    })


def join_ok(client, code, nickname, pin=None):
    response = join(client, code, nickname, pin or f"{nickname}-pin")
    assert response.status_code in (200, 201), response.text
    return response.json()


def settings_action(client, competition_id, participant_id, action, **extra):
    return client.post("/api/v1/competitions/settings", json={
        "action": action,
        "competitionId": competition_id,
        "participantId": participant_id,
        **extra,
    })


def advance(client, competition_id, admin_id, times=1):
    for _ in range(times):
        response = settings_action(client, competition_id, admin_id, "advance_phase")
        assert response.status_code == 200, response.text
    return response.json()["phase"]


def write_dish(client, competition_id, participant_id, name="Lasagna", chef_name="Mario", **extra):
    return client.post("/api/v1/dishes/write", json={
        "competitionId": competition_id,
        "participantId": participant_id,
        "name": name,
        "chefName": chef_name,
        **extra,
    })


def dish_ok(client, competition_id, participant_id, name="Lasagna", **extra):
    response = write_dish(client, competition_id, participant_id, name=name, **extra)
    assert response.status_code in (200, 201), response.text
    return response.json()["dish"]


def cast(client, competition_id, participant_id, dish_id, score=None):
    body = {
        "competitionId": competition_id,
        "participantId": participant_id,
        "dishId": dish_id,
    }
    if score is not None:
        body["score"] = score
    return client.post("/api/v1/votes/cast", json=body)


def read_votes(client, competition_id, participant_id):
    response = client.post("/api/v1/votes/read", json={
        "competitionId": competition_id,
        "participantId": participant_id,
    })
    assert response.status_code == 200, response.text
    return response.json()
