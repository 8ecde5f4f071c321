"""Tests for dish registration, photo handling and deletion."""

import uuid

import pytest

from app.models.dish import Dish
from app.models.photo import Photo
from app.models.vote import Vote

from tests.helpers import (
    FakeStorage,
    advance,
    cast,
    create_competition,
    dish_ok,
    join_ok,
    photo_url,
    read_votes,
    write_dish,
)


@pytest.fixture
def competition(client):
    """Competition with an admin and two participants."""
    comp = create_competition(client)
    return {
        "id": comp["competitionId"],
        "code": comp["code"],
        "admin": comp["participantId"],
        "luigi": join_ok(client, comp["code"], "Luigi")["participantId"],
        "peach": join_ok(client, comp["code"], "Peach")["participantId"],
    }


def list_for(client, competition, viewer):
    response = client.get("/api/v1/dishes", params={
        "competitionId": competition["id"],
        "participantId": competition[viewer],
    })
    assert response.status_code == 200, response.text
    return {dish["name"]: dish for dish in response.json()}


class TestWriteDish:
    def test_create(self, client, competition):
        response = write_dish(
            client, competition["id"], competition["luigi"],
            name="Tiramisù", chef_name="Luigi", ingredients="mascarpone", recipe="",
        )
        assert response.status_code == 201
        dish = response.json()["dish"]
        assert dish["participantId"] == competition["luigi"]
        assert dish["ingredients"] == "mascarpone"
        # 빈 문자열은 NULL
        assert dish["recipe"] is None
        assert response.json()["photos"] == []

    def test_one_dish_per_participant(self, client, competition):
        dish_ok(client, competition["id"], competition["luigi"])
        response = write_dish(client, competition["id"], competition["luigi"], name="Seconda")
        assert response.status_code == 403
        assert response.json()["detail"] == "Hai già aggiunto un piatto per questa gara"

    def test_pre_generated_id_creates(self, client, competition):
        dish_id = str(uuid.uuid4())
        response = write_dish(client, competition["id"], competition["luigi"], dishId=dish_id)
        assert response.status_code == 201
        assert response.json()["dish"]["id"] == dish_id

    def test_edit_own_dish(self, client, competition):
        dish = dish_ok(client, competition["id"], competition["luigi"])
        response = write_dish(
            client, competition["id"], competition["luigi"],
            name="Lasagna verde", dishId=dish["id"],
        )
        assert response.status_code == 200
        assert response.json()["dish"]["name"] == "Lasagna verde"

    def test_cannot_edit_other_dish(self, client, competition):
        dish = dish_ok(client, competition["id"], competition["luigi"])
        response = write_dish(
            client, competition["id"], competition["peach"],
            name="Mia", dishId=dish["id"],
        )
        assert response.status_code == 403

    def test_participant_locked_out_after_preparation(self, client, competition):
        dish = dish_ok(client, competition["id"], competition["luigi"])
        advance(client, competition["id"], competition["admin"])

        response = write_dish(client, competition["id"], competition["luigi"], name="Nuovo", dishId=dish["id"])
        assert response.status_code == 403
        assert response.json()["detail"] == "Piatti modificabili solo in fase preparazione"

        response = write_dish(client, competition["id"], competition["peach"], name="Tardi")
        assert response.status_code == 403

    def test_admin_writes_in_any_phase(self, client, competition):
        advance(client, competition["id"], competition["admin"], times=2)
        response = write_dish(client, competition["id"], competition["admin"], name="Fuori gara")
        assert response.status_code == 201
        assert response.json()["dish"]["participantId"] is None

    def test_admin_edits_participant_dish(self, client, competition):
        dish = dish_ok(client, competition["id"], competition["luigi"])
        advance(client, competition["id"], competition["admin"])
        response = write_dish(
            client, competition["id"], competition["admin"],
            name="Corretto", dishId=dish["id"],
        )
        assert response.status_code == 200
        # 주인은 그대로
        assert response.json()["dish"]["participantId"] == competition["luigi"]

    def test_dish_from_other_competition(self, client, competition):
        other = create_competition(client, name="Altra")
        foreign = dish_ok(client, other["competitionId"], other["participantId"])
        response = write_dish(
            client, competition["id"], competition["admin"],
            name="Furto", dishId=foreign["id"],
        )
        assert response.status_code == 404

    def test_invalid_photo_url(self, client, competition):
        response = write_dish(client, competition["id"], competition["luigi"], photoUrls=["not a url"])
        assert response.status_code == 400
        assert "URL non valido" in response.json()["detail"]

    def test_too_many_photos(self, client, competition):
        urls = [photo_url(f"{i}.jpg") for i in range(11)]
        response = write_dish(client, competition["id"], competition["luigi"], photoUrls=urls)
        assert response.status_code == 400

    def test_name_too_long(self, client, competition):
        response = write_dish(client, competition["id"], competition["luigi"], name="x" * 101)
        assert response.status_code == 400


class TestPhotos:
    def test_photos_keep_order(self, client, competition):
        urls = [photo_url("c.jpg"), photo_url("a.jpg"), photo_url("b.jpg")]
        response = write_dish(client, competition["id"], competition["luigi"], photoUrls=urls)
        photos = response.json()["photos"]
        assert [p["url"] for p in photos] == urls
        assert [p["order"] for p in photos] == [0, 1, 2]
        assert not any(p["isExtra"] for p in photos)

    def test_photos_are_replaced(self, client, competition, db):
        dish = dish_ok(client, competition["id"], competition["luigi"], photoUrls=[photo_url("a.jpg")])
        response = write_dish(
            client, competition["id"], competition["luigi"],
            dishId=dish["id"], photoUrls=[photo_url("b.jpg")],
        )
        assert [p["url"] for p in response.json()["photos"]] == [photo_url("b.jpg")]
        assert db.query(Photo).count() == 1

    def test_extra_photos_during_voting(self, client, competition):
        first = photo_url("piatto.jpg")
        dish = dish_ok(client, competition["id"], competition["luigi"], photoUrls=[first])
        advance(client, competition["id"], competition["admin"])

        extra = photo_url("assaggio.jpg")
        response = write_dish(
            client, competition["id"], competition["luigi"],
            dishId=dish["id"], photoUrls=[first, extra], isExtra=True,
        )
        assert response.status_code == 200
        flags = {p["url"]: p["isExtra"] for p in response.json()["photos"]}
        assert flags == {first: False, extra: True}

    def test_extra_photos_only_on_own_dish(self, client, competition):
        dish = dish_ok(client, competition["id"], competition["luigi"])
        advance(client, competition["id"], competition["admin"])
        response = write_dish(
            client, competition["id"], competition["peach"],
            dishId=dish["id"], photoUrls=[photo_url("x.jpg")], isExtra=True,
        )
        assert response.status_code == 403

    def test_extra_flag_does_not_open_finished_phase(self, client, competition):
        dish = dish_ok(client, competition["id"], competition["luigi"])
        advance(client, competition["id"], competition["admin"], times=2)
        response = write_dish(
            client, competition["id"], competition["luigi"],
            dishId=dish["id"], photoUrls=[photo_url("x.jpg")], isExtra=True,
        )
        assert response.status_code == 403


class TestDeleteDish:
    def delete(self, client, competition, who, dish_id):
        return client.post("/api/v1/dishes/delete", json={
            "competitionId": competition["id"],
            "participantId": competition[who],
            "dishId": dish_id,
        })

    def test_participant_cannot_delete(self, client, competition):
        dish = dish_ok(client, competition["id"], competition["luigi"])
        assert self.delete(client, competition, "luigi", dish["id"]).status_code == 403

    def test_unknown_dish(self, client, competition):
        assert self.delete(client, competition, "admin", str(uuid.uuid4())).status_code == 404

    def test_delete_cascades(self, client, competition, db, storage, events):
        urls = [photo_url("a.jpg"), photo_url("b.jpg"), "https://elsewhere.test/c.jpg"]
        dish = dish_ok(client, competition["id"], competition["luigi"], photoUrls=urls)
        advance(client, competition["id"], competition["admin"])
        assert cast(client, competition["id"], competition["peach"], dish["id"], score=8).status_code == 200

        response = self.delete(client, competition, "admin", dish["id"])
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert db.query(Dish).count() == 0
        assert db.query(Photo).count() == 0
        assert db.query(Vote).count() == 0
        assert read_votes(client, competition["id"], competition["peach"])["dishScores"] == []
        # 스토리지 밖 URL은 건드리지 않음
        assert storage.removed == ["a.jpg", "b.jpg"]
        assert events.topics()[-1] == "dish_deleted"

    def test_storage_failure_still_deletes(self, client, competition, db):
        from app.api.deps import get_photo_storage
        from main import app

        app.dependency_overrides[get_photo_storage] = lambda: FakeStorage(fail=True)
        dish = dish_ok(client, competition["id"], competition["luigi"], photoUrls=[photo_url("a.jpg")])

        response = self.delete(client, competition, "admin", dish["id"])
        assert response.status_code == 200
        assert db.query(Dish).count() == 0


class TestListDishes:
    def test_chef_hidden_until_finished(self, client, competition):
        dish_ok(client, competition["id"], competition["luigi"], name="Risotto", chef_name="Luigi")
        dish_ok(client, competition["id"], competition["peach"], name="Torta", chef_name="Peach")

        seen_by_peach = list_for(client, competition, "peach")
        assert seen_by_peach["Risotto"]["chefName"] is None
        assert seen_by_peach["Risotto"]["participantId"] is None
        assert seen_by_peach["Torta"]["chefName"] == "Peach"
        assert seen_by_peach["Torta"]["isMine"] is True

        seen_by_admin = list_for(client, competition, "admin")
        assert seen_by_admin["Risotto"]["chefName"] == "Luigi"
        assert seen_by_admin["Risotto"]["isMine"] is False

        advance(client, competition["id"], competition["admin"], times=2)
        assert list_for(client, competition, "peach")["Risotto"]["chefName"] == "Luigi"

    def test_photos_included(self, client, competition):
        dish_ok(client, competition["id"], competition["luigi"], photoUrls=[photo_url("a.jpg")])
        dishes = list_for(client, competition, "peach")
        assert [p["url"] for p in dishes["Lasagna"]["photos"]] == [photo_url("a.jpg")]

    def test_outsider_forbidden(self, client, competition):
        other = create_competition(client, name="Altra")
        response = client.get("/api/v1/dishes", params={
            "competitionId": competition["id"],
            "participantId": other["participantId"],
        })
        assert response.status_code == 403
