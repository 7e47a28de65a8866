import pytest

from socialplan.domain.profiles.service import shared_free_time
from socialplan.models import WEEKDAYS, default_availability


def week(**overrides):
    slots = default_availability()
    for slot in slots:
        slot.update(overrides.get(slot["day"], {}))
    return slots


@pytest.fixture
def alice(make_user, login):
    profile = make_user("alice", display_name="Alice")
    login("alice")
    return profile


def test_get_me(client, alice):
    body = client.get("/users/me").json()

    assert body["uid"] == "alice"
    assert body["display_name"] == "Alice"
    assert [slot["day"] for slot in body["availability"]] == list(WEEKDAYS)
    assert body["following"] == [] and body["followers"] == []


def test_display_name_falls_back_to_email(make_user):
    profile = make_user("carol", display_name=" ", email="Carol.K@Example.com")
    assert profile.display_name == "carol.k"
    assert profile.email == "carol.k@example.com"


def test_patch_profile(client, alice):
    response = client.patch("/users/me", json={"display_name": "Alice B", "bio": "Runner"})

    assert response.status_code == 200
    assert response.json()["display_name"] == "Alice B"
    assert response.json()["bio"] == "Runner"


def test_bio_is_escaped(client, alice):
    response = client.put("/users/me/bio", json={"bio": "<b>hi</b>"})
    assert response.json()["bio"] == "&lt;b&gt;hi&lt;/b&gt;"


def test_resaving_escaped_text_keeps_it_unchanged(client, alice):
    first = client.patch("/users/me", json={"display_name": "Tom & Jerry", "bio": "<b>hi</b>"}).json()
    assert first["display_name"] == "Tom &amp; Jerry"

    again = client.patch(
        "/users/me", json={"display_name": first["display_name"], "bio": first["bio"]}
    ).json()
    assert again["display_name"] == "Tom &amp; Jerry"
    assert again["bio"] == "&lt;b&gt;hi&lt;/b&gt;"


def test_bio_length_limit(client, alice):
    response = client.put("/users/me/bio", json={"bio": "x" * 501})
    assert response.status_code == 422


def test_graph_fields_are_not_client_writable(client, alice):
    response = client.patch("/users/me", json={"followers": ["mallory"]})
    assert response.status_code == 422


def test_update_availability(client, alice):
    slots = week(saturday={"is_available": True, "start_time": "10:00", "end_time": "12:00"})
    response = client.put("/users/me/availability", json={"availability": slots})

    assert response.status_code == 200
    saturday = response.json()["availability"][5]
    assert saturday == {
        "day": "saturday",
        "start_time": "10:00",
        "end_time": "12:00",
        "is_available": True,
    }


def test_availability_needs_every_day(client, alice):
    response = client.put("/users/me/availability", json={"availability": week()[:6]})
    assert response.status_code == 422


def test_available_window_must_be_ordered(client, alice):
    slots = week(monday={"start_time": "18:00", "end_time": "09:00"})
    response = client.put("/users/me/availability", json={"availability": slots})
    assert response.status_code == 422


def test_unavailable_day_window_is_not_checked(client, alice):
    slots = week(sunday={"start_time": "18:00", "end_time": "09:00"})
    response = client.put("/users/me/availability", json={"availability": slots})
    assert response.status_code == 200


def test_public_profile(client, alice, make_user):
    make_user("bob")
    response = client.get("/users/bob")

    assert response.status_code == 200
    assert response.json()["uid"] == "bob"
    assert "email_verified" not in response.json()


def test_unknown_profile_is_404(client, alice):
    assert client.get("/users/ghost").status_code == 404


def test_shared_free_time_endpoint(client, alice, make_user):
    make_user(
        "bob",
        availability=week(
            monday={"start_time": "13:00", "end_time": "20:00"},
            tuesday={"is_available": False},
        ),
    )
    body = client.get("/users/bob/free-time").json()

    assert body["other_uid"] == "bob"
    days = {slot["day"]: slot for slot in body["slots"]}
    assert days["monday"] == {"day": "monday", "start_time": "13:00", "end_time": "17:00"}
    assert "tuesday" not in days
    assert "saturday" not in days


def test_shared_free_time_skips_touching_windows():
    mine = week(monday={"start_time": "09:00", "end_time": "12:00"})
    theirs = week(monday={"start_time": "12:00", "end_time": "15:00"})

    assert "monday" not in [slot.day for slot in shared_free_time(mine, theirs)]
