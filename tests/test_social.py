import pytest

from socialplan.models import UserProfile


@pytest.fixture
def people(make_user, login):
    make_user("alice", display_name="Alice")
    make_user("bob", display_name="Bob", email="bob@example.com")
    make_user("bobby", display_name="Bobby Tables", email="tables@example.com")
    login("alice")


def graph(db, uid):
    db.expire_all()
    profile = db.query(UserProfile).filter(UserProfile.uid == uid).one()
    return profile.following, profile.followers


def test_search_matches_name_and_email(client, people):
    results = client.get("/users/search", params={"q": "bob"}).json()

    assert [r["uid"] for r in results] == ["bob", "bobby"]
    assert all(r["is_following"] is False for r in results)


def test_search_is_case_insensitive_and_matches_email(client, people):
    results = client.get("/users/search", params={"q": "TABLES@"}).json()
    assert [r["uid"] for r in results] == ["bobby"]


def test_exact_match_ranks_first(client, people, make_user):
    make_user("aaron", display_name="Bob's friend", email="aaron@example.com")
    results = client.get("/users/search", params={"q": "bob"}).json()
    assert results[0]["uid"] == "bob"


def test_search_excludes_the_searcher(client, people):
    assert client.get("/users/search", params={"q": "alice"}).json() == []


@pytest.mark.parametrize("term", ["", "   ", "nobody-like-this"])
def test_search_without_matches_is_empty(client, people, term):
    response = client.get("/users/search", params={"q": term})
    assert response.status_code == 200
    assert response.json() == []


def test_follow_updates_both_sides(client, db, people):
    response = client.post("/users/bob/follow")

    assert response.status_code == 200
    assert response.json()["following"] == ["bob"]
    assert graph(db, "alice") == (["bob"], [])
    assert graph(db, "bob") == ([], ["alice"])


def test_follow_is_idempotent(client, db, people):
    client.post("/users/bob/follow")
    client.post("/users/bob/follow")
    assert graph(db, "bob")[1] == ["alice"]


def test_follow_then_unfollow_restores_the_graph(client, db, people):
    client.post("/users/bob/follow")
    response = client.delete("/users/bob/follow")

    assert response.status_code == 200
    assert response.json()["is_following"] is False
    assert graph(db, "alice") == ([], [])
    assert graph(db, "bob") == ([], [])


def test_cannot_follow_self(client, db, people):
    response = client.post("/users/alice/follow")

    assert response.status_code == 400
    assert graph(db, "alice") == ([], [])


def test_follow_unknown_user(client, people):
    assert client.post("/users/ghost/follow").status_code == 404


def test_search_reflects_follow_state(client, people):
    client.post("/users/bob/follow")
    results = {r["uid"]: r for r in client.get("/users/search", params={"q": "bob"}).json()}

    assert results["bob"]["is_following"] is True
    assert results["bobby"]["is_following"] is False


def test_is_following(client, people):
    assert client.get("/users/bob/is-following").json()["is_following"] is False
    client.post("/users/bob/follow")
    assert client.get("/users/bob/is-following").json()["is_following"] is True


def test_connection_lists(client, people, login):
    client.post("/users/bob/follow")
    client.post("/users/bobby/follow")
    following = client.get("/users/me/following").json()
    assert [u["uid"] for u in following] == ["bob", "bobby"]

    login("bob")
    followers = client.get("/users/me/followers").json()
    assert followers == [{"uid": "alice", "display_name": "Alice", "photo_url": None}]


def test_search_matches_names_with_escaped_characters(client, people, make_user):
    make_user("tom", display_name="Tom & Jerry", email="tj@example.com")

    partial = client.get("/users/search", params={"q": "tom & j"}).json()
    exact = client.get("/users/search", params={"q": "Tom & Jerry"}).json()

    assert [r["uid"] for r in partial] == ["tom"]
    assert [r["uid"] for r in exact] == ["tom"]
