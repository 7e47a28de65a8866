import pytest


@pytest.fixture
def alice(make_user, login):
    make_user("alice")
    login("alice")


def task(id="t1", day="monday", start="09:00", end="10:00", description="Gym"):
    return {"id": id, "day": day, "start_time": start, "end_time": end, "description": description}


def test_no_tasks_yet(client, alice):
    body = client.get("/tasks").json()
    assert body == {"uid": "alice", "tasks": [], "updated_at": None}


def test_save_replaces_the_list(client, alice):
    client.put("/tasks", json={"tasks": [task("t1"), task("t2", day="friday")]})
    response = client.put("/tasks", json={"tasks": [task("t3", description="  Read  ")]})

    assert response.status_code == 200
    tasks = client.get("/tasks").json()["tasks"]
    assert tasks == [task("t3", description="Read")]


def test_day_is_normalized(client, alice):
    response = client.put("/tasks", json={"tasks": [task(day="Monday")]})
    assert response.json()["tasks"][0]["day"] == "monday"


@pytest.mark.parametrize(
    "bad",
    [
        task(start="10:00", end="10:00"),
        task(start="11:00", end="10:00"),
        task(start="9am"),
        task(day="someday"),
        task(description="   "),
        task(description="x" * 201),
    ],
)
def test_invalid_tasks_are_rejected(client, alice, bad):
    assert client.put("/tasks", json={"tasks": [bad]}).status_code == 422


def test_duplicate_ids_are_rejected(client, alice):
    response = client.put("/tasks", json={"tasks": [task("t1"), task("t1", day="friday")]})
    assert response.status_code == 422
