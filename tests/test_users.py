import pytest

from rtdblib.database import Database
from rtdblib.demo import SAMPLE_USER, UPDATED_EMAIL, run_demo
from rtdblib.errors import NotFoundError, RequestError
from rtdblib.types import User
from rtdblib.users import delete_user, get_user, get_users, set_user, update_user


BASE = "https://demo-rtdb.firebaseio.com/"


def test_user_lifecycle(fake_rtdb):
    db = Database(BASE, http_client=fake_rtdb)
    ann = User("Ann", 30, "ann@example.com")

    created = set_user(db, ann)
    assert created.name.startswith("-N")
    assert get_user(db, created.name) == ann
    assert get_users(db) == {created.name: ann}

    ann.email = "ann@new.example.com"
    assert update_user(db, created.name, ann) == ann
    assert fake_rtdb.root["users"][created.name]["email"] == "ann@new.example.com"

    delete_user(db, created.name)
    assert get_users(db) == {}
    with pytest.raises(NotFoundError):
        get_user(db, created.name)


def test_get_users_keeps_every_record(fake_rtdb):
    db = Database(BASE, http_client=fake_rtdb)
    a = set_user(db, User("A", 1, "a@x"))
    b = set_user(db, User("B", 2, "b@x"))
    assert get_users(db) == {a.name: User("A", 1, "a@x"), b.name: User("B", 2, "b@x")}


def test_run_demo_sequence_and_output(fake_rtdb):
    db = Database(BASE, http_client=fake_rtdb)
    lines = []

    result = run_demo(db, echo=lines.append)

    assert [m for m, _, _ in fake_rtdb.calls] == ["POST", "GET", "GET", "PATCH", "DELETE"]
    assert fake_rtdb.calls[0][1] == "https://demo-rtdb.firebaseio.com/users.json"
    assert fake_rtdb.calls[1][1] == f"https://demo-rtdb.firebaseio.com/users/{result.user_id}.json"

    original = User("John Doe", 25, "johndoe@gmail.com")
    assert result.fetched == original
    assert result.all_users == {result.user_id: original}
    assert result.updated == User("John Doe", 25, UPDATED_EMAIL)
    assert lines == [
        repr(original),
        repr({result.user_id: original}),
        repr(User("John Doe", 25, UPDATED_EMAIL)),
        "User deleted",
    ]
    assert fake_rtdb.root == {}
    # the module-level sample is never mutated
    assert SAMPLE_USER.email == "johndoe@gmail.com"

    totals, _ = db.metrics.snapshot()
    assert totals.requests == 5
    assert totals.errors == 0
    assert totals.by_method == {"POST": 1, "GET": 2, "PATCH": 1, "DELETE": 1}


def test_run_demo_stops_at_first_error(make_fake_rtdb):
    fake = make_fake_rtdb(fail={"PATCH": 401})
    db = Database(BASE, http_client=fake)
    lines = []

    with pytest.raises(RequestError) as info:
        run_demo(db, echo=lines.append)

    assert info.value.status == 401
    assert [m for m, _, _ in fake.calls] == ["POST", "GET", "GET", "PATCH"]
    assert len(lines) == 2
    assert "User deleted" not in lines
