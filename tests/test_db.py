import pytest

from exercise_tracker_api.app.core.db import Database, resolve_database_path
from exercise_tracker_api.app.core.errors import StoreError, StoreValidationError
from exercise_tracker_api.app.main import open_database


def test_users_are_listed_in_insertion_order(db):
    names = ["carol", "alice", "bob"]
    created = [db.insert_user(name) for name in names]

    assert [user.username for user in db.find_users()] == names
    assert db.find_user(created[1].id).username == "alice"
    assert db.find_user("missing") is None


def test_append_exercise_persists_reference(db):
    user = db.insert_user("alice")
    exercise = db.insert_exercise(description="run", duration=30, date="Mon Jan 01 2024")

    db.append_exercise(user, exercise.id)

    assert db.find_user(user.id).exercises == [exercise.id]
    assert [stored.duration for stored in db.find_exercises([exercise.id])] == [30]


def test_find_exercises_preserves_reference_order(db):
    exercises = [
        db.insert_exercise(description=f"e{i}", duration=i + 1, date="Mon Jan 01 2024")
        for i in range(3)
    ]
    ids = [exercises[2].id, "missing", exercises[0].id, exercises[1].id]

    found = db.find_exercises(ids)

    assert [exercise.description for exercise in found] == ["e2", "e0", "e1"]


def test_concurrent_appends_can_lose_an_update(db):
    """Two writers that read the same user before saving: the last save wins."""
    user = db.insert_user("racer")
    first_reader = db.find_user(user.id)
    second_reader = db.find_user(user.id)
    e1 = db.insert_exercise(description="a", duration=1, date="Mon Jan 01 2024")
    e2 = db.insert_exercise(description="b", duration=2, date="Mon Jan 01 2024")

    db.append_exercise(first_reader, e1.id)
    db.append_exercise(second_reader, e2.id)

    assert db.find_user(user.id).exercises == [e2.id]


def test_constraint_violations_raise_store_validation_error(db):
    with pytest.raises(StoreValidationError):
        db.insert_exercise(description="", duration=10, date="Mon Jan 01 2024")
    with pytest.raises(StoreValidationError):
        db.insert_exercise(description="run", duration=0, date="Mon Jan 01 2024")
    with pytest.raises(StoreValidationError):
        db.insert_user("")


def test_operations_fail_when_not_connected():
    database = Database(":memory:")

    with pytest.raises(StoreError):
        database.find_users()


def test_data_survives_reconnect(tmp_path):
    path = str(tmp_path / "tracker.db")
    database = Database(path)
    database.connect()
    user = database.insert_user("alice")
    database.close()

    reopened = Database(path)
    reopened.connect()
    try:
        assert reopened.find_user(user.id).username == "alice"
    finally:
        reopened.close()


def test_connect_failure_raises_store_error(tmp_path):
    database = Database(str(tmp_path / "missing" / "tracker.db"))

    with pytest.raises(StoreError):
        database.connect()
    assert not database.is_connected


def test_startup_exits_when_store_is_unavailable(tmp_path):
    database = Database(str(tmp_path / "missing" / "tracker.db"))

    with pytest.raises(SystemExit) as excinfo:
        open_database(database)
    assert excinfo.value.code == 1


def test_resolve_database_path(tmp_path):
    absolute = str(tmp_path / "x.db")

    assert resolve_database_path(":memory:") == ":memory:"
    assert resolve_database_path(absolute) == absolute
    assert resolve_database_path("x.db").endswith("x.db")


def test_integer_overflow_raises_store_validation_error(db):
    with pytest.raises(StoreValidationError):
        db.insert_exercise(description="run", duration=2 ** 70, date="Mon Jan 01 2024")
