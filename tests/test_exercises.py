from datetime import date

from exercise_tracker_api.app.core.errors import StoreError, StoreValidationError
from exercise_tracker_api.app.schemas.exercise import format_date


def _exercise_ids(client, user_id):
    users = {user["id"]: user for user in client.get("/api/users").json()}
    return users[user_id]["exercises"]


def test_add_exercise_returns_merged_view(client, create_user):
    user = create_user("alice")

    response = client.post(
        f"/api/users/{user['id']}/exercises",
        json={"description": "run", "duration": 30, "date": "2024-01-01"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "id": user["id"],
        "username": "alice",
        "description": "run",
        "duration": 30,
        "date": "Mon Jan 01 2024",
    }
    assert len(_exercise_ids(client, user["id"])) == 1


def test_add_exercise_defaults_to_today(create_user, add_exercise):
    user = create_user()

    added = add_exercise(user["id"])

    assert added["date"] == format_date(date.today())


def test_add_exercise_from_form_body(client, create_user):
    user = create_user()

    response = client.post(
        f"/api/users/{user['id']}/exercises",
        data={"description": "yoga", "duration": "45", "date": ""},
    )

    assert response.status_code == 200
    assert response.json()["duration"] == 45
    assert response.json()["date"] == format_date(date.today())


def test_add_exercise_keeps_fractional_duration(create_user, add_exercise):
    user = create_user()

    added = add_exercise(user["id"], duration="12.5")

    assert added["duration"] == 12.5


def test_add_exercise_accepts_readable_and_iso_timestamp_dates(create_user, add_exercise):
    user = create_user()

    assert add_exercise(user["id"], date="Tue Feb 06 2024")["date"] == "Tue Feb 06 2024"
    assert add_exercise(user["id"], date="2024-02-07T08:30:00Z")["date"] == "Wed Feb 07 2024"


def test_missing_fields_are_rejected_without_mutation(client, create_user):
    user = create_user()

    for body in ({"duration": 30}, {"description": "run"}, {"description": "", "duration": 30}, {}):
        response = client.post(f"/api/users/{user['id']}/exercises", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Description and duration are required"}

    assert _exercise_ids(client, user["id"]) == []


def test_malformed_fields_are_rejected(client, create_user):
    user = create_user()
    url = f"/api/users/{user['id']}/exercises"

    bad_duration = client.post(url, json={"description": "run", "duration": "thirty"})
    assert bad_duration.status_code == 400
    assert bad_duration.json()["error"] == "Validation Error"
    assert "duration" in bad_duration.json()["details"]

    negative = client.post(url, json={"description": "run", "duration": -5})
    assert negative.status_code == 400

    bad_date = client.post(url, json={"description": "run", "duration": 10, "date": "someday"})
    assert bad_date.status_code == 400
    assert "Invalid date" in bad_date.json()["details"]

    assert _exercise_ids(client, user["id"]) == []


def test_add_exercise_to_unknown_user(client):
    response = client.post(
        "/api/users/000000000000000000000000/exercises",
        json={"description": "run", "duration": 30},
    )

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_store_validation_failure_is_reported_as_400(client, app, create_user, monkeypatch):
    user = create_user()

    def rejected(**kwargs):
        raise StoreValidationError("CHECK constraint failed: duration > 0")

    monkeypatch.setattr(app.state.db, "insert_exercise", rejected)

    response = client.post(f"/api/users/{user['id']}/exercises", json={"description": "run", "duration": 5})

    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation Error",
        "details": "CHECK constraint failed: duration > 0",
    }


def test_store_failure_is_reported_as_500(client, app, create_user, monkeypatch):
    user = create_user()

    def broken(user_record, exercise_id):
        raise StoreError("disk full")

    monkeypatch.setattr(app.state.db, "append_exercise", broken)

    response = client.post(f"/api/users/{user['id']}/exercises", json={"description": "run", "duration": 5})

    assert response.status_code == 500
    assert response.json() == {"error": "Server error while adding exercise"}


def test_huge_whole_duration_is_stored_as_float(client, create_user):
    user = create_user()

    response = client.post(f"/api/users/{user['id']}/exercises", json={"description": "marathon", "duration": 1e30})

    assert response.status_code == 200
    assert response.json()["duration"] == 1e30
    log = client.get(f"/api/users/{user['id']}/logs").json()
    assert log["log"][0]["duration"] == 1e30
