from datetime import datetime, timedelta, timezone

from session_booking.models.booking import Booking
from session_booking.models.enrollment import Enrollment
from session_booking.models.grade import Grade
from session_booking.models.slot import Slot
from session_booking.services.metrics import SqlMetricsProvider
from session_booking.services.recency import RecencySource


def _slot_payload(days_ahead: int) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=days_ahead)
    return {
        "starts_at": start.isoformat(),
        "ends_at": (start + timedelta(hours=2)).isoformat(),
    }


def _enrolled_long_ago(db):
    db.query(Enrollment).update(
        {Enrollment.created_at: datetime.now(timezone.utc) - timedelta(days=30)}
    )
    db.commit()


def test_posting_wait_blocks_early_slots(client, student_headers, ids):
    # freshly enrolled: posting wait of 10 days counts from the enrolment date
    url = f"/courses/{ids['course']}/slots"

    r = client.post(url, json=_slot_payload(3), headers=student_headers)
    assert r.status_code == 400
    assert "Availability can be posted from" in r.json()["detail"]

    r = client.post(url, json=_slot_payload(12), headers=student_headers)
    assert r.status_code == 201, r.text
    assert r.json()["status"] == ""


def test_past_slot_rejected(client, student_headers, ids, db):
    _enrolled_long_ago(db)
    r = client.post(
        f"/courses/{ids['course']}/slots", json=_slot_payload(-1), headers=student_headers
    )
    assert r.status_code == 400


def test_slot_end_must_follow_start(client, student_headers, ids):
    start = datetime.now(timezone.utc) + timedelta(days=20)
    r = client.post(
        f"/courses/{ids['course']}/slots",
        json={"starts_at": start.isoformat(), "ends_at": start.isoformat()},
        headers=student_headers,
    )
    assert r.status_code == 422


def test_book_confirm_and_grade(client, student_headers, instructor_headers, ids, db):
    _enrolled_long_ago(db)
    slot = client.post(
        f"/courses/{ids['course']}/slots", json=_slot_payload(2), headers=student_headers
    ).json()

    r = client.post(
        f"/courses/{ids['course']}/bookings",
        json={"student_id": ids["student1"], "slot_id": slot["id"], "session_at": slot["starts_at"]},
        headers=instructor_headers,
    )
    assert r.status_code == 201, r.text
    booking = r.json()
    assert booking["active"] is True
    assert booking["confirmed"] is False

    # one active booking at a time
    again = client.post(
        f"/courses/{ids['course']}/bookings",
        json={"student_id": ids["student1"], "session_at": slot["starts_at"]},
        headers=instructor_headers,
    )
    assert again.status_code == 409

    r = client.post(f"/bookings/{booking['id']}/confirm", headers=student_headers)
    assert r.status_code == 200, r.text
    assert r.json()["confirmed"] is True
    assert db.get(Slot, slot["id"]).status == "booked"

    r = client.post(
        f"/courses/{ids['course']}/grades",
        json={"student_id": ids["student1"], "exercise": "Circuits", "score": 4},
        headers=instructor_headers,
    )
    assert r.status_code == 201, r.text

    db.expire_all()
    assert db.get(Booking, booking["id"]).active is False


def test_cancel_reopens_slot(client, student_headers, instructor_headers, ids, db):
    _enrolled_long_ago(db)
    slot = client.post(
        f"/courses/{ids['course']}/slots", json=_slot_payload(2), headers=student_headers
    ).json()
    booking = client.post(
        f"/courses/{ids['course']}/bookings",
        json={"student_id": ids["student1"], "slot_id": slot["id"], "session_at": slot["starts_at"]},
        headers=instructor_headers,
    ).json()
    assert db.get(Slot, slot["id"]).status == "tentative"

    r = client.post(f"/bookings/{booking['id']}/cancel", headers=instructor_headers)
    assert r.status_code == 204

    db.expire_all()
    assert db.get(Booking, booking["id"]) is None
    assert db.get(Slot, slot["id"]).status == ""


def test_other_student_cannot_confirm(client, headers_for, instructor_headers, ids, db):
    _enrolled_long_ago(db)
    booking = client.post(
        f"/courses/{ids['course']}/bookings",
        json={
            "student_id": ids["student1"],
            "session_at": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
        },
        headers=instructor_headers,
    ).json()

    r = client.post(
        f"/bookings/{booking['id']}/confirm", headers=headers_for("student2@example.com")
    )
    assert r.status_code == 403


def test_student_cannot_book(client, student_headers, ids):
    r = client.post(
        f"/courses/{ids['course']}/bookings",
        json={"student_id": ids["student1"], "session_at": datetime.now(timezone.utc).isoformat()},
        headers=student_headers,
    )
    assert r.status_code == 403


def test_activity_and_lessons_feed_the_queue(client, student_headers, instructor_headers, ids):
    for _ in range(10):
        r = client.post(
            f"/courses/{ids['course']}/activity", json={"event": "viewed"}, headers=student_headers
        )
        assert r.status_code == 201, r.text

    url = f"/courses/{ids['course']}/lessons/3/complete"
    first = client.post(url, headers=student_headers)
    second = client.post(url, headers=student_headers)
    assert first.status_code == 200, first.text
    assert second.json()["id"] == first.json()["id"]

    queue = client.get(f"/instructor/courses/{ids['course']}/queue", headers=instructor_headers).json()
    row = next(s for s in queue["students"] if s["student_id"] == ids["student1"])
    assert row["activity_count"] == 10
    assert row["activity_count_normalized"] == 1
    assert row["completions"] == 1


HONOLULU = timezone(timedelta(hours=-10))


def test_offset_booking_time_stored_as_utc(client, instructor_headers, ids, db):
    _enrolled_long_ago(db)
    session_at = datetime.now(timezone.utc) + timedelta(hours=3)

    r = client.post(
        f"/courses/{ids['course']}/bookings",
        json={"student_id": ids["student1"], "session_at": session_at.astimezone(HONOLULU).isoformat()},
        headers=instructor_headers,
    )
    assert r.status_code == 201, r.text
    echoed = datetime.fromisoformat(r.json()["session_at"]).replace(tzinfo=timezone.utc)
    assert abs(echoed - session_at) < timedelta(seconds=1)

    # still upcoming, so the wait counts from enrolment
    provider = SqlMetricsProvider(db, datetime.now(timezone.utc))
    assert provider.get_session_recency(ids["course"], ids["student1"]) == (30, RecencySource.ENROL)


def test_offset_slot_counts_as_upcoming(client, student_headers, ids, db):
    _enrolled_long_ago(db)
    start = (datetime.now(timezone.utc) + timedelta(hours=3)).astimezone(HONOLULU)

    r = client.post(
        f"/courses/{ids['course']}/slots",
        json={"starts_at": start.isoformat(), "ends_at": (start + timedelta(hours=2)).isoformat()},
        headers=student_headers,
    )
    assert r.status_code == 201, r.text

    provider = SqlMetricsProvider(db, datetime.now(timezone.utc))
    assert provider.get_slot_count(ids["course"], ids["student1"]) == 1


def test_offset_grade_date_stored_as_utc(client, instructor_headers, ids, db):
    graded_at = datetime.now(timezone.utc) - timedelta(days=2)

    r = client.post(
        f"/courses/{ids['course']}/grades",
        json={
            "student_id": ids["student1"],
            "exercise": "Stalls",
            "graded_at": graded_at.astimezone(HONOLULU).isoformat(),
        },
        headers=instructor_headers,
    )
    assert r.status_code == 201, r.text

    db.expire_all()
    stored = db.get(Grade, r.json()["id"]).graded_at.replace(tzinfo=timezone.utc)
    assert abs(stored - graded_at) < timedelta(seconds=1)


def _status_url(ids, student):
    return f"/instructor/courses/{ids['course']}/students/{ids[student]}/status"


def test_instructor_releases_student_from_hold(client, instructor_headers, ids, db):
    db.query(Enrollment).filter(Enrollment.student_id == ids["student2"]).update(
        {Enrollment.on_hold: True}
    )
    db.commit()

    r = client.patch(_status_url(ids, "student2"), json={"on_hold": False}, headers=instructor_headers)
    assert r.status_code == 200, r.text
    assert r.json()["on_hold"] is False

    queue = client.get(f"/instructor/courses/{ids['course']}/queue", headers=instructor_headers).json()
    assert ids["student2"] in [row["student_id"] for row in queue["students"]]


def test_instructor_suspends_and_reinstates_student(client, instructor_headers, ids):
    r = client.patch(_status_url(ids, "student1"), json={"suspended": True}, headers=instructor_headers)
    assert r.status_code == 200, r.text
    assert r.json()["suspended"] is True
    assert r.json()["suspended_at"] is not None

    suspended = client.get(
        f"/instructor/courses/{ids['course']}/queue",
        params={"filter": "suspended"},
        headers=instructor_headers,
    ).json()
    assert [row["student_id"] for row in suspended["students"]] == [ids["student1"]]

    r = client.patch(_status_url(ids, "student1"), json={"suspended": False}, headers=instructor_headers)
    assert r.json()["suspended"] is False
    assert r.json()["suspended_at"] is None


def test_keep_active_waives_posting_wait_until_graded(
    client, student_headers, instructor_headers, ids, db
):
    # freshly enrolled: a slot 3 days out is inside the posting wait
    r = client.patch(_status_url(ids, "student1"), json={"keep_active": True}, headers=instructor_headers)
    assert r.status_code == 200, r.text
    assert r.json()["keep_active"] is True

    r = client.post(f"/courses/{ids['course']}/slots", json=_slot_payload(3), headers=student_headers)
    assert r.status_code == 201, r.text

    r = client.post(
        f"/courses/{ids['course']}/grades",
        json={"student_id": ids["student1"], "exercise": "Circuits"},
        headers=instructor_headers,
    )
    assert r.status_code == 201, r.text

    db.expire_all()
    enrollment = db.query(Enrollment).filter(Enrollment.student_id == ids["student1"]).one()
    assert enrollment.keep_active is False

    r = client.post(f"/courses/{ids['course']}/slots", json=_slot_payload(4), headers=student_headers)
    assert r.status_code == 400


def test_student_cannot_change_status(client, student_headers, ids):
    r = client.patch(_status_url(ids, "student1"), json={"keep_active": True}, headers=student_headers)
    assert r.status_code == 403


def test_status_of_unenrolled_student_is_404(client, instructor_headers, ids):
    r = client.patch(
        f"/instructor/courses/{ids['course']}/students/9999/status",
        json={"on_hold": False},
        headers=instructor_headers,
    )
    assert r.status_code == 404
