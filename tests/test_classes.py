from datetime import time, timedelta

from yogastudio.models import ClassBooking, ClassSchedule, WaitlistEntry


class TestCatalogue:
    def test_public_lists_only_active(self, client, db_session, class_type):
        class_type.is_active = False
        db_session.commit()
        assert client.get("/class-types").json() == []

    def test_weekly_schedule_ordering(self, client, db_session, class_type, instructor):
        for day, start in ((3, time(18, 0)), (1, time(9, 0)), (1, time(7, 0))):
            db_session.add(
                ClassSchedule(
                    class_type_id=class_type.id, instructor_id=instructor.id, day_of_week=day, start_time=start
                )
            )
        db_session.add(
            ClassSchedule(
                class_type_id=class_type.id,
                instructor_id=instructor.id,
                day_of_week=0,
                start_time=time(10, 0),
                is_active=False,
            )
        )
        db_session.commit()

        slots = client.get("/schedule/weekly").json()
        assert [(s["day_of_week"], s["start_time"]) for s in slots] == [(1, "07:00:00"), (1, "09:00:00"), (3, "18:00:00")]
        assert slots[0]["class_name"] == "Vinyasa Flow"
        assert slots[0]["instructor_name"] == "Sarah Johnson"

    def test_upcoming_excludes_past_and_cancelled(self, client, make_class):
        upcoming = make_class()
        make_class(starts_in=timedelta(days=-1))
        make_class(status="cancelled")

        classes = client.get("/classes/upcoming").json()
        assert [c["id"] for c in classes] == [upcoming.id]
        assert classes[0]["spots_left"] == 2
        assert classes[0]["is_full"] is False


class TestBooking:
    def test_book_confirms_and_counts(self, client, db_session, make_class, booking_payload):
        scheduled = make_class(max_participants=2)

        response = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "confirmed"
        assert body["booking"]["email"] == "guest@example.com"
        assert body["waitlist_entry"] is None

        db_session.refresh(scheduled)
        assert scheduled.current_participants == 1

    def test_signed_in_booking_records_user(self, client, make_class, member, member_headers, booking_payload):
        scheduled = make_class()
        response = client.post(
            f"/classes/{scheduled.id}/bookings", json=booking_payload(email=member.email), headers=member_headers
        )
        assert response.json()["booking"]["user_id"] == member.id

    def test_duplicate_booking_is_conflict(self, client, make_class, booking_payload):
        scheduled = make_class()
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload())
        response = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="GUEST@example.com"))
        assert response.status_code == 409

    def test_full_class_goes_to_waitlist(self, client, make_class, booking_payload):
        scheduled = make_class(max_participants=1)
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="a@example.com"))

        second = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="b@example.com")).json()
        third = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="c@example.com")).json()

        assert second["status"] == "waitlisted"
        assert second["waitlist_entry"]["position"] == 1
        assert third["waitlist_entry"]["position"] == 2

    def test_duplicate_waitlist_is_conflict(self, client, make_class, booking_payload):
        scheduled = make_class(max_participants=1)
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="a@example.com"))
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="b@example.com"))

        response = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="b@example.com"))
        assert response.status_code == 409

    def test_cannot_book_past_class(self, client, make_class, booking_payload):
        scheduled = make_class(starts_in=timedelta(hours=-2))
        assert client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload()).status_code == 400

    def test_cannot_book_cancelled_class(self, client, make_class, booking_payload):
        scheduled = make_class(status="cancelled")
        assert client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload()).status_code == 400

    def test_unknown_class_is_404(self, client, booking_payload):
        assert client.post("/classes/missing/bookings", json=booking_payload()).status_code == 404

    def test_invalid_email_is_422(self, client, make_class, booking_payload):
        scheduled = make_class()
        payload = booking_payload(email="not-an-email")
        assert client.post(f"/classes/{scheduled.id}/bookings", json=payload).status_code == 422


class TestCancellationAndPromotion:
    def _fill_with_waitlist(self, client, make_class, booking_payload, member):
        scheduled = make_class(max_participants=1)
        booked = client.post(
            f"/classes/{scheduled.id}/bookings", json=booking_payload(email=member.email, first_name="Maya")
        ).json()
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="next@example.com", first_name="Nia"))
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="later@example.com", first_name="Leo"))
        return scheduled, booked["booking"]["id"]

    def test_cancel_promotes_head_of_waitlist(
        self, client, db_session, make_class, booking_payload, member, member_headers
    ):
        scheduled, booking_id = self._fill_with_waitlist(client, make_class, booking_payload, member)

        response = client.post(
            f"/class-bookings/{booking_id}/cancel", json={"reason": "Travelling"}, headers=member_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["booking"]["booking_status"] == "cancelled"
        assert body["booking"]["cancellation_reason"] == "Travelling"
        assert body["promoted_booking"]["email"] == "next@example.com"
        assert body["promoted_booking"]["first_name"] == "Nia"

        db_session.refresh(scheduled)
        assert scheduled.current_participants == 1
        waitlist = db_session.query(WaitlistEntry).filter(WaitlistEntry.scheduled_class_id == scheduled.id).all()
        assert [(w.email, w.position) for w in waitlist] == [("later@example.com", 1)]

    def test_cancel_twice_is_conflict(self, client, make_class, booking_payload, member, member_headers):
        scheduled = make_class()
        booking_id = client.post(
            f"/classes/{scheduled.id}/bookings", json=booking_payload(email=member.email)
        ).json()["booking"]["id"]

        client.post(f"/class-bookings/{booking_id}/cancel", headers=member_headers)
        response = client.post(f"/class-bookings/{booking_id}/cancel", headers=member_headers)
        assert response.status_code == 409

    def test_cannot_cancel_someone_elses_booking(self, client, make_class, booking_payload, member_headers):
        scheduled = make_class()
        booking_id = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload()).json()["booking"]["id"]
        response = client.post(f"/class-bookings/{booking_id}/cancel", headers=member_headers)
        assert response.status_code == 403

    def test_admin_can_cancel_any_booking(self, client, make_class, booking_payload, admin_headers):
        scheduled = make_class()
        booking_id = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload()).json()["booking"]["id"]
        response = client.post(f"/class-bookings/{booking_id}/cancel", headers=admin_headers)
        assert response.status_code == 200

    def test_cancel_requires_sign_in(self, client, make_class, booking_payload):
        scheduled = make_class()
        booking_id = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload()).json()["booking"]["id"]
        assert client.post(f"/class-bookings/{booking_id}/cancel").status_code == 401

    def test_admin_status_change_to_cancelled_promotes(
        self, client, db_session, make_class, booking_payload, member, admin_headers
    ):
        scheduled, booking_id = self._fill_with_waitlist(client, make_class, booking_payload, member)

        response = client.patch(
            f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "cancelled"}, headers=admin_headers
        )
        assert response.status_code == 200
        promoted = (
            db_session.query(ClassBooking)
            .filter(ClassBooking.scheduled_class_id == scheduled.id, ClassBooking.email == "next@example.com")
            .one()
        )
        assert promoted.booking_status == "confirmed"

    def test_attended_frees_count_without_promotion(
        self, client, db_session, make_class, booking_payload, member, admin_headers
    ):
        scheduled, booking_id = self._fill_with_waitlist(client, make_class, booking_payload, member)

        client.patch(f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "attended"}, headers=admin_headers)

        db_session.refresh(scheduled)
        assert scheduled.current_participants == 0
        assert db_session.query(WaitlistEntry).filter(WaitlistEntry.scheduled_class_id == scheduled.id).count() == 2

    def test_newcomer_queues_behind_waitlist_after_no_show(
        self, client, db_session, make_class, booking_payload, member, admin_headers
    ):
        scheduled, booking_id = self._fill_with_waitlist(client, make_class, booking_payload, member)
        client.patch(f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "no_show"}, headers=admin_headers)

        response = client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="cara@example.com"))

        assert response.json()["status"] == "waitlisted"
        db_session.refresh(scheduled)
        assert scheduled.current_participants == 1
        confirmed = (
            db_session.query(ClassBooking)
            .filter(ClassBooking.scheduled_class_id == scheduled.id, ClassBooking.booking_status == "confirmed")
            .all()
        )
        assert [b.email for b in confirmed] == ["next@example.com"]
        waitlist = (
            db_session.query(WaitlistEntry)
            .filter(WaitlistEntry.scheduled_class_id == scheduled.id)
            .order_by(WaitlistEntry.position)
            .all()
        )
        assert [(w.email, w.position) for w in waitlist] == [("later@example.com", 1), ("cara@example.com", 2)]

    def test_waitlisted_person_rebooking_takes_freed_spot(
        self, client, make_class, booking_payload, member, admin_headers
    ):
        scheduled, booking_id = self._fill_with_waitlist(client, make_class, booking_payload, member)
        client.patch(f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "no_show"}, headers=admin_headers)

        response = client.post(
            f"/classes/{scheduled.id}/bookings", json=booking_payload(email="next@example.com", first_name="Nia")
        )

        assert response.json()["status"] == "confirmed"
        assert response.json()["booking"]["email"] == "next@example.com"

    def test_reconfirm_while_others_wait_is_conflict(self, client, make_class, booking_payload, member, admin_headers):
        _, booking_id = self._fill_with_waitlist(client, make_class, booking_payload, member)
        client.patch(f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "no_show"}, headers=admin_headers)

        response = client.patch(
            f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "confirmed"}, headers=admin_headers
        )
        assert response.status_code == 409

    def test_reconfirm_on_full_class_is_conflict(self, client, make_class, booking_payload, member, admin_headers):
        scheduled, booking_id = self._fill_with_waitlist(client, make_class, booking_payload, member)
        client.patch(f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "cancelled"}, headers=admin_headers)

        response = client.patch(
            f"/admin/class-bookings/{booking_id}/status", json={"booking_status": "confirmed"}, headers=admin_headers
        )
        assert response.status_code == 409

    def test_capacity_increase_promotes_waitlist(self, client, db_session, make_class, booking_payload, member, admin_headers):
        scheduled, _ = self._fill_with_waitlist(client, make_class, booking_payload, member)

        response = client.patch(f"/admin/classes/{scheduled.id}", json={"max_participants": 3}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["current_participants"] == 3
        assert db_session.query(WaitlistEntry).filter(WaitlistEntry.scheduled_class_id == scheduled.id).count() == 0

    def test_capacity_below_confirmed_is_conflict(self, client, make_class, booking_payload, admin_headers):
        scheduled = make_class(max_participants=3)
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="a@example.com"))
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="b@example.com"))

        response = client.patch(f"/admin/classes/{scheduled.id}", json={"max_participants": 1}, headers=admin_headers)
        assert response.status_code == 409


class TestClassAdministration:
    def test_create_class_type_and_instructor(self, client, admin_headers):
        class_type = client.post(
            "/admin/class-types",
            json={"name": "Yin Yoga", "difficulty_level": "beginner", "price": "25.00", "duration_minutes": 60},
            headers=admin_headers,
        )
        assert class_type.status_code == 201

        instructor = client.post(
            "/admin/instructors",
            json={"name": "Emma Rodriguez", "email": "Emma@Example.com", "specialties": ["Yin"]},
            headers=admin_headers,
        )
        assert instructor.status_code == 201
        assert instructor.json()["email"] == "emma@example.com"

    def test_duplicate_instructor_email_is_conflict(self, client, admin_headers, instructor):
        response = client.post(
            "/admin/instructors", json={"name": "Copy", "email": instructor.email}, headers=admin_headers
        )
        assert response.status_code == 409

    def test_schedule_class_defaults(self, client, admin_headers, class_type, instructor):
        response = client.post(
            "/admin/classes",
            json={
                "class_type_id": class_type.id,
                "instructor_id": instructor.id,
                "start_time": "2030-05-01T09:00:00Z",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["end_time"].startswith("2030-05-01T10:15:00")
        assert body["max_participants"] == class_type.max_participants
        assert body["status"] == "scheduled"

    def test_end_before_start_is_400(self, client, admin_headers, class_type, instructor):
        response = client.post(
            "/admin/classes",
            json={
                "class_type_id": class_type.id,
                "instructor_id": instructor.id,
                "start_time": "2030-05-01T09:00:00",
                "end_time": "2030-05-01T08:00:00",
            },
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_cancel_class(self, client, make_class, booking_payload, admin_headers):
        scheduled = make_class()
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload())

        response = client.post(f"/admin/classes/{scheduled.id}/cancel", json={"reason": "Instructor ill"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert client.post(f"/admin/classes/{scheduled.id}/cancel", headers=admin_headers).status_code == 409

    def test_cannot_delete_instructor_with_classes(self, client, make_class, instructor, admin_headers):
        make_class()
        assert client.delete(f"/admin/instructors/{instructor.id}", headers=admin_headers).status_code == 409

    def test_cannot_delete_class_type_in_use(self, client, make_class, class_type, admin_headers):
        make_class()
        assert client.delete(f"/admin/class-types/{class_type.id}", headers=admin_headers).status_code == 409

    def test_instructor_stats(self, client, make_class, booking_payload, instructor, admin_headers):
        scheduled = make_class()
        make_class(status="completed", starts_in=timedelta(days=-3))
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="a@example.com"))
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="b@example.com"))

        stats = client.get(f"/admin/instructors/{instructor.id}/stats", headers=admin_headers).json()
        assert stats["total_classes"] == 2
        assert stats["completed_classes"] == 1
        assert stats["upcoming_classes"] == 1
        assert stats["total_students"] == 2

    def test_slot_effective_range_validated(self, client, admin_headers, class_type, instructor):
        response = client.post(
            "/admin/class-schedules",
            json={
                "class_type_id": class_type.id,
                "instructor_id": instructor.id,
                "day_of_week": 2,
                "start_time": "07:30:00",
                "effective_from": "2030-02-01",
                "effective_until": "2030-01-01",
            },
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_admin_lists_bookings_and_waitlist(self, client, make_class, booking_payload, admin_headers):
        scheduled = make_class(max_participants=1)
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="a@example.com"))
        client.post(f"/classes/{scheduled.id}/bookings", json=booking_payload(email="b@example.com"))

        bookings = client.get(f"/admin/classes/{scheduled.id}/bookings", headers=admin_headers).json()
        waitlist = client.get(f"/admin/classes/{scheduled.id}/waitlist", headers=admin_headers).json()
        assert [b["email"] for b in bookings] == ["a@example.com"]
        assert [w["email"] for w in waitlist] == ["b@example.com"]
