import pytest

from yogastudio.models import Booking, FormSubmission


@pytest.fixture
def booking_form():
    return {
        "class_name": "Hatha Yoga",
        "instructor": "Sarah Johnson",
        "class_date": "2030-03-04",
        "class_time": "09:00",
        "first_name": "Maya",
        "last_name": "Member",
        "email": "Maya@Example.com",
        "phone": "(555) 123-4567",
        "experience_level": "beginner",
        "emergency_contact": "Sam Member",
        "emergency_phone": "555 765 4321",
    }


class TestPublicBooking:
    def test_create_booking(self, client, db_session, booking_form):
        response = client.post("/bookings", json=booking_form)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "confirmed"
        assert body["email"] == "maya@example.com"
        assert body["user_id"] is None

        submission = db_session.query(FormSubmission).one()
        assert submission.type == "booking"
        assert submission.user_email == "maya@example.com"
        assert submission.user_name == "Maya Member"
        assert submission.data["class_name"] == "Hatha Yoga"

    def test_signed_in_booking_links_user(self, client, member, member_headers, booking_form):
        response = client.post("/bookings", json=booking_form, headers=member_headers)
        assert response.json()["user_id"] == member.id

    @pytest.mark.parametrize("field", ["class_name", "emergency_contact", "first_name"])
    def test_blank_required_fields_rejected(self, client, booking_form, field):
        booking_form[field] = "   "
        assert client.post("/bookings", json=booking_form).status_code == 422

    def test_invalid_email_rejected(self, client, booking_form):
        booking_form["email"] = "maya@"
        assert client.post("/bookings", json=booking_form).status_code == 422

    def test_invalid_phone_rejected(self, client, booking_form):
        booking_form["emergency_phone"] = "12"
        assert client.post("/bookings", json=booking_form).status_code == 422


class TestBookingAdmin:
    def test_requires_admin(self, client, member_headers):
        assert client.get("/admin/bookings", headers=member_headers).status_code == 403

    def test_search_and_filter(self, client, admin_headers, booking_form):
        client.post("/bookings", json=booking_form)
        other = dict(booking_form, first_name="Leo", email="leo@example.com", class_name="Yin Yoga")
        leo_id = client.post("/bookings", json=other).json()["id"]
        client.patch(f"/admin/bookings/{leo_id}/status", json={"status": "cancelled"}, headers=admin_headers)

        by_text = client.get("/admin/bookings?search=yin", headers=admin_headers).json()
        assert [b["first_name"] for b in by_text] == ["Leo"]

        by_status = client.get("/admin/bookings?status=confirmed", headers=admin_headers).json()
        assert [b["first_name"] for b in by_status] == ["Maya"]

        assert len(client.get("/admin/bookings?status=all", headers=admin_headers).json()) == 2

    def test_update_booking(self, client, admin_headers, booking_form):
        booking_id = client.post("/bookings", json=booking_form).json()["id"]
        response = client.patch(
            f"/admin/bookings/{booking_id}", json={"class_time": "10:30", "first_name": None}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["class_time"] == "10:30"
        assert response.json()["first_name"] == "Maya"

    def test_invalid_status_rejected(self, client, admin_headers, booking_form):
        booking_id = client.post("/bookings", json=booking_form).json()["id"]
        response = client.patch(f"/admin/bookings/{booking_id}/status", json={"status": "lost"}, headers=admin_headers)
        assert response.status_code == 422

    def test_delete_booking(self, client, db_session, admin_headers, booking_form):
        booking_id = client.post("/bookings", json=booking_form).json()["id"]
        assert client.delete(f"/admin/bookings/{booking_id}", headers=admin_headers).status_code == 200
        assert db_session.query(Booking).count() == 0
        assert client.get(f"/admin/bookings/{booking_id}", headers=admin_headers).status_code == 404

    def test_export_csv(self, client, admin_headers, booking_form):
        client.post("/bookings", json=booking_form)

        response = client.get("/admin/bookings/export", headers=admin_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=bookings_export_" in response.headers["content-disposition"]

        lines = response.text.strip().splitlines()
        assert lines[0].startswith("ID,Class,Instructor,Date,Time")
        assert "maya@example.com" in lines[1]
        assert len(lines) == 2
