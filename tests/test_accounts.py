from datetime import date

from yogastudio.models import Booking, Profile, YogaQuery


class TestProfiles:
    def test_get_own_profile(self, client, member_headers):
        response = client.get("/profiles/me", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["full_name"] == "Maya Member"

    def test_missing_profile_is_created(self, client, db_session, member, member_headers):
        db_session.query(Profile).filter(Profile.user_id == member.id).delete()
        db_session.commit()

        response = client.get("/profiles/me", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["email"] == member.email

    def test_update_profile(self, client, member_headers):
        response = client.patch(
            "/profiles/me",
            json={"full_name": "  Maya M.  ", "phone": "+44 20 7946 0958", "bio": "Morning flow fan"},
            headers=member_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["full_name"] == "Maya M."
        assert body["phone"] == "+44 20 7946 0958"

    def test_blank_full_name_rejected(self, client, member_headers):
        response = client.patch("/profiles/me", json={"full_name": "   "}, headers=member_headers)
        assert response.status_code == 422

    def test_invalid_phone_rejected(self, client, member_headers):
        response = client.patch("/profiles/me", json={"phone": "call me"}, headers=member_headers)
        assert response.status_code == 422


class TestActivity:
    def test_activity_matches_by_email(self, client, db_session, member, member_headers):
        db_session.add(
            Booking(
                class_name="Hatha Yoga",
                instructor="Sarah Johnson",
                class_date=date(2026, 3, 2),
                class_time="09:00",
                first_name="Maya",
                last_name="Member",
                email=member.email,
                phone="5551234567",
                emergency_contact="Sam",
                emergency_phone="5557654321",
            )
        )
        db_session.add(YogaQuery(name="Maya", email=member.email, subject="Knees", message="Any tips?"))
        db_session.add(YogaQuery(name="Other", email="other@example.com", subject="Hips", message="?"))
        db_session.commit()

        response = client.get("/profiles/me/activity", headers=member_headers)
        assert response.status_code == 200
        body = response.json()
        assert len(body["bookings"]) == 1
        assert body["class_bookings"] == []
        assert [q["subject"] for q in body["queries"]] == ["Knees"]


class TestRoleManagement:
    def test_list_users_includes_roles(self, client, admin_headers, member):
        response = client.get("/admin/users", headers=admin_headers)
        assert response.status_code == 200
        by_email = {u["email"]: u for u in response.json()}
        assert by_email[member.email]["roles"] == ["user"]
        assert by_email["admin@example.com"]["highest_role"] == "admin"

    def test_list_roles(self, client, admin_headers):
        names = {r["name"] for r in client.get("/admin/roles", headers=admin_headers).json()}
        assert {"user", "admin", "super_admin", "instructor", "mantra_curator"} <= names

    def test_replace_roles_and_audit(self, client, admin, admin_headers, member):
        response = client.put(
            f"/admin/users/{member.id}/roles",
            json={"roles": ["mantra_curator", "user", "mantra_curator"]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json() == {
            "user_id": member.id,
            "roles": ["mantra_curator", "user"],
            "highest_role": "mantra_curator",
        }

        changes = client.get(f"/admin/users/{member.id}/role-changes", headers=admin_headers).json()
        assert len(changes) == 1
        assert changes[0]["old_roles"] == ["user"]
        assert changes[0]["new_roles"] == ["mantra_curator", "user"]
        assert changes[0]["changed_by"] == admin.id

    def test_roles_can_be_removed(self, client, admin_headers, curator):
        response = client.put(f"/admin/users/{curator.id}/roles", json={"roles": ["user"]}, headers=admin_headers)
        assert response.json()["roles"] == ["user"]

    def test_empty_role_set_rejected(self, client, admin_headers, member):
        response = client.put(f"/admin/users/{member.id}/roles", json={"roles": []}, headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_role_rejected(self, client, admin_headers, member):
        response = client.put(f"/admin/users/{member.id}/roles", json={"roles": ["wizard"]}, headers=admin_headers)
        assert response.status_code == 400
        assert "wizard" in response.json()["detail"]

    def test_unknown_user_is_404(self, client, admin_headers):
        response = client.put("/admin/users/nope/roles", json={"roles": ["user"]}, headers=admin_headers)
        assert response.status_code == 404

    def test_member_cannot_change_roles(self, client, member, member_headers):
        response = client.put(f"/admin/users/{member.id}/roles", json={"roles": ["admin"]}, headers=member_headers)
        assert response.status_code == 403
