from yogastudio import permissions
from yogastudio.models import AdminUser, Article


class TestHighestRole:
    def test_priority_order(self):
        assert permissions.highest_role(["user", "mantra_curator"]) == "mantra_curator"
        assert permissions.highest_role(["instructor", "admin"]) == "admin"
        assert permissions.highest_role(["super_admin", "admin", "user"]) == "super_admin"

    def test_no_roles_means_user(self):
        assert permissions.highest_role([]) == "user"
        assert permissions.highest_role(None) == "user"


class TestAdminResolution:
    def test_role_based_admin(self, db_session, admin):
        assert permissions.is_admin(db_session, admin) is True

    def test_member_is_not_admin(self, db_session, member):
        assert permissions.is_admin(db_session, member) is False

    def test_admin_list_is_case_insensitive(self, db_session, member):
        db_session.add(AdminUser(email="MEMBER@example.com"))
        db_session.commit()
        assert permissions.is_listed_admin(db_session, "member@EXAMPLE.com") is True
        assert permissions.is_admin(db_session, member) is True

    def test_none_user(self, db_session):
        assert permissions.is_admin(db_session, None) is False
        assert permissions.can_manage_articles(db_session, None) is False


class TestArticlePermissions:
    def test_curator_manages_only_own_articles(self, db_session, curator, admin):
        own = Article(title="Om", content="c", preview_text="p", author_id=curator.id)
        other = Article(title="So Hum", content="c", preview_text="p", author_id=admin.id)
        db_session.add_all([own, other])
        db_session.commit()

        assert permissions.can_manage_article(db_session, curator, own) is True
        assert permissions.can_manage_article(db_session, curator, other) is False
        assert permissions.can_manage_article(db_session, admin, own) is True

    def test_member_cannot_manage_articles(self, db_session, member):
        assert permissions.can_manage_articles(db_session, member) is False

    def test_describe(self, db_session, curator):
        summary = permissions.describe(db_session, curator)
        assert summary == {
            "roles": ["mantra_curator", "user"],
            "highest_role": "mantra_curator",
            "is_admin": False,
            "is_curator": True,
        }
