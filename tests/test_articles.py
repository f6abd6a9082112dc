import pytest

from yogastudio.models import Article, ArticleView, Rating
from yogastudio.shared.dates import utcnow


@pytest.fixture
def publish(db_session, curator):
    def _publish(title, category="mantras", view_count=0, status="published"):
        article = Article(
            title=title,
            content=f"<p>{title}</p>",
            preview_text=f"About {title}",
            category=category,
            status=status,
            view_count=view_count,
            author_id=curator.id,
            published_at=utcnow() if status == "published" else None,
        )
        db_session.add(article)
        db_session.commit()
        db_session.refresh(article)
        return article

    return _publish


class TestPublicListing:
    def test_only_published_articles_listed(self, client, publish):
        publish("Om Namah Shivaya")
        publish("Draft mantra", status="draft")

        titles = [a["title"] for a in client.get("/articles").json()]
        assert titles == ["Om Namah Shivaya"]

    def test_filter_by_category_and_all(self, client, publish):
        publish("Gayatri", category="mantras")
        publish("Breath of fire", category="pranayama")

        assert [a["title"] for a in client.get("/articles?category=pranayama").json()] == ["Breath of fire"]
        assert len(client.get("/articles?category=all").json()) == 2

    def test_sort_popular(self, client, publish):
        publish("Quiet", view_count=2)
        publish("Busy", view_count=50)

        titles = [a["title"] for a in client.get("/articles?sort_by=popular").json()]
        assert titles == ["Busy", "Quiet"]

    def test_sort_highest_rated_puts_unrated_last(self, client, db_session, publish):
        unrated = publish("Unrated")
        loved = publish("Loved")
        meh = publish("Meh")
        db_session.add_all(
            [
                Rating(article_id=loved.id, fingerprint="a", rating=5),
                Rating(article_id=meh.id, fingerprint="a", rating=2),
            ]
        )
        db_session.commit()

        titles = [a["title"] for a in client.get("/articles?sort_by=highest_rated").json()]
        assert titles == ["Loved", "Meh", unrated.title]

    def test_invalid_sort_is_400(self, client):
        assert client.get("/articles?sort_by=random").status_code == 400

    def test_categories(self, client, publish):
        publish("A", category="mantras")
        publish("B", category="meditation")
        publish("C", category="hidden", status="draft")

        assert client.get("/articles/categories").json() == ["mantras", "meditation"]

    def test_draft_is_404(self, client, publish):
        draft = publish("Secret", status="draft")
        assert client.get(f"/articles/{draft.id}").status_code == 404


class TestViewsAndRatings:
    def test_views_recount(self, client, publish):
        article = publish("Counted")
        client.post(f"/articles/{article.id}/views", json={"fingerprint": "fp-1"})
        response = client.post(f"/articles/{article.id}/views", json={"fingerprint": "fp-1"})

        assert response.status_code == 200
        assert response.json() == {"article_id": article.id, "view_count": 2}

    def test_rating_upserts_per_fingerprint(self, client, publish):
        article = publish("Rated")
        client.post(f"/articles/{article.id}/ratings", json={"rating": 2, "fingerprint": "fp-1"})
        client.post(f"/articles/{article.id}/ratings", json={"rating": 4, "fingerprint": "fp-2"})
        response = client.post(f"/articles/{article.id}/ratings", json={"rating": 5, "fingerprint": "fp-1"})

        body = response.json()
        assert body["total_ratings"] == 2
        assert body["average_rating"] == 4.5
        assert body["user_rating"] == 5

    def test_user_rating_from_fingerprint_header(self, client, db_session, publish):
        article = publish("Mine")
        db_session.add(Rating(article_id=article.id, fingerprint="fp-9", rating=3))
        db_session.commit()

        body = client.get(f"/articles/{article.id}", headers={"X-Fingerprint": "fp-9"}).json()
        assert body["user_rating"] == 3
        assert body["total_ratings"] == 1
        assert client.get(f"/articles/{article.id}").json()["user_rating"] is None

    def test_rating_out_of_range(self, client, publish):
        article = publish("Bounds")
        response = client.post(f"/articles/{article.id}/ratings", json={"rating": 6, "fingerprint": "fp"})
        assert response.status_code == 422

    def test_cannot_rate_draft(self, client, publish):
        draft = publish("Not yet", status="draft")
        response = client.post(f"/articles/{draft.id}/ratings", json={"rating": 4, "fingerprint": "fp"})
        assert response.status_code == 404


class TestManagement:
    def test_curator_creates_sanitized_article(self, client, curator, curator_headers):
        response = client.post(
            "/admin/articles",
            json={
                "title": "Lokah Samastah",
                "content": "<p>Peace</p><script>alert(1)</script>",
                "preview_text": "May all beings be happy",
                "category": " Mantras ",
                "status": "published",
            },
            headers=curator_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert "<script>" not in body["content"]
        assert "<p>Peace</p>" in body["content"]
        assert body["category"] == "mantras"
        assert body["author_id"] == curator.id
        assert body["published_at"] is not None

    def test_missing_preview_text_rejected(self, client, curator_headers):
        response = client.post(
            "/admin/articles",
            json={"title": "T", "content": "C", "preview_text": "  "},
            headers=curator_headers,
        )
        assert response.status_code == 422

    def test_member_cannot_manage(self, client, member_headers):
        assert client.get("/admin/articles", headers=member_headers).status_code == 403

    def test_curator_sees_only_own(self, client, db_session, admin, curator_headers, publish):
        publish("Mine")
        db_session.add(Article(title="Admin's", content="c", preview_text="p", author_id=admin.id))
        db_session.commit()

        titles = [a["title"] for a in client.get("/admin/articles", headers=curator_headers).json()]
        assert titles == ["Mine"]

    def test_curator_cannot_edit_others(self, client, db_session, admin, curator_headers):
        other = Article(title="Admin's", content="c", preview_text="p", author_id=admin.id)
        db_session.add(other)
        db_session.commit()

        response = client.patch(f"/admin/articles/{other.id}", json={"title": "Hijacked"}, headers=curator_headers)
        assert response.status_code == 403

    def test_publish_sets_published_at_once(self, client, admin_headers, publish):
        draft = publish("Later", status="draft")

        first = client.patch(f"/admin/articles/{draft.id}", json={"status": "published"}, headers=admin_headers).json()
        assert first["published_at"] is not None

        second = client.patch(f"/admin/articles/{draft.id}", json={"title": "Later, edited"}, headers=admin_headers).json()
        assert second["published_at"] == first["published_at"]

    def test_delete_cascades(self, client, db_session, admin_headers, publish):
        article = publish("Gone")
        db_session.add(Rating(article_id=article.id, fingerprint="x", rating=4))
        db_session.add(ArticleView(article_id=article.id, fingerprint="x"))
        db_session.commit()
        article_id = article.id

        assert client.delete(f"/admin/articles/{article_id}", headers=admin_headers).status_code == 200
        assert db_session.query(Rating).filter(Rating.article_id == article_id).count() == 0
        assert db_session.query(ArticleView).filter(ArticleView.article_id == article_id).count() == 0

    def test_stats(self, client, db_session, curator_headers, publish):
        article = publish("Measured")
        db_session.add_all(
            [
                ArticleView(article_id=article.id, fingerprint="a"),
                ArticleView(article_id=article.id, fingerprint="a"),
                ArticleView(article_id=article.id, fingerprint="b"),
                Rating(article_id=article.id, fingerprint="a", rating=5),
                Rating(article_id=article.id, fingerprint="b", rating=3),
            ]
        )
        db_session.commit()

        body = client.get(f"/admin/articles/{article.id}/stats", headers=curator_headers).json()
        assert body["views"] == 3
        assert body["unique_viewers"] == 2
        assert body["average_rating"] == 4.0
        assert body["rating_distribution"] == {"1": 0, "2": 0, "3": 1, "4": 0, "5": 1}
