"""Route tests: principal headers, error envelope, and the HTTP surface of each service."""
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from eventmarketers.core.config import settings
from eventmarketers.db.session import get_db
from eventmarketers.main import app
from eventmarketers.utils.clock import utcnow
from tests.factories import make_content, make_payment, make_subscription, make_user

ADMIN = {"X-Principal-Id": "admin-1", "X-Principal-Role": "ADMIN"}


def mobile(user_id):
    return {"X-Principal-Id": user_id, "X-Principal-Role": "MOBILE_USER"}


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ready(self, client):
        with patch("eventmarketers.api.routes.health.redis.Redis.from_url") as from_url:
            from_url.return_value = MagicMock()
            response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "checks": {"database": "ok", "broker": "ok"}}
        assert from_url.call_args.args[0] == settings.celery_broker_url

    def test_not_ready_names_the_failing_dependency(self, client):
        with patch("eventmarketers.api.routes.health.redis.Redis.from_url") as from_url:
            from_url.return_value.ping.side_effect = ConnectionError("refused")
            response = client.get("/ready")
        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "not_ready"
        assert body["checks"]["database"] == "ok"
        assert body["checks"]["broker"] == "error: refused"

    def test_metrics(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "content_moderated_total" in response.text


class TestModerationRoutes:
    def test_approve(self, client, db):
        item = make_content(db)

        response = client.put(f"/content/{item.id}/approval", json={"status": "APPROVED"}, headers=ADMIN)

        assert response.status_code == 200
        body = response.json()
        assert body["approval_status"] == "APPROVED"
        assert body["moderated_by"] == "admin-1"
        assert body["is_mobile_synced"] is False

    def test_second_moderation_conflicts(self, client, db):
        item = make_content(db)
        client.put(f"/content/{item.id}/approval", json={"status": "REJECTED", "reason": "Off-brand"}, headers=ADMIN)

        response = client.put(
            f"/content/{item.id}/approval",
            json={"status": "APPROVED"},
            headers={**ADMIN, "X-Request-Id": "req-123"},
        )

        assert response.status_code == 409
        assert response.headers["X-Request-Id"] == "req-123"
        error = response.json()["error"]
        assert error["code"] == "state_conflict"
        assert error["request_id"] == "req-123"

    def test_non_moderator_forbidden(self, client, db):
        item = make_content(db)
        response = client.put(f"/content/{item.id}/approval", json={"status": "APPROVED"}, headers=mobile("u1"))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "forbidden"

    def test_missing_principal(self, client, db):
        item = make_content(db)
        response = client.put(f"/content/{item.id}/approval", json={"status": "APPROVED"})
        assert response.status_code == 403

    def test_unknown_item(self, client):
        response = client.put("/content/missing/approval", json={"status": "APPROVED"}, headers=ADMIN)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_invalid_status(self, client, db):
        item = make_content(db)
        response = client.put(f"/content/{item.id}/approval", json={"status": "PENDING"}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_bulk(self, client, db):
        a = make_content(db)
        b = make_content(db, approval_status="APPROVED")

        response = client.post(
            "/content/bulk-approval",
            json={"content_ids": [a.id, b.id], "status": "REJECTED"},
            headers=ADMIN,
        )

        assert response.status_code == 200
        assert response.json() == {"status": "REJECTED", "updated_count": 1}

    def test_bulk_requires_ids(self, client):
        response = client.post("/content/bulk-approval", json={"content_ids": [], "status": "APPROVED"}, headers=ADMIN)
        assert response.status_code == 400

    def test_pending_approvals(self, client, db):
        pending = make_content(db)
        make_content(db, approval_status="APPROVED")

        response = client.get("/content/pending-approvals", headers=ADMIN)
        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == [pending.id]

        assert client.get("/content/pending-approvals", headers=mobile("u1")).status_code == 403


class TestContentSyncRoutes:
    def test_end_to_end(self, client, db):
        item = make_content(db)

        assert client.put(f"/content/{item.id}/approval", json={"status": "APPROVED"}, headers=ADMIN).status_code == 200
        assert [i["id"] for i in client.get("/content-sync/pending", headers=ADMIN).json()] == [item.id]

        first = client.post(f"/content-sync/sync/{item.id}", headers=ADMIN)
        second = client.post(f"/content-sync/sync/{item.id}", headers=ADMIN)

        assert first.status_code == 200
        assert first.json()["source_id"] == item.id
        assert second.json()["id"] == first.json()["id"]
        status = client.get("/content-sync/status", headers=ADMIN).json()
        assert status["images"]["synced"] == 1
        assert status["mobile"]["templates"] == 1

    def test_sync_all(self, client, db):
        make_content(db, approval_status="APPROVED")
        broken = make_content(db, approval_status="APPROVED", url=None)

        response = client.post("/content-sync/sync-all", headers=ADMIN)

        assert response.status_code == 200
        body = response.json()
        assert body["succeeded"] == 1
        assert body["failed"] == 1
        assert body["errors"][0]["id"] == broken.id

    def test_sync_pending_item_conflicts(self, client, db):
        item = make_content(db)
        response = client.post(f"/content-sync/sync/{item.id}", headers=ADMIN)
        assert response.status_code == 409

    def test_requires_moderator(self, client):
        assert client.post("/content-sync/sync-all", headers=mobile("u1")).status_code == 403


class TestMobileRoutes:
    def test_subscription_status(self, client, db):
        user = make_user(db)
        make_subscription(db, user.id, end_date=utcnow() + timedelta(days=5))

        response = client.get("/mobile/subscription/status", headers=mobile(user.id))

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ACTIVE"
        assert body["days_remaining"] == 5
        assert body["total_subscriptions"] == 1

    def test_subscription_status_without_history(self, client, db):
        user = make_user(db)
        body = client.get("/mobile/subscription/status", headers=mobile(user.id)).json()
        assert body["status"] == "INACTIVE"
        assert body["days_remaining"] == 0

    def test_subscription_history(self, client, db):
        user = make_user(db)
        make_subscription(db, user.id, end_date=utcnow() + timedelta(days=5))
        response = client.get("/mobile/subscription/history", headers=mobile(user.id))
        assert response.status_code == 200
        assert response.json()[0]["is_current"] is True

    def test_track_usage_twice(self, client, db):
        user = make_user(db)
        payload = {"resource_type": "template", "resource_id": "tmpl_1"}

        first = client.post("/mobile/usage/track", json=payload, headers=mobile(user.id))
        second = client.post("/mobile/usage/track", json=payload, headers=mobile(user.id))

        assert first.status_code == 200
        assert first.json()["is_new"] is True
        assert second.json()["is_new"] is False
        assert second.json()["record"]["id"] == first.json()["record"]["id"]

    def test_track_usage_bad_type(self, client, db):
        user = make_user(db)
        response = client.post(
            "/mobile/usage/track",
            json={"resource_type": "SOUND", "resource_id": "s1"},
            headers=mobile(user.id),
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_track_usage_unknown_user(self, client):
        response = client.post(
            "/mobile/usage/track",
            json={"resource_type": "TEMPLATE", "resource_id": "tmpl_1"},
            headers=mobile("ghost"),
        )
        assert response.status_code == 404

    def test_list_and_statistics(self, client, db):
        user = make_user(db)
        headers = mobile(user.id)
        client.post("/mobile/usage/track", json={"resource_type": "TEMPLATE", "resource_id": "tmpl_1"}, headers=headers)
        client.post("/mobile/usage/track", json={"resource_type": "VIDEO", "resource_id": "vid_1"}, headers=headers)

        listing = client.get("/mobile/usage", params={"limit": 1}, headers=headers).json()
        assert len(listing["items"]) == 1
        assert listing["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}

        stats = client.get("/mobile/usage/statistics", headers=headers).json()
        assert stats["total"] == 2
        assert stats["by_type"]["video"] == 1

    def test_like_check(self, client, db):
        user = make_user(db)
        headers = mobile(user.id)
        params = {"resource_type": "template", "resource_id": "tmpl_1"}

        before = client.get("/mobile/usage/check", params=params, headers=headers)
        client.post("/mobile/usage/track", json={**params, "kind": "like"}, headers=headers)
        after = client.get("/mobile/usage/check", params=params, headers=headers)

        assert before.status_code == 200
        assert before.json() == {
            "kind": "LIKE",
            "resource_type": "TEMPLATE",
            "resource_id": "tmpl_1",
            "exists": False,
        }
        assert after.json()["exists"] is True
        # The like does not count as a download.
        downloads = client.get("/mobile/usage/check", params={**params, "kind": "DOWNLOAD"}, headers=headers)
        assert downloads.json()["exists"] is False

    def test_like_check_validation(self, client, db):
        user = make_user(db)
        response = client.get(
            "/mobile/usage/check",
            params={"resource_type": "SOUND", "resource_id": "s1"},
            headers=mobile(user.id),
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"
        assert client.get("/mobile/usage/check", params={"resource_type": "TEMPLATE"}, headers=mobile(user.id)).status_code == 400


class TestPaymentRoutes:
    def test_expire_pending(self, client, db):
        make_payment(db, "owner-1", expires_at=utcnow() - timedelta(minutes=1))
        make_payment(db, "owner-1", status="COMPLETED", expires_at=utcnow() - timedelta(minutes=1))

        response = client.post("/payments/expire-pending", headers=ADMIN)

        assert response.status_code == 200
        assert response.json() == {"expired_count": 1}

    def test_requires_moderator(self, client):
        assert client.post("/payments/expire-pending", headers=mobile("u1")).status_code == 403
