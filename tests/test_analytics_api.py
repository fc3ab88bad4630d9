"""Tests for analytics API endpoints."""

from datetime import UTC, datetime, timedelta

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from smartalk import models

EVENTS_URL = "/api/v1/analytics/events"


class TestRecordEvent:
    """Test suite for POST /analytics/events endpoint."""

    def test_record_event_success(
        self, client: TestClient, db_session: Session, test_user: models.User
    ) -> None:
        response = client.post(
            EVENTS_URL,
            json={
                "user_id": test_user.id,
                "event_type": "vtpr_answer_correct",
                "event_data": {"keywordId": "kw-1", "note": "x" * 600},
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user_id"] == test_user.id
        assert data["event_type"] == "vtpr_answer_correct"
        assert data["event_data"]["keywordId"] == "kw-1"
        assert len(data["event_data"]["note"]) == 503

        stored = db_session.query(models.AnalyticsEvent).filter_by(id=data["id"]).first()
        assert stored is not None
        assert len(stored.event_data["note"]) == 503

    def test_unknown_event_type(self, client: TestClient, test_user: models.User) -> None:
        response = client.post(
            EVENTS_URL, json={"user_id": test_user.id, "event_type": "unknown_thing"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["field"] == "event_type"

    def test_payload_must_be_object(self, client: TestClient, test_user: models.User) -> None:
        response = client.post(
            EVENTS_URL,
            json={"user_id": test_user.id, "event_type": "app_launch", "event_data": "text"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_user(self, client: TestClient, db_session: Session) -> None:
        response = client.post(EVENTS_URL, json={"user_id": 9999, "event_type": "app_launch"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert db_session.query(models.AnalyticsEvent).count() == 0

    def test_missing_fields(self, client: TestClient) -> None:
        response = client.post(EVENTS_URL, json={"event_type": "app_launch"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT


class TestRecordBatch:
    """Test suite for POST /analytics/events/batch endpoint."""

    def test_batch_with_unknown_user(
        self, client: TestClient, db_session: Session, test_user: models.User
    ) -> None:
        response = client.post(
            f"{EVENTS_URL}/batch",
            json={
                "events": [
                    {"user_id": test_user.id, "event_type": "app_launch"},
                    {"user_id": 9999, "event_type": "app_launch"},
                    {"user_id": test_user.id, "event_type": "onboarding_start"},
                ]
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["recorded_count"] == 2
        assert data["dropped_count"] == 1
        assert data["dropped_indexes"] == [1]
        assert len(data["event_ids"]) == 2
        assert db_session.query(models.AnalyticsEvent).count() == 2

    def test_invalid_event_rejects_batch(
        self, client: TestClient, db_session: Session, test_user: models.User
    ) -> None:
        response = client.post(
            f"{EVENTS_URL}/batch",
            json={
                "events": [
                    {"user_id": test_user.id, "event_type": "app_launch"},
                    {"user_id": test_user.id, "event_type": "bogus_event"},
                ]
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0].startswith("events[1]")
        assert db_session.query(models.AnalyticsEvent).count() == 0

    def test_oversized_batch(self, client: TestClient, test_user: models.User) -> None:
        events = [{"user_id": test_user.id, "event_type": "app_launch"}] * 101
        response = client.post(f"{EVENTS_URL}/batch", json={"events": events})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_empty_batch(self, client: TestClient) -> None:
        response = client.post(f"{EVENTS_URL}/batch", json={"events": []})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestUserEvents:
    """Test suite for GET /analytics/users/:id/events endpoint."""

    def test_list_newest_first(self, client: TestClient, test_user: models.User) -> None:
        base = datetime.now(UTC) - timedelta(hours=1)
        for minute, event_type in enumerate(["app_launch", "onboarding_start", "vtpr_start"]):
            client.post(
                EVENTS_URL,
                json={
                    "user_id": test_user.id,
                    "event_type": event_type,
                    "timestamp": (base + timedelta(minutes=minute)).isoformat(),
                },
            )

        response = client.get(
            f"/api/v1/analytics/users/{test_user.id}/events", params={"limit": 2}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 3
        assert data["has_next"] is True
        assert [e["event_type"] for e in data["items"]] == ["vtpr_start", "onboarding_start"]

    def test_filter_by_type(self, client: TestClient, test_user: models.User) -> None:
        for event_type in ["app_launch", "vtpr_start", "vtpr_start"]:
            client.post(EVENTS_URL, json={"user_id": test_user.id, "event_type": event_type})

        response = client.get(
            f"/api/v1/analytics/users/{test_user.id}/events",
            params={"event_type": "vtpr_start"},
        )

        assert response.json()["total"] == 2

    def test_unknown_user(self, client: TestClient) -> None:
        response = client.get("/api/v1/analytics/users/9999/events")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invalid_time_range(self, client: TestClient, test_user: models.User) -> None:
        response = client.get(
            f"/api/v1/analytics/users/{test_user.id}/events", params={"time_range": "2w"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestUserStats:
    def test_stats(self, client: TestClient, test_user: models.User) -> None:
        for event_type, data in [
            ("onboarding_complete", {}),
            ("vtpr_start", {}),
            ("vtpr_answer_correct", {"keywordId": "kw-1"}),
            ("vtpr_answer_incorrect", {"keywordId": "kw-2"}),
        ]:
            client.post(
                EVENTS_URL,
                json={"user_id": test_user.id, "event_type": event_type, "event_data": data},
            )

        response = client.get(f"/api/v1/analytics/users/{test_user.id}/stats")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total_events"] == 4
        assert data["onboarding_completed"] is True
        assert data["vtpr_accuracy"] == 0.5
        assert data["keywords_learned"] == 1
        assert data["time_range"] == "30d"


class TestFunnel:
    """Test suite for GET /analytics/funnel endpoint."""

    def test_custom_funnel(
        self, client: TestClient, test_user: models.User, other_user: models.User
    ) -> None:
        client.post(
            f"{EVENTS_URL}/batch",
            json={
                "events": [
                    {"user_id": test_user.id, "event_type": "app_launch"},
                    {"user_id": other_user.id, "event_type": "app_launch"},
                    {"user_id": test_user.id, "event_type": "onboarding_complete"},
                ]
            },
        )

        response = client.get(
            "/api/v1/analytics/funnel",
            params=[("step", "app_launch"), ("step", "onboarding_complete")],
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [s["user_count"] for s in data["steps"]] == [2, 1]
        assert [s["conversion_rate"] for s in data["steps"]] == [1.0, 0.5]
        assert data["total_users"] == 2

    def test_default_funnel_on_empty_store(self, client: TestClient) -> None:
        response = client.get("/api/v1/analytics/funnel")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["steps"]) == 9
        assert data["total_users"] == 0
        assert data["activation_rate"] == 0.0

    def test_unknown_step(self, client: TestClient) -> None:
        response = client.get("/api/v1/analytics/funnel", params={"step": "nope"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestSystemAnalytics:
    def test_system_view(self, client: TestClient, test_user: models.User) -> None:
        for _ in range(2):
            client.post(EVENTS_URL, json={"user_id": test_user.id, "event_type": "app_launch"})

        response = client.get("/api/v1/analytics/system", params={"group_by": "hour"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["overview"]["total_users"] == 1
        assert data["overview"]["total_events"] == 2
        assert data["overview"]["retention_rate"] == 1.0
        assert data["event_distribution"] == [{"event_type": "app_launch", "count": 2}]
        assert sum(b["total"] for b in data["time_series"]) == 2

    def test_invalid_group_by(self, client: TestClient) -> None:
        response = client.get("/api/v1/analytics/system", params={"group_by": "month"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestAnalyticsHealth:
    def test_health(self, client: TestClient, test_user: models.User) -> None:
        client.post(EVENTS_URL, json={"user_id": test_user.id, "event_type": "app_launch"})

        response = client.get("/api/v1/analytics/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database_connected"] is True
        assert data["recent_events"] == 1
