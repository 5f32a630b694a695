"""
Integration tests for email endpoints.
"""

from conftest import USER_ID, OTHER_USER_ID

HEADERS = {"X-User-Id": USER_ID}
MISSING_ID = "0b8e3c5e-4f52-4a43-9d35-2f1c9f1f6a10"


class TestEmailEndpoints:
    """Tests for /api/emails."""

    def test_create_defaults(self, test_client, create_day):
        day = create_day()

        response = test_client.post("/api/emails", json={
            "day_id": day.id,
            "subject": "Invoice",
            "sender": "billing@example.com"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["subject"] == "Invoice"
        assert data["is_read"] is False
        assert data["is_archived"] is False
        assert data["received_at"] is not None

    def test_list(self, test_client, create_day, create_email):
        day = create_day()
        create_email(day.id)

        response = test_client.get("/api/emails", params={"day_id": day.id})

        assert response.status_code == 200
        assert [e["subject"] for e in response.json()] == ["Standup notes"]

    def test_mark_read_and_archive(self, test_client, create_day, create_email):
        email = create_email(create_day().id)

        read = test_client.patch("/api/emails", json={"id": email.id, "is_read": True}).json()
        archived = test_client.patch("/api/emails", json={"id": email.id, "is_archived": True}).json()

        assert read["is_read"] is True
        assert archived["is_read"] is True
        assert archived["is_archived"] is True

    def test_delete(self, test_client, create_day, create_email):
        email = create_email(create_day().id)

        assert test_client.delete("/api/emails", params={"id": email.id}).status_code == 200
        assert test_client.delete("/api/emails", params={"id": email.id}).status_code == 404

    def test_unknown_email(self, test_client):
        response = test_client.patch("/api/emails", json={"id": MISSING_ID, "is_read": True})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "email_not_found"

    def test_unknown_day(self, test_client):
        response = test_client.post("/api/emails", json={"day_id": MISSING_ID, "subject": "x"})

        assert response.status_code == 404

    def test_transient_day_emails(self, offline_client):
        day = offline_client.get("/api/days/2025-01-15/resolve", headers=HEADERS).json()["day"]

        created = offline_client.post("/api/emails", json={"day_id": day["id"], "subject": "offline"}).json()
        offline_client.patch("/api/emails", json={"id": created["id"], "is_read": True})

        listed = offline_client.get("/api/emails", params={"day_id": day["id"]}).json()
        assert [(e["subject"], e["is_read"]) for e in listed] == [("offline", True)]

    def test_other_users_emails_are_404(self, test_client, create_day, create_email):
        email = create_email(create_day(user_id=OTHER_USER_ID).id)

        assert test_client.get("/api/emails", params={"day_id": email.day_id}).status_code == 404
        assert test_client.patch("/api/emails", json={"id": email.id, "is_read": True}).status_code == 404
        assert test_client.delete("/api/emails", params={"id": email.id}).status_code == 404
        owner = test_client.get(
            "/api/emails", params={"day_id": email.day_id}, headers={"X-User-Id": OTHER_USER_ID}
        ).json()
        assert [e["is_read"] for e in owner] == [False]
