"""
Integration tests for the health endpoint and the reminder job endpoint.
"""
from goodday.models.user import User


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["db"] == "ok"


class TestRemindersEndpoint:
    def test_prompts_due_users(self, client, db, notifier):
        db.add_all([
            User(slackid="U001", timezone="America/New_York", prompt_time="16:00"),
            User(slackid="U002", timezone="UTC", prompt_time="16:00"),
        ])
        db.commit()

        # 21:00 UTC is 16:00 in New York.
        r = client.post("/jobs/reminders", json={"now": "2024-01-22T21:00:00Z"})
        assert r.status_code == 207
        body = r.json()
        assert body["total"] == 1
        assert body["succeeded"] == 1
        assert body["items"][0]["slackid"] == "U001"
        assert notifier.prompts == ["U001"]

    def test_reports_failed_prompts(self, client, db, notifier):
        db.add(User(slackid="U001", timezone="UTC", prompt_time="09:00"))
        db.commit()
        notifier.failing.add("U001")

        r = client.post("/jobs/reminders", json={"now": "2024-01-22T09:30:00Z"})
        assert r.status_code == 207
        body = r.json()
        assert body["failed"] == 1
        assert body["items"][0]["ok"] is False
        assert "U001" in body["items"][0]["error"]


class TestOpenAPI:
    def test_error_envelope_documented(self, client):
        schema = client.get("/openapi.json").json()
        assert "ErrorResponse" in schema["components"]["schemas"]
        responses = schema["paths"]["/record-day"]["post"]["responses"]
        assert set(responses) >= {"201", "422", "500", "502"}

    def test_error_envelope_fields(self, client):
        envelope = client.get("/openapi.json").json()["components"]["schemas"]["ErrorResponse"]
        assert envelope["required"] == ["code", "message"]
        assert envelope["properties"]["code"]["examples"] == ["PATH_IS_DIRECTORY"]
        assert "details" in envelope["properties"]
