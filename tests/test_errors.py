"""
Tests for error handling: structured error responses, HTTP status codes,
and the custom exception classes.
"""
import pytest

from goodday.core.config import settings
from goodday.core.dependencies import get_store
from goodday.core.errors import (
    DataFileError,
    MissingCredentialError,
    NotASubmissionError,
    NotificationError,
    PathIsDirectoryError,
    PublishError,
    RenderError,
    RowFormatError,
    UnknownQuestionError,
)
from goodday.main import app


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_missing_credential(self):
        err = MissingCredentialError("GH_API_KEY")
        assert err.http_status == 500
        assert err.code == "MISSING_CREDENTIAL"
        assert "GH_API_KEY" in err.message
        assert err.to_dict()["details"]["name"] == "GH_API_KEY"

    def test_data_file_error_with_path(self):
        err = DataFileError("could not read", path="good-day.csv")
        assert err.http_status == 502
        assert err.details == {"path": "good-day.csv"}

    def test_data_file_error_without_path(self):
        assert "details" not in DataFileError("could not parse").to_dict()

    def test_row_format_error(self):
        err = RowFormatError("bad date", details={"date": "x"})
        assert err.http_status == 422
        assert err.code == "ROW_FORMAT_ERROR"

    def test_unknown_question(self):
        err = UnknownQuestionError("mood")
        assert err.code == "UNKNOWN_QUESTION"
        assert err.details["question_id"] == "mood"

    def test_render_error(self):
        err = RenderError("time-of-day.png", "boom")
        assert "time-of-day.png" in err.message
        assert err.details["chart"] == "time-of-day.png"

    def test_publish_error(self):
        err = PublishError("README.md", "409 conflict")
        assert err.http_status == 502
        assert err.code == "PUBLISH_ERROR"
        assert "409 conflict" in err.message

    def test_notification_error(self):
        err = NotificationError("U001", "timeout")
        assert err.details["slackid"] == "U001"

    def test_webhook_errors(self):
        assert PathIsDirectoryError("data").http_status == 422
        assert NotASubmissionError().code == "NOT_A_SUBMISSION"

    def test_to_dict_without_details(self):
        d = NotASubmissionError().to_dict()
        assert set(d) == {"code", "message"}


class TestSettings:
    def test_require_github_token_missing(self, monkeypatch):
        monkeypatch.setattr(settings, "GH_API_KEY", None)
        with pytest.raises(MissingCredentialError):
            settings.require_github_token()

    def test_require_github_token_present(self, monkeypatch):
        monkeypatch.setattr(settings, "GH_API_KEY", "ghp_abc")
        assert settings.require_github_token() == "ghp_abc"

    def test_cors_origins_list(self, monkeypatch):
        monkeypatch.setattr(settings, "CORS_ORIGINS", "https://a.example, https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


# ---------------------------------------------------------------------------
# HTTP error envelopes
# ---------------------------------------------------------------------------

class TestValidationErrors:
    def test_missing_submission(self, client):
        r = client.post("/record-day", json={"owner": "o", "repo": "r", "path": "p"})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert any(e["field"] == "submission" for e in body["details"]["errors"])

    def test_invalid_day_format(self, client):
        r = client.post("/record-day", json={
            "owner": "o", "repo": "r", "path": "p", "submission": {}, "day": "15-01-2024",
        })
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_invalid_now(self, client):
        r = client.post("/jobs/reminders", json={"now": "not a time"})
        assert r.status_code == 422


class TestCredentialErrors:
    def test_missing_token_is_500_with_code(self, client, monkeypatch):
        monkeypatch.setattr(settings, "GH_API_KEY", None)
        app.dependency_overrides.pop(get_store)
        r = client.post("/record-day", json={
            "owner": "o", "repo": "r", "path": "p", "submission": {},
        })
        assert r.status_code == 500
        assert r.json()["code"] == "MISSING_CREDENTIAL"
