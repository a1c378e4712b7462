"""
Tests for recording a day: Slack payload parsing, CSV append, and the
POST /record-day endpoint.
"""
from datetime import date

import pytest

from goodday.core.errors import NotASubmissionError
from goodday.services.questions import QUALITY_QUESTION_ID, catalog
from goodday.services.record_day import (
    COMMIT_MESSAGE,
    append_row,
    default_header,
    is_button_submit,
    parse_submission,
)

OWNER, REPO, PATH = "octo", "my-good-day", "good-day.csv"


def slack_payload(selected, actions=None):
    """A block-action payload with one static select per catalog question."""
    blocks = []
    values = {}
    for question in catalog:
        options = [
            {"text": {"type": "plain_text", "text": label}, "value": f"value-{i}"}
            for i, label in enumerate(question.options)
        ]
        blocks.append({
            "block_id": f"{question.id}_block",
            "accessory": {"type": "static_select", "action_id": question.id, "options": options},
        })
        choice = selected.get(question.id)
        values[f"{question.id}_block"] = {
            question.id: {
                "type": "static_select",
                "selected_option": {"value": f"value-{choice}"} if choice is not None else None,
            }
        }
    payload = {"view": {"blocks": blocks, "state": {"values": values}}}
    if actions is not None:
        payload["actions"] = actions
    return payload


SUBMIT = [{"type": "button", "action_id": "record_day"}]


class TestParseSubmission:
    def test_selected_options_become_expanded_labels(self):
        answers = parse_submission(slack_payload({QUALITY_QUESTION_ID: 4, "meetings": 0}, SUBMIT))
        assert answers[QUALITY_QUESTION_ID] == catalog.resolve(QUALITY_QUESTION_ID).label_of(4)
        assert answers["meetings"] == "None"

    def test_unanswered_is_blank(self):
        answers = parse_submission(slack_payload({"meetings": 1}, SUBMIT))
        assert answers["breaks"] == ""
        assert list(answers) == catalog.ids

    def test_select_change_is_not_a_submission(self):
        payload = slack_payload({}, [{"type": "static_select", "action_id": "meetings"}])
        assert not is_button_submit(payload)
        with pytest.raises(NotASubmissionError):
            parse_submission(payload)

    def test_view_submission_without_actions(self):
        answers = parse_submission(slack_payload({"meetings": 2}))
        assert answers["meetings"] == "2"


class TestAppendRow:
    def test_creates_file_with_header(self, store):
        result = append_row(store, OWNER, REPO, PATH, {"meetings": "2"}, date(2024, 1, 15))
        assert result.created is True
        lines = store.text(OWNER, REPO, PATH).splitlines()
        assert lines[0] == ",".join(default_header())
        assert lines[1].startswith("2024-01-15,")
        assert result.row["meetings"] == "2"
        assert store.writes[-1] == (OWNER, REPO, PATH, COMMIT_MESSAGE)

    def test_appends_against_existing_header(self, store):
        store.put(OWNER, REPO, PATH, "date,meetings,breaks\n2024-01-14,1,None of the day\n")
        result = append_row(
            store, OWNER, REPO, PATH,
            {"meetings": "3–4", "emotions": "😬 Tense or nervous"},
            date(2024, 1, 15),
        )
        assert result.created is False
        assert result.header == ["date", "meetings", "breaks"]
        assert store.text(OWNER, REPO, PATH).splitlines() == [
            "date,meetings,breaks",
            "2024-01-14,1,None of the day",
            "2024-01-15,3–4,",
        ]

    def test_missing_trailing_newline(self, store):
        store.put(OWNER, REPO, PATH, "date,meetings\n2024-01-14,1")
        append_row(store, OWNER, REPO, PATH, {"meetings": "2"}, date(2024, 1, 15))
        assert store.text(OWNER, REPO, PATH) == "date,meetings\n2024-01-14,1\n2024-01-15,2\n"

    def test_values_with_commas_are_quoted(self, store):
        store.put(OWNER, REPO, PATH, "date,emotions\n")
        append_row(store, OWNER, REPO, PATH, {"emotions": "Calm, mostly"}, date(2024, 1, 15))
        assert store.text(OWNER, REPO, PATH).splitlines()[-1] == '2024-01-15,"Calm, mostly"'


class TestRecordDayEndpoint:
    def test_record_day(self, client, store):
        r = client.post("/record-day", json={
            "owner": OWNER,
            "repo": REPO,
            "path": PATH,
            "day": "2024-01-15",
            "submission": slack_payload({QUALITY_QUESTION_ID: 3, "meetings": 1}, SUBMIT),
        })
        assert r.status_code == 201
        body = r.json()
        assert body["created"] is True
        assert body["row"]["date"] == "2024-01-15"
        assert body["row"]["meetings"] == "1"
        assert body["sha"] == store.files[(OWNER, REPO, PATH)].sha

    def test_defaults_to_today(self, client, store):
        r = client.post("/record-day", json={
            "owner": OWNER, "repo": REPO, "path": PATH,
            "submission": slack_payload({"meetings": 1}, SUBMIT),
        })
        assert r.status_code == 201
        assert len(r.json()["row"]["date"]) == 10

    def test_not_a_submission(self, client):
        r = client.post("/record-day", json={
            "owner": OWNER, "repo": REPO, "path": PATH,
            "submission": slack_payload({}, [{"type": "static_select", "action_id": "meetings"}]),
        })
        assert r.status_code == 422
        assert r.json()["code"] == "NOT_A_SUBMISSION"

    def test_path_is_directory(self, client, store):
        store.directories.add((OWNER, REPO, "data"))
        r = client.post("/record-day", json={
            "owner": OWNER, "repo": REPO, "path": "data",
            "submission": slack_payload({"meetings": 1}, SUBMIT),
        })
        assert r.status_code == 422
        assert r.json()["code"] == "PATH_IS_DIRECTORY"

    def test_invalid_timezone(self, client):
        r = client.post("/record-day", json={
            "owner": OWNER, "repo": REPO, "path": PATH, "timezone": "Nowhere/Special",
            "submission": slack_payload({"meetings": 1}, SUBMIT),
        })
        assert r.status_code == 422
        assert r.json()["code"] == "ROW_FORMAT_ERROR"

    def test_blank_owner_rejected(self, client):
        r = client.post("/record-day", json={
            "owner": "  ", "repo": REPO, "path": PATH,
            "submission": slack_payload({}, SUBMIT),
        })
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_write_conflict_is_bad_gateway(self, client, store):
        store.failing_writes.add(PATH)
        r = client.post("/record-day", json={
            "owner": OWNER, "repo": REPO, "path": PATH,
            "submission": slack_payload({"meetings": 1}, SUBMIT),
        })
        assert r.status_code == 502
        assert r.json()["code"] == "PUBLISH_ERROR"
