"""
Record Day: a Slack modal submission → one appended CSV row.

Payload shape (Slack block action, trimmed)
-------------------------------------------
view.state.values  {block_id: {action_id: {"selected_option": {"value": ...}}}}
view.blocks        [{"block_id": "<action_id>_block",
                     "accessory": {"type": "static_select", "options": [...]}}]
actions            [{"type": "button", "action_id": "record_day"}, ...]

The action id of each select is the question id. The stored answer is the
option's display text, icon tokens expanded, so it matches the catalog labels
exactly.

Public API
----------
is_button_submit(payload)                               -> bool
parse_submission(payload, catalog)                      -> dict[str, str]
append_row(store, owner, repo, path, answers, day, ...) -> AppendResult
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Sequence

import pandas as pd

from goodday.core.errors import NotASubmissionError
from goodday.core.logging import get_logger
from goodday.services.normalizer import DATE_FIELD
from goodday.services.publisher import FileStore
from goodday.services.questions import QuestionCatalog, catalog as default_catalog

logger = get_logger(__name__)

SUBMIT_ACTION_ID = "record_day"
COMMIT_MESSAGE = "Good Day update"


@dataclass
class AppendResult:
    path: str
    sha: str
    created: bool
    header: list[str]
    row: dict[str, str]


# ---------------------------------------------------------------------------
# Slack payload parsing
# ---------------------------------------------------------------------------

def is_button_submit(payload: Mapping[str, Any]) -> bool:
    for action in payload.get("actions") or []:
        if action.get("type") == "button" and action.get("action_id") == SUBMIT_ACTION_ID:
            return True
    return False


def _select_options(payload: Mapping[str, Any]) -> dict[str, list[dict]]:
    """static_select options keyed by block id."""
    options: dict[str, list[dict]] = {}
    for block in (payload.get("view") or {}).get("blocks") or []:
        accessory = block.get("accessory") or {}
        if accessory.get("type") == "static_select":
            options[block.get("block_id")] = accessory.get("options") or []
    return options


def parse_submission(
    payload: Mapping[str, Any],
    catalog: QuestionCatalog = default_catalog,
) -> dict[str, str]:
    """
    Answers keyed by question id, in the order Slack reports them.

    A question left unanswered maps to "".
    """
    if payload.get("actions") and not is_button_submit(payload):
        raise NotASubmissionError()

    options = _select_options(payload)
    state = ((payload.get("view") or {}).get("state") or {}).get("values") or {}

    answers: dict[str, str] = {}
    for block_state in state.values():
        for action_id, action_state in block_state.items():
            selected = (action_state or {}).get("selected_option") or {}
            value = selected.get("value")
            text = ""
            if value is not None:
                for option in options.get(f"{action_id}_block", []):
                    if option.get("value") == value:
                        text = ((option.get("text") or {}).get("text")) or ""
                        break
            answers[action_id] = catalog.expand(text) if text else ""
    return answers


# ---------------------------------------------------------------------------
# CSV append
# ---------------------------------------------------------------------------

def default_header(catalog: QuestionCatalog = default_catalog) -> list[str]:
    return [DATE_FIELD, *catalog.ids]


def _existing_header(text: str) -> list[str]:
    if not text.strip():
        return []
    frame = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, nrows=0)
    return [str(c) for c in frame.columns if not str(c).startswith("Unnamed:")]


def _csv_line(values: Sequence[str]) -> str:
    return pd.DataFrame([list(values)]).to_csv(index=False, header=False, lineterminator="\n")


def append_row(
    store: FileStore,
    owner: str,
    repo: str,
    path: str,
    answers: Mapping[str, str],
    day: date,
    catalog: QuestionCatalog = default_catalog,
) -> AppendResult:
    """
    Append one day's answers to the CSV at `path`, creating it if needed.

    A new file gets a `date` column followed by every catalog question id.
    An existing file keeps its header; answers for columns it lacks are
    dropped with a warning. Concurrent appends are not coordinated: the
    write is conditional on the sha read here, so a racing writer makes
    this one fail rather than silently overwrite.
    """
    existing = store.read_file(owner, repo, path)
    body = existing.text if existing else ""
    header = _existing_header(body) or default_header(catalog)

    unknown = [k for k in answers if k not in header]
    if unknown:
        logger.warning("Dropping answers for columns not in %s: %s", path, ", ".join(unknown))

    row = {DATE_FIELD: day.isoformat()}
    for column in header:
        if column != DATE_FIELD:
            row[column] = answers.get(column, "")

    line = _csv_line([row[c] for c in header])
    if not body.strip():
        content = _csv_line(header) + line
    else:
        content = body if body.endswith("\n") else body + "\n"
        content += line

    sha = store.write_file(
        owner, repo, path, content.encode("utf-8"), COMMIT_MESSAGE,
        existing.sha if existing else None,
    )
    logger.info("Appended %s row to %s/%s/%s", day.isoformat(), owner, repo, path)
    return AppendResult(
        path=path, sha=sha, created=existing is None, header=header, row=row,
    )
