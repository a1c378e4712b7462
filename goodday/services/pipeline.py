"""
Weekly report pipeline.

Per user:  fetch CSV → normalize → window → build chart specs → render
           (parallel) → publish charts + README → notify.
All users: independent runs in a thread pool; one user's failure is
           recorded in their result and never stops the others.

Public API
----------
run_for_user(user, store, renderer, notifier, now)   -> UserRunResult
run_weekly_reports(db, store, renderer, notifier)    -> list[UserRunResult]
"""
from __future__ import annotations

import enum
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence

from sqlalchemy.orm import Session

from goodday.core.config import settings
from goodday.core.errors import (
    DataFileError,
    GoodDayException,
    NotificationError,
    PathIsDirectoryError,
    PublishError,
    RenderError,
    RowFormatError,
)
from goodday.core.logging import get_logger
from goodday.models.user import User
from goodday.services.aggregation import week_stats
from goodday.services.chart_spec import ChartSpec
from goodday.services.charts import build_chart_specs
from goodday.services.normalizer import CsvTable, load_rows
from goodday.services.notifier import Notifier
from goodday.services.publisher import FileStore, RenderedChart, RepoTarget, publish_report
from goodday.services.questions import QUALITY_QUESTION_ID, QuestionCatalog, catalog as default_catalog
from goodday.services.report import render_summary
from goodday.services.window import filter_rows, weekday_number, window_for

logger = get_logger(__name__)


class Renderer(Protocol):
    def render(self, spec: ChartSpec) -> bytes: ...


class RunStatus(str, enum.Enum):
    published = "published"
    no_data = "no_data"
    fetch_failed = "fetch_failed"
    publish_failed = "publish_failed"
    notify_failed = "notify_failed"


@dataclass
class UserRunResult:
    slackid: str
    status: RunStatus
    week_start: Optional[str] = None
    days: int = 0
    charts: list[str] = field(default_factory=list)
    skipped_charts: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (RunStatus.published, RunStatus.no_data)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def target_for(user: User) -> RepoTarget:
    return RepoTarget(
        owner=user.ghuser or settings.DEFAULT_GH_OWNER,
        repo=user.ghrepo or settings.DEFAULT_GH_REPO,
    )


def fetch_table(store: FileStore, user: User, path: Optional[str] = None) -> CsvTable:
    """The user's survey CSV, parsed. A missing file is an empty table."""
    path = path or settings.DATA_FILE_PATH
    target = target_for(user)
    stored = store.read_file(target.owner, target.repo, path)
    if stored is None:
        return CsvTable(fields=[], rows=[])
    try:
        text = stored.text
    except UnicodeDecodeError as e:
        raise DataFileError(f"{path} is not UTF-8 text", path=path) from e
    return load_rows(text, user.timezone)


def render_charts(
    specs: Sequence[ChartSpec],
    renderer: Renderer,
    max_workers: int,
    slackid: str = "",
) -> tuple[list[RenderedChart], list[str]]:
    """
    Render specs concurrently. Returns (rendered, skipped filenames), both in
    spec order; a chart that fails to render is logged and skipped.
    """
    def _render(spec: ChartSpec) -> Optional[RenderedChart]:
        try:
            return RenderedChart(filename=spec.filename, image=renderer.render(spec))
        except RenderError as e:
            logger.error("Chart %s for %s failed: %s", spec.filename, slackid, e.message)
            return None

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        results = list(pool.map(_render, specs))

    rendered = [r for r in results if r is not None]
    skipped = [s.filename for s, r in zip(specs, results) if r is None]
    return rendered, skipped


# ---------------------------------------------------------------------------
# Per user
# ---------------------------------------------------------------------------

def run_for_user(
    user: User,
    store: FileStore,
    renderer: Renderer,
    notifier: Notifier,
    now: Optional[datetime] = None,
    catalog: QuestionCatalog = default_catalog,
    chart_workers: Optional[int] = None,
) -> UserRunResult:
    slackid = user.slackid
    logger.info("Creating charts for %s", slackid)

    try:
        table = fetch_table(store, user)
        window = window_for(now or _now(), user.timezone, weekday_number(settings.WEEK_START))
    except (DataFileError, RowFormatError) as e:
        logger.error("Could not load data for %s: %s", slackid, e.message)
        return UserRunResult(slackid=slackid, status=RunStatus.fetch_failed, error=e.message)

    week_start = window.start_date.isoformat()
    rows = filter_rows(table.rows, window)
    if not rows:
        logger.info("No days recorded in week of %s for %s", week_start, slackid)
        return UserRunResult(slackid=slackid, status=RunStatus.no_data, week_start=week_start)

    specs = build_chart_specs(rows, table.fields, window, catalog)
    charts, skipped = render_charts(
        specs, renderer, chart_workers or settings.CHART_WORKERS, slackid
    )
    result = UserRunResult(
        slackid=slackid,
        status=RunStatus.published,
        week_start=week_start,
        days=len(rows),
        charts=[c.filename for c in charts],
        skipped_charts=skipped,
    )

    quality = catalog.get(QUALITY_QUESTION_ID)
    if quality is None:
        logger.warning("No %s question in catalog; summary stats left out", QUALITY_QUESTION_ID)
    stats = week_stats(rows, quality) if quality else None
    readme = render_summary(stats, window, result.charts, total_days=len(rows))
    target = target_for(user)
    logger.info("Saving charts to %s/%s for %s", target.owner, target.repo, slackid)
    try:
        publish_report(store, target, charts, readme)
    except (PublishError, DataFileError, PathIsDirectoryError) as e:
        logger.error("Publishing report for %s failed: %s", slackid, e.message)
        result.status = RunStatus.publish_failed
        result.error = e.message
        return result

    try:
        notifier.notify_summary(slackid)
    except NotificationError as e:
        logger.error("Notification for %s failed: %s", slackid, e.message)
        result.status = RunStatus.notify_failed
        result.error = e.message
    return result


# ---------------------------------------------------------------------------
# All users
# ---------------------------------------------------------------------------

def _isolated(user: User, **kwargs) -> UserRunResult:
    try:
        return run_for_user(user, **kwargs)
    except GoodDayException as e:
        logger.exception("Weekly report for %s failed", user.slackid)
        return UserRunResult(slackid=user.slackid, status=RunStatus.fetch_failed, error=e.message)
    except Exception as e:
        logger.exception("Weekly report for %s failed unexpectedly", user.slackid)
        return UserRunResult(slackid=user.slackid, status=RunStatus.fetch_failed, error=str(e))


def run_weekly_reports(
    db: Session,
    store: FileStore,
    renderer: Renderer,
    notifier: Notifier,
    now: Optional[datetime] = None,
    catalog: QuestionCatalog = default_catalog,
    user_workers: Optional[int] = None,
) -> list[UserRunResult]:
    """Run the weekly report for every registered user; results in user order."""
    users: list[User] = db.query(User).order_by(User.id).all()
    logger.info("Found %d users, gonna bake them some charts!", len(users))
    if not users:
        return []

    now = now or _now()
    with ThreadPoolExecutor(max_workers=max(1, user_workers or settings.USER_WORKERS)) as pool:
        futures = [
            pool.submit(
                _isolated, user,
                store=store, renderer=renderer, notifier=notifier, now=now, catalog=catalog,
            )
            for user in users
        ]
        results = [f.result() for f in futures]

    published = sum(1 for r in results if r.status == RunStatus.published)
    logger.info("Weekly reports done: %d published, %d total", published, len(results))
    return results
