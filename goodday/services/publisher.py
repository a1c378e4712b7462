"""
GitHub file store and report publishing.

Both the survey CSV and the weekly report live in the user's repository.
Writes are create-or-update: an existing file is updated against the sha
read just before, so GitHub rejects the write if someone changed it since.

Public API
----------
GitHubStore.read_file(owner, repo, path)                        -> StoredFile | None
GitHubStore.write_file(owner, repo, path, content, message, sha) -> str (new sha)
publish_report(store, target, charts, readme)                   -> list[str] (paths written)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from github import Auth, Github, GithubException, InputGitAuthor, UnknownObjectException

from goodday.core.config import settings
from goodday.core.errors import DataFileError, PathIsDirectoryError, PublishError
from goodday.core.logging import get_logger

logger = get_logger(__name__)

README_PATH = "README.md"
CHART_COMMIT_MESSAGE = "Update summary visualization"
README_COMMIT_MESSAGE = "Update README"


@dataclass(frozen=True)
class StoredFile:
    path: str
    sha: str
    content: bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


@dataclass(frozen=True)
class RepoTarget:
    owner: str
    repo: str


@dataclass(frozen=True)
class RenderedChart:
    filename: str
    image: bytes


class FileStore(Protocol):
    def read_file(self, owner: str, repo: str, path: str) -> Optional[StoredFile]: ...

    def write_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: bytes,
        message: str,
        sha: Optional[str] = None,
    ) -> str: ...


class GitHubStore:
    """FileStore backed by the GitHub contents API."""

    def __init__(self, token: str, committer_name: str, committer_email: str):
        self._github = Github(auth=Auth.Token(token))
        self._author = InputGitAuthor(committer_name, committer_email)

    @classmethod
    def from_settings(cls) -> "GitHubStore":
        return cls(
            token=settings.require_github_token(),
            committer_name=settings.COMMITTER_NAME,
            committer_email=settings.COMMITTER_EMAIL,
        )

    def read_file(self, owner: str, repo: str, path: str) -> Optional[StoredFile]:
        """Current content and sha of `path`, or None if it does not exist."""
        try:
            contents = self._github.get_repo(f"{owner}/{repo}").get_contents(path)
        except UnknownObjectException:
            return None
        except GithubException as e:
            raise DataFileError(
                f"Could not read {owner}/{repo}/{path}: {e.status} {e.data}", path=path
            ) from e

        if isinstance(contents, list):
            raise PathIsDirectoryError(path)
        return StoredFile(path=path, sha=contents.sha, content=contents.decoded_content or b"")

    def write_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: bytes,
        message: str,
        sha: Optional[str] = None,
    ) -> str:
        try:
            repository = self._github.get_repo(f"{owner}/{repo}")
            if sha is None:
                result = repository.create_file(
                    path, message, content, committer=self._author, author=self._author
                )
            else:
                result = repository.update_file(
                    path, message, content, sha, committer=self._author, author=self._author
                )
        except GithubException as e:
            raise PublishError(path, f"{e.status} {e.data}") from e
        return result["content"].sha


def _current_sha(store: FileStore, target: RepoTarget, path: str) -> Optional[str]:
    try:
        existing = store.read_file(target.owner, target.repo, path)
    except DataFileError as e:
        raise PublishError(path, e.message) from e
    return existing.sha if existing else None


def publish_report(
    store: FileStore,
    target: RepoTarget,
    charts: Sequence[RenderedChart],
    readme: str,
) -> list[str]:
    """
    Write every chart image, then the README that references them.

    A failure part-way leaves the files already written in place; rerunning
    overwrites the same paths.
    """
    written: list[str] = []
    for chart in charts:
        sha = _current_sha(store, target, chart.filename)
        store.write_file(
            target.owner, target.repo, chart.filename, chart.image, CHART_COMMIT_MESSAGE, sha
        )
        written.append(chart.filename)

    sha = _current_sha(store, target, README_PATH)
    store.write_file(
        target.owner, target.repo, README_PATH, readme.encode("utf-8"), README_COMMIT_MESSAGE, sha
    )
    written.append(README_PATH)
    logger.info("Published %d file(s) to %s/%s", len(written), target.owner, target.repo)
    return written
