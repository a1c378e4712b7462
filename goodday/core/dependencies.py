"""
FastAPI dependencies for the external collaborators.

Tests replace these through `app.dependency_overrides`.
"""
from functools import lru_cache

from goodday.services.notifier import SlackNotifier
from goodday.services.publisher import GitHubStore
from goodday.services.renderer import MatplotlibRenderer


def get_store() -> GitHubStore:
    # Raises MissingCredentialError (HTTP 500) when GH_API_KEY is unset.
    return GitHubStore.from_settings()


@lru_cache
def get_notifier() -> SlackNotifier:
    return SlackNotifier.from_settings()


@lru_cache
def get_renderer() -> MatplotlibRenderer:
    return MatplotlibRenderer()
