"""Content provider interface: fetch PR/MR content and publish reviews.

Providers wrap blocking SDK clients (PyGithub, python-gitlab). The review
tools call them from a worker thread, so implementations stay synchronous.
"""

from abc import ABC, abstractmethod

from quick_review.core.pr_parser import Platform, PRReference
from quick_review.services.reviewer.schemas import ReviewContent, ReviewVerdict


class ContentProvider(ABC):
    """Fetches review content for a PR/MR and posts the verdict back."""

    @abstractmethod
    def fetch(self, reference: PRReference) -> ReviewContent:
        """Fetch title, description, diff and files. Raises ProviderError."""

    @abstractmethod
    def publish(self, reference: PRReference, verdict: ReviewVerdict) -> None:
        """Post the verdict on the PR/MR. Raises ProviderError."""


def truncate(text: str, limit: int) -> str:
    """Truncate very large file bodies."""
    if len(text) > limit:
        return text[:limit] + "\n\n... [truncated, file too large]"
    return text


def get_provider(platform: Platform) -> ContentProvider:
    """Create the provider for a platform from settings."""
    if platform is Platform.GITHUB:
        from quick_review.services.providers.github import GitHubProvider

        return GitHubProvider.from_settings()

    from quick_review.services.providers.gitlab import GitLabProvider

    return GitLabProvider.from_settings()
