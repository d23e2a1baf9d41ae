"""GitHub content provider - PyGithub data layer."""

from typing import Optional

from github import Auth, Github, GithubException, GithubIntegration
from github.PullRequest import PullRequest
from requests.exceptions import RequestException

from quick_review.config import settings
from quick_review.core.exceptions import ProviderError
from quick_review.core.logging import get_logger
from quick_review.core.pr_parser import PRReference
from quick_review.services.providers.base import ContentProvider, truncate
from quick_review.services.providers.patch_parser import (
    assemble_diff,
    filter_comments_by_valid_lines,
    format_unplaced_comments,
)
from quick_review.services.reviewer.schemas import FileEntry, ReviewContent, ReviewVerdict

logger = get_logger("github.provider")


def get_github_client() -> Github:
    """Get an authenticated GitHub client from a token or App installation."""
    if settings.github_token:
        return Github(auth=Auth.Token(settings.github_token), base_url=settings.github_base_url)

    if not all([settings.github_app_id, settings.github_private_key, settings.github_installation_id]):
        raise ProviderError("GitHub", "GITHUB_TOKEN or GitHub App credentials not configured")

    private_key = settings.github_private_key.replace("\\n", "\n")

    integration = GithubIntegration(
        auth=Auth.AppAuth(int(settings.github_app_id), private_key),
        base_url=settings.github_base_url,
    )
    try:
        access_token = integration.get_access_token(int(settings.github_installation_id)).token
    except (GithubException, RequestException) as e:
        logger.error(f"Failed to get GitHub App installation token: {e}")
        raise ProviderError("GitHub", f"App authentication failed: {e}") from e

    logger.info("GitHub App client initialized")
    return Github(auth=Auth.Token(access_token), base_url=settings.github_base_url)


class GitHubProvider(ContentProvider):
    """Fetches pull requests and posts reviews through the GitHub API."""

    def __init__(self, client: Github, max_file_chars: Optional[int] = None) -> None:
        self.client = client
        self.max_file_chars = max_file_chars or settings.max_file_chars

    @classmethod
    def from_settings(cls) -> "GitHubProvider":
        return cls(get_github_client())

    def _pull_request(self, reference: PRReference) -> PullRequest:
        repository = self.client.get_repo(f"{reference.owner}/{reference.repo}")
        return repository.get_pull(int(reference.pr_id))

    def fetch(self, reference: PRReference) -> ReviewContent:
        """Fetch PR title, body and changed files with their patches."""
        logger.info(f"Fetching PR: {reference}")
        try:
            pr = self._pull_request(reference)
            patches = {}
            files = []
            for f in pr.get_files():
                patches[f.filename] = f.patch or ""
                content = None
                if f.status != "removed":
                    content = self._file_contents(pr, f.filename)
                files.append(FileEntry(path=f.filename, diff=f.patch or None, content=content))
        except (GithubException, RequestException) as e:
            logger.error(f"Failed to fetch PR {reference}: {e}")
            raise ProviderError("GitHub", str(e)) from e

        logger.info(f"Found {len(files)} files in PR")

        return ReviewContent(
            title=pr.title or "",
            description=pr.body or "",
            diff=assemble_diff(patches),
            files=files,
        )

    def _file_contents(self, pr: PullRequest, path: str) -> Optional[str]:
        """Full file contents at the PR head, or None if unavailable."""
        if pr.head.repo is None:
            # Head fork was deleted
            return None
        try:
            content = pr.head.repo.get_contents(path, ref=pr.head.sha)
            if isinstance(content, list):
                return None
            return truncate(content.decoded_content.decode("utf-8"), self.max_file_chars)
        except (GithubException, RequestException, UnicodeDecodeError) as e:
            logger.warning(f"Failed to fetch file {path}: {e}")
            return None

    def publish(self, reference: PRReference, verdict: ReviewVerdict) -> None:
        """Create a COMMENT review. Comments outside the diff go into the body."""
        try:
            pr = self._pull_request(reference)
            patches = {f.filename: f.patch or "" for f in pr.get_files()}
            valid, invalid = filter_comments_by_valid_lines(verdict.line_comments, patches)
            if invalid:
                logger.warning(f"{len(invalid)} comments are outside the diff, moving them to the review body")

            review_comments = [{"path": c.path, "line": c.line, "body": c.body} for c in valid]
            pr.create_review(
                body=verdict.summary + format_unplaced_comments(invalid),
                event="COMMENT",
                comments=review_comments,
            )
        except (GithubException, RequestException) as e:
            logger.error(f"Failed to submit review on {reference}: {e}")
            raise ProviderError("GitHub", str(e)) from e

        logger.info(f"Created review with {len(review_comments)} inline comments")
