"""GitLab content provider - python-gitlab data layer."""

import gitlab
from gitlab.exceptions import GitlabError
from requests.exceptions import RequestException

from quick_review.config import settings
from quick_review.core.exceptions import ProviderError
from quick_review.core.logging import get_logger
from quick_review.core.pr_parser import PRReference
from quick_review.services.providers.base import ContentProvider
from quick_review.services.providers.patch_parser import (
    assemble_diff,
    filter_comments_by_valid_lines,
    format_unplaced_comments,
)
from quick_review.services.reviewer.schemas import FileEntry, LineComment, ReviewContent, ReviewVerdict

logger = get_logger("gitlab.provider")


def get_gitlab_client() -> gitlab.Gitlab:
    """Get an authenticated GitLab client."""
    if not settings.gitlab_token:
        raise ProviderError("GitLab", "GITLAB_TOKEN not configured")
    return gitlab.Gitlab(settings.gitlab_url, private_token=settings.gitlab_token)


class GitLabProvider(ContentProvider):
    """Fetches merge requests and posts reviews through the GitLab API."""

    def __init__(self, client: gitlab.Gitlab) -> None:
        self.client = client
        self._posted: set[tuple[str, str, int, str]] = set()

    @classmethod
    def from_settings(cls) -> "GitLabProvider":
        return cls(get_gitlab_client())

    def _merge_request(self, reference: PRReference):
        project = self.client.projects.get(f"{reference.owner}/{reference.repo}")
        return project.mergerequests.get(int(reference.pr_id))

    def _patches(self, mr) -> dict[str, str]:
        patches = {}
        for change in mr.changes().get("changes", []):
            patches[change["new_path"]] = change.get("diff") or ""
        return patches

    def fetch(self, reference: PRReference) -> ReviewContent:
        """Fetch MR title, description and per-file diffs."""
        logger.info(f"Fetching MR: {reference}")
        try:
            mr = self._merge_request(reference)
            patches = self._patches(mr)
        except (GitlabError, RequestException) as e:
            logger.error(f"Failed to fetch MR {reference}: {e}")
            raise ProviderError("GitLab", str(e)) from e

        logger.info(f"Found {len(patches)} files in MR")

        return ReviewContent(
            title=mr.title or "",
            description=mr.description or "",
            diff=assemble_diff(patches),
            files=[FileEntry(path=path, diff=patch or None) for path, patch in patches.items()],
        )

    def publish(self, reference: PRReference, verdict: ReviewVerdict) -> None:
        """Post line comments as diff discussions, then the summary as an MR note.

        A discussion GitLab refuses is folded into the summary note instead of
        failing the publish. Discussions already posted for this MR are not
        posted again when a publish is retried.
        """
        try:
            mr = self._merge_request(reference)
            valid, invalid = filter_comments_by_valid_lines(
                verdict.line_comments, self._patches(mr), added_only=True
            )
            positions = [(c, self._position(mr, c)) for c in valid]
        except (GitlabError, RequestException) as e:
            logger.error(f"Failed to prepare review on {reference}: {e}")
            raise ProviderError("GitLab", str(e)) from e

        if invalid:
            logger.warning(f"{len(invalid)} comments are outside the diff, moving them to the summary note")

        unplaced = list(invalid)
        placed = 0
        for c, position in positions:
            key = (str(reference), c.path, c.line, c.body)
            if key in self._posted:
                continue
            try:
                mr.discussions.create({"body": c.body, "position": position})
            except (GitlabError, RequestException) as e:
                logger.warning(f"GitLab rejected comment on {c.path}:{c.line}, moving it to the summary note: {e}")
                unplaced.append(c)
                continue
            self._posted.add(key)
            placed += 1

        try:
            mr.notes.create({"body": verdict.summary + format_unplaced_comments(unplaced)})
        except (GitlabError, RequestException) as e:
            logger.error(f"Failed to submit review on {reference}: {e}")
            raise ProviderError("GitLab", str(e)) from e

        logger.info(f"Posted review with {placed} inline comments")

    def _position(self, mr, comment: LineComment) -> dict:
        refs = mr.diff_refs or {}
        missing = [k for k in ("base_sha", "start_sha", "head_sha") if not refs.get(k)]
        if missing:
            raise ProviderError("GitLab", f"merge request has no diff refs ({', '.join(missing)})")
        return {
            "position_type": "text",
            "base_sha": refs["base_sha"],
            "start_sha": refs["start_sha"],
            "head_sha": refs["head_sha"],
            "new_path": comment.path,
            "new_line": comment.line,
        }
