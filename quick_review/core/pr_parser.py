"""Parse PR/MR references from URLs."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Platform(str, Enum):
    """Hosting platform of a pull/merge request."""

    GITHUB = "github"
    GITLAB = "gitlab"

    @property
    def label(self) -> str:
        return "GitHub" if self is Platform.GITHUB else "GitLab"


@dataclass(frozen=True)
class PRReference:
    """Parsed PR (GitHub) or MR (GitLab) reference."""

    platform: Platform
    owner: str
    repo: str
    pr_id: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.pr_id}"


GITHUB_PR_PATTERN = re.compile(r"https://github\.com/([^/\s?#]+)/([^/\s?#]+)/pull/(\d+)")
GITLAB_MR_PATTERN = re.compile(
    r"https://gitlab\.com/([^/\s?#]+)/([^/\s?#]+)/-/merge_requests/(\d+)"
)


def parse_pr_url(url: str) -> Optional[PRReference]:
    """
    Parse a PR/MR URL.

    Supported formats (whole string, surrounding whitespace ignored):
    - https://github.com/owner/repo/pull/123
    - https://gitlab.com/owner/repo/-/merge_requests/456

    Returns None when the URL is not one of these shapes.
    """
    if not url:
        return None
    url = url.strip()

    match = GITHUB_PR_PATTERN.fullmatch(url)
    if match:
        return PRReference(
            platform=Platform.GITHUB,
            owner=match.group(1),
            repo=match.group(2),
            pr_id=match.group(3),
        )

    match = GITLAB_MR_PATTERN.fullmatch(url)
    if match:
        return PRReference(
            platform=Platform.GITLAB,
            owner=match.group(1),
            repo=match.group(2),
            pr_id=match.group(3),
        )

    return None
