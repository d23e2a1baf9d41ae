"""quick-review: agent-driven code review for GitHub PRs and GitLab MRs."""

__version__ = "0.1.0"
