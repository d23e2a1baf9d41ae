"""Content providers for GitHub and GitLab."""
