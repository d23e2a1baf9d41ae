"""Shared library utilities."""

from quick_review.core.logging import get_logger
from quick_review.core.pr_parser import Platform, PRReference, parse_pr_url

__all__ = [
    "get_logger",
    "Platform",
    "PRReference",
    "parse_pr_url",
]
