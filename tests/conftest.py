"""Shared fixtures for reviewer tests."""

import pytest

from quick_review.core.pr_parser import Platform, PRReference
from quick_review.services.reviewer.schemas import FileEntry, ReviewContent
from tests.fakes import FakeProvider


@pytest.fixture()
def reference() -> PRReference:
    return PRReference(platform=Platform.GITHUB, owner="acme", repo="widgets", pr_id="42")


@pytest.fixture()
def content() -> ReviewContent:
    return ReviewContent(
        title="Add widget cache",
        description="Caches widgets in memory.",
        diff="diff --git a/src/lib.rs b/src/lib.rs\n@@ -1,2 +1,3 @@\n fn a() {}\n+fn b() {}\n fn c() {}",
        files=[
            FileEntry(path="src/lib.rs", diff="@@ -1,2 +1,3 @@\n fn a() {}\n+fn b() {}\n fn c() {}"),
            FileEntry(path="README.md", content="# Widgets"),
        ],
    )


@pytest.fixture()
def provider(content: ReviewContent) -> FakeProvider:
    return FakeProvider(content)
