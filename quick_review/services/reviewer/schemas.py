"""Pydantic schemas for reviewer service."""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError


class FileEntry(BaseModel):
    """One changed file: its diff and/or full content."""

    model_config = ConfigDict(frozen=True)

    path: str
    diff: Optional[str] = None
    content: Optional[str] = None

    @property
    def label(self) -> str:
        """Path annotated with what is available for the file."""
        if self.diff is not None and self.content is not None:
            return f"{self.path} (diff+content)"
        if self.diff is not None:
            return f"{self.path} (diff)"
        if self.content is not None:
            return f"{self.path} (content)"
        return self.path


class ReviewContent(BaseModel):
    """Everything the agent may read about a PR: title, description, diff, files."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    diff: str = ""
    files: list[FileEntry] = Field(default_factory=list)

    def part(self, name: str) -> str:
        """Text for one part of the PR, as returned by retrieve_context."""
        if name == "title":
            return self.title
        if name == "description":
            return self.description
        if name == "diff":
            return self.diff
        if name == "files":
            return ", ".join(f.path for f in self.files)
        return f"Unknown part: {name}"


class LineComment(BaseModel):
    """A comment attached to one line of one file."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1)
    line: StrictInt = Field(ge=1)
    body: str = Field(min_length=1)


def filter_line_comments(raw: Any) -> list[LineComment]:
    """Keep the well-formed line comments, silently dropping the rest.

    Accepts LineComment instances or mappings with path/line/body. Anything
    that is not a list (or tuple) yields no comments. Order is preserved.
    """
    if not isinstance(raw, (list, tuple)):
        return []

    comments = []
    for entry in raw:
        if isinstance(entry, LineComment):
            comments.append(entry)
            continue
        if not isinstance(entry, Mapping):
            continue
        try:
            comments.append(
                LineComment(
                    path=entry.get("path"),
                    line=entry.get("line"),
                    body=entry.get("body"),
                )
            )
        except ValidationError:
            continue
    return comments


class ReviewVerdict(BaseModel):
    """Final review: overall summary plus per-line comments."""

    model_config = ConfigDict(frozen=True)

    summary: str
    line_comments: list[LineComment] = Field(default_factory=list)

    @classmethod
    def build(cls, summary: str, raw_comments: Any = None) -> "ReviewVerdict":
        """Build a verdict, dropping malformed line comments."""
        return cls(summary=summary, line_comments=filter_line_comments(raw_comments))


class ReviewResult(BaseModel):
    """Result of a PR review, as reported by the CLI."""

    success: bool
    pr: str
    summary: str = ""
    comments: list[LineComment] = Field(default_factory=list)
    error: Optional[str] = None
