"""Review tools for the code review agent: retrieve_context and submit_review.

A tool source exposes the fixed tool catalog and executes one named call at a
time against the context it was bound to: an in-memory ReviewContent, or a
live content provider for a specific PR. Bad calls raise ToolError, which the
agent loop reports back to the model instead of aborting the review.
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel

from quick_review.core.exceptions import (
    ProviderError,
    ToolInvalidInputError,
    ToolNotFoundError,
)
from quick_review.core.logging import get_logger
from quick_review.core.pr_parser import PRReference
from quick_review.services.providers.base import ContentProvider
from quick_review.services.reviewer.schemas import ReviewContent, ReviewVerdict
from quick_review.services.reviewer.slot import ResultSlot

logger = get_logger("reviewer.tools")


class ToolName(str, Enum):
    RETRIEVE_CONTEXT = "retrieve_context"
    SUBMIT_REVIEW = "submit_review"


class ContextPart(str, Enum):
    TITLE = "title"
    DESCRIPTION = "description"
    DIFF = "diff"
    FILES = "files"


class ToolSpec(BaseModel):
    """A tool declaration: name, description and JSON schema of its arguments."""

    name: str
    description: str
    input_schema: dict

    def as_openai_tool(self) -> dict:
        """Function-calling format accepted by bind_tools."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


TOOL_SPECS: list[ToolSpec] = [
    ToolSpec(
        name=ToolName.RETRIEVE_CONTEXT.value,
        description="Retrieve a part of the PR: title, description, diff, or files.",
        input_schema={
            "type": "object",
            "properties": {
                "part": {
                    "type": "string",
                    "enum": [p.value for p in ContextPart],
                    "description": "Which part of the PR to retrieve.",
                }
            },
            "required": ["part"],
        },
    ),
    ToolSpec(
        name=ToolName.SUBMIT_REVIEW.value,
        description=(
            "Submit the final code review. Call exactly once when done. "
            "Required: summary; optional: line_comments."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "summary": {"type": "string", "description": "Overall review summary."},
                "line_comments": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "path": {"type": "string"},
                            "line": {"type": "integer", "minimum": 1},
                            "body": {"type": "string"},
                        },
                        "required": ["path", "line", "body"],
                    },
                    "description": "Optional per-line comments.",
                },
            },
            "required": ["summary"],
        },
    ),
]


class ReviewToolSource(ABC):
    """Tool catalog plus dispatcher, bound to one review's context and result slot."""

    acknowledgement = "Review submitted."

    def __init__(self, result_slot: ResultSlot) -> None:
        self.result_slot = result_slot
        self._handlers: dict[str, Callable[[dict], Awaitable[str]]] = {
            ToolName.RETRIEVE_CONTEXT.value: self._retrieve_context,
            ToolName.SUBMIT_REVIEW.value: self._submit_review,
        }

    def list_tools(self) -> list[ToolSpec]:
        return list(TOOL_SPECS)

    async def call_tool(self, name: str, arguments: Any) -> str:
        """Execute one tool call and return its text result.

        Raises:
            ToolNotFoundError: name is not in the catalog
            ToolInvalidInputError: arguments are invalid or the backing call failed
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise ToolNotFoundError(name)
        if not isinstance(arguments, dict):
            arguments = {}
        return await handler(arguments)

    @abstractmethod
    async def get_content(self) -> ReviewContent:
        """Content backing retrieve_context."""

    async def publish(self, verdict: ReviewVerdict) -> None:
        """Deliver the verdict before it is stored. No-op by default."""

    async def _retrieve_context(self, arguments: dict) -> str:
        part = arguments.get("part")
        if not isinstance(part, str):
            part = ""
        content = await self.get_content()
        return content.part(part)

    async def _submit_review(self, arguments: dict) -> str:
        summary = arguments.get("summary")
        if not isinstance(summary, str):
            raise ToolInvalidInputError("submit_review: missing summary")

        raw_comments = arguments.get("line_comments", arguments.get("lineComments"))
        verdict = ReviewVerdict.build(summary, raw_comments)

        stored = await self.result_slot.offer(verdict, before_write=self.publish)
        if stored:
            logger.info(f"Review submitted with {len(verdict.line_comments)} line comments")
        else:
            logger.warning("Duplicate submit_review ignored, a review was already submitted")
        return self.acknowledgement


class ContentReviewToolSource(ReviewToolSource):
    """Tools backed by ReviewContent already in memory."""

    def __init__(self, content: ReviewContent, result_slot: ResultSlot) -> None:
        super().__init__(result_slot)
        self.content = content

    async def get_content(self) -> ReviewContent:
        return self.content


class ProviderReviewToolSource(ReviewToolSource):
    """Tools backed by a live content provider for one PR.

    The first retrieve_context fetches and caches the content; later calls
    reuse it. A failed fetch leaves the cache empty so the next call retries.
    submit_review publishes through the provider before storing the verdict.
    """

    acknowledgement = "Review submitted and published."

    def __init__(
        self,
        provider: ContentProvider,
        reference: PRReference,
        result_slot: ResultSlot,
    ) -> None:
        super().__init__(result_slot)
        self.provider = provider
        self.reference = reference
        self._cached: Optional[ReviewContent] = None
        self._cache_lock = asyncio.Lock()

    async def get_content(self) -> ReviewContent:
        async with self._cache_lock:
            if self._cached is None:
                logger.info(f"Fetching content for {self.reference}")
                try:
                    self._cached = await asyncio.to_thread(self.provider.fetch, self.reference)
                except ProviderError as e:
                    raise ToolInvalidInputError(f"fetch failed: {e}") from e
            return self._cached

    async def publish(self, verdict: ReviewVerdict) -> None:
        logger.info(f"Publishing review for {self.reference}")
        try:
            await asyncio.to_thread(self.provider.publish, self.reference, verdict)
        except ProviderError as e:
            raise ToolInvalidInputError(f"publish failed: {e}") from e
