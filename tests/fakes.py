"""Fakes for reviewer tests: a scripted LLM and an in-memory provider."""

from collections.abc import Sequence

from langchain_core.messages import AIMessage, BaseMessage

from quick_review.core.exceptions import ProviderError
from quick_review.core.pr_parser import PRReference
from quick_review.services.providers.base import ContentProvider
from quick_review.services.reviewer.schemas import ReviewContent, ReviewVerdict


def tool_call(name: str, args: dict, call_id: str | None = None) -> dict:
    return {"name": name, "args": args, "id": call_id, "type": "tool_call"}


class ScriptedDecisionMaker:
    """Returns queued responses in order; an Exception in the queue is raised."""

    def __init__(self, responses: Sequence) -> None:
        self.responses = list(responses)
        self.seen: list[list[BaseMessage]] = []

    async def decide(self, messages: Sequence[BaseMessage]) -> AIMessage:
        self.seen.append(list(messages))
        if not self.responses:
            return AIMessage(content="I have nothing more to say.")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeProvider(ContentProvider):
    """Records fetch/publish calls; can be told to fail."""

    def __init__(
        self,
        content: ReviewContent,
        fetch_errors: int = 0,
        publish_errors: int = 0,
    ) -> None:
        self.content = content
        self.fetch_errors = fetch_errors
        self.publish_errors = publish_errors
        self.fetch_calls = 0
        self.published: list[ReviewVerdict] = []

    def fetch(self, reference: PRReference) -> ReviewContent:
        self.fetch_calls += 1
        if self.fetch_errors:
            self.fetch_errors -= 1
            raise ProviderError("GitHub", "401 Bad credentials")
        return self.content

    def publish(self, reference: PRReference, verdict: ReviewVerdict) -> None:
        if self.publish_errors:
            self.publish_errors -= 1
            raise ProviderError("GitHub", "422 Unprocessable Entity")
        self.published.append(verdict)


