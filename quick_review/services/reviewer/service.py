"""Reviewer service - orchestration layer."""

import asyncio
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage

from quick_review.config import settings
from quick_review.core.exceptions import (
    AgentNonComplianceError,
    ReviewAbortedError,
    ReviewFailedError,
)
from quick_review.core.llm import get_chat_llm
from quick_review.core.logging import get_logger
from quick_review.core.pr_parser import PRReference
from quick_review.core.prompts import (
    render_content_prompt,
    render_request_prompt,
    render_system_prompt,
)
from quick_review.services.providers.base import ContentProvider
from quick_review.services.reviewer.graph import (
    ChatDecisionMaker,
    DecisionMaker,
    create_review_graph,
    initial_state,
    last_answer,
    recursion_limit,
)
from quick_review.services.reviewer.schemas import ReviewContent, ReviewVerdict
from quick_review.services.reviewer.slot import ResultSlot
from quick_review.services.reviewer.state import LoopOutcome
from quick_review.services.reviewer.tools import (
    TOOL_SPECS,
    ContentReviewToolSource,
    ProviderReviewToolSource,
    ReviewToolSource,
)

logger = get_logger("reviewer.service")


class ReviewAgent:
    """Runs one agent review per call and returns its verdict.

    Each review gets a fresh result slot, tool source and graph. Nothing is
    shared between reviews except the decision maker. The synchronous entry
    points run the review on their own event loop.
    """

    def __init__(self, decision_maker: DecisionMaker, max_rounds: Optional[int] = None) -> None:
        self.decision_maker = decision_maker
        self.max_rounds = settings.max_review_rounds if max_rounds is None else max_rounds

    async def areview_content(self, content: ReviewContent) -> ReviewVerdict:
        """Review PR content already in memory. Nothing is published."""
        logger.info(f"Starting review: {content.title or '(untitled)'}")
        return await self._run(
            lambda slot: ContentReviewToolSource(content, slot),
            render_content_prompt(content),
        )

    async def areview_pull_request(
        self,
        reference: PRReference,
        provider: ContentProvider,
    ) -> ReviewVerdict:
        """Review a PR whose content the agent fetches, and publishes to, via the provider."""
        logger.info(f"Starting review: {reference.platform.label} {reference}")
        return await self._run(
            lambda slot: ProviderReviewToolSource(provider, reference, slot),
            render_request_prompt(reference),
        )

    def review_content(self, content: ReviewContent) -> ReviewVerdict:
        return asyncio.run(self.areview_content(content))

    def review_pull_request(self, reference: PRReference, provider: ContentProvider) -> ReviewVerdict:
        return asyncio.run(self.areview_pull_request(reference, provider))

    async def _run(self, make_tools, user_prompt: str) -> ReviewVerdict:
        result_slot = ResultSlot()

        try:
            tools: ReviewToolSource = make_tools(result_slot)
            graph = create_review_graph(self.decision_maker, tools, self.max_rounds)
            state = initial_state(
                [
                    SystemMessage(content=render_system_prompt()),
                    HumanMessage(content=user_prompt),
                ]
            )
        except Exception as e:
            logger.error(f"Review setup failed: {e}")
            raise ReviewFailedError("setup", e) from e

        try:
            final_state = await graph.ainvoke(
                state,
                config={"recursion_limit": recursion_limit(self.max_rounds)},
            )
        except Exception as e:
            logger.error(f"Review agent failed: {e}")
            raise ReviewFailedError("agent", e) from e

        logger.info(
            f"Agent loop finished after {final_state['rounds']} rounds: "
            f"{LoopOutcome(final_state['outcome']).value}"
        )

        verdict = await result_slot.get()
        if verdict is not None:
            return verdict

        if final_state["outcome"] == LoopOutcome.ABORTED:
            raise ReviewAbortedError(self.max_rounds)

        answer = last_answer(final_state["messages"])
        if answer:
            logger.warning(f"Agent answered without submitting: {answer[:200]}")
        raise AgentNonComplianceError()


def create_review_agent(model: Optional[str] = None, max_rounds: Optional[int] = None) -> ReviewAgent:
    """Build a ReviewAgent backed by the configured OpenRouter model."""
    llm = get_chat_llm(
        model=model or settings.review_model,
        temperature=settings.review_temperature,
    )
    return ReviewAgent(ChatDecisionMaker(llm, TOOL_SPECS), max_rounds=max_rounds)
