"""Fetch -> review -> publish pipeline for callers that fetch content up front."""

from quick_review.core.exceptions import QuickReviewError
from quick_review.core.logging import get_logger
from quick_review.core.pr_parser import PRReference
from quick_review.services.providers.base import ContentProvider
from quick_review.services.reviewer.schemas import ReviewVerdict
from quick_review.services.reviewer.service import ReviewAgent

logger = get_logger("reviewer.pipeline")


class PipelineError(QuickReviewError):
    """Failure in one pipeline stage: fetch, review or post."""

    def __init__(self, stage: str, cause: Exception) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}", {"stage": stage})


class ReviewPipeline:
    """Fetches PR content, reviews it in memory, then publishes the verdict."""

    def __init__(self, provider: ContentProvider, agent: ReviewAgent) -> None:
        self.provider = provider
        self.agent = agent

    def run(self, reference: PRReference, publish: bool = True) -> ReviewVerdict:
        try:
            content = self.provider.fetch(reference)
        except QuickReviewError as e:
            raise PipelineError("fetch", e) from e

        try:
            verdict = self.agent.review_content(content)
        except QuickReviewError as e:
            raise PipelineError("review", e) from e

        if not publish:
            logger.info(f"Dry run, not publishing review for {reference}")
            return verdict

        try:
            self.provider.publish(reference, verdict)
        except QuickReviewError as e:
            raise PipelineError("post", e) from e

        return verdict
