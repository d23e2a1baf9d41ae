"""Custom exceptions for the review agent."""


class QuickReviewError(Exception):
    """Base exception for all review errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ProviderError(QuickReviewError):
    """Content provider (GitHub, GitLab) fetch or publish failure."""

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        super().__init__(f"{service} error: {message}", {"service": service})


class ToolError(QuickReviewError):
    """Tool call failure. Reported back to the agent, never fatal."""


class ToolNotFoundError(ToolError):
    """The agent asked for a tool that is not in the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}", {"tool": name})


class ToolInvalidInputError(ToolError):
    """Tool arguments were missing or malformed, or the backing call failed."""


class DecisionMakerError(QuickReviewError):
    """The LLM step failed (transport or protocol). Aborts the review."""


class AgentNonComplianceError(QuickReviewError):
    """The loop finished without a valid submit_review call."""

    def __init__(self, message: str = "review agent did not call submit_review") -> None:
        super().__init__(message)


class ReviewAbortedError(QuickReviewError):
    """The loop hit its round limit before a review was submitted."""

    def __init__(self, max_rounds: int) -> None:
        self.max_rounds = max_rounds
        super().__init__(
            f"review aborted after {max_rounds} rounds without submit_review",
            {"max_rounds": max_rounds},
        )


class ReviewFailedError(QuickReviewError):
    """Failure inside one stage of a review (setup or agent loop)."""

    def __init__(self, stage: str, cause: Exception) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}", {"stage": stage})
