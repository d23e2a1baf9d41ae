"""Agent state schema for the code reviewer."""

from enum import Enum
from typing import Annotated, TypedDict

from langchain_core.messages import ToolMessage
from langgraph.graph.message import add_messages


class LoopOutcome(str, Enum):
    """Where the loop goes after an observe step."""

    CONTINUE = "continue"
    SUBMITTED = "submitted"  # submit_review accepted
    ANSWERED = "answered"  # plain-text answer, no tool calls
    ABORTED = "aborted"  # round limit reached


class ReviewState(TypedDict):
    """State for the code review agent."""

    # Agent conversation
    messages: Annotated[list, add_messages]

    # Current round
    pending_tool_calls: list[dict]  # [{name, args, id}] from the last AIMessage
    tool_results: list[ToolMessage]

    # Loop bookkeeping
    rounds: int
    submitted: bool
    outcome: LoopOutcome
