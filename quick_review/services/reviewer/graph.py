"""LangGraph agent loop for code review: think -> act -> observe."""

from typing import Literal, Optional, Protocol, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, ToolMessage
from langgraph.graph import END, START, StateGraph

from quick_review.core.exceptions import DecisionMakerError, ToolError
from quick_review.core.logging import get_logger
from quick_review.services.reviewer.state import LoopOutcome, ReviewState
from quick_review.services.reviewer.tools import ReviewToolSource, ToolName, ToolSpec

logger = get_logger("reviewer.graph")


class DecisionMaker(Protocol):
    """Given the conversation, proposes tool calls or a final text answer."""

    async def decide(self, messages: Sequence[BaseMessage]) -> AIMessage: ...


class ChatDecisionMaker:
    """DecisionMaker backed by a tool-calling chat model."""

    def __init__(self, llm: BaseChatModel, tool_specs: Sequence[ToolSpec]) -> None:
        self.llm_with_tools = llm.bind_tools([spec.as_openai_tool() for spec in tool_specs])

    async def decide(self, messages: Sequence[BaseMessage]) -> AIMessage:
        try:
            response = await self.llm_with_tools.ainvoke(list(messages))
        except Exception as e:
            raise DecisionMakerError(f"LLM call failed: {e}") from e
        if not isinstance(response, AIMessage):
            raise DecisionMakerError(f"Expected AIMessage, got {type(response).__name__}")
        return response


def _pending_calls(message: AIMessage, round_number: int) -> list[dict]:
    """Tool calls proposed by the model, in order, each with an id."""
    calls = []
    for call in message.tool_calls:
        calls.append({"name": call["name"], "args": call.get("args") or {}, "id": call.get("id")})
    # Calls whose arguments could not be parsed are reported back as errors.
    for call in message.invalid_tool_calls:
        calls.append(
            {
                "name": call.get("name") or "",
                "args": {},
                "id": call.get("id"),
                "error": call.get("error") or "could not parse tool arguments",
            }
        )
    for index, call in enumerate(calls):
        if not call["id"]:
            call["id"] = f"call_{round_number}_{index}"
    return calls


def _with_call_ids(message: AIMessage, calls: list[dict]) -> AIMessage:
    """Copy filled-in call ids onto the message so results pair with their calls."""
    ids = [c["id"] for c in calls]
    n = len(message.tool_calls)
    if ids[:n] == [c.get("id") for c in message.tool_calls] and ids[n:] == [
        c.get("id") for c in message.invalid_tool_calls
    ]:
        return message
    return message.model_copy(
        update={
            "tool_calls": [{**c, "id": i} for c, i in zip(message.tool_calls, ids)],
            "invalid_tool_calls": [{**c, "id": i} for c, i in zip(message.invalid_tool_calls, ids[n:])],
        }
    )


def create_review_graph(
    decision_maker: DecisionMaker,
    tools: ReviewToolSource,
    max_rounds: int,
):
    """Create the review agent graph.

    Every round runs think, act and observe in full. The loop stops after a
    round in which submit_review succeeded, a round with no tool calls, or
    once max_rounds rounds have run.
    """
    if max_rounds < 1:
        raise ValueError("max_rounds must be at least 1")

    async def think_node(state: ReviewState) -> dict:
        """Ask the model for the next step."""
        round_number = state["rounds"] + 1
        try:
            response = await decision_maker.decide(state["messages"])
        except DecisionMakerError:
            raise
        except Exception as e:
            raise DecisionMakerError(f"LLM call failed: {e}") from e
        if not isinstance(response, AIMessage):
            raise DecisionMakerError(f"Expected AIMessage, got {type(response).__name__}")

        pending = _pending_calls(response, round_number)
        response = _with_call_ids(response, pending)
        if pending:
            logger.info(f"Round {round_number}: agent calling tools {[c['name'] for c in pending]}")
        else:
            logger.info(f"Round {round_number}: agent answered without tool calls")

        return {
            "messages": [response],
            "pending_tool_calls": pending,
            "tool_results": [],
            "rounds": round_number,
        }

    async def act_node(state: ReviewState) -> dict:
        """Run the proposed tool calls in order."""
        results = []
        submitted = state["submitted"]

        for call in state["pending_tool_calls"]:
            name = call["name"]
            if "error" in call:
                text = f"Error: invalid arguments for {name or 'tool'}: {call['error']}"
                logger.warning(text)
                results.append(
                    ToolMessage(content=text, tool_call_id=call["id"], name=name, status="error")
                )
                continue

            try:
                text = await tools.call_tool(name, call["args"])
                status = "success"
                if name == ToolName.SUBMIT_REVIEW.value:
                    submitted = True
            except ToolError as e:
                text = f"Error: {e}"
                status = "error"
                logger.warning(f"Tool {name} failed: {e}")

            results.append(ToolMessage(content=text, tool_call_id=call["id"], name=name, status=status))

        return {"tool_results": results, "submitted": submitted}

    def observe_node(state: ReviewState) -> dict:
        """Append tool results to the conversation and decide whether to go on."""
        if state["submitted"]:
            outcome = LoopOutcome.SUBMITTED
        elif not state["pending_tool_calls"]:
            outcome = LoopOutcome.ANSWERED
        elif state["rounds"] >= max_rounds:
            logger.error(f"Round limit {max_rounds} reached without submit_review")
            outcome = LoopOutcome.ABORTED
        else:
            outcome = LoopOutcome.CONTINUE

        return {
            "messages": state["tool_results"],
            "pending_tool_calls": [],
            "tool_results": [],
            "outcome": outcome,
        }

    def route_after_observe(state: ReviewState) -> Literal["think", "__end__"]:
        if state["outcome"] == LoopOutcome.CONTINUE:
            return "think"
        return END

    graph = StateGraph(ReviewState)

    graph.add_node("think", think_node)
    graph.add_node("act", act_node)
    graph.add_node("observe", observe_node)

    graph.add_edge(START, "think")
    graph.add_edge("think", "act")
    graph.add_edge("act", "observe")
    graph.add_conditional_edges("observe", route_after_observe, {"think": "think", END: END})

    return graph.compile()


def initial_state(messages: list[BaseMessage]) -> ReviewState:
    """Fresh loop state seeded with the opening messages."""
    return {
        "messages": messages,
        "pending_tool_calls": [],
        "tool_results": [],
        "rounds": 0,
        "submitted": False,
        "outcome": LoopOutcome.CONTINUE,
    }


def recursion_limit(max_rounds: int) -> int:
    """LangGraph step budget covering max_rounds full rounds."""
    return max_rounds * 3 + 2


def last_answer(messages: Sequence[BaseMessage]) -> Optional[str]:
    """Text of the last model message, if any."""
    for message in reversed(messages):
        if isinstance(message, AIMessage) and isinstance(message.content, str):
            return message.content
    return None
