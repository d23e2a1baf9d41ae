"""End-to-end tests for the review agent loop and orchestrator."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from quick_review.core.exceptions import (
    AgentNonComplianceError,
    DecisionMakerError,
    ReviewAbortedError,
    ReviewFailedError,
)
from quick_review.services.reviewer.schemas import ReviewContent
from quick_review.services.reviewer.service import ReviewAgent
from tests.fakes import FakeProvider, ScriptedDecisionMaker, tool_call


def _submit(summary=None, line_comments=None, call_id="call_submit"):
    args = {}
    if summary is not None:
        args["summary"] = summary
    if line_comments is not None:
        args["line_comments"] = line_comments
    return AIMessage(content="", tool_calls=[tool_call("submit_review", args, call_id)])


def _retrieve(part, call_id="call_ctx"):
    return AIMessage(content="", tool_calls=[tool_call("retrieve_context", {"part": part}, call_id)])


class TestReviewPullRequest:
    """Scenarios for reviews driven through a live provider."""

    def test_submit_on_first_round(self, provider, reference):
        """Agent submits straight away with no comments."""
        llm = ScriptedDecisionMaker([_submit("Looks good.", [])])

        verdict = ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)

        assert verdict.summary == "Looks good."
        assert verdict.line_comments == []
        assert len(llm.seen) == 1
        assert [v.summary for v in provider.published] == ["Looks good."]

    def test_retrieve_then_submit(self, provider, reference):
        """Agent reads the diff, then submits one line comment."""
        llm = ScriptedDecisionMaker(
            [
                _retrieve("diff"),
                _submit(
                    "A few nits.",
                    [{"path": "src/lib.rs", "line": 10, "body": "Use Option here."}],
                ),
            ]
        )

        verdict = ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)

        assert verdict.summary == "A few nits."
        assert len(verdict.line_comments) == 1
        c = verdict.line_comments[0]
        assert (c.path, c.line, c.body) == ("src/lib.rs", 10, "Use Option here.")

        # The second round saw the diff as a tool result
        observed = llm.seen[1][-1]
        assert isinstance(observed, ToolMessage)
        assert observed.tool_call_id == "call_ctx"
        assert observed.content == provider.content.diff

    def test_invalid_comment_dropped(self, provider, reference):
        """A comment with an empty path is dropped; the summary survives."""
        llm = ScriptedDecisionMaker([_submit("Looks good.", [{"path": "", "line": 5, "body": "x"}])])

        verdict = ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)

        assert verdict.summary == "Looks good."
        assert verdict.line_comments == []

    def test_fetch_failure_is_recoverable(self, content, reference):
        """A failed fetch is reported to the agent, and the next call fetches again."""
        provider = FakeProvider(content, fetch_errors=1)
        llm = ScriptedDecisionMaker(
            [
                _retrieve("title", "c1"),
                _retrieve("title", "c2"),
                _submit("Done."),
            ]
        )

        verdict = ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)

        assert verdict.summary == "Done."
        assert provider.fetch_calls == 2
        failed = llm.seen[1][-1]
        assert failed.status == "error"
        assert "fetch failed" in failed.content
        assert llm.seen[2][-1].content == "Add widget cache"

    def test_many_retrievals_fetch_once(self, provider, reference):
        llm = ScriptedDecisionMaker(
            [
                AIMessage(
                    content="",
                    tool_calls=[
                        tool_call("retrieve_context", {"part": "title"}, "a"),
                        tool_call("retrieve_context", {"part": "diff"}, "b"),
                    ],
                ),
                _retrieve("files", "c"),
                _submit("Done."),
            ]
        )

        ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)

        assert provider.fetch_calls == 1

    def test_publish_failure_lets_agent_retry(self, content, reference):
        provider = FakeProvider(content, publish_errors=1)
        llm = ScriptedDecisionMaker([_submit("Try 1.", call_id="s1"), _submit("Try 2.", call_id="s2")])

        verdict = ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)

        assert verdict.summary == "Try 2."
        assert "publish failed" in llm.seen[1][-1].content
        assert [v.summary for v in provider.published] == ["Try 2."]

    def test_initial_conversation(self, provider, reference):
        llm = ScriptedDecisionMaker([_submit("ok")])

        ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)

        system, user = llm.seen[0]
        assert isinstance(system, SystemMessage)
        assert "submit_review" in system.content
        assert "retrieve_context" in system.content
        assert isinstance(user, HumanMessage)
        assert "GitHub PR: acme / widgets #42" in user.content


class TestReviewContent:
    """Scenarios for reviews of content already in memory."""

    def test_user_turn_renders_content(self, content):
        llm = ScriptedDecisionMaker([_submit("ok")])

        ReviewAgent(llm, max_rounds=5).review_content(content)

        user = llm.seen[0][1].content
        assert "Title: Add widget cache" in user
        assert "Description: Caches widgets in memory." in user
        assert "Files (2): src/lib.rs (diff), README.md (content)" in user

    def test_empty_file_list(self):
        llm = ScriptedDecisionMaker([_submit("ok")])

        ReviewAgent(llm, max_rounds=5).review_content(ReviewContent(title="T"))

        assert "Files (0): (none)" in llm.seen[0][1].content

    def test_missing_summary_is_recoverable(self, content):
        """A malformed submit does not stop the loop; a later good one wins."""
        llm = ScriptedDecisionMaker([_submit(call_id="bad"), _submit("Fixed.", call_id="good")])

        verdict = ReviewAgent(llm, max_rounds=5).review_content(content)

        assert verdict.summary == "Fixed."
        error = llm.seen[1][-1]
        assert error.status == "error"
        assert "missing summary" in error.content

    def test_unknown_tool_is_recoverable(self, content):
        llm = ScriptedDecisionMaker(
            [
                AIMessage(content="", tool_calls=[tool_call("run_tests", {}, "x")]),
                _submit("ok"),
            ]
        )

        verdict = ReviewAgent(llm, max_rounds=5).review_content(content)

        assert verdict.summary == "ok"
        assert "Tool not found: run_tests" in llm.seen[1][-1].content

    def test_unparseable_tool_arguments_are_recoverable(self, content):
        llm = ScriptedDecisionMaker(
            [
                AIMessage(
                    content="",
                    invalid_tool_calls=[
                        {"name": "submit_review", "args": "{not json", "id": "bad", "error": "bad json"}
                    ],
                ),
                _submit("ok"),
            ]
        )

        verdict = ReviewAgent(llm, max_rounds=5).review_content(content)

        assert verdict.summary == "ok"
        assert llm.seen[1][-1].status == "error"

    def test_submit_ends_round_despite_other_calls(self, content):
        """Submission in a round ends the loop even with other calls alongside it."""
        llm = ScriptedDecisionMaker(
            [
                AIMessage(
                    content="",
                    tool_calls=[
                        tool_call("submit_review", {"summary": "first"}, "s1"),
                        tool_call("retrieve_context", {"part": "title"}, "r1"),
                        tool_call("submit_review", {"summary": "second"}, "s2"),
                    ],
                ),
                _submit("never asked"),
            ]
        )

        verdict = ReviewAgent(llm, max_rounds=5).review_content(content)

        assert verdict.summary == "first"
        assert len(llm.seen) == 1

    def test_missing_call_ids_are_filled(self, content):
        llm = ScriptedDecisionMaker([_retrieve("title", call_id=None), _submit("ok")])

        ReviewAgent(llm, max_rounds=5).review_content(content)

        call_message, result = llm.seen[1][-2:]
        assert result.tool_call_id == "call_1_0"
        assert call_message.tool_calls[0]["id"] == "call_1_0"


class TestTerminalFailures:
    """Fatal outcomes of a review."""

    def test_plain_text_answer_is_non_compliance(self, content):
        llm = ScriptedDecisionMaker([AIMessage(content="LGTM!")])

        with pytest.raises(AgentNonComplianceError) as exc_info:
            ReviewAgent(llm, max_rounds=5).review_content(content)

        assert str(exc_info.value) == "review agent did not call submit_review"
        assert len(llm.seen) == 1

    def test_never_submitting_is_non_compliance(self, provider, reference):
        llm = ScriptedDecisionMaker([_retrieve("diff"), AIMessage(content="Here is my review...")])

        with pytest.raises(AgentNonComplianceError):
            ReviewAgent(llm, max_rounds=5).review_pull_request(reference, provider)
        assert provider.published == []

    def test_decision_maker_failure_aborts(self, content):
        llm = ScriptedDecisionMaker([_retrieve("diff"), ConnectionError("connection reset")])

        with pytest.raises(ReviewFailedError) as exc_info:
            ReviewAgent(llm, max_rounds=5).review_content(content)

        assert exc_info.value.stage == "agent"
        assert isinstance(exc_info.value.__cause__, DecisionMakerError)
        assert "connection reset" in str(exc_info.value)

    def test_round_limit_aborts(self, content):
        llm = ScriptedDecisionMaker([_retrieve("title", f"c{i}") for i in range(10)])

        with pytest.raises(ReviewAbortedError) as exc_info:
            ReviewAgent(llm, max_rounds=3).review_content(content)

        assert exc_info.value.max_rounds == 3
        assert len(llm.seen) == 3

    def test_submit_on_last_round_succeeds(self, content):
        llm = ScriptedDecisionMaker([_retrieve("title", "c1"), _retrieve("diff", "c2"), _submit("ok")])

        verdict = ReviewAgent(llm, max_rounds=3).review_content(content)

        assert verdict.summary == "ok"

    def test_setup_failure_is_wrapped(self, content):
        llm = ScriptedDecisionMaker([_submit("ok")])

        with pytest.raises(ReviewFailedError) as exc_info:
            ReviewAgent(llm, max_rounds=0).review_content(content)

        assert exc_info.value.stage == "setup"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert llm.seen == []
