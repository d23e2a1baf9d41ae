"""Prompt templates using Jinja2."""

from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader

from quick_review.services.reviewer.tools import ToolName

if TYPE_CHECKING:
    from quick_review.core.pr_parser import PRReference
    from quick_review.services.reviewer.schemas import ReviewContent

PROMPTS_DIR = Path(__file__).parent
_env = Environment(loader=FileSystemLoader(PROMPTS_DIR))

RETRIEVE_TOOL = ToolName.RETRIEVE_CONTEXT.value
SUBMIT_TOOL = ToolName.SUBMIT_REVIEW.value


def render_system_prompt() -> str:
    """Render the reviewer system instruction."""
    template = _env.get_template("review_system.jinja2")
    return template.render(retrieve_tool=RETRIEVE_TOOL, submit_tool=SUBMIT_TOOL)


def render_request_prompt(reference: "PRReference") -> str:
    """Render the user turn for a PR the agent must fetch itself."""
    template = _env.get_template("review_request.jinja2")
    return template.render(
        platform=reference.platform.label,
        owner=reference.owner,
        repo=reference.repo,
        pr_id=reference.pr_id,
        retrieve_tool=RETRIEVE_TOOL,
        submit_tool=SUBMIT_TOOL,
    )


def render_content_prompt(content: "ReviewContent") -> str:
    """Render the user turn for PR content already in hand."""
    template = _env.get_template("review_content.jinja2")
    return template.render(
        title=content.title,
        description=content.description,
        diff=content.diff,
        files=[f.label for f in content.files],
    )
