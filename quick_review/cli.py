"""Command-line entry point: review one GitHub PR or GitLab MR by URL."""

import click
from dotenv import load_dotenv

from quick_review.core.exceptions import QuickReviewError
from quick_review.core.logging import get_logger
from quick_review.core.pr_parser import parse_pr_url
from quick_review.services.reviewer.schemas import ReviewResult, ReviewVerdict

logger = get_logger("cli")

EXAMPLE_URL = "https://github.com/owner/repo/pull/123"


def format_verdict(verdict: ReviewVerdict) -> str:
    """Summary followed by one `path:line - body` line per comment."""
    lines = [verdict.summary]
    for c in verdict.line_comments:
        lines.append(f"  {c.path}:{c.line} - {c.body}")
    return "\n".join(lines)


@click.command(epilog=f"Example: quick-review {EXAMPLE_URL}")
@click.argument("url")
@click.option("--dry-run", is_flag=True, help="Fetch and review, but do not publish the review.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option("--model", default=None, help="Model name (defaults to REVIEW_MODEL).")
@click.option("--max-rounds", type=click.IntRange(min=1), default=None, help="Round limit for the agent loop.")
@click.pass_context
def main(ctx: click.Context, url: str, dry_run: bool, as_json: bool, model: str, max_rounds: int):
    """Review the pull/merge request at URL with an AI agent."""
    from quick_review.services.providers.base import get_provider
    from quick_review.services.reviewer.pipeline import ReviewPipeline
    from quick_review.services.reviewer.service import create_review_agent

    reference = parse_pr_url(url)
    if reference is None:
        raise click.UsageError(f"Unrecognized PR/MR URL: {url}", ctx=ctx)

    try:
        provider = get_provider(reference.platform)
        agent = create_review_agent(model=model, max_rounds=max_rounds)
        if dry_run:
            verdict = ReviewPipeline(provider, agent).run(reference, publish=False)
        else:
            verdict = agent.review_pull_request(reference, provider)
    except (QuickReviewError, ValueError) as e:
        logger.error(f"Review failed for {reference}: {e}")
        if as_json:
            click.echo(ReviewResult(success=False, pr=str(reference), error=str(e)).model_dump_json(indent=2))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if as_json:
        result = ReviewResult(
            success=True, pr=str(reference), summary=verdict.summary, comments=verdict.line_comments
        )
        click.echo(result.model_dump_json(indent=2))
    else:
        click.echo(format_verdict(verdict))


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    main()


if __name__ == "__main__":
    run()
