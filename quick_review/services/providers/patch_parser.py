"""Patch parser to find which lines of a diff can carry inline review comments."""

import re

from quick_review.services.reviewer.schemas import LineComment

HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def parse_patch_line_numbers(patch: str, added_only: bool = False) -> set[int]:
    """Extract valid line numbers from a unified diff patch.

    Inline comments can only be placed on lines that are part of the diff.
    Added lines and context lines inside a hunk are both addressable by their
    line number in the new file.

    Args:
        patch: Unified diff patch string
        added_only: Only report added lines (GitLab positions context lines differently)

    Returns:
        Set of valid line numbers (in the new file) for review comments
    """
    valid_lines = set()

    if not patch:
        return valid_lines

    # Track current line number in the new file
    current_line = 0

    for line in patch.split("\n"):
        hunk_match = HUNK_HEADER.match(line)
        if hunk_match:
            current_line = int(hunk_match.group(1))
            continue

        # Skip until the first hunk header, and the trailing empty line
        if current_line == 0 or not line:
            continue

        if line.startswith("-") or line.startswith("\\"):
            # Removed lines don't exist in the new file
            continue

        if not added_only or line.startswith("+"):
            valid_lines.add(current_line)
        current_line += 1

    return valid_lines


def filter_comments_by_valid_lines(
    comments: list[LineComment],
    patches: dict[str, str],
    added_only: bool = False,
) -> tuple[list[LineComment], list[LineComment]]:
    """Split comments into those placeable on the diff and the rest.

    Args:
        comments: Line comments from the verdict
        patches: Dict mapping file path to patch content

    Returns:
        Tuple of (valid_comments, invalid_comments)
    """
    valid_lines_by_file = {path: parse_patch_line_numbers(patch, added_only) for path, patch in patches.items()}

    valid = []
    invalid = []

    for comment in comments:
        if comment.line in valid_lines_by_file.get(comment.path, set()):
            valid.append(comment)
        else:
            invalid.append(comment)

    return valid, invalid


def format_unplaced_comments(comments: list[LineComment]) -> str:
    """Render comments that could not be placed inline, for the review body."""
    if not comments:
        return ""
    lines = ["", "", "**Additional comments:**"]
    for c in comments:
        lines.append(f"- `{c.path}:{c.line}` - {c.body}")
    return "\n".join(lines)


def assemble_diff(patches: dict[str, str]) -> str:
    """Join per-file patches into one git-style diff."""
    parts = []
    for path, patch in patches.items():
        parts.append(f"diff --git a/{path} b/{path}\n--- a/{path}\n+++ b/{path}\n{patch}")
    return "\n".join(parts)
