"""Branch name generation from task descriptions."""

import hashlib
import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .assistant import ClaudeAssistant

logger = logging.getLogger(__name__)

MAX_BRANCH_NAME_LEN = 20
BRANCH_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")
NAMING_PROMPT = (
    "Convert this task to a git branch name (kebab-case, 2-4 words, under 20 chars): {task}"
)

_REPEATED_HYPHENS = re.compile(r"-+")


def sanitize_branch_name(raw: str) -> str:
    """Normalize free-form assistant output into ``[a-z0-9-]``."""
    name = raw.replace("\r", "").replace("\n", "").lower()
    name = re.sub(r"[^a-z0-9-]", "-", name)
    name = _REPEATED_HYPHENS.sub("-", name)
    return name.strip("-")


def is_valid_branch_name(name: str, max_length: int = MAX_BRANCH_NAME_LEN) -> bool:
    """Check a generated name before it is used as branch and directory name."""
    return bool(name) and len(name) <= max_length and bool(BRANCH_NAME_PATTERN.match(name))


def fallback_branch_name(task: str, max_length: int = MAX_BRANCH_NAME_LEN) -> str:
    """Mechanically derive a branch name from a task.

    Never empty: a task with no usable characters gets ``task-<sha1 prefix>``.
    """
    name = re.sub(r"[^a-z0-9 ]", "", task.lower())
    name = name.replace(" ", "-")
    name = _REPEATED_HYPHENS.sub("-", name)
    name = name[:max_length].strip("-")
    if not name:
        digest = hashlib.sha1(task.encode("utf-8")).hexdigest()[:8]
        name = f"task-{digest}"[:max_length]
    return name


def generate_branch_name(task: str, assistant: "ClaudeAssistant | None" = None,
                         max_length: int = MAX_BRANCH_NAME_LEN) -> str:
    """Turn a task description into a short branch name.

    Args:
        task: Free-text task description
        assistant: Asked for a meaningful name when it is available
        max_length: Maximum length of the name

    Returns:
        A lowercase ``[a-z0-9-]`` name without leading or trailing hyphens
    """
    task = task.strip()
    if not task:
        raise ValueError("No task description provided")

    if assistant is not None and assistant.is_available():
        suggestion = assistant.suggest(NAMING_PROMPT.format(task=task))
        if suggestion is not None:
            name = sanitize_branch_name(suggestion)
            if is_valid_branch_name(name, max_length):
                logger.info(f"Using assistant branch name: {name}")
                return name
            logger.info(f"Discarding invalid assistant branch name: {suggestion!r}")

    return fallback_branch_name(task, max_length)
