"""Capture a task description by opening the user's editor."""

import logging

import click

logger = logging.getLogger(__name__)

TASK_TEMPLATE = """\
# Enter your task description below (lines starting with # are ignored)
# Examples:
#   add user authentication
#   fix the login bug
#   implement dark mode toggle

"""


def extract_task(text: str | None) -> str | None:
    """First line that is neither blank nor a ``#`` comment."""
    if text is None:
        return None
    for line in text.splitlines():
        if line.startswith("#") or not line.strip():
            continue
        return line.strip()
    return None


def capture_task(editor: str) -> str:
    """Open ``editor`` on a scratch file and read the task from it.

    The scratch file is created and always removed by :func:`click.edit`.
    """
    logger.info(f"Opening editor: {editor}")
    try:
        text = click.edit(TASK_TEMPLATE, editor=editor, extension=".md", require_save=False)
    except click.ClickException as e:
        logger.debug(f"Editor failed: {e.format_message()}")
        raise RuntimeError("Editor exited with error")

    task = extract_task(text)
    if not task:
        raise ValueError("No task description provided")
    return task
