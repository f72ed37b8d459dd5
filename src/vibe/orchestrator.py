"""Orchestrator for turning a task into a worktree with Claude Code on it."""

import logging
import os
from pathlib import Path
from typing import NoReturn

from pydantic import BaseModel

from .context import RepoContext
from .naming import generate_branch_name
from .utils import FileUtils, GitUtils
from .worktree import CleanReport, Worktree, WorktreeManager

# Set up logger
logger = logging.getLogger(__name__)

FALLBACK_BASE_BRANCHES = ("master", "main")


class ShellHandoff(BaseModel):
    """Final step of worktree creation: replace this process with a shell."""
    shell: str
    cwd: Path

    def execute(self) -> NoReturn:
        """Change into the worktree and exec the shell. Does not return."""
        os.chdir(self.cwd)
        os.execvp(self.shell, [self.shell])


class Orchestrator:
    """High-level flow for creating, listing and cleaning worktrees."""

    def __init__(self, context: RepoContext):
        """Initialize the orchestrator.

        Args:
            context: Repository the commands act on
        """
        self.context = context
        self.worktree_manager = WorktreeManager(
            base_repo_path=context.repo_path,
            worktree_base_path=context.worktree_base,
        )
        logger.info(f"Initialized orchestrator with repo: {context.repo_path}")

    def resolve_base_branch(self, from_branch: str | None = None) -> str:
        """Pick the branch a new worktree starts from.

        An explicit branch wins, then the current branch, then master, then main.
        """
        if from_branch:
            return from_branch

        current = GitUtils.get_current_branch(self.context.repo_path)
        if current:
            return current

        for candidate in FALLBACK_BASE_BRANCHES:
            if GitUtils.branch_exists(self.context.repo_path, candidate):
                return candidate

        raise RuntimeError(
            "Could not determine base branch (no current branch, master, or main found)"
        )

    def generate_identifier(self, task: str) -> str:
        """Branch and directory name for a task."""
        return generate_branch_name(
            task,
            assistant=self.context.assistant,
            max_length=self.context.config.max_branch_name_length,
        )

    def create_worktree(self, task: str, from_branch: str | None = None) -> Worktree:
        """Create the worktree for a task.

        Args:
            task: Free-text task description
            from_branch: Explicit base branch

        Returns:
            The new worktree
        """
        logger.info(f"Creating worktree for task: {task!r}")

        base_branch = self.resolve_base_branch(from_branch)
        logger.info(f"Base branch determined: {base_branch}")

        branch = self.generate_identifier(task)
        logger.info(f"Generated branch name: {branch}")

        return self.worktree_manager.create_worktree(branch, base_branch)

    def launch_assistant(self, worktree: Worktree, task: str) -> int | None:
        """Run Claude Code on the task inside the worktree.

        Returns:
            The assistant's exit code, or None when it is not installed
        """
        assistant = self.context.assistant
        if not assistant.is_available():
            logger.info("Assistant not available, skipping launch")
            return None

        returncode = assistant.launch(task, worktree.path)
        logger.info(f"Claude Code session ended with exit code {returncode}")
        return returncode

    def handoff(self, worktree: Worktree) -> ShellHandoff:
        """Build the shell hand-off for a worktree."""
        if not FileUtils.is_enterable(worktree.path):
            raise RuntimeError(f"Could not change to worktree directory {worktree.path}")
        return ShellHandoff(shell=self.context.shell, cwd=worktree.path)

    def list_worktrees(self) -> list[Worktree]:
        """List all worktrees of the repository."""
        return self.worktree_manager.list_worktrees()

    def clean(self) -> CleanReport:
        """Prune stale worktree references and report removal candidates."""
        return self.worktree_manager.clean()
