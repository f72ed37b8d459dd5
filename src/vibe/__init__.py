"""
Vibe - git worktree automation with Claude Code integration.

Turns a task description into a branch and a sibling worktree, runs Claude Code
on the task there and leaves you in a shell inside the new checkout. Also lists,
cleans and merges worktrees and reports oversized files.
"""

from .assistant import ClaudeAssistant
from .config import Config
from .context import RepoContext
from .merge import MergeFlow, MergeResult
from .naming import generate_branch_name
from .orchestrator import Orchestrator, ShellHandoff
from .report import line_count_report
from .utils import FileUtils, GitUtils
from .worktree import Worktree, WorktreeManager

__version__ = "0.1.0"

__all__ = [
    "ClaudeAssistant",
    "Config",
    "RepoContext",
    "MergeFlow",
    "MergeResult",
    "generate_branch_name",
    "Orchestrator",
    "ShellHandoff",
    "line_count_report",
    "GitUtils",
    "FileUtils",
    "Worktree",
    "WorktreeManager",
]
