"""Repository context shared by every command."""

import os
from collections.abc import Mapping
from pathlib import Path

from .assistant import ClaudeAssistant
from .config import Config
from .utils import GitUtils


class RepoContext:
    """Where a command runs and with which settings and collaborators.

    Commands receive the repository path explicitly instead of relying on the
    process working directory, so a context can point at another worktree
    without changing global state.
    """

    def __init__(self, repo_path: Path, config: Config | None = None,
                 assistant: ClaudeAssistant | None = None,
                 environ: Mapping[str, str] | None = None):
        self.repo_path = Path(repo_path)
        self.config = config or Config()
        self.assistant = assistant or ClaudeAssistant(
            command=self.config.assistant_command,
            skip_permissions_flag=self.config.skip_permissions_flag,
            cwd=self.repo_path,
        )
        self.environ = environ if environ is not None else os.environ

    @classmethod
    def discover(cls, start: Path | None = None, config: Config | None = None,
                 **kwargs) -> "RepoContext":
        """Build a context for the repository containing ``start``."""
        repo_path = GitUtils.find_repo_root(start or Path.cwd())
        if config is None:
            config = Config.discover(repo_path)
        return cls(repo_path, config=config, **kwargs)

    def at(self, path: Path) -> "RepoContext":
        """Same context, rooted at another worktree."""
        return RepoContext(path, config=self.config, assistant=self.assistant,
                           environ=self.environ)

    @property
    def editor(self) -> str:
        """Editor used for task capture."""
        return self.environ.get("EDITOR") or self.config.default_editor

    @property
    def shell(self) -> str:
        """Shell handed control after a worktree is created."""
        return self.environ.get("SHELL") or self.config.default_shell

    @property
    def worktree_base(self) -> Path:
        """Directory new worktrees are created in."""
        return self.config.resolve_worktree_base(self.repo_path)

    def __repr__(self) -> str:
        return f"RepoContext(repo_path='{self.repo_path}')"
