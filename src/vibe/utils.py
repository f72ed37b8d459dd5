"""Utility functions for vibe."""

import os
import shutil
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError


class GitUtils:
    """Git utility functions."""

    @staticmethod
    def is_git_repo(path: str | Path) -> bool:
        """Check if path is inside a git repository."""
        try:
            Repo(path, search_parent_directories=True)
            return True
        except (InvalidGitRepositoryError, NoSuchPathError):
            return False

    @staticmethod
    def find_repo_root(path: str | Path) -> Path:
        """Get the top level of the working tree containing ``path``."""
        try:
            repo = Repo(path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise RuntimeError("Not in a git repository")
        if repo.working_tree_dir is None:
            raise RuntimeError("Not in a git repository")
        return Path(repo.working_tree_dir)

    @staticmethod
    def get_current_branch(repo_path: str | Path) -> str | None:
        """Get the current branch name, or None on a detached HEAD."""
        repo = Repo(repo_path)
        if repo.head.is_detached:
            return None
        return repo.active_branch.name

    @staticmethod
    def branch_exists(repo_path: str | Path, branch_name: str) -> bool:
        """Check whether a local branch exists."""
        repo = Repo(repo_path)
        try:
            repo.git.show_ref("--verify", "--quiet", f"refs/heads/{branch_name}")
            return True
        except GitCommandError:
            return False

    @staticmethod
    def has_uncommitted_changes(repo_path: str | Path) -> bool:
        """Check if tracked files differ from HEAD."""
        repo = Repo(repo_path)
        return repo.is_dirty(untracked_files=False)

    @staticmethod
    def list_worktrees_porcelain(repo_path: str | Path) -> str:
        """Raw ``git worktree list --porcelain`` output."""
        return Repo(repo_path).git.worktree("list", "--porcelain")

    @staticmethod
    def add_worktree(repo_path: str | Path, worktree_path: Path, branch_name: str,
                     base_branch: str | None = None) -> None:
        """Add a worktree, creating ``branch_name`` from ``base_branch`` if given."""
        repo = Repo(repo_path)
        if base_branch is None:
            repo.git.worktree("add", str(worktree_path), branch_name)
        else:
            repo.git.worktree("add", "-b", branch_name, str(worktree_path), base_branch)

    @staticmethod
    def remove_worktree(repo_path: str | Path, worktree_path: Path) -> None:
        """Remove a worktree and its administrative files."""
        Repo(repo_path).git.worktree("remove", str(worktree_path))

    @staticmethod
    def prune_worktrees(repo_path: str | Path) -> None:
        """Drop metadata of worktrees whose directories are gone."""
        Repo(repo_path).git.worktree("prune")

    @staticmethod
    def list_gone_branches(repo_path: str | Path) -> list[str]:
        """List local branches whose upstream has been deleted."""
        output = Repo(repo_path).git.for_each_ref(
            "--format=%(refname:short) %(upstream:track)", "refs/heads/"
        )
        gone = []
        for line in output.splitlines():
            if "[gone]" in line:
                gone.append(line.split()[0])
        return gone

    @staticmethod
    def stash_push(repo_path: str | Path, message: str) -> None:
        """Stash uncommitted changes under a message."""
        Repo(repo_path).git.stash("push", "-m", message)

    @staticmethod
    def find_stash(repo_path: str | Path, message: str) -> str | None:
        """Return the ``stash@{n}`` reference whose message contains ``message``."""
        output = Repo(repo_path).git.stash("list")
        for line in output.splitlines():
            ref, _, description = line.partition(": ")
            if message in description:
                return ref
        return None

    @staticmethod
    def stash_pop(repo_path: str | Path, ref: str) -> None:
        """Re-apply and drop a stash entry."""
        Repo(repo_path).git.stash("pop", ref)

    @staticmethod
    def combine(repo_path: str | Path, branch_name: str, strategy: str = "rebase") -> bool:
        """Rebase or merge ``branch_name`` into the branch checked out at ``repo_path``.

        Returns:
            True on success, False when git stopped (usually on conflicts)
        """
        repo = Repo(repo_path)
        try:
            if strategy == "merge":
                repo.git.merge("--no-edit", branch_name)
            else:
                repo.git.rebase(branch_name)
            return True
        except GitCommandError:
            return False

    @staticmethod
    def list_tracked_files(repo_path: str | Path) -> list[str]:
        """List files tracked by git, relative to the repository root."""
        output = Repo(repo_path).git.ls_files("-z")
        return [name for name in output.split("\0") if name]


class FileUtils:
    """File system utility functions."""

    @staticmethod
    def remove_directory(path: Path, force: bool = False) -> bool:
        """Remove directory and all contents."""
        try:
            if force and path.exists():
                shutil.rmtree(path)
                return True
            elif path.exists() and path.is_dir():
                path.rmdir()
                return True
            return False
        except OSError:
            return False

    @staticmethod
    def create_directory(path: Path, parents: bool = True) -> None:
        """Create directory if it is missing."""
        path.mkdir(parents=parents, exist_ok=True)

    @staticmethod
    def directory_exists(path: Path) -> bool:
        """Check if directory exists."""
        return path.exists() and path.is_dir()

    @staticmethod
    def is_enterable(path: Path) -> bool:
        """Check if path is a directory the process may chdir into."""
        return path.is_dir() and os.access(path, os.X_OK)

    @staticmethod
    def count_lines(path: Path) -> int:
        """Count the lines of a file."""
        return len(path.read_bytes().splitlines())


class ProcessUtils:
    """Process utility functions."""

    @staticmethod
    def command_exists(command: str) -> bool:
        """Check whether an executable is on PATH."""
        return shutil.which(command) is not None
