"""Git worktree management for vibe."""

import logging
from pathlib import Path

from git.exc import GitCommandError
from pydantic import BaseModel

from .utils import FileUtils, GitUtils

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


class RemovalCandidate(BaseModel):
    """A worktree whose branch lost its upstream."""
    branch: str
    path: Path


class CleanReport(BaseModel):
    """Outcome of a clean run."""
    pruned_paths: list[Path] = []
    candidates: list[RemovalCandidate] = []


class Worktree:
    """Represents one entry of ``git worktree list``."""

    def __init__(self, path: Path, branch: str | None = None, head: str | None = None,
                 detached: bool = False, bare: bool = False, is_main: bool = False):
        self.path = path
        self.branch = branch
        self.head = head
        self.detached = detached
        self.bare = bare
        self.is_main = is_main

    @property
    def name(self) -> str:
        """Directory name of the worktree."""
        return self.path.name

    @property
    def exists(self) -> bool:
        """Check if worktree directory exists."""
        return FileUtils.directory_exists(self.path)

    @property
    def display_branch(self) -> str:
        """Branch label used when listing."""
        if self.detached:
            return "HEAD (detached)"
        if self.bare:
            return "(bare)"
        return self.branch or ""

    @property
    def has_changes(self) -> bool:
        """Check if worktree has uncommitted changes."""
        if self.exists:
            return GitUtils.has_uncommitted_changes(self.path)
        return False

    def __str__(self) -> str:
        return f"Worktree(branch={self.display_branch}, path={self.path})"

    def __repr__(self) -> str:
        return (f"Worktree(path='{self.path}', branch='{self.branch}', "
                f"head='{self.head}', detached={self.detached}, bare={self.bare})")


def parse_worktree_porcelain(output: str) -> list[Worktree]:
    """Parse ``git worktree list --porcelain`` output.

    Records are separated by blank lines; each starts with a ``worktree <path>``
    line followed by ``HEAD``, ``branch``, ``detached`` or ``bare`` attributes.
    The first record is always the main working tree.
    """
    worktrees: list[Worktree] = []
    current: Worktree | None = None

    for line in output.splitlines():
        if not line.strip():
            current = None
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            current = Worktree(path=Path(value), is_main=not worktrees)
            worktrees.append(current)
        elif current is None:
            continue
        elif key == "HEAD":
            current.head = value
        elif key == "branch":
            current.branch = value.removeprefix(BRANCH_REF_PREFIX)
        elif key == "detached":
            current.detached = True
        elif key == "bare":
            current.bare = True

    return worktrees


class WorktreeManager:
    """Manager for the git worktrees of one repository."""

    def __init__(self, base_repo_path: str | Path, worktree_base_path: str | Path):
        """Initialize worktree manager.

        Args:
            base_repo_path: Path to a checkout of the git repository
            worktree_base_path: Base directory where worktrees will be created
        """
        self.base_repo_path = Path(base_repo_path)
        self.worktree_base_path = Path(worktree_base_path)

        if not GitUtils.is_git_repo(self.base_repo_path):
            raise RuntimeError(f"Path {self.base_repo_path} is not a git repository")

    def worktree_path(self, branch: str) -> Path:
        """Path a worktree for ``branch`` is created at."""
        return self.worktree_base_path / branch

    def create_worktree(self, branch: str, base_branch: str) -> Worktree:
        """Create a worktree for ``branch``, creating the branch if it is new.

        Args:
            branch: Branch to check out (and directory name of the worktree)
            base_branch: Branch the new branch starts from when it does not exist

        Returns:
            Worktree instance
        """
        FileUtils.create_directory(self.worktree_base_path)
        logger.info(f"Ensured worktree base directory: {self.worktree_base_path}")

        worktree_path = self.worktree_path(branch)
        logger.info(f"Worktree path will be: {worktree_path}")

        if GitUtils.branch_exists(self.base_repo_path, branch):
            logger.info(f"Branch {branch} already exists, adding worktree for it")
            try:
                GitUtils.add_worktree(self.base_repo_path, worktree_path, branch)
            except GitCommandError as e:
                raise RuntimeError(
                    f"Could not create worktree for existing branch {branch}: {e.stderr.strip()}"
                )
        else:
            logger.info(f"Creating new branch {branch} from {base_branch}")
            try:
                GitUtils.add_worktree(self.base_repo_path, worktree_path, branch, base_branch)
            except GitCommandError as e:
                raise RuntimeError(
                    f"Could not create new worktree and branch {branch}: {e.stderr.strip()}"
                )

        logger.info("Worktree creation completed")
        return Worktree(path=worktree_path, branch=branch)

    def list_worktrees(self) -> list[Worktree]:
        """List every worktree git knows about, including stale ones."""
        output = GitUtils.list_worktrees_porcelain(self.base_repo_path)
        return parse_worktree_porcelain(output)

    def find_by_branch(self, branch: str) -> Worktree | None:
        """Get the worktree that has ``branch`` checked out."""
        for worktree in self.list_worktrees():
            if worktree.branch == branch:
                return worktree
        return None

    def prune_stale(self) -> list[Path]:
        """Prune metadata of worktrees whose directory no longer exists.

        Returns:
            Paths of the stale entries that were pruned
        """
        stale = [wt.path for wt in self.list_worktrees() if not wt.bare and not wt.exists]
        if stale:
            logger.info(f"Pruning {len(stale)} stale worktree reference(s)")
            GitUtils.prune_worktrees(self.base_repo_path)
        return stale

    def find_removal_candidates(self) -> list[RemovalCandidate]:
        """Live worktrees whose branch upstream is gone."""
        candidates = []
        for branch in GitUtils.list_gone_branches(self.base_repo_path):
            worktree = self.find_by_branch(branch)
            if worktree is not None and worktree.exists:
                candidates.append(RemovalCandidate(branch=branch, path=worktree.path))
        return candidates

    def clean(self) -> CleanReport:
        """Prune stale references and report worktrees that may be removed."""
        pruned = self.prune_stale()
        return CleanReport(pruned_paths=pruned, candidates=self.find_removal_candidates())

    def remove_worktree(self, worktree_path: Path) -> bool:
        """Remove a worktree, deleting its directory if git refuses.

        Returns:
            True if the directory is gone afterwards
        """
        try:
            GitUtils.remove_worktree(self.base_repo_path, worktree_path)
        except GitCommandError as e:
            logger.warning(f"git worktree remove failed, deleting directory: {e.stderr.strip()}")
            FileUtils.remove_directory(worktree_path, force=True)
        return not worktree_path.exists()
