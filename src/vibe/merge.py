"""Interactive merge of the current worktree's branch into another worktree."""

import logging
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from .context import RepoContext
from .utils import FileUtils, GitUtils
from .worktree import Worktree, WorktreeManager

logger = logging.getLogger(__name__)

STASH_LABEL_PREFIX = "Auto-stash before merge"


class MergeOutcome(str, Enum):
    """How a merge run ended."""
    MERGED = "merged"
    CONFLICT = "conflict"


class MergeResult(BaseModel):
    """Summary of a merge run."""
    outcome: MergeOutcome
    strategy: str
    source_branch: str
    target_branch: str
    target_path: Path
    stash_label: str | None = None
    stash_restored: bool = False
    source_removed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.outcome == MergeOutcome.MERGED


def parse_selection(selection: str, count: int) -> int:
    """Turn a 1-based menu answer into a list index."""
    try:
        index = int(selection.strip())
    except ValueError:
        raise ValueError("Invalid selection")
    if not 1 <= index <= count:
        raise ValueError("Invalid selection")
    return index - 1


class MergeFlow:
    """Merge (or rebase) the current branch into a worktree the user picks.

    Args:
        context: Repository context of the source worktree
        choose: Shows the candidates and returns the raw 1-based answer
        confirm: Asks a yes/no question, used before removing the source worktree
    """

    def __init__(self, context: RepoContext,
                 choose: Callable[[list[Worktree]], str],
                 confirm: Callable[[str], bool]):
        self.context = context
        self.choose = choose
        self.confirm = confirm
        self.strategy = context.config.merge_strategy
        self.worktree_manager = WorktreeManager(context.repo_path, context.worktree_base)

    def current_branch(self) -> str:
        """Branch being merged; a detached HEAD cannot be merged."""
        branch = GitUtils.get_current_branch(self.context.repo_path)
        if not branch:
            raise RuntimeError("You are in detached HEAD state. Cannot merge.")
        return branch

    def candidates(self, current_branch: str) -> list[Worktree]:
        """Worktrees with a branch other than the current one."""
        candidates = [
            wt for wt in self.worktree_manager.list_worktrees()
            if wt.branch and wt.branch != current_branch
        ]
        if not candidates:
            raise RuntimeError("No other worktrees found to merge into")
        return candidates

    def select_target(self, candidates: list[Worktree]) -> Worktree:
        """Ask the user which worktree to merge into."""
        return candidates[parse_selection(self.choose(candidates), len(candidates))]

    def stash_if_dirty(self, target: RepoContext) -> str | None:
        """Stash uncommitted changes in the target, returning the stash label."""
        if not GitUtils.has_uncommitted_changes(target.repo_path):
            return None
        label = f"{STASH_LABEL_PREFIX} {int(time.time())}"
        logger.info(f"Stashing uncommitted changes in {target.repo_path}: {label}")
        GitUtils.stash_push(target.repo_path, label)
        return label

    def restore_stash(self, target: RepoContext, label: str) -> bool:
        """Pop the stash entry created for this merge."""
        ref = GitUtils.find_stash(target.repo_path, label)
        if ref is None:
            logger.warning(f"Stash '{label}' not found, leaving stash list untouched")
            return False
        GitUtils.stash_pop(target.repo_path, ref)
        return True

    def remove_source(self, target: RepoContext, source_branch: str) -> bool:
        """Remove the source worktree if the user agrees.

        Removal runs from the target worktree. The main working tree holds the
        repository itself and is never removed.
        """
        if not self.confirm("Remove source worktree folder?"):
            return False
        manager = WorktreeManager(target.repo_path, target.worktree_base)
        source = manager.find_by_branch(source_branch)
        if source is None or not source.exists:
            return False
        if source.is_main:
            logger.warning(f"Not removing main working tree {source.path}")
            return False
        removed = manager.remove_worktree(source.path)
        if removed:
            logger.info(f"Removed worktree: {source.path}")
        return removed

    def run(self) -> MergeResult:
        """Run the whole flow."""
        source_branch = self.current_branch()
        logger.info(f"Current branch: {source_branch}")

        target_worktree = self.select_target(self.candidates(source_branch))
        if not FileUtils.is_enterable(target_worktree.path):
            raise RuntimeError(f"Could not change to target worktree {target_worktree.path}")
        target = self.context.at(target_worktree.path)
        logger.info(f"Merging {source_branch} into {target_worktree.branch} "
                    f"at {target_worktree.path} using {self.strategy}")

        result = MergeResult(
            outcome=MergeOutcome.CONFLICT,
            strategy=self.strategy,
            source_branch=source_branch,
            target_branch=target_worktree.branch,
            target_path=target_worktree.path,
        )
        result.stash_label = self.stash_if_dirty(target)

        if not GitUtils.combine(target.repo_path, source_branch, self.strategy):
            logger.warning(f"{self.strategy} of {source_branch} stopped with conflicts")
            return result

        result.outcome = MergeOutcome.MERGED
        if result.stash_label:
            result.stash_restored = self.restore_stash(target, result.stash_label)
        result.source_removed = self.remove_source(target, source_branch)
        return result
