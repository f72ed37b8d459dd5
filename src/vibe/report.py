"""Line-count report over the files tracked by git."""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from .config import Config
from .utils import FileUtils, GitUtils

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Size tier of a file."""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class FileLineCount(BaseModel):
    """Line count of one tracked file."""
    path: str
    lines: int
    severity: Severity


def classify(lines: int, red_threshold: int = 500, yellow_threshold: int = 400) -> Severity:
    """Bucket a line count into a tier."""
    if lines > red_threshold:
        return Severity.RED
    if lines > yellow_threshold:
        return Severity.YELLOW
    return Severity.GREEN


def line_count_report(repo_path: Path, config: Config | None = None,
                      severity: Severity | None = None) -> list[FileLineCount]:
    """Count lines of tracked files, largest first.

    Args:
        repo_path: Worktree to inspect
        config: Thresholds and excluded extensions
        severity: Only keep files in this tier

    Returns:
        Counts sorted by line count, descending
    """
    config = config or Config()
    excluded = set(config.excluded_extensions)
    counts = []

    for name in GitUtils.list_tracked_files(repo_path):
        path = repo_path / name
        if Path(name).suffix.lower() in excluded or not path.is_file():
            continue
        try:
            lines = FileUtils.count_lines(path)
        except OSError as e:
            logger.warning(f"Skipping unreadable file {name}: {e}")
            continue
        tier = classify(lines, config.red_threshold, config.yellow_threshold)
        if severity is None or tier == severity:
            counts.append(FileLineCount(path=name, lines=lines, severity=tier))

    counts.sort(key=lambda c: (-c.lines, c.path))
    return counts
