"""Configuration management for vibe."""

import os
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".vibe.toml"


class Config(BaseModel):
    """Configuration settings for vibe."""

    # Worktree settings
    worktree_base_path: Path = Field(default=Path(".."))
    max_branch_name_length: int = Field(default=20)

    # Tool settings
    default_editor: str = Field(default="nvim")
    default_shell: str = Field(default="/bin/bash")
    assistant_command: str = Field(default="claude")
    skip_permissions_flag: str = Field(default="--dangerously-skip-permissions")

    # Merge settings
    merge_strategy: Literal["rebase", "merge"] = Field(default="rebase")

    # Line-count report settings
    red_threshold: int = Field(default=500)
    yellow_threshold: int = Field(default=400)
    excluded_extensions: list[str] = Field(default_factory=lambda: [
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".svg", ".webp",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ])

    # Logging settings
    log_level: str = Field(default="WARNING", validate_default=True)
    log_file: Path | None = Field(default=None)

    model_config = ConfigDict(extra="forbid")

    @field_validator("log_level", mode="before")
    @classmethod
    def get_log_level(cls, v: str | None) -> str:
        """Let VIBE_LOG_LEVEL override the configured level."""
        v = os.getenv("VIBE_LOG_LEVEL") or v or "WARNING"
        return v.upper()

    @field_validator("excluded_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase extensions and make sure they carry a leading dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    def resolve_worktree_base(self, repo_path: Path) -> Path:
        """Directory new worktrees are created in, relative to the repository."""
        base = self.worktree_base_path.expanduser()
        if not base.is_absolute():
            base = repo_path / base
        return base.resolve()

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load_from_file(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from a TOML file, falling back to defaults."""
        if config_path and config_path.exists():
            with config_path.open("rb") as f:
                data = tomllib.load(f)
            return cls(**data.get("vibe", data))
        return cls()

    @classmethod
    def discover(cls, repo_path: Path) -> "Config":
        """Load ``.vibe.toml`` from the repository root if there is one."""
        return cls.load_from_file(repo_path / CONFIG_FILE_NAME)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()
