"""Claude Code wrapper used for naming branches and working on tasks."""

import asyncio
import logging
import subprocess
from pathlib import Path

from claude_code_sdk import (
    AssistantMessage,
    ClaudeCodeOptions,
    CLIConnectionError,
    CLIJSONDecodeError,
    ClaudeSDKError,
    CLINotFoundError,
    ProcessError,
    TextBlock,
    query,
)

from .utils import ProcessUtils

# Set up logger
logger = logging.getLogger(__name__)


class ClaudeAssistant:
    """The ``claude`` command-line assistant."""

    def __init__(self, command: str = "claude",
                 skip_permissions_flag: str = "--dangerously-skip-permissions",
                 cwd: Path | None = None):
        """Initialize the assistant.

        Args:
            command: Executable name of the Claude Code CLI
            skip_permissions_flag: Flag that bypasses interactive permission prompts
            cwd: Working directory for one-shot queries
        """
        self.command = command
        self.skip_permissions_flag = skip_permissions_flag
        self.cwd = cwd

    @property
    def options(self) -> ClaudeCodeOptions:
        """Options for one-shot, tool-free queries."""
        return ClaudeCodeOptions(
            max_turns=1,
            allowed_tools=[],
            cwd=str(self.cwd) if self.cwd else None,
        )

    def is_available(self) -> bool:
        """Check if the assistant CLI is installed."""
        return ProcessUtils.command_exists(self.command)

    async def ask(self, prompt: str) -> str:
        """Send a single prompt and return the text of the answer."""
        output_parts = []
        async for message in query(prompt=prompt, options=self.options):
            if isinstance(message, AssistantMessage):
                for block in message.content:
                    if isinstance(block, TextBlock):
                        output_parts.append(block.text)
        return "".join(output_parts)

    def suggest(self, prompt: str) -> str | None:
        """Ask for a short answer, returning None if the assistant fails."""
        try:
            return asyncio.run(self.ask(prompt))
        except CLINotFoundError as e:
            logger.warning(f"Claude Code CLI not found: {e}")
        except (CLIConnectionError, ProcessError) as e:
            logger.warning(f"Claude Code query failed: {e}")
        except CLIJSONDecodeError as e:
            logger.warning(f"Could not decode Claude Code response: {e}")
        except ClaudeSDKError as e:
            logger.warning(f"Claude Code error: {e}")
        return None

    def launch(self, task: str, cwd: Path) -> int:
        """Run an interactive session on ``task`` and wait for it to exit.

        Returns:
            Exit code of the assistant process
        """
        cmd = [self.command, self.skip_permissions_flag, task]
        logger.info(f"Executing: {self.command} {self.skip_permissions_flag} {task!r}")
        result = subprocess.run(cmd, cwd=cwd, check=False)
        return result.returncode

    def __repr__(self) -> str:
        return f"ClaudeAssistant(command='{self.command}', available={self.is_available()})"
