"""Tests for the Claude Code wrapper."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from claude_code_sdk import AssistantMessage, CLINotFoundError, ProcessError, TextBlock

from vibe.assistant import ClaudeAssistant


def fake_query(*texts):
    """Build a stand-in for ``claude_code_sdk.query`` yielding one text message."""
    async def _query(prompt, options):
        message = Mock(spec=AssistantMessage)
        message.content = [Mock(spec=TextBlock, text=text) for text in texts]
        yield Mock()  # system/init message without content
        yield message
    return _query


def failing_query(error):
    async def _query(prompt, options):
        raise error
        yield  # pragma: no cover
    return _query


@pytest.fixture
def assistant():
    return ClaudeAssistant(cwd=Path("/repo"))


class TestClaudeAssistant:
    """Test cases for ClaudeAssistant."""

    def test_options(self, assistant):
        options = assistant.options
        assert options.max_turns == 1
        assert options.allowed_tools == []
        assert str(options.cwd) == "/repo"

    @patch("vibe.assistant.ProcessUtils.command_exists")
    def test_is_available(self, mock_exists, assistant):
        mock_exists.return_value = True
        assert assistant.is_available() is True
        mock_exists.assert_called_once_with("claude")

    @pytest.mark.asyncio
    async def test_ask_joins_text_blocks(self, assistant):
        with patch("vibe.assistant.query", fake_query("user-", "auth")):
            assert await assistant.ask("name it") == "user-auth"

    def test_suggest(self, assistant):
        with patch("vibe.assistant.query", fake_query("user-auth\n")):
            assert assistant.suggest("name it") == "user-auth\n"

    @pytest.mark.parametrize("error", [
        CLINotFoundError("Claude Code not found"),
        ProcessError("boom", exit_code=1),
    ])
    def test_suggest_failure_returns_none(self, assistant, error):
        with patch("vibe.assistant.query", failing_query(error)):
            assert assistant.suggest("name it") is None

    @patch("vibe.assistant.subprocess.run")
    def test_launch(self, mock_run, assistant):
        mock_run.return_value = Mock(returncode=0)

        assert assistant.launch("add user auth", Path("/work")) == 0
        mock_run.assert_called_once_with(
            ["claude", "--dangerously-skip-permissions", "add user auth"],
            cwd=Path("/work"),
            check=False,
        )

    @patch("vibe.assistant.subprocess.run")
    def test_launch_custom_command(self, mock_run):
        mock_run.return_value = Mock(returncode=2)
        assistant = ClaudeAssistant(command="my-claude", skip_permissions_flag="--yolo")

        assert assistant.launch("task", Path("/work")) == 2
        assert mock_run.call_args.args[0] == ["my-claude", "--yolo", "task"]
