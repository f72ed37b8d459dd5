"""Tests for branch name generation."""

from unittest.mock import Mock, patch

import pytest
from claude_code_sdk import ClaudeSDKError

from vibe.assistant import ClaudeAssistant
from vibe.naming import (
    NAMING_PROMPT,
    fallback_branch_name,
    generate_branch_name,
    is_valid_branch_name,
    sanitize_branch_name,
)


@pytest.fixture
def available_assistant():
    assistant = Mock(spec=ClaudeAssistant)
    assistant.is_available.return_value = True
    return assistant


class TestFallbackBranchName:
    """Test cases for the mechanical fallback."""

    def test_punctuation_is_dropped(self):
        assert fallback_branch_name("Add User Auth!!") == "add-user-auth"

    def test_truncated_to_twenty_without_trailing_hyphen(self):
        name = fallback_branch_name("implement the user authentication flow")
        assert name == "implement-the-user-a"
        assert len(name) <= 20

        # Cut lands right after a word, the hyphen is stripped
        assert fallback_branch_name("implement the users flow") == "implement-the-users"

    def test_repeated_spaces_collapse(self):
        assert fallback_branch_name("fix   login  bug") == "fix-login-bug"

    def test_leading_space_does_not_leave_hyphen(self):
        assert fallback_branch_name(" !fix bug") == "fix-bug"

    @pytest.mark.parametrize("task", [
        "ADD USER AUTH",
        "FIX THE VERY LONG LOGIN BUG IN PRODUCTION",
        " LEADING AND TRAILING ",
        "A B C D E F G H I J K L",
        "X",
    ])
    def test_uppercase_tasks_give_clean_names(self, task):
        name = fallback_branch_name(task)
        assert name == name.lower()
        assert 0 < len(name) <= 20
        assert not name.startswith("-") and not name.endswith("-")
        assert " " not in name

    @pytest.mark.parametrize("task", ["!!!", "日本語のタスク", "---", "🙂"])
    def test_never_empty(self, task):
        name = fallback_branch_name(task)
        assert name.startswith("task-")
        assert is_valid_branch_name(name)

    def test_custom_max_length(self):
        assert fallback_branch_name("add user auth", max_length=8) == "add-user"


class TestSanitize:
    """Test cases for cleaning assistant output."""

    def test_sanitize_assistant_output(self):
        assert sanitize_branch_name("Add_User Auth\n") == "add-user-auth"

    def test_sanitize_strips_quotes_and_hyphens(self):
        assert sanitize_branch_name("`--fix--login--`") == "fix-login"

    def test_validation(self):
        assert is_valid_branch_name("fix-login")
        assert not is_valid_branch_name("")
        assert not is_valid_branch_name("-fix")
        assert not is_valid_branch_name("a" * 21)
        assert not is_valid_branch_name("Fix")


class TestGenerateBranchName:
    """Test cases for the two-tier generator."""

    def test_empty_task_rejected(self):
        with pytest.raises(ValueError, match="No task description provided"):
            generate_branch_name("   ")

    def test_no_assistant_uses_fallback(self, mock_assistant):
        assert generate_branch_name("Add User Auth!!", mock_assistant) == "add-user-auth"
        mock_assistant.suggest.assert_not_called()

    def test_assistant_name_used(self, available_assistant):
        available_assistant.suggest.return_value = "User-Auth\n"

        assert generate_branch_name("Add User Auth!!", available_assistant) == "user-auth"
        available_assistant.suggest.assert_called_once_with(
            NAMING_PROMPT.format(task="Add User Auth!!")
        )

    def test_too_long_assistant_name_discarded(self, available_assistant):
        available_assistant.suggest.return_value = "implement-user-authentication-flow"

        assert generate_branch_name("Add User Auth", available_assistant) == "add-user-auth"

    def test_failed_assistant_call_falls_back(self, available_assistant):
        available_assistant.suggest.return_value = None

        assert generate_branch_name("Add User Auth", available_assistant) == "add-user-auth"

    def test_blank_assistant_answer_falls_back(self, available_assistant):
        available_assistant.suggest.return_value = "!!!"

        assert generate_branch_name("Add User Auth", available_assistant) == "add-user-auth"

    def test_sdk_error_falls_back(self):
        assistant = ClaudeAssistant()

        with patch.object(ClaudeAssistant, "is_available", return_value=True), \
                patch.object(ClaudeAssistant, "ask", side_effect=ClaudeSDKError("bad message")):
            assert generate_branch_name("Add User Auth!!", assistant) == "add-user-auth"
