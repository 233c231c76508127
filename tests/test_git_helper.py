"""Tests for apicurate.git_helper module."""

from __future__ import annotations

import subprocess
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

from apicurate.git_helper import date_added, date_updated, git_log_date


class TestGitLogDate:
    """Tests for git_log_date function."""

    @patch("apicurate.git_helper.subprocess.run")
    def test_success(self, mock_run: MagicMock) -> None:
        """Test parsing an RFC 2822 author date."""
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="Wed, 15 Jan 2025 10:30:45 +0000\n",
        )
        result = git_log_date(Path("example.com/1.0/swagger.json"))
        assert result == datetime(2025, 1, 15, 10, 30, 45, tzinfo=timezone.utc)

    @patch("apicurate.git_helper.subprocess.run")
    def test_first_line_wins(self, mock_run: MagicMock) -> None:
        """Test that only the first commit is used."""
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="Wed, 15 Jan 2025 10:30:45 +0000\nTue, 14 Jan 2025 09:00:00 +0000\n",
        )
        result = git_log_date(Path("f.json"))
        assert result is not None
        assert result.day == 15

    @patch("apicurate.git_helper.subprocess.run")
    def test_not_in_git(self, mock_run: MagicMock) -> None:
        """Test when file is not tracked by git."""
        mock_run.return_value = MagicMock(returncode=0, stdout="")
        assert git_log_date(Path("f.json")) is None

    @patch("apicurate.git_helper.subprocess.run")
    def test_git_error(self, mock_run: MagicMock) -> None:
        """Test when git command returns error."""
        mock_run.return_value = MagicMock(returncode=128, stdout="")
        assert git_log_date(Path("f.json")) is None

    @patch("apicurate.git_helper.subprocess.run")
    def test_subprocess_error(self, mock_run: MagicMock) -> None:
        """Test when subprocess raises an error."""
        mock_run.side_effect = subprocess.SubprocessError("git not found")
        assert git_log_date(Path("f.json")) is None

    @patch("apicurate.git_helper.subprocess.run")
    def test_git_missing(self, mock_run: MagicMock) -> None:
        """Test when the git executable does not exist."""
        mock_run.side_effect = FileNotFoundError("git")
        assert git_log_date(Path("f.json")) is None

    @patch("apicurate.git_helper.subprocess.run")
    def test_parse_error(self, mock_run: MagicMock) -> None:
        """Test when timestamp parsing fails."""
        mock_run.return_value = MagicMock(returncode=0, stdout="invalid timestamp\n")
        assert git_log_date(Path("f.json")) is None

    @patch("apicurate.git_helper.subprocess.run")
    def test_command_arguments(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test that options go before the path separator."""
        mock_run.return_value = MagicMock(returncode=0, stdout="")
        git_log_date(Path("a/swagger.json"), "-1", cwd=tmp_path)

        args = mock_run.call_args[0][0]
        assert args == ["git", "log", "--format=%aD", "-1", "--", "a/swagger.json"]
        assert mock_run.call_args[1]["cwd"] == tmp_path


class TestDateHelpers:
    """Tests for date_added and date_updated."""

    @patch("apicurate.git_helper.subprocess.run")
    def test_date_added_follows_renames(self, mock_run: MagicMock) -> None:
        """Test that the adding commit is selected."""
        mock_run.return_value = MagicMock(returncode=0, stdout="")
        date_added(Path("f.json"))

        args = mock_run.call_args[0][0]
        assert "--follow" in args
        assert "--diff-filter=A" in args

    @patch("apicurate.git_helper.subprocess.run")
    def test_date_updated_latest_commit(self, mock_run: MagicMock) -> None:
        """Test that only the latest commit is requested."""
        mock_run.return_value = MagicMock(returncode=0, stdout="")
        date_updated(Path("f.json"))

        args = mock_run.call_args[0][0]
        assert "-1" in args
        assert "--follow" not in args
