"""Tests for opening bookmarks in an external browser."""
import subprocess
import pytest
from unittest.mock import patch

from unimark.exceptions import LaunchError
from unimark.launcher import build_command, open_url


class TestBuildCommand:

    def test_single_word(self):
        assert build_command("http://a", "xdg-open") == ["xdg-open", "http://a"]

    def test_multi_word(self):
        assert build_command("http://a", "cmd /c start") == ["cmd", "/c", "start", "http://a"]

    def test_quoted_program(self):
        assert build_command("http://a", '"/opt/My Browser/browser" --new-tab') == [
            "/opt/My Browser/browser", "--new-tab", "http://a"
        ]

    @pytest.mark.parametrize("command", ["", "   ", None])
    def test_empty_command(self, command):
        with pytest.raises(LaunchError, match="set-browser"):
            build_command("http://a", command)


class TestOpenUrl:

    @patch("subprocess.Popen")
    def test_starts_detached_process(self, mock_popen):
        open_url("http://a", "firefox --new-tab")

        args, kwargs = mock_popen.call_args
        assert args[0] == ["firefox", "--new-tab", "http://a"]
        assert kwargs["stdout"] == subprocess.DEVNULL

    @patch("subprocess.Popen", side_effect=FileNotFoundError("no such file"))
    def test_missing_program(self, mock_popen):
        with pytest.raises(LaunchError, match="could not start 'nonexistent-browser'"):
            open_url("http://a", "nonexistent-browser")
