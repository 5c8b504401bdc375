import subprocess
from unittest.mock import MagicMock, patch

from inkpolish.core.input import ClipboardReader, SelectionReader, no_context
from inkpolish.utils import platform as platform_utils


def completed(stdout="", returncode=0):
    return MagicMock(stdout=stdout, returncode=returncode)


class TestPlatformCommands:
    def test_linux_commands(self):
        with patch.object(platform_utils, "get_platform", return_value="linux"):
            assert platform_utils.get_clipboard_command()[:3] == ["xclip", "-selection", "clipboard"]
            assert "primary" in platform_utils.get_selection_command()

    def test_macos_has_no_selection_reader(self):
        with patch.object(platform_utils, "get_platform", return_value="macos"):
            assert platform_utils.get_clipboard_command() == ["pbpaste"]
            assert platform_utils.get_selection_command() is None

    def test_unknown_platform(self):
        with patch.object(platform_utils, "get_platform", return_value="haiku"):
            assert platform_utils.get_clipboard_command() is None

    def test_subprocess_kwargs_on_windows(self):
        with patch.object(platform_utils, "get_platform", return_value="windows"):
            kwargs = platform_utils.get_subprocess_kwargs(text=True)
        assert kwargs["text"] is True
        assert "creationflags" in kwargs


class TestReaders:
    @patch("inkpolish.core.input.context.get_clipboard_command", return_value=["pbpaste"])
    @patch("inkpolish.core.input.context.subprocess.run")
    def test_clipboard_text_is_stripped(self, mock_run, _command):
        mock_run.return_value = completed("  copied text \n")

        assert ClipboardReader(timeout=0.5)() == "copied text"
        assert mock_run.call_args.kwargs["timeout"] == 0.5

    @patch("inkpolish.core.input.context.get_clipboard_command", return_value=["pbpaste"])
    @patch("inkpolish.core.input.context.subprocess.run")
    def test_empty_clipboard_is_none(self, mock_run, _command):
        mock_run.return_value = completed("   ")
        assert ClipboardReader()() is None

    @patch("inkpolish.core.input.context.get_clipboard_command", return_value=["pbpaste"])
    @patch("inkpolish.core.input.context.subprocess.run")
    def test_failed_command_is_none(self, mock_run, _command):
        mock_run.return_value = completed("error output", returncode=1)
        assert ClipboardReader()() is None

    @patch("inkpolish.core.input.context.get_selection_command", return_value=["xclip"])
    @patch("inkpolish.core.input.context.subprocess.run")
    def test_missing_tool_is_none(self, mock_run, _command):
        mock_run.side_effect = FileNotFoundError("xclip")
        assert SelectionReader()() is None

    @patch("inkpolish.core.input.context.get_clipboard_command", return_value=["pbpaste"])
    @patch("inkpolish.core.input.context.subprocess.run")
    def test_timeout_is_none(self, mock_run, _command):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="pbpaste", timeout=1)
        assert ClipboardReader()() is None

    @patch("inkpolish.core.input.context.get_selection_command", return_value=None)
    @patch("inkpolish.core.input.context.subprocess.run")
    def test_no_command_skips_subprocess(self, mock_run, _command):
        assert SelectionReader()() is None
        mock_run.assert_not_called()


def test_no_context():
    assert no_context() is None
