"""Tests for utils.py module."""

from unittest.mock import patch

import pyperclip
import pytest

from gyz.models import UploadOutcome
from gyz.utils import (
    copy_to_clipboard,
    format_output,
    print_error,
    print_success,
    print_warning,
)


OUTCOMES = [
    UploadOutcome("photos/a.png", url="https://gyazo.com/aaa"),
    UploadOutcome("photos/b.png", error=RuntimeError("failed")),
    UploadOutcome("photos/c.jpg", url="https://gyazo.com/ccc"),
]


class TestFormatOutput:
    """Tests for format_output function."""

    def test_plain(self):
        """Should list successful URLs only."""
        assert format_output(OUTCOMES, "plain") == "https://gyazo.com/aaa\nhttps://gyazo.com/ccc"

    def test_markdown(self):
        assert format_output(OUTCOMES, "markdown") == (
            "![a](https://gyazo.com/aaa)\n![c](https://gyazo.com/ccc)"
        )

    def test_html(self):
        assert format_output(OUTCOMES, "html") == (
            '<a href="https://gyazo.com/aaa">a.png</a>\n'
            '<a href="https://gyazo.com/ccc">c.jpg</a>'
        )

    def test_unknown_format_falls_back_to_plain(self):
        assert format_output(OUTCOMES, "xml") == format_output(OUTCOMES, "plain")


class TestCopyToClipboard:
    """Tests for copy_to_clipboard function."""

    @patch('gyz.utils.pyperclip.copy')
    def test_copies(self, mock_copy):
        assert copy_to_clipboard("text") is True
        mock_copy.assert_called_once_with("text")

    @patch('gyz.utils.pyperclip.copy', side_effect=pyperclip.PyperclipException("no clipboard"))
    def test_reports_failure(self, mock_copy):
        assert copy_to_clipboard("text") is False


class TestStatusMessages:
    """Tests for the Rich status helpers."""

    @pytest.mark.parametrize("printer", [print_success, print_error, print_warning])
    def test_markup_is_escaped(self, printer, capsys):
        """Should print bracketed text literally instead of parsing it as markup."""
        printer("bad value '[/]' in [bold]x")

        assert "'[/]' in [bold]x" in capsys.readouterr().err
