"""Tests for terminal display helpers and clipboard handling."""

from unittest.mock import patch

import pyperclip

from kunci_core import ui
from kunci_core.payload import EncryptedPassword
from kunci_core.store import Entry
from kunci_core.ui import Feedback, FeedbackKind, InputMode


def make_entry(account="gmail", payload="AAAA:BBBB"):
    return Entry(account, EncryptedPassword(payload))


class TestMaskPassword:

    def test_follows_payload_length(self):
        assert ui.mask_password(make_entry(payload="AAAA:BBBB")) == "*" * 9

    def test_capped(self):
        assert ui.mask_password(make_entry(payload="A" * 60)) == "*" * 32

    def test_at_least_one(self):
        assert ui.mask_password(make_entry(payload="")) == "*"


class TestFeedback:

    def test_prefixes(self):
        assert Feedback("hi").render() == "[i] hi"
        assert Feedback("done", FeedbackKind.SUCCESS).render() == "[+] done"
        assert Feedback("oops", FeedbackKind.ERROR).render() == "[-] oops"

    def test_default_hint(self, capsys):
        ui.display_feedback(None)
        assert ui.DEFAULT_HINT in capsys.readouterr().out


class TestDisplay:

    def test_status(self):
        assert ui.format_status(3, InputMode.EDITING_PASSWORD) == \
            "Total Entries: 3 | Mode: Input Password"

    def test_accounts_marks_selection(self, capsys):
        ui.display_accounts([make_entry("github"), make_entry("gmail")], selected=1)

        lines = capsys.readouterr().out.splitlines()
        assert lines[2].startswith("   1")
        assert "github" in lines[2]
        assert lines[3].startswith(">> 2")
        assert "gmail" in lines[3]

    def test_accounts_empty(self, capsys):
        ui.display_accounts([])
        assert "No entries yet" in capsys.readouterr().out

    def test_detail_hides_password(self, capsys):
        ui.display_entry_detail(make_entry(payload="SECRETPAYLOAD:XYZ"))

        out = capsys.readouterr().out
        assert "Account:     gmail" in out
        assert "SECRETPAYLOAD" not in out
        assert "*" * 17 in out

    def test_screen(self, capsys):
        ui.display_screen([make_entry()], 0, InputMode.NORMAL, Feedback("saved", FeedbackKind.SUCCESS))

        out = capsys.readouterr().out
        assert "Total Entries: 1 | Mode: Normal" in out
        assert "[+] saved" in out
        assert "[Exit] exit (q)" in out


class TestClipboard:

    @patch("kunci_core.ui.pyperclip.copy")
    def test_copy(self, mock_copy):
        assert ui.copy_to_clipboard("s3cr3t", timeout=0) is True
        mock_copy.assert_called_once_with("s3cr3t")

    @patch("kunci_core.ui.pyperclip.copy")
    def test_copy_failure(self, mock_copy, capsys):
        mock_copy.side_effect = pyperclip.PyperclipException("no clipboard")

        assert ui.copy_to_clipboard("s3cr3t", timeout=0) is False
        assert "Clipboard error" in capsys.readouterr().out

    @patch("kunci_core.ui.threading.Thread")
    @patch("kunci_core.ui.pyperclip.copy")
    def test_schedules_clear(self, mock_copy, mock_thread):
        ui.copy_to_clipboard("s3cr3t", timeout=5)

        mock_thread.return_value.start.assert_called_once()
