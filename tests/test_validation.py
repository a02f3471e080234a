"""Tests for new-entry validation."""

import pytest

from kunci_core.errors import EntryValidationError
from kunci_core.validation import check_entry_input, validate_entry_input


class TestCheckEntryInput:

    def test_valid(self):
        assert check_entry_input("gmail", "s3cr3t") == (True, "Entry is valid")

    @pytest.mark.parametrize("account, password", [
        ("", "pw"), ("gmail", ""), (" ", "pw"), ("gmail", "\n\t"),
    ])
    def test_blank(self, account, password):
        is_valid, message = check_entry_input(account, password)
        assert is_valid is False
        assert "must not be empty" in message


class TestValidateEntryInput:

    def test_trims(self):
        assert validate_entry_input("  gmail  ", " s3 cr3t ") == ("gmail", "s3 cr3t")

    def test_raises_on_blank(self):
        with pytest.raises(EntryValidationError, match="must not be empty"):
            validate_entry_input("gmail", "   ")
