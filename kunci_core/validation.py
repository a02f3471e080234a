"""
Kunci Validation Module
Input validation for new credential entries
"""

from typing import Tuple

from .errors import EntryValidationError


def check_entry_input(account: str, password: str) -> Tuple[bool, str]:
    """
    Check that an account/password pair is usable

    Returns:
        (is_valid, validation_message)
    """
    if not account.strip() or not password.strip():
        return False, "Account or password must not be empty."

    return True, "Entry is valid"


def validate_entry_input(account: str, password: str) -> Tuple[str, str]:
    """
    Trim and validate a new entry

    Returns:
        (account, password) with surrounding whitespace removed

    Raises:
        EntryValidationError: If either value is blank
    """
    is_valid, message = check_entry_input(account, password)
    if not is_valid:
        raise EntryValidationError(message)

    return account.strip(), password.strip()
