"""
Kunci User Interface Components

This module provides display and interaction utilities for the Kunci
terminal session. It includes:
- The account list with a selection marker
- The detail view of the selected entry with a masked password
- The status line, notification area and per-mode instructions
- Clipboard copy with automatic clearing

Passwords are never printed by these helpers except through an explicit
feedback message requested by the operator.

Dependencies: pyperclip for cross-platform clipboard support
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import pyperclip

from .settings import CLIPBOARD_CLEAR_SECONDS, MASK_MAX_LENGTH, MASK_MIN_LENGTH
from .store import Entry

# ==============================================================================
# SESSION STATE TYPES
# ==============================================================================

class InputMode(Enum):
    NORMAL = "Normal"
    EDITING_ACCOUNT = "Input Account"
    EDITING_PASSWORD = "Input Password"


class FeedbackKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


# Console prefix used for each feedback kind
FEEDBACK_PREFIXES = {
    FeedbackKind.INFO: "[i]",
    FeedbackKind.SUCCESS: "[+]",
    FeedbackKind.ERROR: "[-]",
}

DEFAULT_HINT = "Use 'next'/'previous' to navigate, 'add' to create an entry."

INSTRUCTIONS = {
    InputMode.NORMAL: [
        "[Navigate] next (n) / previous (p) / select <number> (s)",
        "[Add] add (a)",
        "[View Password] view (v)  [Copy Password] copy (c)",
        "[Exit] exit (q)",
    ],
    InputMode.EDITING_ACCOUNT: [
        "Enter the account name.",
        "Enter to continue to the password.",
        "Ctrl+C to cancel.",
    ],
    InputMode.EDITING_PASSWORD: [
        "Enter the password.",
        "Enter to save the entry.",
        "Ctrl+C to cancel.",
    ],
}


@dataclass
class Feedback:
    text: str
    kind: FeedbackKind = FeedbackKind.INFO

    def render(self) -> str:
        return f"{FEEDBACK_PREFIXES[self.kind]} {self.text}"

# ==============================================================================
# ENTRY DISPLAY FUNCTIONS
# ==============================================================================

def mask_password(entry: Entry) -> str:
    """
    Build the masked stand-in for a stored password.

    The mask length follows the length of the encrypted payload, clamped
    to [MASK_MIN_LENGTH, MASK_MAX_LENGTH].
    """
    length = min(max(len(entry.password), MASK_MIN_LENGTH), MASK_MAX_LENGTH)
    return "*" * length


def format_status(total: int, mode: InputMode) -> str:
    return f"Total Entries: {total} | Mode: {mode.value}"


def display_accounts(entries: Sequence[Entry], selected: int = 0) -> None:
    """
    Display the account list with the selected row highlighted.

    Args:
        entries (Sequence[Entry]): Entries in storage order
        selected (int): Index of the highlighted entry

    Example Output:
           #  | Account
        ----------------
           1  | github
        >> 2  | gmail
    """
    if not entries:
        print("[-] No entries yet")
        print("[i] Type 'add' to create a new account")
        return

    number_width = max(len(str(len(entries))), 1) + 2
    account_width = max(len("Account"), max(len(e.account) for e in entries)) + 2

    print(f"   {'#'.ljust(number_width)}| Account")
    print('-' * (number_width + account_width + 5))

    for index, entry in enumerate(entries):
        marker = ">> " if index == selected else "   "
        print(f"{marker}{str(index + 1).ljust(number_width)}| {entry.account}")


def display_entry_detail(entry: Optional[Entry]) -> None:
    """Display the selected entry with its password masked."""
    print("=" * 50)
    if entry is None:
        print("No entries yet.")
        print("Type 'add' to create a new account.")
    else:
        print(f"Account:     {entry.account}")
        print(f"Password:    {mask_password(entry)} (encrypted, hidden)")
        print("Type 'view' to show the real password in the notification.")
    print("=" * 50)


def display_feedback(feedback: Optional[Feedback]) -> None:
    if feedback is None:
        print(f"[i] {DEFAULT_HINT}")
    else:
        print(feedback.render())


def display_instructions(mode: InputMode) -> None:
    for line in INSTRUCTIONS[mode]:
        print(f"  {line}")


def display_screen(entries: Sequence[Entry], selected: int, mode: InputMode,
                   feedback: Optional[Feedback]) -> None:
    """Render the full session view: status, notification, list, detail and instructions."""
    print(format_status(len(entries), mode))
    display_feedback(feedback)
    print()
    display_accounts(entries, selected)
    print()
    display_entry_detail(entries[selected] if entries else None)
    display_instructions(mode)

# ==============================================================================
# CLIPBOARD MANAGEMENT
# ==============================================================================

def copy_to_clipboard(text: str, timeout: int = CLIPBOARD_CLEAR_SECONDS) -> bool:
    """
    Copy text to the system clipboard with auto-clear.

    The clipboard is cleared after ``timeout`` seconds, but only if it
    still holds ``text``. A timeout of 0 disables clearing.

    Returns:
        bool: True if the text was copied, False otherwise
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        print(f"[-] Clipboard error: {e}")
        return False

    if timeout > 0:
        def clear_later():
            time.sleep(timeout)
            try:
                if pyperclip.paste() == text:
                    pyperclip.copy("")
            except pyperclip.PyperclipException:
                # clipboard went away; nothing left to clear
                pass

        # Daemon so a pending clear never blocks exit
        clear_thread = threading.Thread(target=clear_later)
        clear_thread.daemon = True
        clear_thread.start()

    return True
