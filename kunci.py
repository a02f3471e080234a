#!/usr/bin/env python3
"""
Kunci Password Manager v1.0.0
A small terminal credential vault. Account/password pairs are kept in a
flat text file with every password encrypted by AES-256-GCM under a key
derived from the PASSWORD_MANAGER_KEY passphrase.
"""

# ==============================================================================
# STANDARD LIBRARY IMPORTS
# ==============================================================================
import argparse
import logging
import sys
from typing import Optional

# ==============================================================================
# THIRD-PARTY LIBRARY IMPORTS
# ==============================================================================
from prompt_toolkit import prompt
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.validation import ValidationError, Validator

# ==============================================================================
# CUSTOM MODULE IMPORTS
# ==============================================================================
from kunci_core import crypto, settings, store, ui
from kunci_core.errors import (
    ConfigError,
    DecryptionError,
    EncryptionError,
    EntryValidationError,
    StorageError,
)
from kunci_core.ui import Feedback, FeedbackKind, InputMode

logger = logging.getLogger("kunci")

# ==============================================================================
# CONSTANTS
# ==============================================================================

MAIN_MENU_INTERACTIVE = """
Kunci Password Manager - available commands:

'add' (a)           - Add a new account (prompts for account and password)
'list' (l)          - Show all stored accounts
'next' (n, down)    - Select the next account
'previous' (p, up)  - Select the previous account
'select' (s) <num>  - Select an account by its number
'view' (v)          - Show the password of the selected account
'copy' (c)          - Copy the password of the selected account to the clipboard
'help' (h)          - Show this help message
'exit' (quit, q)    - Exit the program

Use the arrow keys for command history.
"""

# Command aliases for user convenience (full names and abbreviations)
COMMAND_ALIASES = {
    'add': 'add',
    'list': 'list',
    'next': 'next',
    'previous': 'previous',
    'select': 'select',
    'view': 'view',
    'copy': 'copy',
    'help': 'help',
    'exit': 'exit',
    'quit': 'exit',

    # Abbreviations
    'a': 'add',
    'l': 'list',
    'n': 'next',
    'down': 'next',
    'p': 'previous',
    'up': 'previous',
    's': 'select',
    'v': 'view',
    'c': 'copy',
    'h': 'help',
    'q': 'exit',
}

# ==============================================================================
# VALIDATORS
# ==============================================================================

class NumberValidator(Validator):
    """Validator for numeric input fields."""

    def validate(self, document):
        text = document.text
        if text and not text.isdigit():
            raise ValidationError(message='Please enter a valid number')

# ==============================================================================
# MAIN KUNCI CLASS
# ==============================================================================

class Kunci:
    """
    Interactive session over an open credential vault.

    Tracks the selected entry, the current input mode and the last
    notification shown to the operator. All vault access goes through
    CredentialVault.
    """

    def __init__(self, vault: store.CredentialVault):
        self.vault = vault
        self.selected = 0
        self.input_mode = InputMode.NORMAL
        self.feedback: Optional[Feedback] = None
        self.history = InMemoryHistory()
        self.auto_suggest = AutoSuggestFromHistory()
        self.completer = WordCompleter(sorted(COMMAND_ALIASES), ignore_case=True)

    def set_feedback(self, text: str, kind: FeedbackKind = FeedbackKind.INFO) -> None:
        self.feedback = Feedback(text, kind)

    # ==========================================================================
    # COMMAND RESOLUTION AND PROMPT FORMATTING
    # ==========================================================================

    def _resolve_command(self, command_input: str) -> Optional[str]:
        """
        Resolve user input to a command using aliases and prefix matching.

        Returns:
            str or None: Resolved command name, or None if unknown/ambiguous
        """
        if not command_input:
            return None

        command_input = command_input.strip().lower()

        if command_input in COMMAND_ALIASES:
            return COMMAND_ALIASES[command_input]

        matches = sorted({COMMAND_ALIASES[cmd] for cmd in COMMAND_ALIASES
                          if cmd.startswith(command_input)})

        if len(matches) == 1:
            return matches[0]
        elif len(matches) > 1:
            self.set_feedback(
                f"Ambiguous command '{command_input}'. Could be: {', '.join(matches)}",
                FeedbackKind.ERROR,
            )
            return None

        self.set_feedback(
            f"Unknown command: '{command_input}'. Type 'help' for available commands",
            FeedbackKind.ERROR,
        )
        return None

    def _format_prompt(self) -> str:
        return f"kunci@{len(self.vault)}/> "

    # ==========================================================================
    # NAVIGATION
    # ==========================================================================

    def next(self) -> None:
        """Move the selection down, wrapping to the first entry."""
        if not len(self.vault):
            return
        self.selected = (self.selected + 1) % len(self.vault)

    def previous(self) -> None:
        """Move the selection up, wrapping to the last entry."""
        if not len(self.vault):
            return
        self.selected = (self.selected - 1) % len(self.vault)

    def select(self, number: Optional[str] = None) -> None:
        """Select an entry by its 1-based number as shown in the list."""
        if number is None:
            try:
                number = prompt("Entry number: ", validator=NumberValidator()).strip()
            except (KeyboardInterrupt, EOFError):
                return

        if not number.isdigit() or not 1 <= int(number) <= len(self.vault):
            self.set_feedback("Invalid entry number", FeedbackKind.ERROR)
            return

        self.selected = int(number) - 1

    # ==========================================================================
    # ENTRY OPERATIONS
    # ==========================================================================

    def add_entry(self) -> bool:
        """
        Prompt for a new account and password and store them.

        Blank input re-prompts; Ctrl+C or Ctrl+D cancels back to normal mode.

        Returns:
            bool: True if the entry was added and saved
        """
        try:
            while True:
                self.input_mode = InputMode.EDITING_ACCOUNT
                ui.display_instructions(self.input_mode)
                account = prompt("New entry - Account: ")

                self.input_mode = InputMode.EDITING_PASSWORD
                ui.display_instructions(self.input_mode)
                password = prompt("New entry - Password: ", is_password=True)

                try:
                    self.vault.add_entry(account, password)
                except EntryValidationError as e:
                    print(f"[-] {e.message}")
                    print("[i] Press Ctrl+C to cancel")
                    continue
                break
        except (KeyboardInterrupt, EOFError):
            self.set_feedback("Add cancelled")
            return False
        except EncryptionError as e:
            self.set_feedback(e.message, FeedbackKind.ERROR)
            return False
        except StorageError as e:
            self.set_feedback(f"Error saving entry: {e.message}", FeedbackKind.ERROR)
            return False
        finally:
            self.input_mode = InputMode.NORMAL

        self.set_feedback("Entry added and password encrypted.", FeedbackKind.SUCCESS)
        return True

    def _reveal_selected(self) -> Optional[str]:
        if not len(self.vault):
            self.set_feedback("No entries yet", FeedbackKind.ERROR)
            return None

        try:
            return self.vault.reveal_password(self.selected)
        except DecryptionError as e:
            self.set_feedback(e.message, FeedbackKind.ERROR)
            return None

    def view_password(self) -> None:
        """Show the selected entry's password in the notification area."""
        plain = self._reveal_selected()
        if plain is None:
            return

        account = self.vault.list_entries()[self.selected].account
        self.set_feedback(f"Password for {account}: {plain}")

    def copy_password(self) -> None:
        plain = self._reveal_selected()
        if plain is None:
            return

        if ui.copy_to_clipboard(plain):
            self.set_feedback(
                f"Password copied to clipboard (will clear in {settings.CLIPBOARD_CLEAR_SECONDS} seconds)",
                FeedbackKind.SUCCESS,
            )
        else:
            self.set_feedback("Failed to copy password to clipboard", FeedbackKind.ERROR)

    # ==========================================================================
    # SESSION LOOP
    # ==========================================================================

    def render(self) -> None:
        ui.display_screen(self.vault.list_entries(), self.selected, self.input_mode, self.feedback)

    def dispatch(self, line: str) -> bool:
        """
        Run one command line.

        Returns:
            bool: False when the session should end
        """
        command_input, _, argument = line.strip().partition(" ")
        resolved_command = self._resolve_command(command_input)

        if not resolved_command:
            return True

        if resolved_command == 'help':
            print(MAIN_MENU_INTERACTIVE)
        elif resolved_command == 'add':
            self.add_entry()
        elif resolved_command == 'list':
            ui.display_accounts(self.vault.list_entries(), self.selected)
        elif resolved_command == 'next':
            self.next()
        elif resolved_command == 'previous':
            self.previous()
        elif resolved_command == 'select':
            self.select(argument.strip() or None)
        elif resolved_command == 'view':
            self.view_password()
        elif resolved_command == 'copy':
            self.copy_password()
        elif resolved_command == 'exit':
            return False

        return True

    def run(self) -> None:
        """Interactive command loop; returns when the operator exits."""
        self.render()
        while True:
            try:
                selection = prompt(
                    self._format_prompt(),
                    history=self.history,
                    auto_suggest=self.auto_suggest,
                    completer=self.completer,
                ).strip()
            except KeyboardInterrupt:
                print("\n[i] Press Ctrl+D to exit or type 'exit'")
                continue
            except EOFError:
                break

            if selection == "":
                continue

            if not self.dispatch(selection):
                break

            self.render()

        print("[+] Kunci vault closed")

# ==============================================================================
# STARTUP HELPERS
# ==============================================================================

def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    )


def open_vault(data_file: str, cipher: crypto.CipherEngine) -> store.CredentialVault:
    """Open the vault, falling back to an empty one if the file cannot be loaded."""
    try:
        vault = store.CredentialVault.open(data_file, cipher)
    except StorageError as e:
        print(f"[-] Error loading entries: {e.message}")
        return store.CredentialVault(data_file, cipher)

    logger.debug("Opened %s with %d entries", data_file, len(vault))
    return vault


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Kunci is a personal credential vault that keeps account/password pairs "
                    "in a flat file, encrypting each password with a key derived from "
                    f"the {settings.PASSPHRASE_ENV_VAR} passphrase.",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--data-file',
        default=settings.DEFAULT_DATA_FILE,
        help=f'Backing file path (default: {settings.DEFAULT_DATA_FILE})'
    )
    parser.add_argument(
        '--env-file',
        help='Read the passphrase from this .env file (default: ./.env if present)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    subparsers = parser.add_subparsers(
        dest='command',
        help='Available operations'
    )

    subparsers.add_parser('open', help='Open the interactive session (default)')
    subparsers.add_parser('list', help='List stored accounts')

    reveal_parser = subparsers.add_parser('reveal', help='Print the password of one entry')
    reveal_parser.add_argument('number', type=int, help='Entry number as shown by list')
    reveal_parser.add_argument(
        '--copy',
        action='store_true',
        help='Copy to the clipboard instead of printing'
    )

    add_parser = subparsers.add_parser('add', help='Add an entry (password is prompted)')
    add_parser.add_argument('--account', required=True, help='Account name')

    subparsers.add_parser('migrate', help='Encrypt legacy plaintext entries and exit')

    return parser

# ==============================================================================
# COMMAND HANDLERS
# ==============================================================================

def run_migrate(data_file: str, cipher: crypto.CipherEngine) -> int:
    try:
        entries, migrated = store.load_entries(data_file, cipher)
        if migrated:
            store.save_entries(data_file, entries)
    except StorageError as e:
        print(f"[-] {e.message}")
        return 1

    if migrated:
        print(f"[+] Legacy entries encrypted and saved to {data_file}")
    else:
        print(f"[i] All {len(entries)} entries are already encrypted")
    return 0


def run_reveal(vault: store.CredentialVault, number: int, copy: bool) -> int:
    try:
        plain = vault.reveal_password(number - 1)
    except IndexError:
        print(f"[-] No entry number {number}")
        return 1
    except DecryptionError as e:
        print(f"[-] {e.message}")
        return 1

    if copy:
        if not ui.copy_to_clipboard(plain):
            return 1
        print(f"[+] Password copied to clipboard (will clear in {settings.CLIPBOARD_CLEAR_SECONDS} seconds)")
    else:
        print(plain)
    return 0


def run_add(vault: store.CredentialVault, account: str) -> int:
    try:
        password = prompt("Password: ", is_password=True)
    except (KeyboardInterrupt, EOFError):
        print("\n[-] Add cancelled")
        return 1

    try:
        vault.add_entry(account, password)
    except (EntryValidationError, EncryptionError) as e:
        print(f"[-] {e.message}")
        return 1
    except StorageError as e:
        print(f"[-] Error saving entry: {e.message}")
        return 1

    print("[+] Entry added and password encrypted.")
    return 0

# ==============================================================================
# MAIN ENTRY POINT
# ==============================================================================

def main(argv=None) -> int:
    """Main entry point for Kunci."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        key = crypto.derive_key(settings.read_passphrase(args.env_file))
    except ConfigError as e:
        print(f"[-] {e.message}")
        return 1

    cipher = crypto.CipherEngine(key)

    if args.command == 'migrate':
        return run_migrate(args.data_file, cipher)

    vault = open_vault(args.data_file, cipher)

    try:
        if args.command == 'list':
            ui.display_accounts(vault.list_entries())
        elif args.command == 'reveal':
            return run_reveal(vault, args.number, args.copy)
        elif args.command == 'add':
            return run_add(vault, args.account)
        else:
            Kunci(vault).run()
    except KeyboardInterrupt:
        print("\n[-] Operation cancelled.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
