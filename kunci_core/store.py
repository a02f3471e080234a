"""
Kunci Credential Store

This module owns the list of credential entries and its backing file.
The file is plain UTF-8 text with one entry per line:

    account,<base64 nonce>:<base64 ciphertext+tag>

Lines are split on the first comma only, so an account name containing
a comma shifts the remainder into the password field. Legacy lines whose
password is not in the encrypted shape are encrypted while loading; the
caller is expected to save straight away so the file reaches a fixed
point.

The file is rewritten in full on every mutation, without locking or a
temporary file. That is adequate for a personal vault of a few hundred
entries and is not safe against concurrent writers.
"""

import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .crypto import CipherEngine
from .errors import EncryptionError, StorageError
from .payload import EncryptedPassword, PlainPassword, classify
from .validation import validate_entry_input

logger = logging.getLogger(__name__)

# Separates the account from the password field on each line
FIELD_SEPARATOR = ","

# ==============================================================================
# ENTRY MODEL
# ==============================================================================

@dataclass(frozen=True)
class Entry:
    """One stored credential. The password is always held encrypted."""
    account: str
    password: EncryptedPassword

    def to_line(self) -> str:
        return f"{self.account}{FIELD_SEPARATOR}{self.password.payload}"

# ==============================================================================
# FILE OPERATIONS
# ==============================================================================

def load_entries(path: str, cipher: CipherEngine) -> Tuple[List[Entry], bool]:
    """
    Load entries from the backing file, encrypting any legacy passwords.

    Args:
        path (str): Backing file path
        cipher (CipherEngine): Engine used to encrypt legacy values

    Returns:
        Tuple[List[Entry], bool]: The entries in file order, and whether
        any legacy entry was migrated. A missing file yields ``([], False)``.

    Raises:
        StorageError: If the file cannot be read or decoded, or a legacy
            value cannot be encrypted. No partial result is returned.
    """
    entries: List[Entry] = []
    migrated = 0

    if not os.path.exists(path):
        logger.debug("Backing file %s does not exist, starting empty", path)
        return entries, False

    try:
        with open(path, "r", encoding="utf-8", newline="\n") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.rstrip("\n")
                if line.endswith("\r"):
                    line = line[:-1]

                account, separator, raw_password = line.partition(FIELD_SEPARATOR)
                if not separator:
                    logger.debug("Skipping line %d of %s: no field separator", line_number, path)
                    continue

                field = classify(raw_password)
                if isinstance(field, PlainPassword):
                    field = cipher.encrypt_field(field.value)
                    migrated += 1

                entries.append(Entry(account, field))
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Failed to read {path}: {exc}") from exc
    except EncryptionError as exc:
        raise StorageError(f"Failed to encrypt legacy entry in {path}: {exc.message}") from exc

    if migrated:
        logger.info("Encrypted %d legacy entries from %s", migrated, path)

    return entries, migrated > 0


def save_entries(path: str, entries: Iterable[Entry]) -> None:
    """
    Overwrite the backing file with the given entries.

    Raises:
        StorageError: If the file cannot be written
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            for entry in entries:
                f.write(entry.to_line() + "\n")
    except OSError as exc:
        raise StorageError(f"Failed to write {path}: {exc}") from exc

# ==============================================================================
# VAULT FACADE
# ==============================================================================

class CredentialVault:
    """
    In-memory credential list bound to its backing file.

    This is the interface used by the presentation layer:
    - list_entries(): read-only snapshot of the entries
    - add_entry(): validate, encrypt, append and persist
    - reveal_password(): decrypt one entry for display
    """

    def __init__(self, path: str, cipher: CipherEngine, entries: Optional[List[Entry]] = None):
        self.path = path
        self.cipher = cipher
        self._entries: List[Entry] = list(entries or [])

    @classmethod
    def open(cls, path: str, cipher: CipherEngine) -> "CredentialVault":
        """
        Load the vault from ``path`` and persist any migration right away.

        A failed migration save is logged and the encrypted entries are
        kept in memory; the next successful add rewrites the file.

        Raises:
            StorageError: If the backing file cannot be loaded
        """
        entries, migrated = load_entries(path, cipher)
        vault = cls(path, cipher, entries)

        if migrated:
            try:
                vault.save()
            except StorageError as exc:
                logger.error("Could not re-save migrated entries: %s", exc.message)

        return vault

    def __len__(self) -> int:
        return len(self._entries)

    def list_entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def add_entry(self, account: str, password: str) -> Entry:
        """
        Add a new credential and persist the vault.

        Args:
            account (str): Account name, trimmed before storing
            password (str): Plaintext password, trimmed before encrypting

        Returns:
            Entry: The stored entry

        Raises:
            EntryValidationError: If either value is blank; nothing changes
            EncryptionError: If encryption fails; nothing changes
            StorageError: If saving fails; the entry stays in memory so
                save() can be retried
        """
        account, password = validate_entry_input(account, password)
        entry = Entry(account, self.cipher.encrypt_field(password))

        self._entries.append(entry)
        self.save()
        return entry

    def reveal_password(self, index: int) -> str:
        """
        Decrypt the password of the entry at ``index``.

        Raises:
            IndexError: If there is no entry at ``index``
            DecryptionError: If the stored payload cannot be decrypted
        """
        if index < 0 or index >= len(self._entries):
            raise IndexError(f"No entry at index {index}")

        return self.cipher.decrypt_field(self._entries[index].password)

    def save(self) -> None:
        save_entries(self.path, self._entries)
