"""
Kunci Error Taxonomy

Every failure the credential store can report derives from KunciError.
Each class carries a short machine-readable ``kind`` so the presentation
layer can pick a colour or exit code, and a human-readable message that
is shown to the operator as-is.
"""

from typing import Optional

# ==============================================================================
# BASE CLASS
# ==============================================================================

class KunciError(Exception):
    """
    Base class for all Kunci errors.

    Attributes:
        kind (str): Error category, e.g. ``"decryption.auth_failed"``
        message (str): Human-readable description for the operator
    """

    kind = "error"
    default_message = "Unexpected vault error."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

# ==============================================================================
# CONFIGURATION ERRORS (fatal at startup)
# ==============================================================================

class ConfigError(KunciError):
    """Passphrase is unusable; no cipher can be constructed."""
    kind = "config"
    default_message = "Invalid vault configuration."


class MissingPassphraseError(ConfigError):
    kind = "config.missing"
    default_message = "Environment variable PASSWORD_MANAGER_KEY is not set."


class EmptyPassphraseError(ConfigError):
    kind = "config.empty"
    default_message = "PASSWORD_MANAGER_KEY must not be empty."

# ==============================================================================
# CRYPTOGRAPHIC ERRORS (recoverable, shown as feedback)
# ==============================================================================

class EncryptionError(KunciError):
    kind = "encryption"
    default_message = "Failed to encrypt password."


class DecryptionError(KunciError):
    """Decryption failed; the stored entry is left untouched."""
    kind = "decryption"
    default_message = "Failed to decrypt password."


class MalformedPayloadError(DecryptionError):
    kind = "decryption.malformed"
    default_message = "Encrypted data format is invalid."


class AuthenticationFailedError(DecryptionError):
    # Wrong key, tampered ciphertext or corrupted nonce all end up here
    kind = "decryption.auth_failed"
    default_message = "Failed to decrypt password."


class InvalidUtf8Error(DecryptionError):
    kind = "decryption.not_utf8"
    default_message = "Decrypted password is not valid UTF-8."


class FormatError(KunciError):
    kind = "format.invalid"
    default_message = "Encrypted data format is invalid."

# ==============================================================================
# STORAGE AND INPUT ERRORS
# ==============================================================================

class StorageError(KunciError):
    """Reading or writing the backing file failed."""
    kind = "io"
    default_message = "Backing file could not be accessed."


class EntryValidationError(KunciError):
    kind = "validation"
    default_message = "Account or password must not be empty."
