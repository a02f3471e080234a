"""
Cryptographic operations for Kunci.

This module provides:
- Key derivation: a single SHA-256 digest of the operator passphrase
- Authenticated encryption of individual passwords using AES-256-GCM

The key derivation is deliberately unsalted and un-iterated so that the
same passphrase always unlocks the same backing file. Each encryption
draws a fresh 96-bit nonce from os.urandom; nonces are never derived
from counters or user input.
"""

import hashlib
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import (
    AuthenticationFailedError,
    EmptyPassphraseError,
    EncryptionError,
    FormatError,
    InvalidUtf8Error,
    MalformedPayloadError,
    MissingPassphraseError,
)
from .payload import NONCE_SIZE, EncryptedPassword, decode_payload, encode_payload

# ==============================================================================
# CRYPTOGRAPHIC CONSTANTS
# ==============================================================================

# Size of encryption key in bytes (256 bits for AES-256)
KEY_SIZE = 32

# ==============================================================================
# KEY DERIVATION
# ==============================================================================

def derive_key(passphrase: Optional[str]) -> bytes:
    """
    Derive the vault key from the operator passphrase.

    The key is the SHA-256 digest of the UTF-8 passphrase bytes. The
    passphrase is only trimmed to check that it is not blank; the digest
    is taken over the passphrase exactly as supplied.

    Args:
        passphrase (str, optional): Passphrase read from the configured
            source, or None when the source is not set

    Returns:
        bytes: 32-byte AES-256 key

    Raises:
        MissingPassphraseError: If no passphrase was supplied
        EmptyPassphraseError: If the passphrase is blank after trimming
    """
    if passphrase is None:
        raise MissingPassphraseError()
    if not passphrase.strip():
        raise EmptyPassphraseError()

    try:
        encoded = passphrase.encode("utf-8")
    except UnicodeEncodeError as exc:
        # Non-UTF-8 environment bytes arrive as surrogate escapes; treat as unset
        raise MissingPassphraseError() from exc

    return hashlib.sha256(encoded).digest()

# ==============================================================================
# CIPHER ENGINE
# ==============================================================================

class CipherEngine:
    """
    AES-256-GCM encryption of single password values.

    Built once from the derived key and shared by the store and the
    presentation layer. Holds no state besides the AEAD instance.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError("Encryption key must be 32 bytes for AES-256")
        self._aead = AESGCM(key)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a password and return its on-disk payload.

        Args:
            plaintext (str): Password to encrypt

        Returns:
            str: ``"<b64 nonce>:<b64 ciphertext+tag>"``

        Raises:
            EncryptionError: If the value cannot be encoded or the AEAD
                backend rejects it
        """
        nonce = os.urandom(NONCE_SIZE)
        try:
            ciphertext = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        except (UnicodeEncodeError, OverflowError, ValueError) as exc:
            raise EncryptionError(f"Failed to encrypt password: {exc}") from exc

        return encode_payload(nonce, ciphertext)

    def decrypt(self, payload: str) -> str:
        """
        Decrypt an on-disk payload back into the password.

        Args:
            payload (str): Encoded ``nonce:ciphertext`` string

        Returns:
            str: The decrypted password

        Raises:
            MalformedPayloadError: If the payload cannot be decoded
            AuthenticationFailedError: If tag verification fails (wrong
                key, tampered ciphertext or corrupted nonce)
            InvalidUtf8Error: If the decrypted bytes are not valid UTF-8
        """
        try:
            nonce, ciphertext = decode_payload(payload)
        except FormatError as exc:
            raise MalformedPayloadError(exc.message) from exc

        try:
            plaintext = self._aead.decrypt(nonce, ciphertext, None)
        except InvalidTag as exc:
            raise AuthenticationFailedError() from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidUtf8Error() from exc

    def encrypt_field(self, plaintext: str) -> EncryptedPassword:
        return EncryptedPassword(self.encrypt(plaintext))

    def decrypt_field(self, field: EncryptedPassword) -> str:
        return self.decrypt(field.payload)
