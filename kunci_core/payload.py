"""
Kunci Payload Codec

Handles the textual representation of an encrypted password as it is
written to the backing file:

    <base64 nonce>:<base64 ciphertext+tag>

and the classification of a raw password field read from disk into one
of two closed variants:

- PlainPassword: a legacy value that has not been encrypted yet
- EncryptedPassword: a field that already has the nonce:ciphertext shape

Classification is purely syntactic. A legacy password that happens to
contain a colon with text on both sides is treated as encrypted and will
fail to decrypt later.
"""

import base64
from dataclasses import dataclass
from typing import Tuple, Union

from .errors import FormatError

# ==============================================================================
# FORMAT CONSTANTS
# ==============================================================================

# Separates the encoded nonce from the encoded ciphertext
PAYLOAD_SEPARATOR = ":"

# AES-GCM nonce size in bytes (96 bits)
NONCE_SIZE = 12

# AES-GCM authentication tag size in bytes, appended to the ciphertext
TAG_SIZE = 16

# ==============================================================================
# PASSWORD FIELD VARIANTS
# ==============================================================================

@dataclass(frozen=True)
class PlainPassword:
    """A legacy password stored without encryption."""
    value: str


@dataclass(frozen=True)
class EncryptedPassword:
    """
    An encrypted password in its on-disk form.

    The payload is kept verbatim so that a field which merely looks
    encrypted is written back unchanged on the next save.
    """
    payload: str

    def decode(self) -> Tuple[bytes, bytes]:
        """Return ``(nonce, ciphertext)``; raises FormatError if malformed."""
        return decode_payload(self.payload)

    def __len__(self) -> int:
        return len(self.payload)


PasswordField = Union[PlainPassword, EncryptedPassword]

# ==============================================================================
# CLASSIFICATION
# ==============================================================================

def classify(raw: str) -> PasswordField:
    """
    Decide whether a raw password field is already encrypted.

    Args:
        raw (str): Password field exactly as read from the backing file

    Returns:
        PasswordField: EncryptedPassword if ``raw`` contains the separator
        with non-empty text on both sides of its first occurrence,
        PlainPassword otherwise.

    Example:
        >>> classify("YWJj:ZGVm")
        EncryptedPassword(payload='YWJj:ZGVm')
        >>> classify("abc:")
        PlainPassword(value='abc:')
    """
    nonce_part, separator, cipher_part = raw.partition(PAYLOAD_SEPARATOR)
    if separator and nonce_part and cipher_part:
        return EncryptedPassword(raw)
    return PlainPassword(raw)

# ==============================================================================
# ENCODING / DECODING
# ==============================================================================

def encode_payload(nonce: bytes, ciphertext: bytes) -> str:
    """
    Encode a nonce and ciphertext into the on-disk payload string.

    Args:
        nonce (bytes): 12-byte AES-GCM nonce
        ciphertext (bytes): Ciphertext with the authentication tag appended

    Returns:
        str: ``"<b64 nonce>:<b64 ciphertext>"`` using standard padded base64

    Raises:
        FormatError: If the nonce is not exactly NONCE_SIZE bytes
    """
    if len(nonce) != NONCE_SIZE:
        raise FormatError("Invalid nonce length.")

    encoded_nonce = base64.b64encode(nonce).decode("ascii")
    encoded_cipher = base64.b64encode(ciphertext).decode("ascii")
    return f"{encoded_nonce}{PAYLOAD_SEPARATOR}{encoded_cipher}"


def decode_payload(payload: str) -> Tuple[bytes, bytes]:
    """
    Decode an on-disk payload string into its nonce and ciphertext.

    The string is split on the first separator only; each half must be
    strict standard base64 and the nonce must decode to NONCE_SIZE bytes.

    Args:
        payload (str): Encoded payload

    Returns:
        Tuple[bytes, bytes]: ``(nonce, ciphertext)``

    Raises:
        FormatError: If the separator is missing, either half is not valid
            base64, or the nonce has the wrong length
    """
    nonce_b64, separator, cipher_b64 = payload.partition(PAYLOAD_SEPARATOR)
    if not separator:
        raise FormatError("Encrypted data format is invalid.")

    try:
        nonce = base64.b64decode(nonce_b64, validate=True)
    except ValueError as exc:
        raise FormatError("Encrypted nonce is invalid.") from exc

    if len(nonce) != NONCE_SIZE:
        raise FormatError("Invalid nonce length.")

    try:
        ciphertext = base64.b64decode(cipher_b64, validate=True)
    except ValueError as exc:
        raise FormatError("Encrypted ciphertext is invalid.") from exc

    return nonce, ciphertext
