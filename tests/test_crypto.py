"""Tests for key derivation and the AES-GCM cipher engine."""

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from kunci_core.crypto import KEY_SIZE, CipherEngine, derive_key
from kunci_core.errors import (
    AuthenticationFailedError,
    ConfigError,
    DecryptionError,
    EmptyPassphraseError,
    EncryptionError,
    InvalidUtf8Error,
    MalformedPayloadError,
    MissingPassphraseError,
)
from kunci_core.payload import EncryptedPassword, decode_payload, encode_payload


def flip_bit(data: bytes, bit: int) -> bytes:
    flipped = bytearray(data)
    flipped[bit // 8] ^= 1 << (bit % 8)
    return bytes(flipped)


class TestDeriveKey:
    """Tests for derive_key."""

    def test_missing_passphrase(self):
        with pytest.raises(MissingPassphraseError) as exc_info:
            derive_key(None)
        assert isinstance(exc_info.value, ConfigError)
        assert exc_info.value.kind == "config.missing"

    def test_non_utf8_passphrase_treated_as_missing(self):
        with pytest.raises(MissingPassphraseError):
            derive_key("abc\udcff")

    @pytest.mark.parametrize("passphrase", ["", "   ", "\t\n"])
    def test_blank_passphrase(self, passphrase):
        with pytest.raises(EmptyPassphraseError) as exc_info:
            derive_key(passphrase)
        assert exc_info.value.kind == "config.empty"

    def test_key_is_sha256_of_passphrase(self):
        assert derive_key("correct-horse") == hashlib.sha256(b"correct-horse").digest()

    def test_key_length(self):
        assert len(derive_key("x")) == KEY_SIZE

    def test_deterministic(self):
        """Same passphrase always yields the same key (no salt)."""
        assert derive_key("correct-horse") == derive_key("correct-horse")

    def test_untrimmed_passphrase_is_hashed(self):
        """Whitespace only matters for the blank check, not the digest."""
        assert derive_key(" correct-horse ") != derive_key("correct-horse")

    def test_different_passphrases_differ(self):
        assert derive_key("correct-horse") != derive_key("battery-staple")

    def test_unicode_passphrase(self):
        assert derive_key("kata sandi rahasia ✓") == hashlib.sha256(
            "kata sandi rahasia ✓".encode("utf-8")
        ).digest()


class TestCipherEngine:
    """Tests for CipherEngine encrypt/decrypt."""

    def test_rejects_short_key(self):
        with pytest.raises(ValueError):
            CipherEngine(b"too short")

    @pytest.mark.parametrize("plaintext", [
        "s3cr3t",
        "",
        " leading and trailing ",
        "with,comma:and:colons",
        "ünïcödé パスワード 🔑",
        "x" * 4096,
    ])
    def test_round_trip(self, cipher, plaintext):
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_payload_shape(self, cipher):
        payload = cipher.encrypt("s3cr3t")
        nonce, ciphertext = decode_payload(payload)
        assert len(nonce) == 12
        # ciphertext carries the 16-byte tag
        assert len(ciphertext) == len("s3cr3t") + 16

    def test_nonce_freshness(self, cipher):
        first = cipher.encrypt("same")
        second = cipher.encrypt("same")
        assert first != second
        assert decode_payload(first)[0] != decode_payload(second)[0]

    def test_cross_instance_decrypt(self, cipher):
        """Ciphertext from one instance decrypts under another built from the same passphrase."""
        other = CipherEngine(derive_key("correct-horse"))
        assert other.decrypt(cipher.encrypt("s3cr3t")) == "s3cr3t"

    def test_wrong_key_fails_authentication(self, cipher, other_cipher):
        payload = cipher.encrypt("s3cr3t")
        with pytest.raises(AuthenticationFailedError) as exc_info:
            other_cipher.decrypt(payload)
        assert exc_info.value.kind == "decryption.auth_failed"

    def test_tampered_ciphertext_fails(self, cipher):
        nonce, ciphertext = decode_payload(cipher.encrypt("s3cr3t"))
        for bit in range(len(ciphertext) * 8):
            tampered = encode_payload(nonce, flip_bit(ciphertext, bit))
            with pytest.raises(AuthenticationFailedError):
                cipher.decrypt(tampered)

    def test_tampered_nonce_fails(self, cipher):
        nonce, ciphertext = decode_payload(cipher.encrypt("s3cr3t"))
        for bit in range(len(nonce) * 8):
            tampered = encode_payload(flip_bit(nonce, bit), ciphertext)
            with pytest.raises(AuthenticationFailedError):
                cipher.decrypt(tampered)

    def test_truncated_ciphertext_fails(self, cipher):
        nonce, ciphertext = decode_payload(cipher.encrypt("s3cr3t"))
        with pytest.raises(AuthenticationFailedError):
            cipher.decrypt(encode_payload(nonce, ciphertext[:-1]))

    @pytest.mark.parametrize("payload", [
        "no-separator",
        "!!!!:ZGVm",
        "YWJj:ZGVm",
        base64.b64encode(b"\x00" * 12).decode() + ":not base64!",
    ])
    def test_malformed_payload(self, cipher, payload):
        with pytest.raises(MalformedPayloadError) as exc_info:
            cipher.decrypt(payload)
        assert isinstance(exc_info.value, DecryptionError)

    def test_invalid_utf8_plaintext(self):
        key = derive_key("correct-horse")
        nonce = b"\x01" * 12
        ciphertext = AESGCM(key).encrypt(nonce, b"\xff\xfe\xfd", None)
        with pytest.raises(InvalidUtf8Error):
            CipherEngine(key).decrypt(encode_payload(nonce, ciphertext))

    def test_unencodable_plaintext(self, cipher):
        with pytest.raises(EncryptionError):
            cipher.encrypt("\ud800")

    def test_field_helpers(self, cipher):
        field = cipher.encrypt_field("s3cr3t")
        assert isinstance(field, EncryptedPassword)
        assert cipher.decrypt_field(field) == "s3cr3t"
