"""Pytest fixtures and utilities for kunci tests."""

import sys
from pathlib import Path

import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from kunci_core.crypto import CipherEngine, derive_key
from kunci_core.store import CredentialVault


PASSPHRASE = "correct-horse"


@pytest.fixture
def cipher():
    """Cipher engine built from the test passphrase."""
    return CipherEngine(derive_key(PASSPHRASE))


@pytest.fixture
def other_cipher():
    """Cipher engine built from a different passphrase."""
    return CipherEngine(derive_key("battery-staple"))


@pytest.fixture
def data_file(tmp_path):
    """Path to a backing file that does not exist yet."""
    return tmp_path / "passwords.txt"


@pytest.fixture
def legacy_file(data_file):
    """Backing file containing only legacy plaintext lines."""
    data_file.write_text("old,plainpass\nbank,hunter2\n", encoding="utf-8")
    return data_file


@pytest.fixture
def vault(data_file, cipher):
    """Empty vault bound to the temporary backing file."""
    return CredentialVault(str(data_file), cipher)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no passphrase in the environment and no .env in the working directory."""
    # setenv first so monkeypatch also removes a value loaded from .env afterwards
    monkeypatch.setenv("PASSWORD_MANAGER_KEY", "placeholder")
    monkeypatch.delenv("PASSWORD_MANAGER_KEY")
    monkeypatch.chdir(tmp_path)
    yield tmp_path
