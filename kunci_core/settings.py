"""
Configuration constants for Kunci.

The passphrase is the only external configuration value. It is read
once by the process entry point; nothing else in the package looks at
the environment.
"""

import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv

# Environment variable holding the operator passphrase
PASSPHRASE_ENV_VAR = "PASSWORD_MANAGER_KEY"

# Backing file used when --data-file is not given (relative to the working directory)
DEFAULT_DATA_FILE = "passwords.txt"

# Seconds before a copied password is cleared from the clipboard
CLIPBOARD_CLEAR_SECONDS = 30

# Bounds for the number of '*' shown in place of a stored password
MASK_MIN_LENGTH = 1
MASK_MAX_LENGTH = 32


def read_passphrase(env_file: Optional[str] = None) -> Optional[str]:
    """
    Read the passphrase from the environment.

    A ``.env`` file (or ``env_file`` when given) is loaded first. Values
    already present in the environment take precedence over the file.

    Returns:
        Optional[str]: The raw passphrase, or None if it is not set
    """
    load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True), override=False)
    return os.environ.get(PASSPHRASE_ENV_VAR)
