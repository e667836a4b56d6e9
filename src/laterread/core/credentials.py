"""
API key storage.

One opaque credential authenticates classifier requests. It is kept in the
user .env file (``~/.config/laterread/.env``) so that the layered env loader
also picks it up; a value exported in the process environment wins on read.
"""

import logging
import os
from pathlib import Path

from dotenv import dotenv_values, set_key, unset_key

from laterread.core.errors import StoreWriteError

logger = logging.getLogger(__name__)

API_KEY_VAR = "OPENROUTER_API_KEY"


class CredentialStore:
    """
    Get, set and delete the classifier API key.

    Example:
        >>> store = CredentialStore(Path("~/.config/laterread/.env").expanduser())
        >>> store.set("sk-or-...")
        >>> store.get()
        'sk-or-...'
    """

    def __init__(self, path: Path, variable: str = API_KEY_VAR) -> None:
        self.path = Path(path)
        self.variable = variable

    def get(self) -> str | None:
        """Return the key, or None if none is stored."""
        if value := os.environ.get(self.variable):
            return value
        if not self.path.exists():
            return None
        return dotenv_values(self.path).get(self.variable) or None

    def set(self, value: str) -> None:
        """
        Store the key, replacing any previous value.

        Raises:
            StoreWriteError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(mode=0o600, exist_ok=True)
            set_key(self.path, self.variable, value.strip())
        except OSError as e:
            raise StoreWriteError(f"Failed to store API key: {e}", path=str(self.path)) from e
        logger.debug("Stored %s in %s", self.variable, self.path)

    def delete(self) -> bool:
        """
        Remove the stored key.

        Returns:
            True if the key is gone (including when none was stored)
        """
        if not self.path.exists() or self.variable not in dotenv_values(self.path):
            return True
        removed, _ = unset_key(self.path, self.variable)
        return bool(removed)
