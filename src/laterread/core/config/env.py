"""
Start-up environment loading.

Two ``.env`` files are read when the CLI starts:

1. The user file next to ``config.json``. ``CredentialStore`` keeps the
   classifier API key there, so a key set with ``laterread key set`` is
   available to every command.
2. ``.env`` in the working directory, which can override the user file
   (e.g. a different key or vault for one project).

A variable already exported in the shell is never overridden.
"""

import os
from collections.abc import Sequence
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_user_env_path


def env_files(project_dir: Path | None = None) -> list[Path]:
    """The ``.env`` files read at start-up, lowest precedence first."""
    return [get_user_env_path(), (project_dir or Path.cwd()) / ".env"]


def load_layered_env(paths: Sequence[Path] | None = None) -> dict[str, str]:
    """
    Export variables from ``.env`` files into the process environment.

    Args:
        paths: Files to read, later ones winning (default: ``env_files()``)

    Returns:
        The variables that were exported
    """
    merged: dict[str, str] = {}
    for path in env_files() if paths is None else paths:
        if Path(path).is_file():
            merged.update({k: v for k, v in dotenv_values(path).items() if v is not None})

    exported = {k: v for k, v in merged.items() if k not in os.environ}
    os.environ.update(exported)
    return exported
