"""
Shared helpers for CLI commands.

Commands build their collaborators here from the loaded configuration so
every command sees the same documents, credentials and notifier.
"""

from rich.console import Console

from laterread.core.classify.client import OpenRouterClassifier
from laterread.core.config import LaterReadConfig, get_user_env_path, load_config
from laterread.core.credentials import CredentialStore
from laterread.core.library import Library
from laterread.core.notify import ConsoleNotifier
from laterread.core.services.classification import ClassificationService

console = Console()


def get_config() -> LaterReadConfig:
    return load_config()


def get_library(config: LaterReadConfig | None = None) -> Library:
    """Create the library for the configured documents."""
    return Library.from_config(config or get_config())


def get_credentials() -> CredentialStore:
    return CredentialStore(get_user_env_path())


def get_service(library: Library, config: LaterReadConfig | None = None) -> ClassificationService:
    """Create a classification service using the stored API key."""
    config = config or get_config()
    classifier = OpenRouterClassifier(
        get_credentials().get(),
        config.classifier,
        registry=library.registry,
    )
    return ClassificationService(
        library,
        classifier,
        ConsoleNotifier(),
        config.classifier,
    )
