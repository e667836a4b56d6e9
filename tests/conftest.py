"""
Pytest configuration and shared fixtures.

Provides isolated config/vault directories, a library backed by temporary
documents, an item factory and a scripted classifier.
"""

from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path

import pytest

from laterread.core.categories import Category
from laterread.core.classify.models import (
    ClassificationRequest,
    ClassificationResult,
    ClassifierError,
)
from laterread.core.config import clear_cache
from laterread.core.items.models import ReadingItem
from laterread.core.library import Library

# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the developer's environment and cached config out of tests."""
    for var in (
        "OPENROUTER_API_KEY",
        "LATERREAD_VAULT",
        "LATERREAD_INBOX",
        "LATERREAD_LATERWRITE",
        "LATERREAD_MODEL",
        "LATERREAD_AUTO_CLASSIFY",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    """Point config, state and vault at temporary directories."""
    config_home = tmp_path / "config"
    vault = tmp_path / "vault"
    workdir = tmp_path / "work"
    config_home.mkdir()
    workdir.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("LATERREAD_VAULT", str(vault))
    monkeypatch.chdir(workdir)
    return {
        "config_dir": config_home / "laterread",
        "vault": vault,
        "inbox": vault / "inbox.md",
        "laterwrite": vault / "LaterWrite.md",
    }


# ==============================================================================
# Library Fixtures
# ==============================================================================


@pytest.fixture
def library(tmp_path: Path) -> Library:
    """Library backed by documents in a temporary directory."""
    return Library(tmp_path / "inbox.md", tmp_path / "LaterWrite.md")


@pytest.fixture
def make_item() -> Callable[..., ReadingItem]:
    """Factory for reading items with sensible defaults."""

    def _make(
        url: str = "https://example.com/a",
        title: str = "Example",
        *,
        category: Category | str = Category.GENERAL,
        created: date = date(2025, 1, 10),
        **fields: object,
    ) -> ReadingItem:
        return ReadingItem(
            url=url,
            title=title,
            domain=fields.pop("domain", "example.com"),
            category=category,
            created=created,
            **fields,
        )

    return _make


# ==============================================================================
# Classifier Doubles
# ==============================================================================


class ScriptedClassifier:
    """Classifier that replays queued results or errors and records requests."""

    def __init__(self, *outcomes: ClassificationResult | ClassifierError) -> None:
        self.outcomes = list(outcomes)
        self.requests: list[ClassificationRequest] = []

    def classify(self, request: ClassificationRequest) -> ClassificationResult:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else ClassificationResult()
        if isinstance(outcome, ClassifierError):
            raise outcome
        return outcome


@pytest.fixture
def scripted_classifier() -> type[ScriptedClassifier]:
    return ScriptedClassifier
