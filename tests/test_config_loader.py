"""
Tests for configuration loading and environment layering.
"""

import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from laterread.core.config import (
    LaterReadConfig,
    clear_cache,
    env_files,
    get_user_config_path,
    load_config,
    load_layered_env,
)
from laterread.core.config.loader import apply_env_overrides, deep_merge, load_json_file


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


def write_user_config(config_home: Path, data: dict) -> Path:
    path = config_home / "laterread" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


class TestDefaults:
    def test_defaults(self, config_home: Path) -> None:
        config = load_config(use_cache=False)

        assert config.storage.inbox_file == Path.home() / "Documents" / "LaterRead" / "inbox.md"
        assert config.classifier.model == "google/gemini-3-flash-preview"
        assert config.classifier.timeout == 30.0
        assert config.classifier.batch_delay == 0.5
        assert config.classifier.context_size == 10
        assert config.reading.hide_read_after_days == 7
        assert config.reading.reminder_thresholds == [7, 15, 20, 30]

    def test_user_config_path(self, config_home: Path) -> None:
        assert get_user_config_path() == config_home / "laterread" / "config.json"


class TestUserConfig:
    def test_merged_over_defaults(self, config_home: Path, tmp_path: Path) -> None:
        write_user_config(
            config_home,
            {"storage": {"vault_dir": str(tmp_path / "vault")}, "classifier": {"max_tokens": 300}},
        )

        config = load_config(use_cache=False)

        assert config.storage.laterwrite_file == tmp_path / "vault" / "LaterWrite.md"
        assert config.classifier.max_tokens == 300
        assert config.classifier.timeout == 30.0

    def test_absolute_document_path_kept(self, config_home: Path, tmp_path: Path) -> None:
        write_user_config(config_home, {"storage": {"inbox_path": str(tmp_path / "x.md")}})

        assert load_config(use_cache=False).storage.inbox_file == tmp_path / "x.md"

    def test_invalid_json_ignored(self, config_home: Path) -> None:
        path = config_home / "laterread" / "config.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        assert load_json_file(path) is None
        assert load_config(use_cache=False).classifier.max_tokens == 200

    def test_invalid_values_rejected(self, config_home: Path) -> None:
        write_user_config(config_home, {"classifier": {"context_size": 50}})

        with pytest.raises(ValidationError):
            load_config(use_cache=False)

    def test_thresholds_sorted(self) -> None:
        config = LaterReadConfig(reading={"reminder_thresholds": [20, 7, 7]})

        assert config.reading.reminder_thresholds == [7, 20]


class TestEnvOverrides:
    def test_env_beats_user_config(
        self, config_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_user_config(config_home, {"classifier": {"model": "from/file"}})
        monkeypatch.setenv("LATERREAD_MODEL", "from/env")
        monkeypatch.setenv("LATERREAD_VAULT", str(tmp_path / "v"))
        monkeypatch.setenv("LATERREAD_INBOX", "reading.md")

        config = load_config(use_cache=False)

        assert config.classifier.model == "from/env"
        assert config.storage.inbox_file == tmp_path / "v" / "reading.md"

    @pytest.mark.parametrize(("raw", "expected"), [("false", False), ("0", False), ("1", True)])
    def test_auto_classify(self, raw: str, expected: bool, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LATERREAD_AUTO_CLASSIFY", raw)

        assert apply_env_overrides({})["classifier"]["auto_classify"] is expected


class TestCache:
    def test_cached_until_cleared(self, config_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        first = load_config()
        monkeypatch.setenv("LATERREAD_MODEL", "other/model")

        assert load_config() is first

        clear_cache()
        assert load_config().classifier.model == "other/model"


def test_deep_merge() -> None:
    merged = deep_merge({"a": 1, "b": {"x": 1, "y": 2}}, {"b": {"y": 3}, "c": 4})

    assert merged == {"a": 1, "b": {"x": 1, "y": 3}, "c": 4}


class TestLayeredEnv:
    def test_os_env_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        user_env = tmp_path / "user.env"
        user_env.write_text("LATERREAD_TEST_A=user\nLATERREAD_TEST_B=user\n")
        project_env = tmp_path / "project.env"
        project_env.write_text("LATERREAD_TEST_B=project\n")
        monkeypatch.setenv("LATERREAD_TEST_A", "os")
        monkeypatch.delenv("LATERREAD_TEST_B", raising=False)

        exported = load_layered_env([user_env, project_env, tmp_path / "missing.env"])

        assert exported == {"LATERREAD_TEST_B": "project"}
        assert os.environ["LATERREAD_TEST_A"] == "os"
        assert os.environ["LATERREAD_TEST_B"] == "project"
        monkeypatch.delenv("LATERREAD_TEST_B")

    def test_default_files(self, config_home: Path, tmp_path: Path) -> None:
        assert env_files(tmp_path) == [config_home / "laterread" / ".env", tmp_path / ".env"]

    def test_stored_key_is_exported(
        self, config_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        user_env = config_home / "laterread" / ".env"
        user_env.parent.mkdir(parents=True)
        user_env.write_text("OPENROUTER_API_KEY=sk-or-stored\n")
        monkeypatch.chdir(tmp_path)

        load_layered_env()

        assert os.environ["OPENROUTER_API_KEY"] == "sk-or-stored"
