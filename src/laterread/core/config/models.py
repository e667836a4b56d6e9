"""
Configuration data models for laterread.

These models define the structure of ~/.config/laterread/config.json, with
validation and type safety via Pydantic.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


def default_vault_dir() -> Path:
    return Path.home() / "Documents" / "LaterRead"


class StorageConfig(BaseModel):
    """
    Locations of the collection documents.

    Relative document paths are resolved against ``vault_dir``.
    """
    vault_dir: Path = Field(
        default_factory=default_vault_dir,
        description="Directory holding the collection documents"
    )
    inbox_path: Path = Field(
        default=Path("inbox.md"),
        description="Inbox document (relative to vault_dir unless absolute)"
    )
    laterwrite_path: Path = Field(
        default=Path("LaterWrite.md"),
        description="LaterWrite document (relative to vault_dir unless absolute)"
    )
    archive_path: Path = Field(
        default=Path("archive.md"),
        description="Archive of read Inbox items (relative to vault_dir unless absolute)"
    )
    digest_dir: Path = Field(
        default=Path("digests"),
        description="Directory for weekly reading lists (relative to vault_dir)"
    )

    @field_validator(
        "vault_dir", "inbox_path", "laterwrite_path", "archive_path", "digest_dir", mode="before"
    )
    @classmethod
    def expand_user(cls, v: str | Path) -> Path:
        """Expand ~ in configured paths."""
        return Path(v).expanduser()

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.vault_dir / path

    @property
    def inbox_file(self) -> Path:
        return self.resolve(self.inbox_path)

    @property
    def laterwrite_file(self) -> Path:
        return self.resolve(self.laterwrite_path)

    @property
    def archive_file(self) -> Path:
        return self.resolve(self.archive_path)

    @property
    def digest_folder(self) -> Path:
        return self.resolve(self.digest_dir)


class ClassifierConfig(BaseModel):
    """
    Remote classifier settings.

    The classifier is an OpenAI-compatible chat completions endpoint.
    """
    endpoint: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="Chat completions endpoint"
    )
    model: str = Field(
        default="google/gemini-3-flash-preview",
        description="Model identifier sent with each request"
    )
    max_tokens: int = Field(
        default=200,
        ge=1,
        description="Response token limit"
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds"
    )
    batch_delay: float = Field(
        default=0.5,
        ge=0.0,
        description="Pause between requests when classifying in batch (seconds)"
    )
    context_size: int = Field(
        default=10,
        ge=0,
        le=10,
        description="Existing items sent as context with each request"
    )
    auto_classify: bool = Field(
        default=True,
        description="Classify new items in the background after saving"
    )
    summary_language: str = Field(
        default="English",
        description="Language the summary is written in"
    )


class ReadingConfig(BaseModel):
    """Reading list behavior: visibility window and unread reminders."""
    hide_read_after_days: int = Field(
        default=7,
        ge=0,
        description="Hide read items this many days after they were saved"
    )
    reminder_thresholds: list[int] = Field(
        default_factory=lambda: [7, 15, 20, 30],
        description="Unread counts that trigger a reminder"
    )

    @field_validator("reminder_thresholds")
    @classmethod
    def sort_thresholds(cls, v: list[int]) -> list[int]:
        return sorted(set(v))


class LaterReadConfig(BaseModel):
    """
    Top-level laterread configuration.

    Example:
        >>> config = LaterReadConfig(storage={"vault_dir": "/tmp/vault"})
        >>> config.storage.inbox_file
        PosixPath('/tmp/vault/inbox.md')
    """
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Collection document locations"
    )
    classifier: ClassifierConfig = Field(
        default_factory=ClassifierConfig,
        description="Remote classifier settings"
    )
    reading: ReadingConfig = Field(
        default_factory=ReadingConfig,
        description="Reading list behavior"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )
