"""
Reading item data model.

A reading item is one saved link. Its url is its identity: stores match,
de-duplicate and relate items by url. Items are rendered as a single
Markdown list line plus optional summary, note and relation lines, so every
text field is kept on one line.
"""

from datetime import date
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from laterread.core.categories import Category


def normalize_url(url: str) -> str:
    """Return the match key for a url (surrounding whitespace removed)."""
    return url.strip()


def domain_from_url(url: str) -> str:
    """
    Derive the display domain for a url.

    Example:
        >>> domain_from_url("https://www.example.com/post/1")
        'example.com'
    """
    host = urlparse(normalize_url(url)).hostname or ""
    if host.startswith("www."):
        host = host[4:]
    return host or "unknown"


def _one_line(value: str) -> str:
    return " ".join(value.split())


class ReadingItem(BaseModel):
    """
    A single saved link with category, read state, note and relations.

    Example:
        >>> item = ReadingItem(
        ...     url="http://a",
        ...     title="X",
        ...     domain="a.com",
        ...     category="ai-tech",
        ...     created=date(2025, 1, 10),
        ... )
        >>> item.read
        False
        >>> item.category
        <Category.AI_TECH: 'ai-tech'>
    """

    url: str = Field(..., min_length=1, description="Normalized url, the item identity")
    title: str = Field(..., description="Page title")
    domain: str = Field(default="unknown", description="Display domain")
    summary: str = Field(default="", description="Short summary from the classifier")
    category: Category = Field(default=Category.GENERAL, description="Category key")
    note: str = Field(default="", description="Freeform user note")
    related: list[str] = Field(
        default_factory=list,
        description="Urls of related items, in either collection",
    )
    created: date = Field(default_factory=date.today, description="Capture date")
    read: bool = Field(default=False, description="Read state")

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not isinstance(v, str):
            raise ValueError("url must be a string")
        return normalize_url(v)

    @field_validator("title", "domain", "summary", "note", mode="before")
    @classmethod
    def validate_one_line(cls, v: str | None) -> str:
        if v is None:
            return ""
        return _one_line(str(v))

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: str | Category | None) -> Category:
        """Unknown category keys fall back to GENERAL."""
        return Category.parse(v)

    @field_validator("related", mode="before")
    @classmethod
    def validate_related(cls, v: list[str] | None) -> list[str]:
        if v is None:
            return []
        cleaned: list[str] = []
        for raw in v:
            url = normalize_url(str(raw))
            if url and url not in cleaned:
                cleaned.append(url)
        return cleaned

    @model_validator(mode="after")
    def fill_blanks_and_drop_self_reference(self) -> "ReadingItem":
        # Assigning through the validator would recurse; bypass it.
        if not self.title:
            object.__setattr__(self, "title", self.url)
        if not self.domain:
            object.__setattr__(self, "domain", "unknown")
        if self.url in self.related:
            object.__setattr__(self, "related", [u for u in self.related if u != self.url])
        return self

    @classmethod
    def new(cls, url: str, title: str | None = None, note: str = "") -> "ReadingItem":
        """
        Build a freshly captured item: unread, GENERAL, created today.

        Args:
            url: Page url
            title: Page title (defaults to the url)
            note: Optional note entered at capture time
        """
        return cls(
            url=url,
            title=title or url,
            domain=domain_from_url(url),
            note=note,
            created=date.today(),
        )

    def context_line(self) -> str:
        """One-line summary used as classifier context."""
        return f"- [{self.category.value}] {self.title}"

    def add_related(self, url: str) -> bool:
        """Append a relation target. Returns True if the list changed."""
        url = normalize_url(url)
        if not url or url == self.url or url in self.related:
            return False
        self.related = [*self.related, url]
        return True

    def remove_related(self, url: str) -> bool:
        """Drop a relation target. Returns True if the list changed."""
        url = normalize_url(url)
        if url not in self.related:
            return False
        self.related = [u for u in self.related if u != url]
        return True
