"""
Category registry for reading items.

Categories form a closed set. Each key carries the symbol that prefixes an
item line in the collection document, a display label, and keyword hints
that are fed to the classifier prompt. Unknown keys and unknown symbols
resolve to ``Category.GENERAL``.

Example:
    >>> registry = default_registry()
    >>> registry.info("ai-tech").symbol
    '🤖'
    >>> registry.key_for_symbol("🎨")
    <Category.DESIGN: 'design'>
    >>> registry.key_for_symbol("?")
    <Category.GENERAL: 'general'>
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    """Category keys, in display order."""

    AI_TECH = "ai-tech"
    DEV_TOOLS = "dev-tools"
    PRODUCT = "product"
    DESIGN = "design"
    BUSINESS = "business"
    RESEARCH = "research"
    CAREER = "career"
    PRODUCTIVITY = "productivity"
    READING = "reading"
    LATERWRITE = "laterwrite"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: "str | Category | None") -> "Category":
        """Resolve a raw key, falling back to GENERAL."""
        if isinstance(value, Category):
            return value
        if value is None:
            return cls.GENERAL
        try:
            return cls(value.strip())
        except ValueError:
            return cls.GENERAL


@dataclass(frozen=True)
class CategoryInfo:
    """Display data for one category."""

    symbol: str
    label: str
    keywords: str


DEFAULT_CATEGORIES: dict[Category, CategoryInfo] = {
    Category.AI_TECH: CategoryInfo(
        "🤖",
        "AI/Tech",
        "AI, machine learning, LLM, GPT, Claude, deep learning, neural network, "
        "automation, agents, prompts",
    ),
    Category.DEV_TOOLS: CategoryInfo(
        "🛠️",
        "Dev Tools",
        "programming, coding, developer tools, IDE, API, SDK, framework, library, open source",
    ),
    Category.PRODUCT: CategoryInfo(
        "📦",
        "Product",
        "product launch, startup, SaaS, app, tool, software, service, platform",
    ),
    Category.DESIGN: CategoryInfo(
        "🎨",
        "Design",
        "UI, UX, design system, figma, interface, visual, typography, branding",
    ),
    Category.BUSINESS: CategoryInfo(
        "💼",
        "Business",
        "startup, funding, investment, strategy, growth, marketing, sales, revenue",
    ),
    Category.RESEARCH: CategoryInfo(
        "📚",
        "Research",
        "paper, study, academic, methodology, analysis, experiment, findings",
    ),
    Category.CAREER: CategoryInfo(
        "🎯",
        "Career",
        "job, hiring, interview, resume, skills, career growth, salary, remote work",
    ),
    Category.PRODUCTIVITY: CategoryInfo(
        "⚡",
        "Productivity",
        "workflow, efficiency, habits, time management, tools, automation, life hacks",
    ),
    Category.READING: CategoryInfo(
        "📖",
        "Reading",
        "book, article, blog post, newsletter, essay, long read, writing",
    ),
    Category.LATERWRITE: CategoryInfo(
        "✍️",
        "LaterWrite",
        "articles to write about, content ideas, writing inspiration, potential blog posts",
    ),
    Category.GENERAL: CategoryInfo(
        "📌",
        "General",
        "everything else, misc, uncategorized",
    ),
}


class CategoryRegistry:
    """
    Lookup table between category keys, symbols and labels.

    The registry is immutable once built. Display order defaults to the
    declaration order of ``Category``; a custom order may list a subset,
    but GENERAL is always appended so fallback items are never hidden.
    """

    def __init__(
        self,
        categories: Mapping[Category, CategoryInfo] | None = None,
        order: Iterable[Category] | None = None,
    ) -> None:
        self._categories: dict[Category, CategoryInfo] = dict(
            categories if categories is not None else DEFAULT_CATEGORIES
        )
        if Category.GENERAL not in self._categories:
            self._categories[Category.GENERAL] = DEFAULT_CATEGORIES[Category.GENERAL]

        ordered = list(order) if order is not None else list(Category)
        self._order: tuple[Category, ...] = tuple(
            key for key in dict.fromkeys(ordered) if key in self._categories
        )
        if Category.GENERAL not in self._order:
            self._order += (Category.GENERAL,)

        self._by_symbol: dict[str, Category] = {
            info.symbol: key for key, info in self._categories.items()
        }

    @property
    def order(self) -> tuple[Category, ...]:
        """Section order used when rendering a collection."""
        return self._order

    def resolve(self, key: "str | Category | None") -> Category:
        """Resolve a raw key to a registered category (fallback GENERAL)."""
        category = Category.parse(key)
        if category not in self._categories:
            return Category.GENERAL
        return category

    def info(self, key: "str | Category | None") -> CategoryInfo:
        """Forward lookup; unknown keys get the GENERAL entry."""
        return self._categories[self.resolve(key)]

    def symbol(self, key: "str | Category | None") -> str:
        return self.info(key).symbol

    def key_for_symbol(self, symbol: str) -> Category:
        """Reverse lookup from a line symbol (fallback GENERAL)."""
        return self._by_symbol.get(symbol, Category.GENERAL)

    def symbols(self) -> list[str]:
        """All configured symbols, longest first (for regex alternation)."""
        return sorted(self._by_symbol, key=len, reverse=True)

    def category_prompt(self) -> str:
        """
        Enumerate the categories for the classifier prompt.

        Returns:
            Multi-line text, one ``- key: Label - keywords`` line per category
        """
        lines = ["Categories (choose the BEST match):"]
        for key in self._order:
            info = self._categories[key]
            lines.append(f"- {key.value}: {info.label} - {info.keywords}")
        return "\n".join(lines) + "\n"


_default_registry: CategoryRegistry | None = None


def default_registry() -> CategoryRegistry:
    """Return the shared registry built from ``DEFAULT_CATEGORIES``."""
    global _default_registry
    if _default_registry is None:
        _default_registry = CategoryRegistry()
    return _default_registry


__all__ = [
    "Category",
    "CategoryInfo",
    "CategoryRegistry",
    "DEFAULT_CATEGORIES",
    "default_registry",
]
