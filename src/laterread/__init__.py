"""
LaterRead - a reading inbox kept in plain Markdown.

Saved pages live in two human-editable documents: the Inbox and the
LaterWrite collection of items worth writing about.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from laterread.core.categories import Category
from laterread.core.config.models import LaterReadConfig
from laterread.core.items.models import ReadingItem
from laterread.core.library import Library

__all__ = ["Category", "LaterReadConfig", "Library", "ReadingItem", "__version__"]
