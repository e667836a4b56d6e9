"""Prompt template for the remote classifier."""

from laterread.core.categories import CategoryRegistry
from laterread.core.classify.models import ClassificationRequest

CLASSIFICATION_PROMPT = """Analyze this article and provide:
1. A summary in {language} (1-2 sentences, at most 80 words)
2. A category (choose the best matching category key from the list below)

Article to classify:
Title: {title}
URL: {url}
Source: {domain}
{context}
{categories}
Classification rules:
- If the article shares a topic with existing items (same tool, concept or field), use the same category
- Always pick a specific category; use "general" only when nothing fits
- Return the category key (such as "ai-tech" or "product"), not its name
- Keep the summary short and precise

Return only JSON: {{"summary": "...", "category": "category-key"}}
"""

CONTEXT_HEADER = "Items already in the inbox (for reference, to keep categories consistent):"


def build_prompt(
    request: ClassificationRequest, registry: CategoryRegistry, language: str = "English"
) -> str:
    """Render the classification prompt for one request."""
    context = ""
    if request.context:
        context = "\n" + CONTEXT_HEADER + "\n" + "\n".join(request.context) + "\n"
    return CLASSIFICATION_PROMPT.format(
        language=language,
        title=request.title,
        url=request.url,
        domain=request.domain,
        context=context,
        categories=registry.category_prompt(),
    )
