"""
HTTP client for the remote classifier.

Talks to an OpenAI-compatible chat completions endpoint (OpenRouter by
default). Each request has a fixed timeout and is never retried; HTTP and
transport failures are mapped to a ``FailureKind``:

    401, 403          -> unauthorized
    429               -> rate-limited
    other non-200     -> server-error (status code kept)
    transport errors  -> network-error
    unreadable body   -> invalid-response
"""

import json
import logging
from typing import Any, Protocol

import httpx

from laterread.core.categories import CategoryRegistry, default_registry
from laterread.core.classify.models import (
    ClassificationRequest,
    ClassificationResult,
    ClassifierError,
    FailureKind,
)
from laterread.core.classify.prompts import build_prompt
from laterread.core.config.models import ClassifierConfig

logger = logging.getLogger(__name__)


class Classifier(Protocol):
    """Anything that can classify one item."""

    def classify(self, request: ClassificationRequest) -> ClassificationResult: ...


class OpenRouterClassifier:
    """
    Classifier backed by a chat completions API.

    Example:
        >>> classifier = OpenRouterClassifier(api_key, ClassifierConfig())
        >>> result = classifier.classify(
        ...     ClassificationRequest(title="X", url="http://a", domain="a.com")
        ... )
        >>> result.category
        <Category.AI_TECH: 'ai-tech'>
    """

    def __init__(
        self,
        api_key: str | None,
        config: ClassifierConfig | None = None,
        *,
        registry: CategoryRegistry | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key or ""
        self.config = config or ClassifierConfig()
        self.registry = registry or default_registry()
        self._client = client

    def _post(self, body: dict[str, Any]) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        if self._client is not None:
            return self._client.post(
                self.config.endpoint, json=body, headers=headers, timeout=self.config.timeout
            )
        return httpx.post(
            self.config.endpoint, json=body, headers=headers, timeout=self.config.timeout
        )

    def classify(self, request: ClassificationRequest) -> ClassificationResult:
        """
        Classify one item.

        Raises:
            ClassifierError: On any failure; ``kind`` tells which
        """
        if not self.api_key.strip():
            raise ClassifierError(FailureKind.UNAUTHORIZED, "no API key configured")

        prompt = build_prompt(request, self.registry, self.config.summary_language)
        body = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        logger.debug(
            "Classifying %s (%d context items) with %s",
            request.url,
            len(request.context),
            self.config.model,
        )
        try:
            response = self._post(body)
        except httpx.HTTPError as e:
            logger.warning("Classifier request failed: %s", e)
            raise ClassifierError(FailureKind.NETWORK_ERROR, str(e)) from e

        logger.debug("Classifier HTTP status: %d", response.status_code)
        status = response.status_code
        if status in (401, 403):
            raise ClassifierError(FailureKind.UNAUTHORIZED, status_code=status)
        if status == 429:
            raise ClassifierError(FailureKind.RATE_LIMITED, status_code=status)
        if status != 200:
            logger.warning("Classifier error %d: %s", status, response.text[:500])
            raise ClassifierError(FailureKind.SERVER_ERROR, status_code=status)

        try:
            payload = response.json()
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ClassifierError(
                FailureKind.INVALID_RESPONSE, "missing message content"
            ) from e
        if not isinstance(content, str):
            raise ClassifierError(FailureKind.INVALID_RESPONSE, "message content is not text")

        return parse_classification(content)


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_classification(text: str) -> ClassificationResult:
    """
    Extract the JSON result from model output.

    Tries the raw text, then the text with Markdown code fences removed,
    then the outermost ``{...}`` span.

    Raises:
        ClassifierError: INVALID_RESPONSE if no JSON object can be found

    Example:
        >>> parse_classification('```json\\n{"summary": "s", "category": "design"}\\n```')
        ClassificationResult(summary='s', category=<Category.DESIGN: 'design'>)
    """
    stripped = text.strip()
    data = _loads_object(stripped)

    if data is None:
        unfenced = stripped.replace("```json", "").replace("```", "").strip()
        data = _loads_object(unfenced)
        if data is None:
            start, end = unfenced.find("{"), unfenced.rfind("}")
            if start != -1 and end > start:
                data = _loads_object(unfenced[start : end + 1])

    if data is None:
        logger.warning("Could not extract JSON from classifier output: %s", stripped[:200])
        raise ClassifierError(FailureKind.INVALID_RESPONSE, "no JSON object in output")

    summary = data.get("summary")
    category = data.get("category")
    return ClassificationResult(
        summary=summary if isinstance(summary, str) else "",
        category=category if isinstance(category, str) else None,
    )


__all__ = ["Classifier", "OpenRouterClassifier", "parse_classification"]
