"""
Classifier request, result and failure types.

Failure kinds are a closed set the caller switches on; every kind is
terminal for the item in the current pass (there is no retry).
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from laterread.core.categories import Category
from laterread.core.errors import LaterReadError

MAX_CONTEXT_LINES = 10


class ClassificationRequest(BaseModel):
    """What the classifier is told about one item."""

    title: str
    url: str
    domain: str
    context: list[str] = Field(
        default_factory=list,
        description="One-line summaries of existing items (at most 10)",
    )

    @field_validator("context")
    @classmethod
    def truncate_context(cls, v: list[str]) -> list[str]:
        return v[:MAX_CONTEXT_LINES]


class ClassificationResult(BaseModel):
    """Summary and category returned by the classifier."""

    summary: str = ""
    category: Category = Category.GENERAL

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: str | Category | None) -> Category:
        return Category.parse(v)


class FailureKind(str, Enum):
    """Ways a classification request can fail."""

    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate-limited"
    SERVER_ERROR = "server-error"
    INVALID_RESPONSE = "invalid-response"
    NETWORK_ERROR = "network-error"


_DESCRIPTIONS = {
    FailureKind.UNAUTHORIZED: "API key is missing, invalid or expired",
    FailureKind.RATE_LIMITED: "Too many requests, try again later",
    FailureKind.SERVER_ERROR: "Server error",
    FailureKind.INVALID_RESPONSE: "Classifier returned an unreadable response",
    FailureKind.NETWORK_ERROR: "Network error",
}


class ClassifierError(LaterReadError):
    """
    A classification request failed.

    Attributes:
        kind: Failure kind
        status_code: HTTP status for server errors
    """

    def __init__(
        self,
        kind: FailureKind,
        detail: str | None = None,
        *,
        status_code: int | None = None,
    ) -> None:
        message = _DESCRIPTIONS[kind]
        if kind == FailureKind.SERVER_ERROR and status_code is not None:
            message = f"{message} ({status_code})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, kind=kind.value, status_code=status_code)
        self.kind = kind
        self.status_code = status_code


__all__ = [
    "ClassificationRequest",
    "ClassificationResult",
    "ClassifierError",
    "FailureKind",
    "MAX_CONTEXT_LINES",
]
