"""
Remote classification of reading items.

The classifier receives the item's title, url and domain plus a few
one-line summaries of existing items, and returns a short summary and a
category key.
"""

from laterread.core.classify.client import Classifier, OpenRouterClassifier, parse_classification
from laterread.core.classify.models import (
    ClassificationRequest,
    ClassificationResult,
    ClassifierError,
    FailureKind,
)

__all__ = [
    "ClassificationRequest",
    "ClassificationResult",
    "Classifier",
    "ClassifierError",
    "FailureKind",
    "OpenRouterClassifier",
    "parse_classification",
]
