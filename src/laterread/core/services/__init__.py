"""
Service layer for laterread.

Services compose the stores and the classifier into the operations a host
calls. They return typed results and report user-facing outcomes as
``Notice`` values; presentation is the caller's job.

Modules:
    classification: ClassificationService runs single, background and batch
        classification and writes results back to the Inbox.
"""

from laterread.core.services.classification import (
    BatchReport,
    ClassificationService,
    needs_classification,
)

__all__ = [
    "BatchReport",
    "ClassificationService",
    "needs_classification",
]
