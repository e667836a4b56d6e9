"""
Classification service: writes classifier results back to the Inbox.

Wraps a ``Classifier`` and the ``Library`` into the operations a host calls:

- ``classify(url)``: one synchronous classification.
- ``submit(url)``: queue a background job for a freshly saved item. Jobs are
  keyed by url and run one at a time on a worker thread. A job is the only
  writer of the item's category and summary, and it is cancelled when the
  item is deleted, so a late result never brings a deleted item back.
- ``classify_all()``: classify every unread item that still lacks a summary
  or a real category, strictly one after another with a fixed pause
  between requests. There is no retry; a failed item stays as it was.

Classifier failures never raise out of the service: they become notices
tagged with the failure kind, and the store is left untouched.

Usage:
    >>> service = ClassificationService(library, classifier, ConsoleNotifier())
    >>> service.submit("https://example.com/a")
    >>> service.wait()
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass
from enum import Enum

from laterread.core.categories import Category
from laterread.core.classify.client import Classifier
from laterread.core.classify.models import (
    ClassificationRequest,
    ClassificationResult,
    ClassifierError,
)
from laterread.core.config.models import ClassifierConfig
from laterread.core.errors import StoreError
from laterread.core.items.models import ReadingItem, normalize_url
from laterread.core.library import Library
from laterread.core.notify import Notice, Notifier

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 3


class Applied(str, Enum):
    """What happened to a classifier result."""

    APPLIED = "applied"
    DISCARDED = "discarded"
    WRITE_FAILED = "write-failed"


@dataclass(frozen=True)
class BatchReport:
    """Outcome of a batch classification pass.

    Attributes:
        total: Items that needed classification
        classified: Items updated with a classifier result
        failed: Items whose request failed or whose result could not be saved
        discarded: Items deleted or cancelled before their result arrived
        last_error: Message of the most recent failure
    """

    total: int = 0
    classified: int = 0
    failed: int = 0
    discarded: int = 0
    last_error: str | None = None


def needs_classification(item: ReadingItem) -> bool:
    """Unread items without a summary or still in GENERAL."""
    return not item.read and (not item.summary or item.category == Category.GENERAL)


class ClassificationService:
    """
    Run classifier requests and apply their results to the Inbox.

    Example:
        >>> service = ClassificationService(library, classifier, notifier)
        >>> report = service.classify_all()
        >>> report.classified
        3
    """

    def __init__(
        self,
        library: Library,
        classifier: Classifier,
        notifier: Notifier,
        config: ClassifierConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.library = library
        self.classifier = classifier
        self.notifier = notifier
        self.config = config or ClassifierConfig()
        self._sleep = sleep
        self._executor: ThreadPoolExecutor | None = None
        self._jobs: dict[str, Future[ClassificationResult | None]] = {}
        self._cancelled: set[str] = set()
        self._lock = threading.Lock()
        library.on_delete(self.cancel)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def context_for(self, url: str, items: list[ReadingItem] | None = None) -> list[str]:
        """One-line summaries of other Inbox items, used as classifier context."""
        if items is None:
            items = self.library.inbox.read_items()
        lines = [i.context_line() for i in items if i.title and i.url != url]
        return lines[: self.config.context_size]

    def _request(self, item: ReadingItem, context: list[str]) -> ClassificationRequest:
        return ClassificationRequest(
            title=item.title,
            url=item.url,
            domain=item.domain,
            context=context[: self.config.context_size],
        )

    # ------------------------------------------------------------------
    # Single item
    # ------------------------------------------------------------------

    def classify(self, url: str) -> ClassificationResult | None:
        """
        Classify one Inbox item and store the result.

        Returns:
            The applied result, or None if the item is gone, the request
            failed (a notice is sent), or the job was cancelled meanwhile
        """
        url = normalize_url(url)
        items = self.library.inbox.read_items()
        item = next((i for i in items if i.url == url), None)
        if item is None:
            logger.info("Not classifying %s: not in inbox", url)
            return None

        try:
            result = self.classifier.classify(self._request(item, self.context_for(url, items)))
        except ClassifierError as e:
            logger.warning("Classification of %s failed: %s", url, e)
            self.notifier.notify(Notice("Classification failed", str(e), kind=e.kind.value))
            return None

        if self._apply(url, result) is not Applied.APPLIED:
            return None
        info = self.library.registry.info(result.category)
        self.notifier.notify(
            Notice("Classified ✓", f"{info.symbol} {result.summary[:30]}", kind="classified")
        )
        return result

    def _apply(self, url: str, result: ClassificationResult) -> Applied:
        # The library lock covers the cancel check and the whole
        # load-modify-save, so a concurrent delete lands before or after it.
        with self.library.lock:
            with self._lock:
                if url in self._cancelled:
                    logger.info("Discarding classification for cancelled %s", url)
                    return Applied.DISCARDED
            try:
                updated = self.library.inbox.update_fields(
                    url, category=result.category, summary=result.summary
                )
            except StoreError as e:
                self.notifier.notify(
                    Notice("Could not save classification", str(e), kind="write-failed")
                )
                return Applied.WRITE_FAILED
        if updated is None:
            logger.info("Discarding classification for %s: item no longer in inbox", url)
            return Applied.DISCARDED
        return Applied.APPLIED

    # ------------------------------------------------------------------
    # Background jobs
    # ------------------------------------------------------------------

    def submit(self, url: str) -> Future[ClassificationResult | None]:
        """
        Queue a background classification for an Inbox item.

        Submitting a url whose job is still pending returns that job.
        """
        url = normalize_url(url)
        with self._lock:
            existing = self._jobs.get(url)
            if existing is not None and not existing.done():
                return existing
            self._cancelled.discard(url)
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="laterread-classify"
                )
            future = self._executor.submit(self.classify, url)
            self._jobs[url] = future

        def finished(done: Future[ClassificationResult | None], url: str = url) -> None:
            with self._lock:
                if self._jobs.get(url) is done:
                    del self._jobs[url]
                    self._cancelled.discard(url)

        future.add_done_callback(finished)
        return future

    def pending(self) -> list[str]:
        """Urls with a queued or running job."""
        with self._lock:
            return [url for url, job in self._jobs.items() if not job.done()]

    def cancel(self, url: str) -> bool:
        """
        Cancel the job for ``url``; a result that still arrives is discarded.

        Returns:
            True if a pending job was cancelled
        """
        url = normalize_url(url)
        with self._lock:
            job = self._jobs.get(url)
            if job is None or job.done():
                return False
            self._cancelled.add(url)
            job.cancel()
        logger.info("Cancelled classification for %s", url)
        return True

    def wait(self, timeout: float | None = None) -> None:
        """Block until every queued job has finished."""
        with self._lock:
            jobs = list(self._jobs.values())
        if jobs:
            wait_futures(jobs, timeout=timeout)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def classify_all(self) -> BatchReport:
        """
        Classify every unread Inbox item that still needs it.

        Items are processed in Inbox order, one request at a time, with
        ``config.batch_delay`` seconds between requests. Each success is
        added to the context sent with later requests.
        """
        items = self.library.inbox.read_items()
        targets = [i for i in items if needs_classification(i)]
        if not targets:
            self.notifier.notify(Notice("Nothing to classify", "All unread items are classified"))
            return BatchReport()

        total = len(targets)
        self.notifier.notify(Notice("Classifying", f"Processing {total} items...", kind="progress"))
        context = [i.context_line() for i in items if i.summary and i.title]
        classified = failed = discarded = 0
        last_error: str | None = None

        for index, item in enumerate(targets):
            try:
                result = self.classifier.classify(self._request(item, context))
            except ClassifierError as e:
                failed += 1
                last_error = str(e)
                logger.warning("Classification of %s failed: %s", item.url, e)
            else:
                outcome = self._apply(item.url, result)
                if outcome is Applied.APPLIED:
                    classified += 1
                    context.append(f"- [{result.category.value}] {item.title}")
                    done = index + 1
                    if done % PROGRESS_EVERY == 0 or done == total:
                        self.notifier.notify(
                            Notice("Progress", f"Completed {done}/{total}", kind="progress")
                        )
                elif outcome is Applied.WRITE_FAILED:
                    failed += 1
                    last_error = f"Could not save classification for {item.url}"
                else:
                    discarded += 1

            if index < total - 1:
                self._sleep(self.config.batch_delay)

        report = BatchReport(
            total=total,
            classified=classified,
            failed=failed,
            discarded=discarded,
            last_error=last_error,
        )
        self.notifier.notify(self._batch_notice(report))
        return report

    @staticmethod
    def _batch_notice(report: BatchReport) -> Notice:
        if report.classified:
            body = f"{report.classified} classified"
            if report.failed:
                body += f", {report.failed} failed"
            if report.discarded:
                body += f", {report.discarded} removed meanwhile"
            return Notice("Classification done ✓", body, kind="done")
        if report.failed:
            return Notice(
                "Classification failed",
                report.last_error or "All requests failed",
                kind="batch-failed",
            )
        return Notice(
            "Nothing classified",
            f"{report.discarded} item(s) were removed while classifying",
            kind="info",
        )


__all__ = ["Applied", "BatchReport", "ClassificationService", "needs_classification"]
