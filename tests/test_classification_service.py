"""
Tests for the classification service.

Covers one-shot classification, background jobs with cancellation on
delete, and the sequential batch.
"""

import threading

import pytest

from laterread.core.categories import Category
from laterread.core.classify.models import (
    ClassificationRequest,
    ClassificationResult,
    ClassifierError,
    FailureKind,
)
from laterread.core.config.models import ClassifierConfig
from laterread.core.library import Library
from laterread.core.notify import RecordingNotifier
from laterread.core.services.classification import (
    BatchReport,
    ClassificationService,
    needs_classification,
)

AI = ClassificationResult(summary="About agents", category=Category.AI_TECH)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


def make_service(library, classifier, notifier, sleeps: list[float] | None = None):
    recorded = sleeps if sleeps is not None else []
    return ClassificationService(
        library, classifier, notifier, ClassifierConfig(), sleep=recorded.append
    )


class TestClassify:
    """Test one-shot classification."""

    def test_success_updates_inbox(
        self, library: Library, notifier, scripted_classifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://a", "Agents", note="mine"))
        service = make_service(library, scripted_classifier(AI), notifier)

        assert service.classify("http://a") == AI

        item = library.inbox.find("http://a")
        assert item.category == Category.AI_TECH
        assert item.summary == "About agents"
        assert item.note == "mine"
        assert notifier.kinds() == ["classified"]

    def test_invalid_response_leaves_store_unmodified(
        self, library: Library, notifier, scripted_classifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://a", "Agents"))
        before = library.inbox.path.read_bytes()
        classifier = scripted_classifier(ClassifierError(FailureKind.INVALID_RESPONSE))
        service = make_service(library, classifier, notifier)

        assert service.classify("http://a") is None

        assert library.inbox.path.read_bytes() == before
        assert notifier.kinds() == ["invalid-response"]
        assert notifier.notices[0].is_error

    def test_absent_item_is_not_sent(
        self, library: Library, notifier, scripted_classifier
    ) -> None:
        classifier = scripted_classifier(AI)
        service = make_service(library, classifier, notifier)

        assert service.classify("http://missing") is None
        assert classifier.requests == []

    def test_context_from_other_items(
        self, library: Library, notifier, scripted_classifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://b", "Figma tips", category=Category.DESIGN))
        library.inbox.append(make_item("http://a", "Agents"))
        classifier = scripted_classifier(AI)

        make_service(library, classifier, notifier).classify("http://a")

        [request] = classifier.requests
        assert request.title == "Agents"
        assert request.context == ["- [design] Figma tips"]

    def test_context_limited_to_ten(
        self, library: Library, notifier, scripted_classifier, make_item
    ) -> None:
        for i in range(12):
            library.inbox.append(make_item(f"http://{i}", f"Item {i}"))
        service = make_service(library, scripted_classifier(), notifier)

        assert len(service.context_for("http://0")) == 10


class BlockingClassifier:
    """Classifier that waits for a signal before answering."""

    def __init__(self, result: ClassificationResult) -> None:
        self.result = result
        self.started = threading.Event()
        self.release = threading.Event()

    def classify(self, request: ClassificationRequest) -> ClassificationResult:
        self.started.set()
        self.release.wait(timeout=5)
        return self.result


class TestBackgroundJobs:
    def test_submit_applies_result(
        self, library: Library, notifier, scripted_classifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://a", "Agents"))
        service = make_service(library, scripted_classifier(AI), notifier)

        future = service.submit("http://a")
        service.wait(timeout=5)
        service.shutdown()

        assert future.result() == AI
        assert library.inbox.find("http://a").category == Category.AI_TECH

    def test_resubmit_returns_pending_job(
        self, library: Library, notifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://a", "Agents"))
        classifier = BlockingClassifier(AI)
        service = make_service(library, classifier, notifier)

        first = service.submit("http://a")
        assert classifier.started.wait(timeout=5)
        second = service.submit("http://a")
        classifier.release.set()
        service.wait(timeout=5)
        service.shutdown()

        assert first is second

    def test_delete_cancels_job_and_discards_result(
        self, library: Library, notifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://a", "Agents"))
        classifier = BlockingClassifier(AI)
        service = make_service(library, classifier, notifier)

        future = service.submit("http://a")
        assert classifier.started.wait(timeout=5)
        assert service.pending() == ["http://a"]

        library.delete("http://a")
        classifier.release.set()
        service.wait(timeout=5)
        service.shutdown()

        assert future.result() is None
        assert library.inbox.read_items() == []
        assert "classified" not in notifier.kinds()

    def test_delete_during_write_back_is_not_undone(
        self,
        library: Library,
        notifier,
        scripted_classifier,
        make_item,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        library.inbox.append(make_item("http://a", "Agents"))
        service = make_service(library, scripted_classifier(AI), notifier)
        deleter = threading.Thread(target=library.delete, args=("http://a",))
        load = library.inbox.load

        def load_then_delete():
            items = load()
            if threading.current_thread() is not deleter and deleter.ident is None:
                # Start a delete between the write-back's load and its save.
                deleter.start()
                deleter.join(timeout=0.2)
            return items

        monkeypatch.setattr(library.inbox, "load", load_then_delete)

        service.classify("http://a")
        deleter.join(timeout=5)

        assert not deleter.is_alive()
        assert library.inbox.read_items() == []

    def test_cancel_without_job(self, library: Library, notifier, scripted_classifier) -> None:
        service = make_service(library, scripted_classifier(), notifier)

        assert service.cancel("http://a") is False


class TestClassifyAll:
    """Test the sequential batch."""

    def test_nothing_to_do(self, library: Library, notifier, scripted_classifier, make_item) -> None:
        library.inbox.append(make_item("http://a", "Done", summary="s", category=Category.DESIGN))
        classifier = scripted_classifier()

        report = make_service(library, classifier, notifier).classify_all()

        assert report == BatchReport()
        assert classifier.requests == []
        assert notifier.kinds() == ["info"]

    def test_targets(self, make_item) -> None:
        assert needs_classification(make_item(summary=""))
        assert needs_classification(make_item(summary="s", category=Category.GENERAL))
        assert not needs_classification(make_item(summary="s", category=Category.DESIGN))
        assert not needs_classification(make_item(summary="", read=True))

    def test_sequential_with_pause_and_growing_context(
        self, library: Library, notifier, scripted_classifier, make_item
    ) -> None:
        for i in range(4, 0, -1):
            library.inbox.append(make_item(f"http://{i}", f"Item {i}"))
        library.inbox.append(make_item("http://read", "Read", read=True))
        results = [
            ClassificationResult(summary=f"S{i}", category=Category.RESEARCH) for i in range(1, 5)
        ]
        classifier = scripted_classifier(*results)
        sleeps: list[float] = []

        report = make_service(library, classifier, notifier, sleeps).classify_all()

        assert report == BatchReport(total=4, classified=4, failed=0, last_error=None)
        assert [r.title for r in classifier.requests] == ["Item 1", "Item 2", "Item 3", "Item 4"]
        assert classifier.requests[0].context == []
        assert classifier.requests[2].context == ["- [research] Item 1", "- [research] Item 2"]
        assert sleeps == [0.5, 0.5, 0.5]
        assert notifier.kinds() == ["progress", "progress", "progress", "done"]
        assert all(i.summary for i in library.inbox.read_items() if not i.read)

    def test_failures_do_not_stop_the_batch(
        self, library: Library, notifier, scripted_classifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://b", "B"))
        library.inbox.append(make_item("http://a", "A"))
        classifier = scripted_classifier(ClassifierError(FailureKind.RATE_LIMITED), AI)

        report = make_service(library, classifier, notifier).classify_all()

        assert report.classified == 1
        assert report.failed == 1
        assert "Too many requests" in report.last_error
        assert library.inbox.find("http://a").summary == ""
        assert library.inbox.find("http://b").category == Category.AI_TECH
        assert notifier.kinds()[-1] == "done"

    def test_all_failed(self, library: Library, notifier, scripted_classifier, make_item) -> None:
        library.inbox.append(make_item("http://a", "A"))
        classifier = scripted_classifier(ClassifierError(FailureKind.SERVER_ERROR, status_code=500))

        report = make_service(library, classifier, notifier).classify_all()

        assert report.classified == 0
        assert notifier.kinds()[-1] == "batch-failed"

    def test_items_removed_meanwhile_are_not_failures(
        self, library: Library, notifier, make_item
    ) -> None:
        library.inbox.append(make_item("http://a", "A"))

        class DeletingClassifier:
            def classify(self, request: ClassificationRequest) -> ClassificationResult:
                library.delete(request.url)
                return AI

        report = make_service(library, DeletingClassifier(), notifier).classify_all()

        assert report == BatchReport(total=1, classified=0, failed=0, discarded=1)
        assert notifier.kinds()[-1] == "info"
        assert "batch-failed" not in notifier.kinds()
        assert library.inbox.read_items() == []
