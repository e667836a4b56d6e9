"""
Unit tests for collection storage.

Tests InboxStore and LaterWriteStore loading, writing and mutation, plus
relation rendering across sibling collections.
"""

from datetime import date
from pathlib import Path

import pytest

from laterread.core.categories import Category
from laterread.core.errors import StoreWriteError
from laterread.core.items.codec import TextCodec
from laterread.core.items.store import CollectionStore, InboxStore, LaterWriteStore


@pytest.fixture
def inbox(tmp_path: Path) -> InboxStore:
    return InboxStore(tmp_path / "inbox.md")


@pytest.fixture
def laterwrite(tmp_path: Path, inbox: InboxStore) -> LaterWriteStore:
    store = LaterWriteStore(tmp_path / "LaterWrite.md")
    store.attach_sibling(inbox)
    return store


class TestLoad:
    """Test loading documents."""

    def test_missing_document_creates_skeleton(self, inbox: InboxStore) -> None:
        assert inbox.load() == []

        text = inbox.path.read_text(encoding="utf-8")
        assert text.startswith("# 📖 LaterRead Inbox\n\n")
        assert inbox.preamble[0] in text

    def test_skeleton_parses_cleanly(self, inbox: InboxStore, laterwrite: LaterWriteStore) -> None:
        inbox.load()
        laterwrite.load()

        assert inbox.read_items() == []
        assert inbox.last_skipped == []
        assert laterwrite.read_items() == []
        assert laterwrite.last_skipped == []

    def test_read_items_has_no_side_effects(self, inbox: InboxStore) -> None:
        assert inbox.read_items() == []
        assert not inbox.path.exists()

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        store = InboxStore(tmp_path / "deep" / "vault" / "inbox.md")

        store.load()

        assert store.path.exists()

    def test_skipped_lines_are_exposed(self, inbox: InboxStore) -> None:
        inbox.path.write_text(
            "# 📖 LaterRead Inbox\n\n"
            "- [ ] 🦄 [Bad](http://bad) | bad.com | 2025-01-10\n"
            "- [ ] 📌 [Good](http://good) | good.com | 2025-01-10\n",
            encoding="utf-8",
        )

        items = inbox.load()

        assert [i.url for i in items] == ["http://good"]
        assert [s.line_number for s in inbox.last_skipped] == [3]

    def test_find_and_contains(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A"))

        assert inbox.find(" http://a ").title == "A"
        assert inbox.contains("http://a")
        assert inbox.find("http://zzz") is None


class TestInboxAppend:
    def test_newest_first(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A"))
        inbox.append(make_item("http://b", "B"))

        assert [i.url for i in inbox.load()] == ["http://b", "http://a"]

    def test_duplicates_allowed(self, inbox: InboxStore, make_item) -> None:
        assert inbox.append(make_item("http://a", "A")) is True
        assert inbox.append(make_item("http://a", "A again")) is True

        assert len(inbox.load()) == 2

    def test_grouped_by_category(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://g", "G"))
        inbox.append(make_item("http://a", "A", category=Category.AI_TECH))

        text = inbox.path.read_text(encoding="utf-8")

        assert text.index("## 🤖 AI/Tech") < text.index("http://a") < text.index("## 📌 General")


class TestLaterWriteAppend:
    def test_idempotent_by_url(self, laterwrite: LaterWriteStore, make_item) -> None:
        assert laterwrite.append(make_item("http://a", "First")) is True
        assert laterwrite.append(make_item("http://a", "Second")) is False

        [item] = laterwrite.load()
        assert item.title == "First"

    def test_sorted_newest_first(self, laterwrite: LaterWriteStore, make_item) -> None:
        laterwrite.append(make_item("http://old", "Old", created=date(2025, 1, 1)))
        laterwrite.append(make_item("http://new", "New", created=date(2025, 2, 1)))

        assert [i.url for i in laterwrite.load()] == ["http://new", "http://old"]

    def test_preamble_and_rule(self, laterwrite: LaterWriteStore) -> None:
        laterwrite.load()

        assert laterwrite.path.read_text(encoding="utf-8") == (
            "# ✍️ LaterWrite\n\nContent ideas and related articles to write about.\n\n---\n\n"
        )


class TestMutations:
    """Test toggle, update, relations and delete."""

    def test_toggle_read(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A"))

        assert inbox.toggle_read("http://a").read is True
        assert inbox.find("http://a").read is True
        assert inbox.toggle_read("http://a").read is False

    def test_toggle_absent_is_noop(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A"))
        before = inbox.path.read_text(encoding="utf-8")

        assert inbox.toggle_read("http://missing") is None
        assert inbox.path.read_text(encoding="utf-8") == before

    def test_update_fields_partial(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A", summary="Old", note="Keep"))

        item = inbox.update_fields("http://a", category="design", summary="New")

        assert item.category == Category.DESIGN
        assert item.summary == "New"
        assert item.note == "Keep"
        assert inbox.find("http://a").summary == "New"

    def test_update_fields_empty_string_clears(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A", note="Gone soon"))

        inbox.update_fields("http://a", note="")

        assert inbox.find("http://a").note == ""
        assert "📝" not in inbox.path.read_text(encoding="utf-8")

    def test_update_fields_absent(self, inbox: InboxStore) -> None:
        assert inbox.update_fields("http://missing", summary="x") is None

    def test_set_relations_does_not_touch_targets(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A"))
        inbox.append(make_item("http://b", "B"))

        inbox.set_relations("http://a", ["http://b"])

        assert inbox.find("http://a").related == ["http://b"]
        assert inbox.find("http://b").related == []

    def test_delete(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://a", "A"))
        inbox.append(make_item("http://b", "B"))

        removed = inbox.delete("http://a")

        assert removed.title == "A"
        assert [i.url for i in inbox.load()] == ["http://b"]

    def test_delete_absent(self, inbox: InboxStore) -> None:
        assert inbox.delete("http://missing") is None


class TestRelationRendering:
    def test_titles_resolved_from_sibling(
        self, inbox: InboxStore, laterwrite: LaterWriteStore, make_item
    ) -> None:
        laterwrite.append(make_item("http://w", "Draft idea"))
        inbox.append(make_item("http://a", "A", related=["http://w"]))

        assert "> 🔗 Related: [Draft idea](http://w)" in inbox.path.read_text(encoding="utf-8")

    def test_dangling_relation_stops_rendering(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item("http://b", "B"))
        inbox.append(make_item("http://a", "A", related=["http://b"]))

        inbox.delete("http://b")

        assert "🔗" not in inbox.path.read_text(encoding="utf-8")

    def test_legacy_relations_rewritten_in_current_encoding(
        self, inbox: InboxStore
    ) -> None:
        inbox.path.write_text(
            "# 📖 LaterRead Inbox\n\n## 📌 General\n\n"
            "- [ ] 📌 [A](http://a) | a.com | 2025-01-10\n"
            "> 🔗 http://b\n\n"
            "- [ ] 📌 [B](http://b) | b.com | 2025-01-09\n",
            encoding="utf-8",
        )

        inbox.toggle_read("http://b")

        assert "> 🔗 Related: [B](http://b)" in inbox.path.read_text(encoding="utf-8")


class TestWriteFailures:
    def test_unwritable_location_raises_store_write_error(
        self, tmp_path: Path, make_item
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        store = InboxStore(blocker / "inbox.md")

        with pytest.raises(StoreWriteError) as exc_info:
            store.append(make_item())

        assert exc_info.value.path == str(blocker / "inbox.md")

    def test_no_temp_files_left_behind(self, inbox: InboxStore, make_item) -> None:
        inbox.append(make_item())
        inbox.toggle_read("https://example.com/a")

        assert [p.name for p in inbox.path.parent.iterdir()] == ["inbox.md"]


def test_render_matches_codec(inbox: InboxStore, make_item) -> None:
    item = make_item("http://a", "A")

    expected = TextCodec().serialize(
        [item], title=inbox.title, preamble=inbox.preamble, link_index={item.url: item}
    )

    assert inbox.render([item]) == expected


def test_collection_store_is_abstract(tmp_path: Path) -> None:
    with pytest.raises(TypeError):
        CollectionStore(tmp_path / "x.md")  # type: ignore[abstract]


def test_extra_link_source_resolves_relations(inbox: InboxStore, make_item) -> None:
    class Archived:
        def read_items(self):
            return [make_item("http://old", "Old one")]

    inbox.add_link_source(Archived())
    inbox.append(make_item("http://a", "A", related=["http://old"]))

    assert "> 🔗 Related: [Old one](http://old)" in inbox.path.read_text(encoding="utf-8")
