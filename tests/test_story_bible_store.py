"""Tests for story bible persistence."""

import json

import pytest

from chaptermaster.exceptions import PersistenceFailed, StoryBibleNotFound, ValidationFailed
from chaptermaster.io.file_handler import FileHandler, slugify
from chaptermaster.io.story_bible_store import StoryBibleStore

from conftest import make_bible, make_chapter, make_character


def test_load_without_story_bible_raises(store):
    """A project without story-bible.json has not been set up yet."""
    assert not store.exists()
    with pytest.raises(StoryBibleNotFound):
        store.load()


def test_create_writes_pretty_json_and_directories(store):
    """The document is UTF-8 JSON with 2-space indentation."""
    store.create(make_bible())

    assert store.exists()
    assert store.characters_dir.is_dir()
    assert store.chapters_dir.is_dir()
    text = store.story_bible_path.read_text(encoding="utf-8")
    assert text.startswith('{\n  "meta": {')
    assert json.loads(text)["meta"]["title"] == "The Answering Light"


def test_round_trip_through_store(store):
    """Saving and loading reproduces the same document."""
    bible = make_bible(characters=[make_character(1)], chapters=[make_chapter(1, characters=[1])])
    store.create(bible)

    assert store.load().to_dict() == bible.to_dict()


def test_transaction_saves_changes_and_bumps_timestamp(saved_store):
    """A transaction persists mutations and records the update time."""
    before = saved_store.load().meta.updated_at

    with saved_store.transaction() as bible:
        bible.add_chapter(make_chapter(bible.next_id("chapters")))

    loaded = saved_store.load()
    assert [c.id for c in loaded.all_chapters] == [1]
    assert loaded.id_counters == {"chapters": 1}
    assert loaded.meta.updated_at >= before


def test_failed_transaction_leaves_document_unchanged(saved_store):
    """Nothing is written when the transaction body raises."""
    original = saved_store.story_bible_path.read_text(encoding="utf-8")

    with pytest.raises(RuntimeError):
        with saved_store.transaction() as bible:
            bible.add_chapter(make_chapter(1))
            raise RuntimeError("boom")

    assert saved_store.story_bible_path.read_text(encoding="utf-8") == original


def test_transact_returns_function_result(saved_store):
    new_id = saved_store.transact(lambda bible: bible.next_id("scenes"))

    assert new_id == 1
    assert saved_store.load().id_counters == {"scenes": 1}


def test_invalid_json_raises_persistence_failed(store):
    store.story_bible_dir.mkdir(parents=True)
    store.story_bible_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceFailed):
        store.load()


def test_schema_violation_raises_validation_failed(store):
    """A document that breaks the schema is never silently accepted."""
    data = make_bible(chapters=[make_chapter(1)]).to_dict()
    data["chapters"][0]["chapterNumber"] = "first"
    FileHandler().write_json(store.story_bible_path, data)

    with pytest.raises(ValidationFailed):
        store.load()


def test_atomic_write_leaves_no_temporary_files(saved_store):
    saved_store.transact(lambda bible: bible.touch())

    leftovers = [p.name for p in saved_store.story_bible_dir.iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


def test_conventional_paths(tmp_path):
    """Document paths follow the project layout."""
    store = StoryBibleStore(tmp_path)

    assert store.story_bible_path == tmp_path / "story-bible" / "story-bible.json"
    assert store.chapter_path(3) == tmp_path / "chapters" / "chapter-03.md"
    assert store.chapter_path(12) == tmp_path / "chapters" / "chapter-12.md"
    assert store.character_path("Mara Quill") == tmp_path / "characters" / "mara-quill.md"
    assert store.plot_thread_path("The Signal!") == tmp_path / "plot-threads" / "the-signal-.md"
    assert store.report_path(1700000000000).name == "consistency-report-1700000000000.md"
    assert store.resolve("PREMISE.md") == tmp_path / "PREMISE.md"


def test_slugify_replaces_every_non_alphanumeric_character():
    assert slugify("Dr. Ada O'Neil") == "dr--ada-o-neil"
