"""Tests for the element factories."""

import asyncio

import pytest

from chaptermaster.core.constants import ElementStatus
from chaptermaster.exceptions import ExternalServiceFailed, PersistenceFailed, PreconditionFailed, ValidationFailed
from chaptermaster.factories import ChapterGenerator, CharacterCreator, PlotThreadCreator, PremiseParser

from conftest import (
    CHARACTER_REPLY,
    FakeGenerationService,
    default_service,
    make_bible,
    make_chapter,
    make_character,
)


# Premise

def test_parse_premise_creates_story_bible(store):
    """The first parse creates the bible, premise.md and outline.md."""
    service = default_service()
    parsed = asyncio.run(PremiseParser(store, service).parse(
        premise="A keeper hears an answer.", title="The Answering Light", author="R. Vale",
    ))

    bible = store.load()
    assert bible.premise.genre.value == "mystery"
    assert bible.premise.status == ElementStatus.COMPLETED
    assert bible.premise.word_count_target == 90000
    assert bible.meta.target_word_count == 90000
    assert bible.meta.author == "R. Vale"
    assert bible.outline.structure_type.value == "three-act"
    assert parsed.premise_path.read_text(encoding="utf-8").startswith("# Story Premise")
    assert parsed.outline_path == store.outline_path
    assert not parsed.replaced_existing
    assert ("object", "research", "premise_analysis") in service.calls


def test_parse_premise_reads_premise_file(store, tmp_path):
    (tmp_path / "PREMISE.md").write_text("A keeper hears an answer.", encoding="utf-8")

    asyncio.run(PremiseParser(store, default_service()).parse(generate_outline=False))

    bible = store.load()
    assert bible.premise is not None
    assert bible.outline is None


def test_parse_premise_without_text_fails(store):
    with pytest.raises(PreconditionFailed):
        asyncio.run(PremiseParser(store, default_service()).parse(file_path="missing.md"))
    with pytest.raises(ValidationFailed):
        asyncio.run(PremiseParser(store, default_service()).parse(premise="   ", file_path=None))


def test_premise_analysis_is_required(store):
    """An unusable analysis reply fails the parse and writes nothing."""
    service = FakeGenerationService({"premise_analysis": "I cannot help with that."})

    with pytest.raises(ExternalServiceFailed):
        asyncio.run(PremiseParser(store, service).parse(premise="A keeper hears an answer."))
    assert not store.exists()


def test_outline_failure_keeps_premise(store):
    service = default_service()
    service.fail_text = True

    parsed = asyncio.run(PremiseParser(store, service).parse(premise="A keeper hears an answer."))

    assert parsed.outline_path is None
    assert store.load().premise is not None


def test_reparse_keeps_other_collections(saved_store):
    saved_store.transact(lambda bible: bible.add_character(make_character(bible.next_id("characters"))))

    parsed = asyncio.run(PremiseParser(saved_store, default_service()).parse(
        premise="A new premise.", generate_outline=False,
    ))

    bible = saved_store.load()
    assert parsed.replaced_existing
    assert [c.id for c in bible.all_characters] == [1]
    assert bible.premise.content.startswith("A lighthouse keeper")


def test_reparse_over_corrupt_bible_leaves_premise_document(saved_store):
    """No document is rewritten when the story bible cannot be loaded."""
    saved_store.premise_path.write_text("untouched premise", encoding="utf-8")
    saved_store.story_bible_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceFailed):
        asyncio.run(PremiseParser(saved_store, default_service()).parse(premise="A brand new premise."))

    assert saved_store.premise_path.read_text(encoding="utf-8") == "untouched premise"
    assert not saved_store.outline_path.exists()


def test_reparse_without_outline_clears_previous_outline(store):
    asyncio.run(PremiseParser(store, default_service()).parse(premise="A keeper hears an answer."))
    assert store.outline_path.exists()

    parsed = asyncio.run(PremiseParser(store, default_service()).parse(
        premise="A new premise.", generate_outline=False,
    ))

    assert parsed.outline_cleared
    assert parsed.outline_path is None
    assert store.load().outline is None
    assert not store.outline_path.exists()


# Characters

def test_create_character_with_enrichment(saved_store):
    created = asyncio.run(CharacterCreator(saved_store, default_service()).create(
        "Mara Quill", character_type="protagonist",
    ))

    character = saved_store.load().get_character(created.character.id)
    assert created.enriched
    assert character.psychology.motivations == ["Find her brother"]
    assert character.arc.summary == "From isolation to trust"
    assert character.voice.tone == "dry"
    assert created.file_path == saved_store.character_path("Mara Quill")
    assert "# Mara Quill" in created.file_path.read_text(encoding="utf-8")


def test_create_character_respects_section_flags(saved_store):
    created = asyncio.run(CharacterCreator(saved_store, default_service()).create(
        "Mara", generate_profile=False, generate_voice=False,
    ))

    assert created.character.psychology is None
    assert created.character.voice is None
    assert created.character.arc.summary == "From isolation to trust"


def test_unparseable_enrichment_degrades_to_baseline(saved_store):
    """Bad model output still yields a draft character without psychology."""
    service = default_service(character_profile="```json\n{not json at all\n```")

    created = asyncio.run(CharacterCreator(saved_store, service).create("Mara"))

    character = saved_store.load().get_character(created.character.id)
    assert not created.enriched
    assert character.status == ElementStatus.DRAFT
    assert character.psychology is None
    assert character.description == "supporting character"


def test_schema_mismatch_degrades_to_baseline(saved_store):
    reply = dict(CHARACTER_REPLY, characterType="sidekick")
    created = asyncio.run(CharacterCreator(saved_store, default_service(character_profile=reply)).create("Mara"))

    assert not created.enriched
    assert created.character.psychology is None


def test_create_character_requires_premise(store):
    store.create(make_bible(premise=False))

    with pytest.raises(PreconditionFailed):
        asyncio.run(CharacterCreator(store, None).create("Mara"))
    assert store.load().all_characters == []


def test_related_characters_become_relationships(saved_store):
    creator = CharacterCreator(saved_store, None)
    first = asyncio.run(creator.create("Mara"))
    second = asyncio.run(creator.create("Ilse", related_characters=[first.character.id]))

    relationships = second.character.biography.relationships
    assert second.character.id == 2
    assert [(r.character_id, r.relationship) for r in relationships] == [(1, "Related character")]


# Chapters

def test_generate_new_chapter_with_scenes(saved_store):
    generated = asyncio.run(ChapterGenerator(saved_store, None).generate(characters=[1]))

    bible = saved_store.load()
    chapter = bible.get_chapter(generated.chapter.id)
    assert generated.is_new
    assert chapter.chapter_number == 1
    assert chapter.word_count_target == 3000
    assert chapter.priority.value == "medium"
    assert chapter.scenes == [1, 2, 3]
    assert all(scene.characters == [1] for scene in bible.all_scenes)
    assert all(scene.scene_type.value == "dialogue" for scene in bible.all_scenes)
    assert generated.file_path == saved_store.chapter_path(1)


def test_next_chapter_number_and_scene_ids_continue(saved_store):
    generator = ChapterGenerator(saved_store, None)
    asyncio.run(generator.generate(scene_count=2))
    second = asyncio.run(generator.generate(scene_count=2))

    assert second.chapter.chapter_number == 2
    assert second.chapter.scenes == [3, 4]


def test_chapter_enrichment_is_applied(saved_store):
    generated = asyncio.run(ChapterGenerator(saved_store, default_service()).generate(generate_scenes=False))

    chapter = generated.chapter
    assert generated.enriched
    assert chapter.title == "The First Signal"
    assert chapter.plot_advancement == "The signal is established"
    assert chapter.character_moments[0].development == "Mara decides to stay"
    assert chapter.scenes == []


def test_update_chapter_keeps_identity_and_stored_fields(saved_store):
    generator = ChapterGenerator(saved_store, None)
    created = asyncio.run(generator.generate(chapter_number=4, target_word_count=4500, priority="high"))
    saved_store.transact(lambda bible: bible.set_status("chapter", created.chapter.id, "in-progress"))

    updated = asyncio.run(generator.generate(chapter_id=created.chapter.id, title="Storm", scene_count=1))

    chapter = saved_store.load().get_chapter(created.chapter.id)
    assert not updated.is_new
    assert chapter.title == "Storm"
    assert chapter.chapter_number == 4
    assert chapter.status.value == "in-progress"
    assert chapter.word_count_target == 4500
    assert chapter.priority.value == "high"
    assert chapter.scenes == [1, 2, 3, 4]
    assert len(saved_store.load().all_chapters) == 1


def test_update_missing_chapter_fails(saved_store):
    with pytest.raises(PreconditionFailed):
        asyncio.run(ChapterGenerator(saved_store, None).generate(chapter_id=9))


def test_failed_save_writes_no_chapter_document(saved_store, monkeypatch):
    """Chapter documents are written only after the story bible is saved."""
    def refuse(bible):
        raise PersistenceFailed("disk full")
    monkeypatch.setattr(saved_store, "save", refuse)

    with pytest.raises(PersistenceFailed):
        asyncio.run(ChapterGenerator(saved_store, None).generate(title="Arrival"))

    assert not saved_store.chapter_path(1).exists()


# Plot threads

def test_plot_thread_links_into_chapters(saved_store):
    saved_store.transact(lambda bible: bible.add_chapter(make_chapter(1)))

    created = asyncio.run(PlotThreadCreator(saved_store, default_service()).create(
        "The Signal", thread_type="main", chapters=[1, 7],
    ))

    bible = saved_store.load()
    assert created.linked_chapters == [1]
    assert bible.get_chapter(1).plot_threads == [created.plot_thread.id]
    assert bible.get_plot_thread(1).resolution == "The answer comes from the brother"
    assert created.file_path == saved_store.plot_thread_path("The Signal")


def test_plot_thread_without_service(saved_store):
    created = asyncio.run(PlotThreadCreator(saved_store, None).create("Harbour Feud"))

    assert not created.enriched
    assert created.plot_thread.description == "subplot plot thread"
    assert created.plot_thread.development is None
