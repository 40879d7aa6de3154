"""Tests for the operation boundary and operation results."""

import asyncio
import json

from chaptermaster.config import Config
from chaptermaster.editor.consistency_checker import FIX_HANDLERS
from chaptermaster.editor.issues import IssueType
from chaptermaster.exceptions import PersistenceFailed
from chaptermaster.io.story_bible_store import StoryBibleStore
from chaptermaster.operations import (
    NO_STORY_BIBLE_MESSAGE,
    OperationContext,
    OperationResult,
    add_plot_thread,
    check_consistency,
    create_character,
    generate_chapter,
    get_story_status,
    next_chapter,
    operation,
    parse_premise,
    set_status,
)

from conftest import default_service, make_bible, make_chapter, make_character, make_scene


def run(coro):
    return asyncio.run(coro)


def empty_context(tmp_path, service=None):
    return OperationContext(store=StoryBibleStore(tmp_path), service=service, config=Config(api_key=""))


def test_missing_story_bible_gives_fixed_message(tmp_path):
    """Every operation except parse-premise reports the same advice."""
    ctx = empty_context(tmp_path)
    results = [
        run(create_character(ctx, name="Mara")),
        run(generate_chapter(ctx)),
        run(check_consistency(ctx)),
        run(get_story_status(ctx)),
        run(next_chapter(ctx)),
        run(add_plot_thread(ctx, title="The Signal")),
        run(set_status(ctx, element_type="chapter", element_id=1, status="completed")),
    ]

    for result in results:
        assert not result.success
        assert result.message == NO_STORY_BIBLE_MESSAGE
        assert result.error == "Story bible not found"


def test_operation_boundary_converts_every_error():
    """No exception escapes an operation."""
    @operation("do something")
    async def failing(ctx):
        raise PersistenceFailed("disk full")

    @operation("do something else")
    async def crashing(ctx):
        raise KeyError("boom")

    result = run(failing(None))
    assert not result.success
    assert result.message == "Failed to do something: disk full"
    assert result.error == "disk full"

    result = run(crashing(None))
    assert not result.success
    assert result.message.startswith("Failed to do something else")


def test_result_dict_omits_empty_fields():
    assert OperationResult(success=True, message="ok").to_dict() == {"success": True, "message": "ok"}


def test_parse_premise_operation(tmp_path):
    ctx = empty_context(tmp_path, default_service())

    result = run(parse_premise(ctx, premise="A keeper hears an answer."))

    assert result.success
    assert "✅ Premise parsed successfully!" in result.message
    assert "Genre: mystery" in result.message
    assert "Target word count: 90,000" in result.message
    assert result.data["premise"]["genre"] == "mystery"
    assert result.data["outlinePath"].endswith("outline.md")


def test_parse_premise_without_service_fails(tmp_path):
    result = run(parse_premise(empty_context(tmp_path), premise="A keeper hears an answer."))

    assert not result.success
    assert result.message.startswith("Failed to parse premise")
    assert not (tmp_path / "story-bible" / "story-bible.json").exists()


def test_create_character_operation(context):
    result = run(create_character(context, name="Mara Quill", character_type="protagonist"))

    assert result.success
    assert '✅ Character "Mara Quill" created successfully!' in result.message
    assert result.data["id"] == 1
    assert result.data["character"]["psychology"]["motivations"] == ["Find her brother"]


def test_create_character_reports_basic_profile(offline_context):
    result = run(create_character(offline_context, name="Mara"))

    assert result.success
    assert "basic (AI enrichment unavailable)" in result.message
    assert result.data["character"]["status"] == "draft"
    assert "psychology" not in result.data["character"]


def test_create_character_rejects_invalid_type(offline_context):
    result = run(create_character(offline_context, name="Mara", character_type="sidekick"))

    assert not result.success
    assert result.message.startswith("Failed to create character")


def test_generate_chapter_operation(offline_context):
    result = run(generate_chapter(offline_context, title="Arrival", scene_count=2))

    assert result.success
    assert "✅ Chapter 1 created successfully!" in result.message
    assert "Target Words: 3,000" in result.message
    assert result.data["chapter"]["scenes"] == [1, 2]


def test_generate_chapter_unknown_id(offline_context):
    result = run(generate_chapter(offline_context, chapter_id=5))

    assert not result.success
    assert result.message == "❌ Chapter with ID 5 not found."


def seed_unlisted(store):
    store.transact(lambda bible: (
        bible.add_character(make_character(1)),
        bible.add_chapter(make_chapter(1, characters=[], scenes=[1])),
        bible.add_scenes([make_scene(1, 1, characters=[1])]),
    ))


def test_check_consistency_writes_report(offline_context):
    seed_unlisted(offline_context.store)

    result = run(check_consistency(offline_context))

    assert result.success
    assert "⚠️ **Found 1 potential issue**" in result.message
    assert "- character-unlisted: 1" in result.message
    report = result.data["reportPath"]
    assert report.endswith(".md")
    with open(report, encoding="utf-8") as f:
        assert f.read().startswith("# Story Consistency Report")
    assert result.data["stats"]["totalIssues"] == 1


def test_check_consistency_conservative_fix_persists_nothing(offline_context):
    seed_unlisted(offline_context.store)
    before = offline_context.store.story_bible_path.read_text(encoding="utf-8")

    result = run(check_consistency(offline_context, auto_fix=True, generate_report=False))

    assert result.data["fixedIssues"] == []
    assert result.data["reportPath"] is None
    assert offline_context.store.story_bible_path.read_text(encoding="utf-8") == before


def test_check_consistency_aggressive_fix_persists(offline_context):
    seed_unlisted(offline_context.store)

    result = run(check_consistency(offline_context, auto_fix=True, fix_mode="aggressive"))

    assert "✅ Auto-fixed 1 issue" in result.message
    assert result.data["fixedIssues"][0]["fixMode"] == "aggressive"
    assert offline_context.store.load().get_chapter(1).characters == [1]

    again = run(check_consistency(offline_context, generate_report=False))
    assert "No consistency issues found" in again.message


def test_check_consistency_saves_nothing_when_no_fix_applies(offline_context, monkeypatch):
    """An eligible issue whose handler changes nothing leaves the file alone."""
    seed_unlisted(offline_context.store)
    before = offline_context.store.story_bible_path.read_text(encoding="utf-8")
    monkeypatch.setitem(FIX_HANDLERS, IssueType.CHARACTER_UNLISTED, lambda bible, issue: False)

    result = run(check_consistency(offline_context, auto_fix=True, fix_mode="aggressive", generate_report=False))

    assert result.success
    assert result.data["fixedIssues"] == []
    assert offline_context.store.story_bible_path.read_text(encoding="utf-8") == before


def test_check_consistency_includes_ai_suggestions(context):
    seed_unlisted(context.store)

    result = run(check_consistency(context, generate_report=False))

    assert result.data["suggestions"] == [{"type": "ai-analysis", "content": "Generated text"}]


def test_check_consistency_rejects_unknown_check_type(offline_context):
    result = run(check_consistency(offline_context, check_type="grammar"))

    assert not result.success


def test_story_status_formats(offline_context):
    offline_context.store.transact(lambda bible: (
        bible.add_chapter(make_chapter(1, status="completed")),
        bible.add_chapter(make_chapter(2, status="completed")),
        bible.add_chapter(make_chapter(3)),
        bible.add_chapter(make_chapter(4)),
    ))

    detailed = run(get_story_status(offline_context))
    summary = run(get_story_status(offline_context, format="summary"))
    table = run(get_story_status(offline_context, format="table"))

    assert "📈 Overall Progress: **57%**" in detailed.message
    assert '👤 Create main characters with "create-character"' in detailed.message
    assert detailed.data["completion"]["overall"] == 57
    assert detailed.data["nextAction"] == "create-character"
    assert "57% Complete" in summary.message
    assert "**Overall Progress: 57%**" in table.message


def test_story_status_rejects_unknown_format(offline_context):
    result = run(get_story_status(offline_context, format="yaml"))

    assert not result.success
    assert "yaml" in result.message


def test_next_chapter_operation(offline_context):
    empty = run(next_chapter(offline_context))
    assert empty.message.startswith("📝 No chapters found")
    assert empty.data["chapterNumber"] == 1

    offline_context.store.transact(lambda bible: (
        bible.add_character(make_character(1)),
        bible.add_chapter(make_chapter(1, characters=[1], scenes=[1])),
        bible.add_scenes([make_scene(1, 1)]),
    ))
    result = run(next_chapter(offline_context))

    assert result.success
    assert "📖 Next Chapter to Work On: **Chapter 1**" in result.message
    assert "🎯 Next scene: **Scene 1**" in result.message
    assert "- Mara (protagonist)" in result.message
    assert result.data["nextScene"]["id"] == 1


def test_next_chapter_when_everything_is_done(offline_context):
    offline_context.store.transact(lambda bible: bible.add_chapter(make_chapter(1, status="completed")))

    result = run(next_chapter(offline_context))

    assert "All existing chapters are completed or in review" in result.message
    assert result.data["chapterNumber"] == 2


def test_add_plot_thread_operation(offline_context):
    offline_context.store.transact(lambda bible: bible.add_chapter(make_chapter(1)))

    result = run(add_plot_thread(offline_context, title="The Signal", chapters=[1]))

    assert result.success
    assert result.data["linkedChapters"] == [1]
    assert offline_context.store.load().get_chapter(1).plot_threads == [1]


def test_set_status_operation(offline_context):
    offline_context.store.transact(lambda bible: bible.add_chapter(make_chapter(1)))

    result = run(set_status(offline_context, element_type="chapter", element_id=1, status="in-progress"))

    assert result.success
    assert "(was draft)" in result.message
    assert offline_context.store.load().get_chapter(1).status.value == "in-progress"

    missing = run(set_status(offline_context, element_type="scene", element_id=3, status="completed"))
    assert missing.message == "❌ No scene with ID 3 in the story bible."


def test_result_is_json_serializable(offline_context):
    result = run(get_story_status(offline_context))

    assert json.loads(json.dumps(result.to_dict()))["success"] is True
