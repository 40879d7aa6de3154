"""Tests for the command line interface."""

import json

import yaml
from click.testing import CliRunner

from chaptermaster.cli.main import cli
from chaptermaster.io.story_bible_store import StoryBibleStore

from conftest import make_bible, make_chapter


def invoke(tmp_path, *args):
    runner = CliRunner()
    return runner.invoke(cli, ["--project-root", str(tmp_path), "--no-ai", *args])


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.3.0" in result.output


def test_missing_story_bible_exits_with_error(tmp_path):
    """Failures go to stderr with exit status 1."""
    result = invoke(tmp_path, "status")

    assert result.exit_code == 1
    assert "No story bible found" in result.output


def test_parse_premise_needs_ai(tmp_path):
    result = invoke(tmp_path, "parse-premise", "A keeper hears an answer.")

    assert result.exit_code == 1
    assert "Failed to parse premise" in result.output


def test_chapter_workflow(tmp_path):
    """Create a chapter, move it along and ask what to do next."""
    StoryBibleStore(tmp_path).create(make_bible())

    created = invoke(tmp_path, "generate-chapter", "--title", "Arrival", "--characters", "1,2",
                     "--conflict", "Storm", "--conflict", "Harbour master")
    assert created.exit_code == 0, created.output
    assert "Chapter 1 created successfully" in created.output

    chapter = StoryBibleStore(tmp_path).load().get_chapter(1)
    assert chapter.characters == [1, 2]
    assert chapter.conflicts == ["Storm", "Harbour master"]

    moved = invoke(tmp_path, "set-status", "chapter", "1", "in-progress")
    assert moved.exit_code == 0, moved.output

    nxt = invoke(tmp_path, "next-chapter")
    assert "Continue working on chapter already in progress" in nxt.output


def test_json_output(tmp_path):
    StoryBibleStore(tmp_path).create(make_bible(chapters=[make_chapter(1, status="completed")]))

    result = invoke(tmp_path, "--json", "get-story-status", "--format", "summary")

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["success"] is True
    assert data["data"]["completion"]["overall"] == 100


def test_check_consistency_command(tmp_path):
    StoryBibleStore(tmp_path).create(make_bible(chapters=[make_chapter(1, 1), make_chapter(2, 3)]))

    result = invoke(tmp_path, "check-consistency", "--type", "timeline", "--no-report")

    assert result.exit_code == 0, result.output
    assert "chapter-sequence-gap: 1" in result.output


def test_bad_id_list_is_rejected(tmp_path):
    result = invoke(tmp_path, "generate-chapter", "--characters", "one,two")

    assert result.exit_code == 2
    assert "comma-separated integer IDs" in result.output


def test_invalid_choice_is_rejected(tmp_path):
    result = invoke(tmp_path, "create-character", "Mara", "--type", "sidekick")
    assert result.exit_code == 2


def test_init_writes_config(tmp_path):
    result = invoke(tmp_path, "init")

    assert result.exit_code == 0, result.output
    config = yaml.safe_load((tmp_path / ".chaptermaster.yaml").read_text(encoding="utf-8"))
    assert config["models"]["research"]
    assert config["analysis_timeout"] == 120.0

    again = invoke(tmp_path, "init")
    assert again.exit_code == 1
