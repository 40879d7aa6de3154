"""Shared fixtures for Chapter Master tests."""

import json

import pytest

from chaptermaster.ai.claude_client import parse_object
from chaptermaster.config import Config
from chaptermaster.core.elements import Chapter, Character, PlotThread, Premise, Scene
from chaptermaster.core.story_bible import StoryBible
from chaptermaster.exceptions import ExternalServiceFailed
from chaptermaster.io.story_bible_store import StoryBibleStore
from chaptermaster.operations import OperationContext


PREMISE_REPLY = {
    "content": "A lighthouse keeper discovers the lamp is signalling something that answers back.",
    "genre": "mystery",
    "themes": ["isolation", "trust"],
    "targetAudience": "Adult readers",
    "wordCountTarget": 90000,
}

CHARACTER_REPLY = {
    "title": "Mara Quill",
    "description": "A keeper who trusts the sea more than people",
    "characterType": "protagonist",
    "motivations": ["Find her brother"],
    "fears": ["Being forgotten"],
    "goals": ["Decode the signal"],
    "traits": ["stubborn", "observant"],
    "arc": "From isolation to trust",
    "speechPatterns": ["Short sentences"],
    "tone": "dry",
}

CHAPTER_REPLY = {
    "title": "The First Signal",
    "description": "Mara notices the answering light",
    "purpose": "Introduce the mystery",
    "conflicts": ["Mara versus the harbour master"],
    "plotAdvancement": "The signal is established",
    "characterMoments": ["Mara decides to stay"],
}

PLOT_THREAD_REPLY = {
    "description": "Who is answering the lamp?",
    "introduction": "Chapter 1, the first night",
    "development": ["The pattern repeats", "The pattern changes"],
    "resolution": "The answer comes from the brother",
}


class FakeGenerationService:
    """Stands in for the model: replies are raw text keyed by schema name."""

    def __init__(self, replies=None, text="Generated text", fail_text=False):
        self.replies = {
            key: value if isinstance(value, str) else json.dumps(value)
            for key, value in (replies or {}).items()
        }
        self.text = text
        self.fail_text = fail_text
        self.calls = []

    async def generate_text(self, prompt, role="main", system=""):
        self.calls.append(("text", role, prompt))
        if self.fail_text:
            raise ExternalServiceFailed("service unavailable")
        return self.text

    async def generate_object(self, prompt, role, schema, schema_name):
        self.calls.append(("object", role, schema_name))
        if schema_name not in self.replies:
            raise ExternalServiceFailed(f"no reply configured for {schema_name}")
        return parse_object(self.replies[schema_name], schema, schema_name)


def default_service(**overrides):
    replies = {
        "premise_analysis": PREMISE_REPLY,
        "character_profile": CHARACTER_REPLY,
        "chapter_structure": CHAPTER_REPLY,
        "plot_thread": PLOT_THREAD_REPLY,
    }
    replies.update(overrides)
    return FakeGenerationService(replies)


def make_premise(**kwargs):
    values = dict(
        id=1,
        title="Story Premise",
        description="Core story premise and foundation",
        status="completed",
        priority="high",
        content="A lighthouse keeper hears an answer.",
        genre="mystery",
    )
    values.update(kwargs)
    return Premise(**values)


def make_character(id, title="Mara", **kwargs):
    values = dict(id=id, title=title, description="A character", character_type="protagonist")
    values.update(kwargs)
    return Character(**values)


def make_chapter(id, number=None, **kwargs):
    number = number if number is not None else id
    values = dict(
        id=id,
        title=f"Chapter {number}",
        description="A chapter",
        chapter_number=number,
        purpose="Move the story",
    )
    values.update(kwargs)
    return Chapter(**values)


def make_scene(id, chapter_id, characters=None, **kwargs):
    values = dict(
        id=id,
        title=f"Scene {id}",
        description="A scene",
        scene_type="dialogue",
        chapter_id=chapter_id,
        characters=characters or [],
        setting="The lighthouse",
        purpose="Advance the chapter",
    )
    values.update(kwargs)
    return Scene(**values)


def make_plot_thread(id, title="The Signal", **kwargs):
    values = dict(id=id, title=title, description="A plot thread", thread_type="main")
    values.update(kwargs)
    return PlotThread(**values)


def make_bible(premise=True, **collections):
    bible = StoryBible.create(genre="mystery", title="The Answering Light", target_word_count=80000)
    if premise:
        bible.premise = make_premise()
    for name, items in collections.items():
        setattr(bible, name, items)
    return bible


@pytest.fixture
def store(tmp_path):
    return StoryBibleStore(tmp_path)


@pytest.fixture
def saved_store(store):
    """A store holding a bible with a completed premise and nothing else."""
    store.create(make_bible())
    return store


@pytest.fixture
def context(saved_store):
    return OperationContext(store=saved_store, service=default_service(), config=Config(api_key=""))


@pytest.fixture
def offline_context(saved_store):
    return OperationContext(store=saved_store, service=None, config=Config(api_key=""))
