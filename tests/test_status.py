"""Tests for progress statistics and recommendations."""

from chaptermaster.core.status import (
    NextAction,
    collect_stats,
    completion_percentages,
    overall_completion,
    recommend_next_action,
    recommend_next_chapter,
    round_half_up,
)

from conftest import make_bible, make_chapter, make_character, make_scene


def test_weighted_completion():
    """Completed premise plus 2 of 4 completed chapters is 57%."""
    bible = make_bible(chapters=[
        make_chapter(1, status="completed"),
        make_chapter(2, status="completed"),
        make_chapter(3),
        make_chapter(4, status="in-progress"),
    ])

    assert overall_completion(collect_stats(bible)) == 57


def test_incomplete_premise_does_not_count():
    """A draft premise stays out of the denominator."""
    bible = make_bible(chapters=[make_chapter(1, status="completed"), make_chapter(2)])
    bible.premise.status = "draft"

    assert overall_completion(collect_stats(bible)) == 50


def test_empty_bible_is_zero_percent():
    assert overall_completion(collect_stats(make_bible(premise=False))) == 0


def test_completion_includes_characters():
    bible = make_bible(
        chapters=[make_chapter(1, status="completed")],
        characters=[make_character(1, status="completed"), make_character(2, title="Ilse")],
    )
    completion = completion_percentages(collect_stats(bible))

    # (10 + 60 + 10) / 90
    assert completion.overall == 89
    assert completion.chapters == 100
    assert completion.characters == 50
    assert completion.scenes == 0


def test_rounding_is_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(57.14) == 57


def test_stats_count_statuses_and_types():
    bible = make_bible(
        chapters=[make_chapter(1, status="review"), make_chapter(2, status="needs-revision"), make_chapter(3)],
        characters=[make_character(1), make_character(2, title="Ilse", character_type="antagonist")],
        scenes=[make_scene(1, 1, status="completed"), make_scene(2, 1)],
    )
    stats = collect_stats(bible)

    assert stats.chapters.total == 3
    assert stats.chapters.review == 1
    assert stats.chapters.needs_revision == 1
    assert stats.chapters.draft == 1
    assert stats.characters.protagonist == 1
    assert stats.characters.antagonist == 1
    assert stats.scenes.completed == 1


def test_word_counts():
    bible = make_bible(
        chapters=[
            make_chapter(1, word_count_target=3000, content="one two three"),
            make_chapter(2, word_count_target=2000),
        ],
        scenes=[make_scene(1, 1, content="four five")],
    )
    counts = collect_stats(bible).word_counts

    assert counts.target == 80000
    assert counts.planned == 5000
    assert counts.written == 5
    assert counts.progress == 0


def test_next_action_ladder():
    """Recommendations follow the fixed ladder."""
    assert recommend_next_action(make_bible(premise=False)) == NextAction.CREATE_PREMISE
    assert recommend_next_action(make_bible()) == NextAction.GENERATE_CHAPTER

    bible = make_bible(chapters=[make_chapter(1)])
    assert recommend_next_action(bible) == NextAction.CREATE_CHARACTER

    bible.characters = [make_character(1)]
    assert recommend_next_action(bible) == NextAction.START_DRAFT_CHAPTER

    bible.get_chapter(1).status = "in-progress"
    assert recommend_next_action(bible) == NextAction.CONTINUE_CHAPTER

    bible.get_chapter(1).status = "needs-revision"
    assert recommend_next_action(bible) == NextAction.REVISE_CHAPTER

    bible.get_chapter(1).status = "completed"
    assert recommend_next_action(bible) == NextAction.CHECK_CONSISTENCY


def test_next_chapter_prefers_in_progress_then_revision():
    bible = make_bible(chapters=[
        make_chapter(1),
        make_chapter(2, status="needs-revision"),
        make_chapter(3, status="in-progress"),
    ])
    recommendation = recommend_next_chapter(bible)
    assert recommendation.chapter.id == 3

    bible.get_chapter(3).status = "completed"
    assert recommend_next_chapter(bible).chapter.id == 2


def test_next_chapter_orders_drafts_by_priority_then_number():
    bible = make_bible(chapters=[
        make_chapter(1, priority="low"),
        make_chapter(2, priority="high"),
        make_chapter(3, priority="high"),
    ])
    recommendation = recommend_next_chapter(bible)

    assert recommendation.chapter.id == 2
    assert recommendation.reason == "Continue story progression"


def test_next_chapter_filters():
    bible = make_bible(chapters=[
        make_chapter(1, characters=[1]),
        make_chapter(2, characters=[2], plot_threads=[5]),
    ])

    assert recommend_next_chapter(bible, character_focus=2).chapter.id == 2
    assert recommend_next_chapter(bible, plot_thread="5").chapter.id == 2
    assert recommend_next_chapter(bible, status="review").chapter is None


def test_next_chapter_without_candidates_suggests_next_number():
    bible = make_bible(chapters=[make_chapter(1, status="completed"), make_chapter(2, 4, status="review")])
    recommendation = recommend_next_chapter(bible)

    assert recommendation.chapter is None
    assert recommendation.chapter_number == 5
    assert recommend_next_chapter(make_bible()).chapter_number == 1


def test_next_chapter_lists_next_open_scene():
    bible = make_bible(
        chapters=[make_chapter(1, scenes=[1, 2])],
        scenes=[make_scene(1, 1, status="completed"), make_scene(2, 1, status="in-progress")],
    )
    recommendation = recommend_next_chapter(bible)

    assert [s.id for s in recommendation.scenes] == [1, 2]
    assert recommendation.next_scene.id == 2
