from lingua_tutor.curriculum import (
    CURRICULUM,
    LEVELS,
    completed_in_level,
    format_topic_name,
    is_topic_available,
    language_name,
    level_of,
    next_level,
    topic_key,
    topic_status,
)


def test_levels_and_thresholds() -> None:
    assert LEVELS == ["beginner", "intermediate", "advanced"]
    assert CURRICULUM["beginner"].topics[0] == "greetings"
    assert CURRICULUM["beginner"].required_to_advance == 5
    assert CURRICULUM["intermediate"].required_to_advance == 6
    assert CURRICULUM["advanced"].required_to_advance == 0
    assert len(CURRICULUM["advanced"].topics) == 9


def test_topics_are_unique_across_levels() -> None:
    all_topics = [t for level in LEVELS for t in CURRICULUM[level].topics]
    assert len(all_topics) == len(set(all_topics))


def test_lookup_helpers() -> None:
    assert next_level("beginner") == "intermediate"
    assert next_level("advanced") is None
    assert level_of("travel") == "intermediate"
    assert level_of("nope") is None
    assert topic_key("beginner", "greetings") == "beginner-greetings"
    assert format_topic_name("common-phrases") == "Common Phrases"
    assert format_topic_name("daily-routine") == "Daily Routine"
    assert language_name("el") == "Greek"
    assert language_name("xx") == "xx"


def test_next_level_opens_after_required_completions() -> None:
    done = [topic_key("beginner", t) for t in CURRICULUM["beginner"].topics[:4]]
    assert completed_in_level("beginner", done) == 4
    assert is_topic_available("beginner", done, "intermediate") is False

    done.append(topic_key("beginner", "foods"))
    assert is_topic_available("beginner", done, "intermediate") is True
    # Two levels ahead is always locked
    assert is_topic_available("beginner", done, "advanced") is False
    # Earlier levels are always open
    assert is_topic_available("advanced", [], "beginner") is True


def test_topic_status_precedence() -> None:
    done = ["beginner-greetings"]
    assert topic_status("beginner", "greetings", done, "beginner", "greetings") == "completed"
    assert topic_status("beginner", "numbers", done, "beginner", "numbers") == "current"
    assert topic_status("beginner", "numbers", done, "beginner", "colors") == "available"
    assert topic_status("beginner", "numbers", done, "intermediate", "travel") == "locked"
