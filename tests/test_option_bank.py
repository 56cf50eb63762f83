import pytest

from lingua_tutor.curriculum import CURRICULUM, LEVELS
from lingua_tutor.option_bank import (
    PRACTICE_CYCLE,
    PracticeSet,
    global_default,
    lookup,
    topic_fallback,
)

LANGUAGES = ["el", "es", "fr", "de", "ja", "xx"]


def _assert_valid(practice: PracticeSet) -> None:
    assert 2 <= len(practice.options) <= 4
    assert practice.correct_option in practice.options


@pytest.mark.parametrize("language", LANGUAGES)
def test_lookup_always_returns_a_valid_set(language: str) -> None:
    for level in LEVELS:
        for topic in CURRICULUM[level].topics:
            for idx in range(7):
                _assert_valid(lookup(language, level, topic, idx))


@pytest.mark.parametrize("topic", ["greeting", "basic-phrases", "simple-conversation", "practice"])
def test_lesson_rows_are_valid(topic: str) -> None:
    for language in LANGUAGES:
        for idx in range(10):
            _assert_valid(lookup(language, "beginner", topic, idx))


def test_known_lesson_entry() -> None:
    practice = lookup("es", "beginner", "greeting", 0)
    assert practice.correct_option == "Hola"
    assert practice.options == ["Hola", "Gracias", "Buenas noches", "Lo siento"]


def test_missing_language_uses_generic_row() -> None:
    practice = lookup("fr", "beginner", "simple-conversation", 2)
    assert practice.correct_option == "I am from..."


def test_practice_topic_cycles() -> None:
    for idx in range(PRACTICE_CYCLE):
        assert lookup("el", "beginner", "practice", idx) == lookup("el", "beginner", "practice", idx + PRACTICE_CYCLE)
    assert lookup("es", "beginner", "practice", 3).correct_option == "Gracias"


def test_unmatched_lookup_uses_language_default() -> None:
    assert lookup("el", "intermediate", "travel", 0).correct_option == "Ευχαριστώ"
    assert lookup("de", "beginner", "foods", 3).correct_option == "Danke"
    assert lookup("ko", "advanced", "slang", 1).correct_option == "Thank you"


def test_returned_sets_are_copies() -> None:
    first = lookup("el", "beginner", "greeting", 0)
    first.options.append("extra")
    assert lookup("el", "beginner", "greeting", 0).options == ["Γειά σου", "Γειά σας", "Καλημέρα", "Καληνύχτα"]


def test_topic_fallbacks() -> None:
    assert topic_fallback("fr", "numbers").correct_option == "Un"
    assert topic_fallback("el", "greetings").correct_option == "Γειά σου"
    # Unknown topic uses the language's generic entry
    assert topic_fallback("de", "weather").correct_option == "Ja"
    # Unknown language uses the English table
    assert topic_fallback("ja", "numbers").correct_option == "One"
    assert topic_fallback("ja", "weather") == global_default()


def test_global_default() -> None:
    practice = global_default()
    assert practice.options == ["Yes", "No", "Maybe", "I don't know"]
    assert practice.correct_option == "Yes"


def test_practice_set_restores_missing_correct_option() -> None:
    practice = PracticeSet(options=["a", "b", "c"], correct_option="z")
    assert practice.options == ["z", "b", "c"]


def test_practice_set_rejects_bad_option_counts() -> None:
    with pytest.raises(ValueError):
        PracticeSet(options=["only"], correct_option="only")
    with pytest.raises(ValueError):
        PracticeSet(options=["a", "b", "c", "d", "e"], correct_option="a")
