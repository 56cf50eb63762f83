import random

import pytest

from lingua_tutor.engine import (
    APOLOGY,
    CANNED_REPLIES,
    HISTORY_WINDOW,
    WELCOME_MESSAGES,
    TopicUnavailableError,
    TutorSession,
)
from lingua_tutor.llm_client import TutorServiceError
from lingua_tutor.option_bank import PracticeSet, lookup, topic_fallback
from lingua_tutor.progress import ProgressState

pytestmark = pytest.mark.asyncio

LESSON_REPLY = """Γειά σου! I'm happy to teach you today.

Greek phrase: Καλημέρα
Pronunciation: kah-lee-MEH-rah
English meaning: Good morning

Practice:
"Καλημέρα"
"Καληνύχτα"
"Ευχαριστώ"
"Συγγνώμη"
"""

ROUTINE_REPLY = "Well done, keep going with the next lesson please."


def _session(state: ProgressState | None = None, language: str = "el") -> TutorSession:
    session = TutorSession(language, state or ProgressState(), rng=random.Random(7))
    session.practice = PracticeSet(options=["Γειά σου", "Καληνύχτα", "Ευχαριστώ"], correct_option="Γειά σου")
    return session


async def test_start_without_tutor_posts_welcome() -> None:
    session = TutorSession("es", ProgressState())
    result = await session.start(None)
    assert [m.text for m in result.messages] == [WELCOME_MESSAGES["es"]]
    assert result.messages[0].sender == "tutor"
    assert result.practice == lookup("es", "beginner", "greetings", 0)
    assert session.history == []


async def test_start_unknown_language_uses_default_welcome() -> None:
    result = await TutorSession("xx", ProgressState()).start(None)
    assert result.messages[0].text.startswith("Hello! I'm your language teacher.")


async def test_start_with_tutor_parses_lesson(scripted_tutor) -> None:
    tutor = scripted_tutor([LESSON_REPLY])
    session = TutorSession("el", ProgressState(), rng=random.Random(0))
    result = await session.start(tutor)

    assert result.practice.correct_option == "Καλημέρα"
    assert "Practice:" not in result.messages[0].text
    assert session.history == [{"role": "assistant", "content": LESSON_REPLY}]
    assert "Greek language teacher" in tutor.calls[0]["system"]
    assert tutor.calls[0]["prior"] == []


async def test_start_with_failing_tutor_apologises(scripted_tutor) -> None:
    tutor = scripted_tutor([TutorServiceError("down")])
    session = TutorSession("el", ProgressState())
    result = await session.start(tutor)
    assert result.messages[-1].text == APOLOGY
    assert result.practice == lookup("el", "beginner", "greetings", 0)


async def test_correct_answer_without_tutor() -> None:
    session = _session()
    result = await session.choose("Γειά σου", None)

    assert result.correct is True
    assert result.expected == "Γειά σου"
    assert [m.sender for m in result.messages] == ["user", "tutor"]
    assert result.messages[1].text == "Great job! That's correct! 🎉"
    assert session.state.progress == 1
    assert result.practice == lookup("el", "beginner", "greetings", 1)


async def test_wrong_answer_without_tutor_keeps_question() -> None:
    session = _session()
    question = session.practice
    result = await session.choose("Καληνύχτα", None)

    assert result.correct is False
    assert result.messages[1].text == 'Not quite. The correct answer is "Γειά σου". Let\'s try again!'
    assert session.practice == question
    assert session.state.progress == 0


async def test_formal_greeting_counts_as_correct() -> None:
    session = _session()
    session.practice = PracticeSet(options=["Γειά σου", "Γειά σας", "Καληνύχτα"], correct_option="Γειά σου")
    session.state = ProgressState(topic="greetings")
    result = await session.choose("Γειά σας", None)
    assert result.correct is True


async def test_completing_topic_parses_reply_for_next_topic(scripted_tutor) -> None:
    session = _session(ProgressState(level="beginner", topic="greetings", progress=4))
    tutor = scripted_tutor([ROUTINE_REPLY])
    result = await session.choose("Γειά σου", tutor)

    assert session.state.topic == "introductions"
    assert session.state.completed == ["beginner-greetings"]
    # No options in the reply, so the fallback for the new topic is used
    assert result.practice == topic_fallback("el", "introductions")
    assert result.messages[-1].text == ROUTINE_REPLY


async def test_wrong_answer_with_tutor_shows_feedback_only(scripted_tutor) -> None:
    session = _session()
    question = session.practice
    tutor = scripted_tutor(['Not quite, try again!\n\nPractice:\n"a"\n"b"'])
    result = await session.choose("Ευχαριστώ", tutor)

    assert result.messages[-1].text == "Not quite, try again!"
    assert session.practice == question
    assert session.history[-1]["content"].endswith('"b"')


async def test_tutor_receives_history_before_the_answer(scripted_tutor) -> None:
    session = _session()
    session.history = [{"role": "assistant", "content": "lesson"}]
    tutor = scripted_tutor([LESSON_REPLY])
    await session.choose("Γειά σου", tutor)

    call = tutor.calls[0]
    assert call["prior"] == [{"role": "assistant", "content": "lesson"}]
    assert 'The user selected "Γειά σου"' in call["user"]
    assert session.history[1] == {"role": "user", "content": "Γειά σου"}


async def test_failing_tutor_during_answer_still_advances(scripted_tutor) -> None:
    session = _session()
    tutor = scripted_tutor([TutorServiceError("timeout")])
    result = await session.choose("Γειά σου", tutor)

    assert result.messages[-1].text == APOLOGY
    assert session.state.progress == 1
    assert result.practice == lookup("el", "beginner", "greetings", 1)


async def test_send_without_tutor_uses_canned_reply() -> None:
    session = _session()
    result = await session.send("Καλημέρα!", None)

    assert result.messages[0].sender == "user"
    tutor_text = result.messages[1].text
    assert any(tutor_text.startswith(reply[:10]) for reply in CANNED_REPLIES["el"])
    assert 2 <= len(result.practice.options) <= 4
    assert session.state.progress == 0


async def test_send_limits_context_to_recent_turns(scripted_tutor) -> None:
    session = _session()
    session.history = [{"role": "user", "content": str(i)} for i in range(10)]
    tutor = scripted_tutor([LESSON_REPLY])
    result = await session.send("more please", tutor)

    assert len(tutor.calls[0]["prior"]) == HISTORY_WINDOW
    assert tutor.calls[0]["prior"][-1]["content"] == "9"
    assert 'The user\'s message is: "more please"' in tutor.calls[0]["user"]
    assert result.practice.correct_option == "Καλημέρα"


async def test_send_with_failing_tutor(scripted_tutor) -> None:
    session = _session()
    result = await session.send("hello", scripted_tutor([TutorServiceError("bad key")]))
    assert result.messages[-1].text == APOLOGY
    assert result.practice == lookup("el", "beginner", "greetings", 0)


async def test_select_topic_starts_fresh_conversation() -> None:
    session = _session(ProgressState(level="beginner", topic="numbers", progress=3, completed=["beginner-greetings"]))
    session.history = [{"role": "user", "content": "old"}]
    result = await session.select_topic("beginner", "common-phrases", None)

    assert [m.text for m in result.messages] == ["Switching to beginner level: Common Phrases"]
    assert result.messages[0].sender == "system"
    assert session.history == []
    assert session.state.topic == "common-phrases"
    assert session.state.progress == 0
    assert session.state.completed == ["beginner-greetings"]


async def test_select_topic_with_tutor_intro(scripted_tutor) -> None:
    session = _session()
    tutor = scripted_tutor([LESSON_REPLY])
    result = await session.select_topic("beginner", "colors", tutor)

    assert len(result.messages) == 2
    assert result.practice.correct_option == "Καλημέρα"
    assert '"Colors"' in tutor.calls[0]["user"]


async def test_select_topic_with_failing_tutor(scripted_tutor) -> None:
    session = _session()
    result = await session.select_topic("beginner", "colors", scripted_tutor([]))
    assert result.messages[-1].text == APOLOGY
    assert result.practice == lookup("el", "beginner", "colors", 0)


async def test_locked_topic_is_rejected() -> None:
    session = _session()
    with pytest.raises(TopicUnavailableError):
        await session.select_topic("intermediate", "travel", None)
    with pytest.raises(TopicUnavailableError):
        await session.select_topic("beginner", "travel", None)
    assert session.state.topic == "greetings"
