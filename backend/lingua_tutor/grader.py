from __future__ import annotations

import re

_PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")

# Below this length answers must match exactly, so "1" does not match "10"
SHORT_ANSWER_LENGTH = 5

GREETING_TOPICS = ("greeting", "greetings")
# Informal and formal "hello" roots, with and without the accent
GREEK_HELLO_ROOTS = ("γεια", "γειά", "για", "γιά")


def normalize(answer: str) -> str:
    return _PUNCTUATION_RE.sub("", answer.strip().lower())


def _is_greek_greeting(selected: str, correct: str, language: str, topic: str) -> bool:
    if language != "el" or topic not in GREETING_TOPICS:
        return False
    return any(root in selected for root in GREEK_HELLO_ROOTS) and any(
        root in correct for root in GREEK_HELLO_ROOTS
    )


def is_correct(selected: str, correct: str, language: str, topic: str) -> bool:
    given = normalize(selected)
    expected = normalize(correct)
    if not given:
        return False
    if given in expected or expected in given:
        return True
    if len(given) < SHORT_ANSWER_LENGTH and len(expected) < SHORT_ANSWER_LENGTH and given == expected:
        return True
    return _is_greek_greeting(given, expected, language, topic)
