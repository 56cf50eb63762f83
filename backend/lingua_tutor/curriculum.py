from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel


class LevelPlan(BaseModel):
    topics: List[str]
    required_to_advance: int

    model_config = {"frozen": True}


# Level order matters: advancement always moves one step to the right.
LEVELS: List[str] = ["beginner", "intermediate", "advanced"]

CURRICULUM: Dict[str, LevelPlan] = {
    "beginner": LevelPlan(
        topics=[
            "greetings",
            "introductions",
            "numbers",
            "common-phrases",
            "foods",
            "colors",
            "family",
        ],
        required_to_advance=5,
    ),
    "intermediate": LevelPlan(
        topics=[
            "travel",
            "shopping",
            "dining",
            "directions",
            "weather",
            "hobbies",
            "time-expressions",
            "daily-routine",
        ],
        required_to_advance=6,
    ),
    "advanced": LevelPlan(
        topics=[
            "opinions",
            "culture",
            "news",
            "storytelling",
            "idioms",
            "debate",
            "professional",
            "slang",
            "literature",
        ],
        # Highest level, nothing to advance to
        required_to_advance=0,
    ),
}

# Lessons per topic; reaching this progress completes the topic.
LESSONS_PER_TOPIC = 5

LANGUAGE_NAMES: Dict[str, str] = {
    "el": "Greek",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ja": "Japanese",
    "zh": "Chinese",
    "ru": "Russian",
    "ar": "Arabic",
    "ko": "Korean",
}


def language_name(language: str) -> str:
    return LANGUAGE_NAMES.get(language, language)


def topic_key(level: str, topic: str) -> str:
    return f"{level}-{topic}"


def topics_for(level: str) -> List[str]:
    return list(CURRICULUM[level].topics)


def next_level(level: str) -> Optional[str]:
    idx = LEVELS.index(level)
    if idx + 1 < len(LEVELS):
        return LEVELS[idx + 1]
    return None


def level_of(topic: str) -> Optional[str]:
    for level in LEVELS:
        if topic in CURRICULUM[level].topics:
            return level
    return None


def completed_in_level(level: str, completed: Sequence[str]) -> int:
    done = set(completed)
    return sum(1 for t in CURRICULUM[level].topics if topic_key(level, t) in done)


def format_topic_name(topic: str) -> str:
    """'common-phrases' -> 'Common Phrases'."""
    return " ".join(word[:1].upper() + word[1:] for word in topic.split("-"))


def is_topic_available(current_level: str, completed: Sequence[str], check_level: str) -> bool:
    """Whether topics of ``check_level`` can be opened from ``current_level``.

    The current level and every earlier level are open. The level right after
    the current one opens once enough of the current level is completed.
    """
    current_idx = LEVELS.index(current_level)
    check_idx = LEVELS.index(check_level)
    if check_idx <= current_idx:
        return True
    if check_idx == current_idx + 1:
        required = CURRICULUM[current_level].required_to_advance
        return completed_in_level(current_level, completed) >= required
    return False


def topic_status(
    current_level: str,
    current_topic: str,
    completed: Sequence[str],
    check_level: str,
    check_topic: str,
) -> str:
    if topic_key(check_level, check_topic) in completed:
        return "completed"
    if check_level == current_level and check_topic == current_topic:
        return "current"
    if is_topic_available(current_level, completed, check_level):
        return "available"
    return "locked"
