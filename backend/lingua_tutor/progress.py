from __future__ import annotations

import json
import logging
import math
from typing import Any, List

from pydantic import BaseModel, Field

from .curriculum import (
    CURRICULUM,
    LESSONS_PER_TOPIC,
    LEVELS,
    completed_in_level,
    level_of,
    next_level,
    topic_key,
)

logger = logging.getLogger(__name__)


class ProgressState(BaseModel):
    """Where the learner is in the curriculum.

    ``completed`` holds ``"level-topic"`` keys and behaves as an ordered set.
    Instances are treated as values: every operation below returns a new one.
    """

    level: str = "beginner"
    topic: str = "greetings"
    progress: int = Field(default=0)
    completed: List[str] = Field(default_factory=list)


def default_state() -> ProgressState:
    return ProgressState()


def next_topic(state: ProgressState) -> str:
    level = state.level
    plan = CURRICULUM[level]
    done = set(state.completed)

    remaining = [t for t in plan.topics if topic_key(level, t) not in done]
    if remaining:
        return remaining[0]

    if completed_in_level(level, state.completed) >= plan.required_to_advance:
        upcoming = next_level(level)
        if upcoming is not None:
            return CURRICULUM[upcoming].topics[0]

    # Nothing left to advance to: loop back over the level for review
    return plan.topics[0]


def _complete_topic(level: str, topic: str, completed: List[str]) -> ProgressState:
    key = topic_key(level, topic)
    if key not in completed:
        completed = [*completed, key]
    marked = ProgressState(level=level, topic=topic, progress=0, completed=completed)
    new_topic = next_topic(marked)
    new_level = level
    if new_topic not in CURRICULUM[level].topics:
        new_level = level_of(new_topic) or level
    logger.info("Topic %s completed, moving to %s:%s", key, new_level, new_topic)
    return ProgressState(level=new_level, topic=new_topic, progress=0, completed=completed)


def validate(state: ProgressState) -> ProgressState:
    """Repair a state field by field; never rejects."""
    level, topic, progress = state.level, state.topic, state.progress

    if level not in LEVELS:
        logger.warning("Invalid level %r, resetting to beginner", level)
        level = "beginner"

    valid_topics = CURRICULUM[level].topics
    if topic not in valid_topics:
        logger.warning("Invalid topic %r, resetting to first topic of %s", topic, level)
        topic = valid_topics[0]

    if progress < 0:
        logger.warning("Invalid progress %r, resetting to 0", progress)
        progress = 0

    completed: List[str] = []
    for key in state.completed:
        if isinstance(key, str) and key not in completed:
            completed.append(key)

    if progress >= LESSONS_PER_TOPIC:
        return _complete_topic(level, topic, completed)

    return ProgressState(level=level, topic=topic, progress=progress, completed=completed)


def advance(state: ProgressState, was_correct: bool) -> ProgressState:
    state = validate(state)
    if was_correct:
        progress = state.progress + 1
        if progress >= LESSONS_PER_TOPIC:
            return _complete_topic(state.level, state.topic, list(state.completed))
    else:
        # TODO: confirm with product whether a wrong answer should count half a
        # lesson; flooring every step means a single miss never moves progress.
        progress = math.floor(state.progress + 0.5)
    return validate(state.model_copy(update={"progress": progress}))


def select_topic(state: ProgressState, level: str, topic: str) -> ProgressState:
    """User-initiated jump: progress restarts, completed topics are kept."""
    chosen = ProgressState(level=level, topic=topic, progress=0, completed=list(state.completed))
    return validate(chosen)


def state_from_payload(payload: Any) -> ProgressState:
    """Build a state from persisted data, taking defaults for unreadable fields."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            logger.warning("Stored teaching state is not valid JSON, using defaults")
            payload = {}
    if not isinstance(payload, dict):
        logger.warning("Stored teaching state has unexpected type %s, using defaults", type(payload).__name__)
        payload = {}

    defaults = default_state()
    level = payload.get("level")
    topic = payload.get("topic")
    raw_progress = payload.get("progress")
    raw_completed = payload.get("completed")

    try:
        progress = math.floor(float(raw_progress))
    except (TypeError, ValueError, OverflowError):
        progress = defaults.progress

    completed = [c for c in raw_completed if isinstance(c, str)] if isinstance(raw_completed, list) else []

    state = ProgressState(
        level=level if isinstance(level, str) else defaults.level,
        topic=topic if isinstance(topic, str) else defaults.topic,
        progress=progress,
        completed=completed,
    )
    return validate(state)


def state_to_json(state: ProgressState) -> str:
    return json.dumps(state.model_dump(), ensure_ascii=False)
