from __future__ import annotations

import logging
import random
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from . import option_bank
from .option_bank import PracticeSet

logger = logging.getLogger(__name__)


PRACTICE_MARKER = "Practice:"
MAX_OPTIONS = 4
MIN_OPTIONS = 2
# Quoted text or lines this long are prose, not answer options
MAX_OPTION_LENGTH = 50

_QUOTED_RE = re.compile(r'"([^"]+)"')

Stage = Callable[[str], Optional[List[str]]]


class ParsedResponse(BaseModel):
    practice: PracticeSet
    cleaned_text: str
    source: str


def _unique(items: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def practice_section_stage(text: str) -> Optional[List[str]]:
    if PRACTICE_MARKER not in text:
        return None
    section = text.split(PRACTICE_MARKER, 1)[1]
    found = _unique(_QUOTED_RE.findall(section))
    return found if len(found) >= MIN_OPTIONS else None


def quoted_text_stage(text: str) -> Optional[List[str]]:
    found = _unique(q for q in _QUOTED_RE.findall(text) if len(q) < MAX_OPTION_LENGTH)
    return found if len(found) >= MIN_OPTIONS else None


def short_lines_stage(text: str) -> Optional[List[str]]:
    lines = (line.strip() for line in text.split("\n"))
    found = _unique(line for line in lines if line and len(line) < MAX_OPTION_LENGTH and ":" not in line)
    if len(found) < MIN_OPTIONS:
        return None
    return found[:MAX_OPTIONS]


STAGES: Sequence[Tuple[str, Stage]] = (
    ("practice_section", practice_section_stage),
    ("quoted_text", quoted_text_stage),
    ("short_lines", short_lines_stage),
)


def shuffle_options(candidates: Sequence[str], correct: str, rng: Optional[random.Random] = None) -> List[str]:
    """Shuffle the candidates and cap them, keeping the correct answer present."""
    shuffled = list(candidates)
    (rng or random).shuffle(shuffled)
    options = shuffled[:MAX_OPTIONS]
    if correct not in options:
        logger.debug("Correct option %r dropped by the cap, restoring it", correct)
        options[0] = correct
    return options


def strip_practice_section(text: str) -> str:
    return text.split(PRACTICE_MARKER, 1)[0].strip()


def _run_stages(text: str, topic: str, language: str, rng: Optional[random.Random]) -> Tuple[PracticeSet, str]:
    for name, stage in STAGES:
        candidates = stage(text)
        if candidates is None:
            logger.debug("Stage %s found no options", name)
            continue
        # The tutor is asked to list the correct answer first
        correct = candidates[0]
        options = shuffle_options(candidates, correct, rng)
        logger.debug("Stage %s extracted %s, correct %r", name, options, correct)
        return PracticeSet(options=options, correct_option=correct), name

    logger.warning("No options found in tutor response, using fallback for %s/%s", language, topic)
    return option_bank.topic_fallback(language, topic), "option_bank"


def parse(
    raw_text: str,
    context_topic: str,
    context_language: str,
    *,
    rng: Optional[random.Random] = None,
) -> ParsedResponse:
    text = raw_text or ""
    try:
        practice, source = _run_stages(text, context_topic, context_language, rng)
    except Exception:
        logger.exception("Option extraction failed")
        practice, source = option_bank.global_default(), "global_default"
    return ParsedResponse(practice=practice, cleaned_text=strip_practice_section(text), source=source)
