"""
Tutoring session orchestration.

A ``TutorSession`` holds one learner conversation: the visible messages, the
turns sent back to the tutor service as context, the practice question on
screen and the learner's ``ProgressState``. The hosting layer injects the
persisted state before each call and writes ``session.state`` back after it.

The tutor service is passed per call and may be ``None`` (no API key); every
path then runs on the option bank. Tutor failures never propagate: the tutor
turn becomes an apology and the option bank supplies the next question.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from datetime import UTC, datetime
from typing import Dict, List, Literal, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from . import option_bank, parser, prompts
from .curriculum import CURRICULUM, LEVELS, format_topic_name, is_topic_available
from .grader import is_correct
from .llm_client import TutorServiceError
from .option_bank import PracticeSet
from .progress import ProgressState, advance, select_topic, validate

logger = logging.getLogger(__name__)


APOLOGY = "Sorry, there was an error communicating with the AI service. Please try again later."

# Turns of context sent with a free-text message
HISTORY_WINDOW = 6

WELCOME_MESSAGES: Dict[str, str] = {
    "es": "¡Hola! Soy tu profesor de español. 'Hello' in Spanish is 'Hola'. You can select the correct response from the options below or type your answer if you have a Spanish keyboard.",
    "fr": "Bonjour! Je suis ton professeur de français. 'Hello' in French is 'Bonjour'. You can select the correct response from the options below or type your answer if you have a French keyboard.",
    "de": "Hallo! Ich bin dein Deutschlehrer. 'Hello' in German is 'Hallo'. You can select the correct response from the options below or type your answer if you have a German keyboard.",
    "it": "Ciao! Sono il tuo insegnante di italiano. 'Hello' in Italian is 'Ciao'. You can select the correct response from the options below or type your answer if you have an Italian keyboard.",
    "pt": "Olá! Eu sou seu professor de português. 'Hello' in Portuguese is 'Olá'. You can select the correct response from the options below or type your answer if you have a Portuguese keyboard.",
    "ja": "こんにちは！私はあなたの日本語の先生です。'Hello' in Japanese is 'こんにちは' (Konnichiwa). You can select the correct response from the options below or type your answer if you have a Japanese keyboard.",
    "zh": "你好！我是你的中文老师。'Hello' in Chinese is '你好' (Nǐ hǎo). You can select the correct response from the options below or type your answer if you have a Chinese keyboard.",
    "ru": "Привет! Я твой учитель русского языка. 'Hello' in Russian is 'Привет' (Privet). You can select the correct response from the options below or type your answer if you have a Russian keyboard.",
    "ar": "مرحبا! أنا مدرس اللغة العربية. 'Hello' in Arabic is 'مرحبا' (Marhaba). You can select the correct response from the options below or type your answer if you have an Arabic keyboard.",
    "ko": "안녕하세요! 저는 당신의 한국어 선생님입니다. 'Hello' in Korean is '안녕하세요' (Annyeonghaseyo). You can select the correct response from the options below or type your answer if you have a Korean keyboard.",
    "el": "Hello! I'm your Greek language teacher. Let's start with some basics. 'Hello' in Greek is 'Γειά σου' (pronounced as 'YAH-soo'). You can select the correct response from the options below or type your answer if you have a Greek keyboard.",
}
DEFAULT_WELCOME = "Hello! I'm your language teacher. You can select the correct response from the options below or type your answer."

CANNED_REPLIES: Dict[str, List[str]] = {
    "es": [
        "¡Muy bien! Sigamos practicando español.",
        "¿Podrías decirme más sobre eso?",
        "Interesante. ¿Cómo dirías esto en español?",
        "Excelente progreso. Ahora intentemos algo más complejo.",
    ],
    "fr": [
        "Très bien ! Continuons à pratiquer le français.",
        "Pourrais-tu m'en dire plus à ce sujet ?",
        "Intéressant. Comment dirais-tu cela en français ?",
        "Excellent progrès. Essayons quelque chose de plus complexe maintenant.",
    ],
    "de": [
        "Sehr gut! Lass uns weiter Deutsch üben.",
        "Könntest du mir mehr darüber erzählen?",
        "Interessant. Wie würdest du das auf Deutsch sagen?",
        "Ausgezeichneter Fortschritt. Versuchen wir jetzt etwas Komplexeres.",
    ],
    "el": [
        "Πολύ καλά! Ας συνεχίσουμε να εξασκούμαστε στα ελληνικά.",
        "Θα μπορούσες να μου πεις περισσότερα γι' αυτό;",
        "Ενδιαφέρον. Πώς θα το έλεγες αυτό στα ελληνικά;",
        "Εξαιρετική πρόοδος. Ας δοκιμάσουμε κάτι πιο σύνθετο τώρα.",
    ],
}
DEFAULT_CANNED_REPLIES: List[str] = [
    "I understand. Let's continue practicing.",
    "Could you tell me more about that?",
    "That's interesting. How would you say this in my language?",
    "Great progress. Let's try something more challenging now.",
]


class TutorService(Protocol):
    async def complete(self, system_prompt: str, prior_turns: Sequence[Dict[str, str]], user_turn: str) -> str:
        ...


class TopicUnavailableError(ValueError):
    """Requested topic is unknown or still locked for the learner."""


class Message(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    sender: Literal["user", "tutor", "system"]
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TurnResult(BaseModel):
    messages: List[Message]
    practice: PracticeSet
    state: ProgressState
    correct: Optional[bool] = None
    expected: Optional[str] = None


class TutorSession:
    def __init__(
        self,
        language: str,
        state: ProgressState,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.session_id: str = uuid.uuid4().hex
        self.language = language
        self.state = validate(state)
        self.messages: List[Message] = []
        self.history: List[Dict[str, str]] = []
        self.practice: PracticeSet = self._bank_practice(self.state)
        self.rng = rng or random.Random()
        # One user action at a time per session
        self.lock: asyncio.Lock = asyncio.Lock()

    # -- helpers -----------------------------------------------------------

    def _post(self, sender: Literal["user", "tutor", "system"], text: str) -> Message:
        message = Message(sender=sender, text=text)
        self.messages.append(message)
        return message

    def _remember(self, role: str, content: str) -> None:
        self.history.append({"role": role, "content": content})

    def _bank_practice(self, state: ProgressState) -> PracticeSet:
        return option_bank.lookup(self.language, state.level, state.topic, state.progress)

    def _parse(self, text: str, topic: str) -> parser.ParsedResponse:
        return parser.parse(text, topic, self.language, rng=self.rng)

    async def _ask(
        self,
        tutor: Optional[TutorService],
        prompt: str,
        prior_turns: Sequence[Dict[str, str]],
        *,
        topic: str,
        progress: int,
        level: str,
    ) -> Optional[str]:
        if tutor is None:
            return None
        system_prompt = prompts.build_system_prompt(self.language, topic, progress, level)
        try:
            return await tutor.complete(system_prompt, list(prior_turns), prompt)
        except TutorServiceError as exc:
            logger.warning("Tutor service unavailable for session %s: %s", self.session_id, exc)
            return None

    def _result(self, posted: List[Message], **extra) -> TurnResult:
        return TurnResult(messages=posted, practice=self.practice, state=self.state, **extra)

    # -- user actions ------------------------------------------------------

    async def start(self, tutor: Optional[TutorService] = None) -> TurnResult:
        """Open the conversation with a first lesson and question."""
        self.messages = []
        self.history = []
        posted: List[Message] = []
        if tutor is None:
            posted.append(self._post("tutor", WELCOME_MESSAGES.get(self.language, DEFAULT_WELCOME)))
            self.practice = self._bank_practice(self.state)
            return self._result(posted)

        reply = await self._ask(
            tutor,
            prompts.initial_lesson_prompt(self.language),
            [],
            topic=self.state.topic,
            progress=self.state.progress,
            level=self.state.level,
        )
        if reply is None:
            posted.append(self._post("tutor", APOLOGY))
            self.practice = self._bank_practice(self.state)
            return self._result(posted)

        parsed = self._parse(reply, self.state.topic)
        self._remember("assistant", reply)
        posted.append(self._post("tutor", parsed.cleaned_text or reply))
        self.practice = parsed.practice
        return self._result(posted)

    async def choose(self, option: str, tutor: Optional[TutorService] = None) -> TurnResult:
        """Grade an answer, give feedback and move the learner along."""
        before = self.state
        expected = self.practice.correct_option
        correct = is_correct(option, expected, self.language, before.topic)
        after = advance(before, correct)
        logger.info(
            "Answer %r for %s:%s was %s (%s:%s:%s -> %s:%s:%s)",
            option, before.level, before.topic, "correct" if correct else "wrong",
            before.level, before.topic, before.progress, after.level, after.topic, after.progress,
        )

        prior = list(self.history)
        posted = [self._post("user", option)]
        self._remember("user", option)

        reply = await self._ask(
            tutor,
            prompts.feedback_prompt(self.language, before.level, before.topic, option, expected, correct),
            prior,
            topic=before.topic,
            progress=before.progress,
            level=before.level,
        )

        if reply is None:
            if tutor is not None:
                feedback = APOLOGY
            elif correct:
                feedback = "Great job! That's correct! 🎉"
            else:
                feedback = f'Not quite. The correct answer is "{expected}". Let\'s try again!'
            if correct:
                self.practice = self._bank_practice(after)
            posted.append(self._post("tutor", feedback))
            self._remember("assistant", feedback)
        else:
            if correct:
                parsed = self._parse(reply, after.topic)
                self.practice = parsed.practice
                display = parsed.cleaned_text
            else:
                # Same question again; only the feedback is shown
                display = parser.strip_practice_section(reply)
            posted.append(self._post("tutor", display or reply))
            self._remember("assistant", reply)

        self.state = after
        return self._result(posted, correct=correct, expected=expected)

    async def send(self, text: str, tutor: Optional[TutorService] = None) -> TurnResult:
        """Free-text turn; refreshes the practice question from the reply."""
        prior = self.history[-HISTORY_WINDOW:]
        posted = [self._post("user", text)]
        self._remember("user", text)

        if tutor is None:
            replies = CANNED_REPLIES.get(self.language, DEFAULT_CANNED_REPLIES)
            reply: Optional[str] = self.rng.choice(replies)
        else:
            reply = await self._ask(
                tutor,
                prompts.topic_reinforcement_prompt(self.language, self.state.topic, text),
                prior,
                topic=self.state.topic,
                progress=self.state.progress,
                level=self.state.level,
            )

        if reply is None:
            posted.append(self._post("tutor", APOLOGY))
            self._remember("assistant", APOLOGY)
            self.practice = self._bank_practice(self.state)
            return self._result(posted)

        parsed = self._parse(reply, self.state.topic)
        posted.append(self._post("tutor", parsed.cleaned_text or reply))
        self._remember("assistant", reply)
        self.practice = parsed.practice
        return self._result(posted)

    async def select_topic(self, level: str, topic: str, tutor: Optional[TutorService] = None) -> TurnResult:
        """Jump to a topic chosen by the learner; starts a fresh conversation."""
        if level not in LEVELS or topic not in CURRICULUM[level].topics:
            raise TopicUnavailableError(f"unknown topic {level}/{topic}")
        if not is_topic_available(self.state.level, self.state.completed, level):
            raise TopicUnavailableError(f"{level} topics are locked")

        self.state = select_topic(self.state, level, topic)
        self.messages = []
        self.history = []
        name = format_topic_name(topic)
        posted = [self._post("system", f"Switching to {level} level: {name}")]
        self.practice = self._bank_practice(self.state)

        reply = await self._ask(
            tutor,
            prompts.topic_intro_prompt(self.language, level, topic),
            [],
            topic=topic,
            progress=0,
            level=level,
        )
        if reply is not None:
            parsed = self._parse(reply, topic)
            posted.append(self._post("tutor", parsed.cleaned_text or reply))
            self._remember("assistant", reply)
            self.practice = parsed.practice
        elif tutor is not None:
            posted.append(self._post("tutor", APOLOGY))
        return self._result(posted)
