from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


class PracticeSet(BaseModel):
    options: List[str] = Field(min_length=2, max_length=4)
    correct_option: str

    @model_validator(mode="after")
    def _correct_is_an_option(self) -> "PracticeSet":
        if self.correct_option not in self.options:
            self.options[0] = self.correct_option
        return self


Entry = Tuple[str, List[str]]

GENERIC = "default"

# (topic, progress index) -> language -> (correct, options).
# Rows missing a language use the row's generic (English) entry.
_LESSONS: Dict[Tuple[str, int], Dict[str, Entry]] = {
    ("greeting", 0): {
        # Both the informal and the formal greeting are accepted when grading
        "el": ("Γειά σου", ["Γειά σου", "Γειά σας", "Καλημέρα", "Καληνύχτα"]),
        "es": ("Hola", ["Hola", "Gracias", "Buenas noches", "Lo siento"]),
        "fr": ("Bonjour", ["Bonjour", "Merci", "Bonne nuit", "Pardon"]),
        "de": ("Hallo", ["Hallo", "Danke", "Gute Nacht", "Entschuldigung"]),
        "it": ("Ciao", ["Ciao", "Grazie", "Buonanotte", "Scusa"]),
        "pt": ("Olá", ["Olá", "Obrigado", "Boa noite", "Desculpe"]),
        "ja": ("こんにちは", ["こんにちは", "ありがとう", "おやすみなさい", "すみません"]),
        "zh": ("你好", ["你好", "谢谢", "晚安", "对不起"]),
        "ru": ("Привет", ["Привет", "Спасибо", "Спокойной ночи", "Извините"]),
        "ar": ("مرحبا", ["مرحبا", "شكرا", "تصبح على خير", "آسف"]),
        "ko": ("안녕하세요", ["안녕하세요", "감사합니다", "안녕히 주무세요", "죄송합니다"]),
        GENERIC: ("Hello", ["Hello", "Thank you", "Good night", "Sorry"]),
    },
    ("greeting", 1): {
        "el": ("Με λένε...", ["Με λένε...", "Χαίρω πολύ", "Από πού είσαι;", "Τι κάνεις;"]),
        "es": ("Me llamo...", ["Me llamo...", "Mucho gusto", "¿De dónde eres?", "¿Cómo estás?"]),
        "fr": ("Je m'appelle...", ["Je m'appelle...", "Enchanté", "D'où viens-tu?", "Comment ça va?"]),
        GENERIC: ("My name is...", ["My name is...", "Nice to meet you", "Where are you from?", "How are you?"]),
    },
    ("greeting", 2): {
        "el": ("Τι κάνεις;", ["Τι κάνεις;", "Πώς είσαι;", "Πού μένεις;", "Πόσο χρονών είσαι;"]),
        "es": ("¿Cómo estás?", ["¿Cómo estás?", "¿Qué tal?", "¿Dónde vives?", "¿Cuántos años tienes?"]),
        "fr": ("Comment ça va?", ["Comment ça va?", "Comment vas-tu?", "Où habites-tu?", "Quel âge as-tu?"]),
        GENERIC: ("How are you?", ["How are you?", "How's it going?", "Where do you live?", "How old are you?"]),
    },
    ("basic-phrases", 0): {
        "el": ("Ευχαριστώ", ["Ευχαριστώ", "Καλημέρα", "Γειά σου", "Συγγνώμη"]),
        "es": ("Gracias", ["Gracias", "Buenos días", "Hola", "Lo siento"]),
        "fr": ("Merci", ["Merci", "Bonjour", "Salut", "Pardon"]),
        GENERIC: ("Thank you", ["Thank you", "Good morning", "Hello", "Sorry"]),
    },
    ("basic-phrases", 1): {
        "el": ("Ναι", ["Ναι", "Όχι", "Ίσως", "Δεν ξέρω"]),
        "es": ("Sí", ["Sí", "No", "Quizás", "No sé"]),
        "fr": ("Oui", ["Oui", "Non", "Peut-être", "Je ne sais pas"]),
        GENERIC: ("Yes", ["Yes", "No", "Maybe", "I don't know"]),
    },
    ("basic-phrases", 2): {
        "el": ("Παρακαλώ", ["Παρακαλώ", "Ευχαριστώ", "Συγγνώμη", "Γειά σου"]),
        "es": ("Por favor", ["Por favor", "Gracias", "Lo siento", "Hola"]),
        "fr": ("S'il vous plaît", ["S'il vous plaît", "Merci", "Pardon", "Bonjour"]),
        GENERIC: ("Please", ["Please", "Thank you", "Sorry", "Hello"]),
    },
    ("basic-phrases", 3): {
        "el": ("Θα ήθελα νερό", ["Θα ήθελα νερό", "Θα ήθελα καφέ", "Πού είναι το μπάνιο;", "Τι ώρα είναι;"]),
        "es": ("Quisiera agua", ["Quisiera agua", "Quisiera café", "¿Dónde está el baño?", "¿Qué hora es?"]),
        "fr": ("Je voudrais de l'eau", ["Je voudrais de l'eau", "Je voudrais un café", "Où sont les toilettes?", "Quelle heure est-il?"]),
        GENERIC: ("I would like water", ["I would like water", "I would like coffee", "Where is the bathroom?", "What time is it?"]),
    },
    ("simple-conversation", 0): {
        "el": ("Πού είναι η τουαλέτα;", ["Πώς είσαι;", "Πού είναι η τουαλέτα;", "Τι ώρα είναι;", "Πόσο κάνει;"]),
        "es": ("¿Dónde está el baño?", ["¿Cómo estás?", "¿Dónde está el baño?", "¿Qué hora es?", "¿Cuánto cuesta?"]),
        "fr": ("Où sont les toilettes?", ["Comment ça va?", "Où sont les toilettes?", "Quelle heure est-il?", "Combien ça coûte?"]),
        GENERIC: ("Where is the bathroom?", ["How are you?", "Where is the bathroom?", "What time is it?", "How much is it?"]),
    },
    ("simple-conversation", 1): {
        "el": (
            "ένα, δύο, τρία, τέσσερα, πέντε",
            ["ένα, δύο, τρία, τέσσερα, πέντε", "Δευτέρα, Τρίτη, Τετάρτη", "καλημέρα, καλησπέρα, καληνύχτα", "ναι, όχι, ίσως"],
        ),
        "es": (
            "uno, dos, tres, cuatro, cinco",
            ["uno, dos, tres, cuatro, cinco", "lunes, martes, miércoles", "buenos días, buenas tardes, buenas noches", "sí, no, quizás"],
        ),
        GENERIC: (
            "one, two, three, four, five",
            ["one, two, three, four, five", "Monday, Tuesday, Wednesday", "good morning, good afternoon, good night", "yes, no, maybe"],
        ),
    },
    ("simple-conversation", 2): {
        "el": ("Είμαι από...", ["Είμαι από...", "Με λένε...", "Είμαι... χρονών", "Μένω στ..."]),
        "es": ("Soy de...", ["Soy de...", "Me llamo...", "Tengo... años", "Vivo en..."]),
        GENERIC: ("I am from...", ["I am from...", "My name is...", "I am... years old", "I live in..."]),
    },
}

PRACTICE_CYCLE = 7

# Seven canned exercises for the open-ended "practice" topic, per language.
_PRACTICE: Dict[str, List[Entry]] = {
    "el": [
        ("Θα ήθελα καφέ", ["Θα ήθελα καφέ", "Θα ήθελα νερό", "Πού είναι το ξενοδοχείο;", "Καλό βράδυ"]),
        ("Πόσο κάνει;", ["Πόσο κάνει;", "Τι ώρα είναι;", "Πώς σε λένε;", "Από πού είσαι;"]),
        ("Χάρηκα για τη γνωριμία", ["Καλή όρεξη", "Χάρηκα για τη γνωριμία", "Καλό ταξίδι", "Καληνύχτα"]),
        ("Ευχαριστώ", ["Παρακαλώ", "Συγγνώμη", "Ευχαριστώ", "Γειά σου"]),
        ("Πού είναι η παραλία;", ["Πού είναι η παραλία;", "Πού είναι το μουσείο;", "Πού είναι το εστιατόριο;", "Πού είναι το ξενοδοχείο;"]),
        ("Το λογαριασμό, παρακαλώ", ["Το λογαριασμό, παρακαλώ", "Ένα τραπέζι για δύο, παρακαλώ", "Τι μου προτείνετε;", "Είναι πικάντικο;"]),
        ("Καλό ταξίδι", ["Καλό ταξίδι", "Καλή διαμονή", "Καλή όρεξη", "Καλή τύχη"]),
    ],
    "es": [
        ("Quisiera un café", ["Quisiera un café", "Quisiera agua", "¿Dónde está el hotel?", "Buenas noches"]),
        ("¿Cuánto cuesta?", ["¿Cuánto cuesta?", "¿Qué hora es?", "¿Cómo te llamas?", "¿De dónde eres?"]),
        ("Encantado de conocerte", ["Buen provecho", "Encantado de conocerte", "Buen viaje", "Buenas noches"]),
        ("Gracias", ["Por favor", "Lo siento", "Gracias", "Hola"]),
        ("¿Dónde está la playa?", ["¿Dónde está la playa?", "¿Dónde está el museo?", "¿Dónde está el restaurante?", "¿Dónde está el hotel?"]),
        ("La cuenta, por favor", ["La cuenta, por favor", "Una mesa para dos, por favor", "¿Qué me recomienda?", "¿Es picante?"]),
        ("Buen viaje", ["Buen viaje", "Buena estancia", "Buen provecho", "Buena suerte"]),
    ],
    "fr": [
        ("Je voudrais un café", ["Je voudrais un café", "Je voudrais de l'eau", "Où est l'hôtel?", "Bonne soirée"]),
        ("Combien ça coûte?", ["Combien ça coûte?", "Quelle heure est-il?", "Comment t'appelles-tu?", "D'où viens-tu?"]),
        ("Enchanté de faire votre connaissance", ["Bon appétit", "Enchanté de faire votre connaissance", "Bon voyage", "Bonne nuit"]),
        ("Merci", ["S'il vous plaît", "Pardon", "Merci", "Bonjour"]),
        ("Où est la plage?", ["Où est la plage?", "Où est le musée?", "Où est le restaurant?", "Où est l'hôtel?"]),
        ("L'addition, s'il vous plaît", ["L'addition, s'il vous plaît", "Une table pour deux, s'il vous plaît", "Que me recommandez-vous?", "Est-ce épicé?"]),
        ("Bon voyage", ["Bon voyage", "Bon séjour", "Bon appétit", "Bonne chance"]),
    ],
    GENERIC: [
        ("I would like coffee", ["I would like coffee", "I would like water", "Where is the hotel?", "Good evening"]),
        ("How much is it?", ["How much is it?", "What time is it?", "What's your name?", "Where are you from?"]),
        ("Nice to meet you", ["Enjoy your meal", "Nice to meet you", "Have a good trip", "Good night"]),
        ("Thank you", ["Please", "Sorry", "Thank you", "Hello"]),
        ("Where is the beach?", ["Where is the beach?", "Where is the museum?", "Where is the restaurant?", "Where is the hotel?"]),
        ("The check, please", ["The check, please", "A table for two, please", "What do you recommend?", "Is it spicy?"]),
        ("Have a good trip", ["Have a good trip", "Enjoy your stay", "Enjoy your meal", "Good luck"]),
    ],
}

# Used by lookup() when no lesson row matches.
_LANGUAGE_DEFAULTS: Dict[str, Entry] = {
    "el": ("Ευχαριστώ", ["Ευχαριστώ", "Καλημέρα", "Γειά σου", "Συγγνώμη"]),
    "es": ("Gracias", ["Gracias", "Buenos días", "Hola", "Lo siento"]),
    "fr": ("Merci", ["Merci", "Bonjour", "Salut", "Pardon"]),
    "de": ("Danke", ["Danke", "Guten Tag", "Hallo", "Entschuldigung"]),
    GENERIC: ("Thank you", ["Thank you", "Good morning", "Hello", "Sorry"]),
}

# Used by the response parser when nothing can be extracted from tutor text.
_TOPIC_FALLBACKS: Dict[str, Dict[str, Entry]] = {
    "el": {
        "greetings": ("Γειά σου", ["Γειά σου", "Γειά σας", "Καλημέρα", "Καληνύχτα"]),
        "greeting": ("Γειά σου", ["Γειά σου", "Γειά σας", "Καλημέρα", "Καληνύχτα"]),
        "numbers": ("Ένα", ["Ένα", "Δύο", "Τρία", "Τέσσερα"]),
        "common-phrases": ("Ευχαριστώ", ["Ευχαριστώ", "Παρακαλώ", "Συγγνώμη", "Ναι"]),
        GENERIC: ("Ναι", ["Ναι", "Όχι", "Ίσως", "Δεν ξέρω"]),
    },
    "es": {
        "greetings": ("Hola", ["Hola", "Buenos días", "Buenas noches", "Adiós"]),
        "greeting": ("Hola", ["Hola", "Buenos días", "Buenas noches", "Adiós"]),
        "numbers": ("Uno", ["Uno", "Dos", "Tres", "Cuatro"]),
        "common-phrases": ("Gracias", ["Gracias", "Por favor", "Lo siento", "Sí"]),
        GENERIC: ("Sí", ["Sí", "No", "Quizás", "No sé"]),
    },
    "fr": {
        "greetings": ("Bonjour", ["Bonjour", "Salut", "Bonsoir", "Au revoir"]),
        "greeting": ("Bonjour", ["Bonjour", "Salut", "Bonsoir", "Au revoir"]),
        "numbers": ("Un", ["Un", "Deux", "Trois", "Quatre"]),
        "common-phrases": ("Merci", ["Merci", "S'il vous plaît", "Pardon", "Oui"]),
        GENERIC: ("Oui", ["Oui", "Non", "Peut-être", "Je ne sais pas"]),
    },
    "de": {
        "greetings": ("Hallo", ["Hallo", "Guten Morgen", "Guten Abend", "Auf Wiedersehen"]),
        "greeting": ("Hallo", ["Hallo", "Guten Morgen", "Guten Abend", "Auf Wiedersehen"]),
        "numbers": ("Eins", ["Eins", "Zwei", "Drei", "Vier"]),
        "common-phrases": ("Danke", ["Danke", "Bitte", "Entschuldigung", "Ja"]),
        GENERIC: ("Ja", ["Ja", "Nein", "Vielleicht", "Ich weiß nicht"]),
    },
    GENERIC: {
        "greetings": ("Hello", ["Hello", "Good morning", "Good evening", "Goodbye"]),
        "greeting": ("Hello", ["Hello", "Good morning", "Good evening", "Goodbye"]),
        "numbers": ("One", ["One", "Two", "Three", "Four"]),
        "common-phrases": ("Thank you", ["Thank you", "Please", "Sorry", "Yes"]),
        GENERIC: ("Yes", ["Yes", "No", "Maybe", "I don't know"]),
    },
}

GLOBAL_DEFAULT: Entry = _TOPIC_FALLBACKS[GENERIC][GENERIC]


def _to_practice_set(entry: Entry) -> PracticeSet:
    correct, options = entry
    # Copy so callers can never mutate the table
    return PracticeSet(options=list(options), correct_option=correct)


def global_default() -> PracticeSet:
    return _to_practice_set(GLOBAL_DEFAULT)


def _lesson_entry(language: str, topic: str, progress_index: int) -> Entry | None:
    if topic == "practice":
        exercises = _PRACTICE.get(language, _PRACTICE[GENERIC])
        return exercises[progress_index % PRACTICE_CYCLE]
    row = _LESSONS.get((topic, progress_index))
    if row is None:
        return None
    return row.get(language, row[GENERIC])


def lookup(language: str, level: str, topic: str, progress_index: int) -> PracticeSet:
    entry = _lesson_entry(language, topic, progress_index)
    if entry is None:
        logger.debug(
            "No bank entry for %s/%s/%s/%s, using language default",
            language, level, topic, progress_index,
        )
        entry = _LANGUAGE_DEFAULTS.get(language, _LANGUAGE_DEFAULTS[GENERIC])
    return _to_practice_set(entry)


def topic_fallback(language: str, topic: str) -> PracticeSet:
    by_topic = _TOPIC_FALLBACKS.get(language, _TOPIC_FALLBACKS[GENERIC])
    entry = by_topic.get(topic, by_topic.get(GENERIC, GLOBAL_DEFAULT))
    return _to_practice_set(entry)
