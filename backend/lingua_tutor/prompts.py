from __future__ import annotations

from typing import Dict

from .curriculum import LESSONS_PER_TOPIC, format_topic_name, language_name


PRONUNCIATION_RULES = """
IMPORTANT PRONUNCIATION FORMATTING:
- ALWAYS use CAPITAL LETTERS for the stressed syllables (e.g., "YAH sahs" not "yah sahs" or "éna")
- Use simple English phonetics that an English speaker can easily read and pronounce
- Break longer words into syllables with hyphens if needed (e.g., "kal-ee-ME-ra")
- NEVER use accent marks in pronunciation guides (like é, í, ó) - use CAPITAL letters instead
- Be consistent with this format for ALL words and phrases
""".strip()


SKILL_LEVEL_NOTES: Dict[str, str] = {
    "beginner": (
        "Since the user is a beginner, focus on simple phrases and basic vocabulary.\n"
        "Use short sentences and provide clear explanations.\n"
        "Repeat important concepts and be patient."
    ),
    "intermediate": (
        "Since the user has intermediate knowledge, you can introduce more complex grammar and vocabulary.\n"
        "You can have longer conversations and expect the user to understand more complex phrases.\n"
        "Challenge the user appropriately but still provide support when needed."
    ),
    "advanced": (
        "Since the user is advanced, you can use complex grammar and sophisticated vocabulary.\n"
        "You can discuss a wide range of topics and expect the user to understand nuanced expressions.\n"
        "Focus on refining the user's fluency and correcting subtle mistakes."
    ),
}

# Topic -> (what is taught, what to focus on); {lang} is the language name.
TOPIC_FOCUS: Dict[str, tuple[str, str]] = {
    "greetings": ("basic greetings in {lang}", 'simple phrases like "hello", "good morning", "good evening", and "goodbye"'),
    "introductions": ("how to introduce oneself in {lang}", 'phrases like "my name is", "nice to meet you", "where are you from", and "I am from"'),
    "numbers": ("numbers in {lang}", "numbers 1-20, and then how to ask about prices or quantities"),
    "common-phrases": ("common everyday phrases in {lang}", 'phrases like "please", "thank you", "excuse me", and "I\'m sorry"'),
    "foods": ("food vocabulary in {lang}", "common food items, how to order in a restaurant, and express preferences"),
    "colors": ("colors in {lang}", "basic colors and how to describe objects using colors"),
    "family": ("family-related vocabulary in {lang}", "terms for family members and how to talk about your family"),
    "travel": ("travel-related vocabulary in {lang}", "transportation, accommodation, and asking for directions"),
    "shopping": ("shopping vocabulary in {lang}", "clothing, sizes, prices, and how to interact with shop assistants"),
    "dining": ("dining vocabulary in {lang}", "restaurant interactions, ordering food, and discussing preferences"),
    "directions": ("how to give and ask for directions in {lang}", "location prepositions, landmarks, and navigation vocabulary"),
    "weather": ("weather-related vocabulary in {lang}", "describing different weather conditions and seasons"),
    "hobbies": ("hobby-related vocabulary in {lang}", "activities, sports, and expressing likes and dislikes"),
    "time-expressions": ("time expressions in {lang}", "telling time, days of the week, months, and scheduling"),
    "daily-routine": ("vocabulary related to daily routines in {lang}", "common activities, reflexive verbs, and time adverbs"),
    "opinions": ("how to express opinions in {lang}", "agreement, disagreement, and nuanced viewpoints"),
    "culture": ("cultural aspects of {lang}-speaking regions", "traditions, customs, and cultural expressions"),
    "news": ("how to discuss current events in {lang}", "news vocabulary, reporting verbs, and expressing reactions"),
    "storytelling": ("storytelling in {lang}", "narrative tenses, sequencing, and descriptive language"),
    "idioms": ("common idioms in {lang}", "figurative expressions and their meanings in different contexts"),
    "debate": ("debate vocabulary in {lang}", "persuasive language, counterarguments, and formal expressions"),
    "professional": ("professional vocabulary in {lang}", "business terms, job interviews, and workplace communication"),
    "slang": ("common slang and colloquial expressions in {lang}", "informal language used by native speakers in casual settings"),
    "literature": ("literary terms and discussing literature in {lang}", "analyzing texts, poetry, and literary devices"),
    # Older stage names, still sent by saved sessions
    "greeting": ("basic greetings in {lang}", 'simple phrases like "hello", "how are you", and "my name is"'),
    "basic-phrases": ("basic useful phrases in {lang}", 'phrases like "thank you", "yes/no", "please", and simple requests'),
    "simple-conversation": ("simple conversation skills in {lang}", "questions, numbers, and basic conversation starters"),
}


def _topic_instructions(topic: str, lang: str) -> str:
    if topic == "practice":
        return (
            f"You are helping the user practice what they've learned in {lang}.\n"
            "Ask questions that allow them to use the phrases they've learned.\n"
            "Provide gentle corrections when they make mistakes."
        )
    focus = TOPIC_FOCUS.get(topic)
    if focus is None:
        return ""
    subject, detail = focus
    return f"You are teaching {subject.format(lang=lang)}.\nFocus on {detail}."


def build_system_prompt(language: str, topic: str, progress: int, skill_level: str = "beginner") -> str:
    lang = language_name(language)
    sections = [
        f"""
You are a helpful and encouraging {lang} language teacher.
Your goal is to teach the user {lang} in a conversational way.
Keep your responses concise, clear, and focused on teaching ONE concept at a time.

The user's skill level is: {skill_level}.

IMPORTANT FORMATTING INSTRUCTIONS:
1. Start with a warm, enthusiastic greeting of 2-3 sentences, followed by a blank line
2. Teach ONE new word or phrase only
3. Put each section on its own line, with no hyphens or bullets:
   {lang} phrase: [word in {lang}]
   Pronunciation: [CAPITALIZE the stressed syllables]
   English meaning: [translation]
   Example: [simple example of usage with context]
4. After the visible content, include a "Practice:" section listing 3-4 options, each in double quotes

DO NOT:
- Introduce multiple concepts at once
- Use complex grammatical explanations or technical linguistic terminology
- Write overly long responses or put everything in one paragraph
- Use accent marks in pronunciation guides - use CAPITAL letters instead
""".strip(),
        PRONUNCIATION_RULES,
    ]
    level_note = SKILL_LEVEL_NOTES.get(skill_level)
    if level_note:
        sections.append(level_note)
    topic_note = _topic_instructions(topic, lang)
    if topic_note:
        sections.append(topic_note)
    sections.append(
        f"The user is at progress level {progress} in this topic.\n"
        "Higher progress means they are more familiar with the current topic."
    )
    if progress % LESSONS_PER_TOPIC == LESSONS_PER_TOPIC - 1:
        sections.append(
            f"THIS IS A QUIZ LESSON. Create a comprehensive quiz that tests what the user has learned about {topic} so far.\n"
            "Include 3-5 multiple choice questions that test different aspects of this topic.\n"
            "Format each question clearly with numbered options.\n"
            "After the user answers, provide detailed feedback explaining why their answer was correct or incorrect."
        )
    return "\n\n".join(sections)


def _practice_format(lang: str) -> str:
    return (
        'You MUST include a "Practice:" section at the end of your response with EXACTLY 4 multiple choice options.\n'
        "Format the Practice section exactly like this:\n\n"
        "Practice:\n"
        '"[First option]" (this should be the correct answer)\n'
        '"[Second option]"\n'
        '"[Third option]"\n'
        '"[Fourth option]"\n\n'
        "CRITICAL FORMATTING RULES:\n"
        "- Each option MUST be enclosed in quotes and on its own line\n"
        "- The first option MUST be the correct answer\n"
        "- Do NOT include numbers in the options themselves\n"
        "- Each option should be a complete, short phrase (1-5 words)\n"
        f"- All options should be in {lang}"
    )


def initial_lesson_prompt(language: str) -> str:
    lang = language_name(language)
    return (
        f"I want to learn {lang}. Please introduce yourself as my language teacher and teach me ONE simple greeting "
        '(like "hello" or "good morning"). Keep it very simple and beginner-friendly.\n\n'
        "Format your response with line breaks between sections like this:\n"
        "[Friendly greeting and introduction as my language teacher]\n"
        f"{lang} phrase: [word in {lang}]\n"
        "Pronunciation: [simple phonetic pronunciation]\n"
        "English meaning: [translation]\n"
        "Example: [simple example of usage]\n\n"
        f"IMPORTANT: {_practice_format(lang)}"
    )


def feedback_prompt(language: str, level: str, topic: str, selected: str, correct: str, was_correct: bool) -> str:
    lang = language_name(language)
    verdict = "They got it right!" if was_correct else "They got it wrong."
    if was_correct:
        ask = (
            "Please provide brief positive feedback on their answer in a friendly, conversational tone. "
            f"Then teach them ONE new simple phrase or word in {lang}."
        )
    else:
        ask = (
            "Please provide brief, encouraging feedback explaining why their answer was incorrect in a friendly, "
            f'conversational tone. Remind them that the correct answer is "{correct}" and what it means. '
            "Then encourage them to try again."
        )
    prompt = (
        f'The user selected "{selected}" as their answer. The correct answer is "{correct}". {verdict}\n\n'
        f"{ask}\n\n"
        f'Keep your response short and friendly. Remember you are teaching {lang} at a {level} level, focusing on the topic "{topic}".'
    )
    if was_correct:
        prompt += f"\n\nIMPORTANT INSTRUCTION: {_practice_format(lang)}"
    return prompt


def topic_reinforcement_prompt(language: str, topic: str, message: str) -> str:
    lang = language_name(language)
    name = format_topic_name(topic)
    return (
        f'The user\'s message is: "{message}". Remember, you are teaching the topic of "{name}" in {lang}. '
        f"Stay focused ONLY on teaching content related to {name}.\n\n"
        f"{PRONUNCIATION_RULES}\n\n"
        'Include a "Practice:" section with 4 options in quotes at the end of your response, '
        "with the first option being the correct answer."
    )


def topic_intro_prompt(language: str, level: str, topic: str) -> str:
    lang = language_name(language)
    name = format_topic_name(topic)
    return (
        f'You are now teaching the topic of "{name}" at a {level} level in {lang}.\n\n'
        f'IMPORTANT: You MUST ONLY teach content related to "{name}" and NEVER deviate from this topic in your responses.\n\n'
        "Format your response with line breaks between sections like this:\n"
        f"[Friendly greeting and introduction to {name}]\n\n"
        f"{lang} phrase: [word or phrase in {lang} related to {name}]\n"
        "Pronunciation: [CAPITALIZE the stressed syllables]\n"
        "English meaning: [translation]\n"
        "Example: [simple example of usage]\n\n"
        f"{PRONUNCIATION_RULES}\n\n"
        f"IMPORTANT: {_practice_format(lang)}\n"
        f"- Options MUST be relevant to {name} and what you just taught"
    )
