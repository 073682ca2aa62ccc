"""Prompt templates for each MurfKiddo mode.

Every builder validates its request before anything else happens and
returns a ``PromptPlan``: the instruction text for the model plus the title
and content-type labels the route echoes back to the client.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from murfkiddo.errors import ValidationError
from murfkiddo.schemas import (
    BedtimeRequest,
    ChatRequest,
    GameRequest,
    LanguageRequest,
    StoryRequest,
    TutorRequest,
)

AUDIENCE = "children aged 5-12"
MAX_LANGUAGE_INPUT_CHARS = 500


@dataclass(slots=True)
class PromptPlan:
    prompt: str
    title: str = ""
    content_type: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


def _required(value: str, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(message)
    return value


# ── Story ───────────────────────────────────────────────────────────────


def build_story_prompt(req: StoryRequest) -> PromptPlan:
    topic = _required(req.topic, "Topic is required")
    voice_type = req.voiceType.strip() or "playful"
    prompt = f"""\
Write a fun, educational story for {AUDIENCE} about "{topic}".
The story should:
- be about 200-300 words long
- be positive and uplifting, with a gentle moral lesson
- use simple, lively language
- include dialogue and sound effects like "whoosh!" or "sparkle!"
- be imaginative but never scary
- have a clear beginning, middle and end

Voice style: {voice_type}

Write only the story itself, with no titles or extra formatting."""
    return PromptPlan(
        prompt=prompt,
        title=f"The Adventure of {topic}",
        content_type="story",
        metadata={"topic": topic, "voiceType": voice_type},
    )


# ── Tutor ───────────────────────────────────────────────────────────────


def build_tutor_prompt(req: TutorRequest) -> PromptPlan:
    question = _required(req.question, "Question is required")
    subject = req.subject.strip()
    prompt = f"""\
You are a friendly, knowledgeable tutor for {AUDIENCE}. A child asked: "{question}"

Give a clear, age-appropriate explanation that:
- uses simple words
- includes a fun example or comparison kids can relate to
- is educational and exciting, never boring
- is about 100-200 words long
- invites curiosity and follow-up questions
- avoids scary or technical jargon

Subject context: {subject or "general knowledge"}

Open with something like "Great question!" and sound excited to teach."""
    return PromptPlan(
        prompt=prompt,
        title=question,
        content_type="explanation",
        metadata={"question": question, "subject": subject or "General Knowledge"},
    )


# ── Chat ────────────────────────────────────────────────────────────────


def format_chat_history(req: ChatRequest) -> str:
    lines = [
        f"{'Child' if item.role == 'user' else 'MurfKiddo'}: {item.content}"
        for item in req.chatHistory
    ]
    return "\n".join(lines)


def build_chat_prompt(req: ChatRequest) -> PromptPlan:
    message = _required(req.message, "Message is required")
    child_name = req.childName.strip()
    named = f"named {child_name} " if child_name else ""
    history = format_chat_history(req)
    context = f"Previous conversation:\n{history}\n\n" if history else ""
    prompt = f"""\
You are MurfKiddo, a friendly, cheerful and supportive companion for {AUDIENCE}. \
A child {named}sent you this message: "{message}"

{context}Reply as MurfKiddo:
- Be warm and genuinely interested in what the child says.
- Keep it conversational, about 100-200 words, in simple words.
- Ask a follow-up question to keep the chat going.
- Remember details from earlier in the conversation.
- Join in happily with jokes, word games and make-believe.
- Keep everything child-safe; gently steer away from unsuitable topics.
- Never ask for or share personal information.

Answer like a caring, fun friend who loves to chat!"""
    return PromptPlan(
        prompt=prompt,
        content_type="chat",
        metadata={"childName": child_name, "voiceType": req.voiceType},
    )


# ── Game ────────────────────────────────────────────────────────────────

GAME_ACTIONS = ("start_game", "respond_to_game")

_GAME_TYPES_HELP = """\
- riddle: a fun, age-appropriate riddle
- word_game: rhyming, word association or a spelling challenge
- trivia: an interesting fun-fact question
- guessing_game: a "20 questions" game where you think of something
- story_game: a story the child helps continue
- math_game: a playful number puzzle"""


def build_game_prompt(req: GameRequest) -> PromptPlan:
    action = _required(req.action, "Action is required")
    game_type = req.gameType.strip() or "riddle"

    if action == "start_game":
        prompt = f"""\
You are a playful game master for {AUDIENCE}. Start a fun {game_type} game.

Game types:
{_GAME_TYPES_HELP}

Use short, exciting words, be encouraging, keep it age-appropriate and
interactive. Begin with something like "Let's play!" and end by making it
clear what the child should do next.

Game type: {game_type}"""
    elif action == "respond_to_game":
        answer = _required(
            req.userResponse, "Tell me your answer so we can keep playing!"
        )
        prompt = f"""\
You are a playful game master replying to a child's answer in a {game_type} game.

Current game context: {req.gameState.strip() or "Playing a fun game"}

The child said: "{answer}"

Reply with high energy:
- acknowledge the answer (right, wrong or creative)
- celebrate a right answer and offer a new challenge
- for a wrong answer, encourage them, give a hint or the answer, then try another
- keep it to 100-200 words
- finish by asking for their next move"""
    else:
        raise ValidationError("I don't know that game move. Let's start a new game!")

    return PromptPlan(
        prompt=prompt,
        content_type=game_type,
        metadata={"gameType": game_type, "action": action},
    )


# ── Language ────────────────────────────────────────────────────────────

_UNSAFE_CHARS_RE = re.compile(r"[<>\"'&]")


def sanitize_input(value: str) -> str:
    """Drop markup-ish characters and cap the length."""
    return _UNSAFE_CHARS_RE.sub("", value).strip()[:MAX_LANGUAGE_INPUT_CHARS]


@dataclass(frozen=True, slots=True)
class _LessonKind:
    name: str
    action_keys: tuple[str, ...]
    input_keys: tuple[str, ...]
    title: str
    template: str


# Checked in order; the first kind whose keys match wins.
LESSON_KINDS: tuple[_LessonKind, ...] = (
    _LessonKind(
        "translation",
        ("translat",),
        ("translate", "what does", "how do you say", "mean"),
        "Translation to {language}",
        """\
You are a friendly language teacher for {audience}. The child wants to know
about "{request}" in {language}.

Give:
1. the translation or answer in {language}
2. a pronunciation guide using English sounds
3. a fun memory tip
4. an encouraging message to try it today""",
    ),
    _LessonKind(
        "vocabulary",
        ("vocab",),
        ("words", "vocabulary", "learn", "teach me"),
        "{language} Vocabulary",
        """\
You are a playful language teacher for {audience}. Based on "{request}",
teach three to five {language} words (animals, colours, numbers, food...).
Give the English meaning and an English-sounds pronunciation for each, use
one in a fun sentence, and ask the child to say a word back to you.""",
    ),
    _LessonKind(
        "conversation",
        ("conversation", "talk"),
        ("talk", "conversation", "chat"),
        "{language} Conversation",
        """\
You are a patient language teacher for {audience}. Start a very simple
conversation practice in {language} based on "{request}".
Include a greeting with its English translation, praise for learning, one
easy question in {language} to answer, pronunciation tips in English sounds
and encouragement. Keep the {language} to basic greetings and short phrases.""",
    ),
    _LessonKind(
        "pronunciation",
        ("pronunciation", "pronounce"),
        ("pronounce", "say", "pronunciation"),
        "{language} Pronunciation",
        """\
You are a helpful pronunciation coach for a child learning {language}.
The child needs help with "{request}".
Split it into syllables, give an English-sounds guide, describe mouth and
tongue position in kid terms, add a rhyme or trick to remember it and lots
of encouragement.""",
    ),
    _LessonKind(
        "grammar",
        ("grammar",),
        ("grammar", "sentence", "structure"),
        "{language} Grammar",
        """\
You are a friendly grammar teacher for {audience} learning {language}.
Based on "{request}", explain the idea simply, give two or three very basic
{language} examples with English translations, show the pattern, share a
memory trick and invite the child to make their own sentence.""",
    ),
    _LessonKind(
        "culture",
        ("culture",),
        ("culture", "country", "tradition"),
        "{language} Culture",
        """\
You are a cultural guide for {audience} curious about {language} culture.
Based on "{request}", share kid-friendly facts about traditions, food, games
or celebrations, compare them with things the child may know, and include a
few {language} words with pronunciation guides.""",
    ),
)

_GENERAL_LESSON = _LessonKind(
    "general",
    (),
    (),
    "Learning {language}",
    """\
You are a friendly language teacher for {audience}. Based on "{request}",
help the child learn {language}: answer their question, include useful
{language} words or phrases, give pronunciation help using English sounds
and suggest a simple way to practise.""",
)


def detect_lesson_kind(action: str, request_text: str) -> _LessonKind:
    action_l = action.lower()
    text_l = request_text.lower()
    for kind in LESSON_KINDS:
        if any(key in action_l for key in kind.action_keys) or any(
            key in text_l for key in kind.input_keys
        ):
            return kind
    return _GENERAL_LESSON


def build_language_prompt(req: LanguageRequest) -> PromptPlan:
    action = sanitize_input(_required(req.action, "Action is required"))
    language = sanitize_input(req.targetLanguage)
    if not language:
        raise ValidationError("Valid language is required")
    request_text = sanitize_input(req.input) or action

    kind = detect_lesson_kind(action, request_text)
    prompt = kind.template.format(
        audience=AUDIENCE, request=request_text, language=language
    )
    prompt += "\n\nKeep it simple, fun and encouraging, like a little adventure!"
    return PromptPlan(
        prompt=prompt,
        title=kind.title.format(language=language),
        content_type=kind.name,
        metadata={"language": language, "learningType": kind.name},
    )


# ── Bedtime ─────────────────────────────────────────────────────────────

BEDTIME_ACTIONS = ("bedtime_story", "lullaby", "relaxation", "goodnight_wishes")
GENERAL_BEDTIME_CONTENT = "general peaceful content"


def build_bedtime_prompt(req: BedtimeRequest) -> PromptPlan:
    action = _required(req.action, "Action is required")
    name = req.childName.strip() or "little one"
    content_type = req.contentType.strip()
    favorites = req.favoriteThings.strip()

    if action == "bedtime_story":
        prompt = f"""\
You are a gentle bedtime storyteller for {AUDIENCE}. Create a peaceful bedtime story.

Story type: {content_type or "peaceful adventure"}
Child's name: {name}
Things they love: {favorites or "gentle animals and nature"}

Make it 200-300 words, soft and soothing, with nature, friendly animals or
quiet magic. Weave in the child's name and favourite things, and end with
the character drifting peacefully to sleep.

Begin with something like "Close your eyes, {name}, and let me tell you a gentle story..." """
    elif action == "lullaby":
        prompt = f"""\
You are a caring bedtime companion writing an original lullaby.

Child's name: {name}
Theme: {content_type or "stars and moon"}

Write two or three short verses with simple, repeating, sleepy words about
stars, moon and dreams. Mention the child's name and finish with a soft
"close your eyes" and "Sweet dreams, {name}..." """
    elif action == "relaxation":
        prompt = f"""\
You are a gentle mindfulness guide for children at bedtime.

Child's name: {name}
Focus: {content_type or "peaceful breathing"}

Write a two to three minute relaxation with slow breathing or gentle body
relaxation, peaceful pictures (floating clouds, soft waves) and very calm
wording. Use the child's name and end by inviting them to drift off to sleep.
Start like "Let's take some gentle breaths together, {name}..." """
    elif action == "goodnight_wishes":
        prompt = f"""\
You are a loving bedtime companion saying goodnight to a child.

Child's name: {name}
Special mentions: {favorites or "their favourite stuffed animals"}

Write a warm, personal goodnight message of 50-100 words, like a loving
grandparent would say, wishing sweet dreams to the child and their favourite
things and ending with peaceful sleep."""
    else:
        prompt = f"""\
You are a gentle bedtime companion for {AUDIENCE}. Create short,
{GENERAL_BEDTIME_CONTENT} for {name} that helps them feel safe, calm and sleepy.
Things they love: {favorites or "gentle animals and nature"}"""

    return PromptPlan(
        prompt=prompt.rstrip(),
        content_type=content_type or "general",
        metadata={"action": action, "childName": req.childName.strip() or None},
    )


# ── Voice agent ─────────────────────────────────────────────────────────

VOICE_AGENT_SYSTEM_PROMPT = f"""\
You are MurfKiddo, a friendly, cheerful voice companion for {AUDIENCE}.

Voice conversation rules:
- Keep replies SHORT, one or two sentences at most; this is spoken aloud.
- Use simple, clear words kids understand.
- Be warm and encouraging, like a caring older sibling.
- Ask ONE simple follow-up question to keep things flowing.
- Show you are listening by referring to what they said.
- Keep everything child-safe; gently redirect unsuitable topics.
- Never ask for personal information."""


def format_voice_user_prompt(
    user_message: str, child_name: str = "", history: list[str] | None = None
) -> str:
    """Render the user turn; ``history`` should already be trimmed."""
    context = ""
    if history:
        context = "Previous conversation:\n" + "\n".join(history) + "\n\n"
    named = f"named {child_name} " if child_name else ""
    return f'{context}Child {named}just said: "{user_message}"'
