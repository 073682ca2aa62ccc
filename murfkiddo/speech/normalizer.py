"""Rewrite generated text so it reads naturally through Murf TTS.

The voices we use take plain text and pace themselves from punctuation, so
every adjustment here is punctuation or word substitution, never markup.
The general pipeline is an ordered tuple of named passes; later passes rely
on the cleanup done by earlier ones (markdown must be gone before spacing is
normalized, spacing must be normalized before sentence starts can be found).

Every substitution guards against its own output, so normalizing already
normalized text is a no-op.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable


class Register(str, Enum):
    """Conversational register used by the transitions pass."""

    FORMAL = "formal"
    CASUAL = "casual"
    FRIENDLY = "friendly"
    CHILD_FRIENDLY = "child-friendly"


@dataclass(frozen=True, slots=True)
class NormalizeOptions:
    add_emphasis: bool = True
    add_transitions: bool = True
    register: Register = Register.CHILD_FRIENDLY


DEFAULT_OPTIONS = NormalizeOptions()

# Start of text, start of a line, or just after terminal punctuation + space.
_SENTENCE_START = r"(?:^|(?<=[.!?] )|(?<=\n))"


def _lower_first(word: str) -> str:
    return word[:1].lower() + word[1:]


def _is_title_case(word: str) -> bool:
    return word[:1].isupper() and not word.isupper()


def _prefixer(prefix: str) -> Callable[[re.Match[str]], str]:
    """Build a substitution that puts ``prefix`` before the matched word.

    A capitalised word (sentence start) hands its capital to the prefix.
    """

    def _sub(match: re.Match[str]) -> str:
        word = match.group(1)
        if _is_title_case(word):
            return f"{prefix[:1].upper()}{prefix[1:]} {_lower_first(word)}"
        return f"{prefix} {word}"

    return _sub


def _at_sentence_start(match: re.Match[str]) -> bool:
    start = match.start()
    text = match.string
    return start == 0 or text[start - 1] == "\n" or text[start - 2 : start] in {
        ". ",
        "! ",
        "? ",
    }


# ── Pass 1: markdown ────────────────────────────────────────────────────

_EMPHASIS_MARKER_RE = re.compile(r"\*+")
_HEADING_RE = re.compile(r"^[ \t]*#+[ \t]*", re.MULTILINE)
_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_CODE_SPAN_RE = re.compile(r"`+([^`]*)`+")


def strip_markdown(text: str) -> str:
    """Remove bold/italic markers, headings, link targets and code ticks."""
    text = _EMPHASIS_MARKER_RE.sub("", text)
    text = _HEADING_RE.sub("", text)
    # Nested links unwrap one level per substitution.
    while True:
        unwrapped = _LINK_RE.sub(r"\1", text)
        if unwrapped == text:
            break
        text = unwrapped
    text = _CODE_SPAN_RE.sub(r"\1", text)
    return text.replace("`", "").strip()


# ── Pass 2: punctuation ─────────────────────────────────────────────────

_TERMINAL_SPACING_RE = re.compile(r"([.!?]+)(?![.!?\d])[ \t]*(?=\S)")
_CLAUSE_SPACING_RE = re.compile(r"([,:;])(?!\d)[ \t]*(?=\S)")
_PAUSE_PHRASE_RE = re.compile(
    r"\b(once upon a time|all of a sudden|suddenly)\b[.,;:!]*",
    re.IGNORECASE,
)
_CLOSING_PHRASE_RE = re.compile(r"\b(the end)\b(?:[.!]+|(?=\s*$))", re.IGNORECASE)


def normalize_punctuation(text: str) -> str:
    """Single space after punctuation, ellipses after dramatic phrases."""
    text = _TERMINAL_SPACING_RE.sub(r"\1 ", text)
    text = _CLAUSE_SPACING_RE.sub(r"\1 ", text)
    text = _PAUSE_PHRASE_RE.sub(r"\1...", text)
    return _CLOSING_PHRASE_RE.sub(r"\1...", text)


# ── Pass 3: emphasis ────────────────────────────────────────────────────

_EMPHASIS_RULES: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], str]], ...] = (
    (
        re.compile(
            r"(?<!exactly )(?<![\w.,:])(\d+(?:[.,:]\d+)*|one|two|three|four|five)\b",
            re.IGNORECASE,
        ),
        _prefixer("exactly"),
    ),
    (
        re.compile(r"(?<!very )\b(important|special)\b", re.IGNORECASE),
        _prefixer("very"),
    ),
    (
        re.compile(r"(?<!absolutely )\b(amazing|incredible)\b", re.IGNORECASE),
        _prefixer("absolutely"),
    ),
    (
        re.compile(r"(?<!really )\b(excited|happy)\b", re.IGNORECASE),
        _prefixer("really"),
    ),
)


def add_emphasis(text: str) -> str:
    """Lean on key words with a spoken intensifier."""
    for pattern, replacement in _EMPHASIS_RULES:
        text = pattern.sub(replacement, text)
    return text


# ── Pass 4: transitions ─────────────────────────────────────────────────

# Only comma-marked discourse markers ("Well, ...") so "Well done" survives.
_DISCOURSE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(_SENTENCE_START + r"So(?=,)"), "So then"),
    (re.compile(_SENTENCE_START + r"Well(?=,)"), "Well now"),
    (re.compile(_SENTENCE_START + r"Now(?=,)"), "Now then"),
)
_EXCLAMATION_RE = re.compile(
    _SENTENCE_START
    + r"(Absolutely (?:amazing|great|awesome)|Amazing|Great|Awesome)\b"
)
_LETS_RE = re.compile(_SENTENCE_START + r"Let(['’])s\b")


def add_transitions(text: str, register: Register = Register.CHILD_FRIENDLY) -> str:
    """Add conversational glue words at sentence starts."""
    for pattern, replacement in _DISCOURSE_RULES:
        text = pattern.sub(replacement, text)
    if register is Register.CHILD_FRIENDLY:
        text = _EXCLAMATION_RE.sub(lambda m: f"Oh, {_lower_first(m.group(1))}", text)
        text = _LETS_RE.sub(r"Come on, let\1s", text)
    return text


# ── Pipeline ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class NormalizerPass:
    name: str
    apply: Callable[[str, NormalizeOptions], str]
    enabled: Callable[[NormalizeOptions], bool] = lambda _options: True


PIPELINE: tuple[NormalizerPass, ...] = (
    NormalizerPass("markdown", lambda text, _o: strip_markdown(text)),
    NormalizerPass("punctuation", lambda text, _o: normalize_punctuation(text)),
    NormalizerPass(
        "emphasis",
        lambda text, _o: add_emphasis(text),
        lambda options: options.add_emphasis,
    ),
    NormalizerPass(
        "transitions",
        lambda text, options: add_transitions(text, options.register),
        lambda options: options.add_transitions,
    ),
)


def normalize_general(text: str, options: NormalizeOptions | None = None) -> str:
    """Run the full ordered pipeline. Empty input gives empty output."""
    if not text:
        return ""
    options = options or DEFAULT_OPTIONS
    for step in PIPELINE:
        if step.enabled(options):
            text = step.apply(text, options)
    return text.strip()


# ── Content-specific entry points ───────────────────────────────────────

_STORY_SUDDEN_RE = re.compile(
    r"\b(?:then,?\s+)?(all of a sudden|suddenly)\b[.,;:!]*", re.IGNORECASE
)
_STORY_ENDING_RE = re.compile(
    _SENTENCE_START + r"(?:and that\.\.\. is )?the end\b(?:[.!]+|(?=\s*$))",
    re.IGNORECASE,
)
_STORY_EVER_AFTER_RE = re.compile(
    r"\b(?:and )?they (?:all )?lived(?:\.\.\.)? happily ever after\b[.!]*",
    re.IGNORECASE,
)


def _sentence_cased(phrase: str) -> Callable[[re.Match[str]], str]:
    def _sub(match: re.Match[str]) -> str:
        if _at_sentence_start(match):
            return phrase[:1].upper() + phrase[1:]
        return phrase

    return _sub


def _story_sudden(match: re.Match[str]) -> str:
    lead = "Then" if _at_sentence_start(match) else "then"
    return f"{lead}, {_lower_first(match.group(1))}..."


def normalize_for_storytelling(text: str) -> str:
    processed = normalize_general(
        text,
        NormalizeOptions(
            add_emphasis=True,
            add_transitions=True,
            register=Register.CHILD_FRIENDLY,
        ),
    )
    processed = _STORY_SUDDEN_RE.sub(_story_sudden, processed)
    processed = _STORY_ENDING_RE.sub(lambda _m: "And that... is the end.", processed)
    return _STORY_EVER_AFTER_RE.sub(
        _sentence_cased("and they all lived... happily ever after."), processed
    )


def normalize_for_education(text: str) -> str:
    return normalize_general(text, NormalizeOptions(register=Register.FRIENDLY))


def normalize_for_conversation(text: str) -> str:
    return normalize_general(text, NormalizeOptions(register=Register.CASUAL))


_BEDTIME_RULES: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], str]], ...] = (
    (
        re.compile(r"(?<!gently )\b(sleep|rest|dream)\b", re.IGNORECASE),
        _prefixer("gently"),
    ),
    (
        re.compile(r"(?<!so very )\b(peaceful|calm|quiet)\b", re.IGNORECASE),
        _prefixer("so very"),
    ),
    (
        re.compile(r"(?<!sweet dreams and )\b(goodnight|good night)\b", re.IGNORECASE),
        lambda m: (
            "Sweet dreams and goodnight"
            if _is_title_case(m.group(1))
            else "sweet dreams and goodnight"
        ),
    ),
)


def normalize_for_bedtime(text: str) -> str:
    """Calm register: no emphasis, no transitions, softer wording."""
    processed = normalize_general(
        text,
        NormalizeOptions(add_emphasis=False, add_transitions=False),
    )
    for pattern, replacement in _BEDTIME_RULES:
        processed = pattern.sub(replacement, processed)
    return processed


def fit_to_length(text: str, limit: int) -> str:
    """Trim ``text`` below ``limit`` characters, preferring a sentence end."""
    if len(text) <= limit:
        return text

    truncate_point = max(1, limit - 50)
    cut = text[:truncate_point]
    last_sentence = max(cut.rfind("."), cut.rfind("!"), cut.rfind("?"))
    if last_sentence > truncate_point * 0.7:
        cut = cut[: last_sentence + 1]
    return cut.strip()
