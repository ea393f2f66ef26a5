"""Shorthand tokenizer: ``+Dyspnea -Murmur Ferritin↓ MCV<80`` → tokens.

Two-stage scan per whitespace-delimited fragment:

  1. Prefix: one leading ``+`` (present) or ``-`` (absent).
  2. Suffix: a trailing ``↑``/``↓`` arrow, otherwise a trailing
     ``<op><digits>`` comparison after a non-empty word.

Pure and synchronous; never touches I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from med_notes.core.types import Token, ValueModifier

PRESENT_PREFIX = "+"
ABSENT_PREFIX = "-"

_DIRECTIONAL = {
    ValueModifier.UP.value: ValueModifier.UP,
    ValueModifier.DOWN.value: ValueModifier.DOWN,
}

# Non-greedy word so the operator anchors on the trailing digit run.
_COMPARISON = re.compile(r"^(.+?)(<=|>=|<|>)(\d+)$", re.DOTALL)


def scan_prefix(fragment: str) -> tuple[bool, str]:
    """Consume at most one sign character. Returns (is_present, rest)."""
    if fragment.startswith(PRESENT_PREFIX):
        return True, fragment[1:]
    if fragment.startswith(ABSENT_PREFIX):
        return False, fragment[1:]
    return True, fragment


def scan_suffix(rest: str) -> tuple[str, ValueModifier, int | None]:
    """Split a sign-free fragment into (clean_text, modifier, numeric_value).

    A directional arrow wins over a comparison operator: ``MCV<80↑``
    keeps ``MCV<80`` as its clean text.
    """
    if rest and rest[-1] in _DIRECTIONAL:
        return rest[:-1], _DIRECTIONAL[rest[-1]], None

    match = _COMPARISON.match(rest)
    if match:
        word, operator, digits = match.groups()
        return word, ValueModifier(operator), int(digits)

    return rest, ValueModifier.NONE, None


def tokenize_fragment(fragment: str) -> Token:
    """Tokenize a single whitespace-free fragment."""
    is_present, rest = scan_prefix(fragment)
    clean_text, modifier, numeric = scan_suffix(rest)
    return Token(
        original_text=fragment,
        clean_text=clean_text,
        is_present=is_present,
        value_modifier=modifier,
        numeric_value=numeric,
    )


def tokenize(text: str) -> list[Token]:
    """Tokenize raw shorthand input, preserving input order."""
    return [tokenize_fragment(fragment) for fragment in text.split()]


@dataclass(frozen=True)
class CurrentWord:
    """The word under the cursor, as used to drive autocomplete."""

    word: str  # Sign prefix removed
    index: int
    start: int
    end: int


def current_word(text: str, cursor: int | None = None) -> CurrentWord:
    """Find the word containing ``cursor`` (defaults to end of text).

    Words are separated by single spaces for position purposes, mirroring
    how the input box tracks the caret.
    """
    if cursor is None:
        cursor = len(text)
    words = re.split(r"\s+", text)
    position = 0
    for index, word in enumerate(words):
        end = position + len(word)
        if cursor <= end:
            return CurrentWord(
                word=re.sub(r"^[+-]", "", word),
                index=index,
                start=position,
                end=end,
            )
        position = end + 1
    return CurrentWord(word="", index=len(words), start=len(text), end=len(text))


def replace_word(text: str, index: int, replacement: str) -> str:
    """Replace the word at ``index`` keeping its sign prefix.

    Used when a suggestion is accepted; the result ends with a space so
    typing can continue.
    """
    words = re.split(r"\s+", text)
    if index >= len(words):
        words.append("")
        index = len(words) - 1
    prefix_match = re.match(r"^[+-]?", words[index])
    prefix = prefix_match.group(0) if prefix_match else ""
    words[index] = prefix + replacement
    return " ".join(words) + " "
