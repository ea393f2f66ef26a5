"""Shorthand tokenization."""

from med_notes.tokens.tokenizer import (
    CurrentWord,
    current_word,
    replace_word,
    scan_prefix,
    scan_suffix,
    tokenize,
    tokenize_fragment,
)

__all__ = [
    "CurrentWord",
    "current_word",
    "replace_word",
    "scan_prefix",
    "scan_suffix",
    "tokenize",
    "tokenize_fragment",
]
