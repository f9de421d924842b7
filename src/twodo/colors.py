#!/usr/bin/env python3
"""
Color hints for short codes: digits, vowels and consonants.
"""

from __future__ import annotations

import re
from typing import List

DIGIT_COLOR = "\x1b[36m"
VOWEL_COLOR = "\x1b[33m"
CONSONANT_COLOR = "\x1b[35m"
ANSI_RESET = "\x1b[0m"

VOWELS = frozenset("aeiou")
CODE_TOKEN_PATTERN = re.compile(r"\b[a-z0-9]{2,4}\b")

CLASS_COLORS = {
    "digit": DIGIT_COLOR,
    "vowel": VOWEL_COLOR,
    "consonant": CONSONANT_COLOR,
}


def classify_char(char: str) -> str:
    """
    Classify a code character for coloring.

    Examples
    --------
    >>> [classify_char(c) for c in "4e8m"]
    ['digit', 'vowel', 'digit', 'consonant']
    >>> classify_char("A")
    'vowel'
    """
    if char in "0123456789":
        return "digit"
    if char.lower() in VOWELS:
        return "vowel"
    return "consonant"


def colorize(code: str, use_colors: bool = True) -> str:
    """
    Color each character of a short code.

    Examples
    --------
    >>> colorize("2a", use_colors=False)
    '2a'
    >>> colorize("2a")
    '\\x1b[36m2\\x1b[0m\\x1b[33ma\\x1b[0m'
    """
    if not use_colors:
        return code
    return "".join(
        f"{CLASS_COLORS[classify_char(char)]}{char}{ANSI_RESET}" for char in code
    )


def colorize_multiple(text: str, use_colors: bool = True) -> str:
    """
    Color every standalone code-like token in a line of text.

    Examples
    --------
    >>> colorize_multiple("done: 2p, 9z1k", use_colors=False)
    'done: 2p, 9z1k'
    >>> colorize_multiple("x 2p") == "x " + colorize("2p")
    True
    """
    if not use_colors:
        return text
    return CODE_TOKEN_PATTERN.sub(lambda match: colorize(match.group(0)), text)


def get_legend_lines(use_colors: bool = True) -> List[str]:
    """
    Build the color legend shown by ``twodo legend``.
    """
    def paint(color: str, label: str) -> str:
        return f"{color}{label}{ANSI_RESET}" if use_colors else label

    examples = " ".join(colorize(code, use_colors) for code in ("2a5x", "9z1k", "4e8m"))
    return [
        "ID Color Legend:",
        f"  {paint(DIGIT_COLOR, 'Numbers (0-9)')} - Cyan",
        f"  {paint(CONSONANT_COLOR, 'Consonants (b,c,d,f...)')} - Magenta",
        f"  {paint(VOWEL_COLOR, 'Vowels (a,e,i,o,u)')} - Yellow",
        "",
        f"Examples: {examples}",
    ]
