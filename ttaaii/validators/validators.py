"""
TTAAII Syntax Validation Functions

Character-class checks that do not need the reference tables:
- T1, T2, A1, A2 are uppercase letters
- ii is two digits
- a heading is at most 6 characters

The table-driven checks live in ``ttaaii.core.resolver``; these run first
so that a digit in a letter position is reported as a format error rather
than as an unknown code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ValidationResult:
    """Result of a validation operation."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


# Character sets
LETTERS = frozenset('ABCDEFGHIJKLMNOPQRSTUVWXYZ')

DIGITS = frozenset('0123456789')

MAX_LENGTH = 6

# Number of letter positions (T1 T2 A1 A2) before ii
LETTER_POSITIONS = 4


def normalize_input(value: str) -> str:
    """Uppercase a heading; positions are left untouched."""
    return (value or "").upper()


def expected_charset(position: int) -> str:
    """'letter' for T1..A2, 'digit' for ii."""
    return 'letter' if position < LETTER_POSITIONS else 'digit'


def check_character_syntax(char: str, position: int) -> ValidationResult:
    """
    Check one character against the character class of its position.

    Args:
        char: Single character
        position: Zero-based position in the heading

    Returns:
        ValidationResult whose meta carries ``code`` (TOO_LONG or
        INVALID_FORMAT) and ``expected`` on failure
    """
    result = ValidationResult(valid=True)

    if position >= MAX_LENGTH:
        result.valid = False
        result.errors.append(f"Heading exceeds {MAX_LENGTH} characters")
        result.meta['code'] = 'TOO_LONG'
        return result

    expected = expected_charset(position)
    allowed = LETTERS if expected == 'letter' else DIGITS
    if len(char) != 1 or char not in allowed:
        result.valid = False
        result.errors.append(f"Expected a {expected} at position {position}, got {char!r}")
        result.meta['code'] = 'INVALID_FORMAT'
        result.meta['expected'] = expected

    return result


def validate_heading_syntax(value: str) -> ValidationResult:
    """
    Check a whole (possibly partial) heading for character-class errors.

    Args:
        value: Heading text, already normalized

    Returns:
        ValidationResult with one error per offending position; the
        offending positions are listed in ``meta['positions']``
    """
    result = ValidationResult(valid=True)
    positions = []

    for position, char in enumerate(value):
        check = check_character_syntax(char, position)
        if not check.valid:
            result.valid = False
            result.errors.extend(check.errors)
            positions.append(position)

    if len(value) < MAX_LENGTH:
        result.warnings.append(f"Heading incomplete ({len(value)}/{MAX_LENGTH} characters)")

    result.meta['positions'] = positions
    result.meta['length'] = len(value)
    return result
