"""
Validation modules for the TTAAII resolver.
"""

from .validators import (
    check_character_syntax,
    validate_heading_syntax,
    normalize_input,
    expected_charset,
    ValidationResult,
    LETTERS,
    DIGITS,
    MAX_LENGTH,
)

__all__ = [
    "check_character_syntax",
    "validate_heading_syntax",
    "normalize_input",
    "expected_charset",
    "ValidationResult",
    "LETTERS",
    "DIGITS",
    "MAX_LENGTH",
]
