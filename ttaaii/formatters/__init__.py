"""
Output formatters for the TTAAII resolver.
"""

from .json_formatter import (
    decode_ttaaii_to_json,
    decode_ttaaii_to_dict,
    validate_ttaaii_to_dict,
    format_decoded_json,
    format_decoded_dict,
    format_validation_dict,
    completion_rows,
)

__all__ = [
    "decode_ttaaii_to_json",
    "decode_ttaaii_to_dict",
    "validate_ttaaii_to_dict",
    "format_decoded_json",
    "format_decoded_dict",
    "format_validation_dict",
    "completion_rows",
]
