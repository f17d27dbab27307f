"""
JSON Formatter for TTAAII results

Clean, human-readable output for decode/validate/complete results:
- Field names taken from the table-set labels ("Data Type", ...)
- Code and meaning shown together ("A: Analyses")
- Joint A1A2 country decodes reported under a single key
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ..core.context import TtaaiiField
from ..core.provider import (
    JOINT_AREA_FIELD,
    CompletionResult,
    DecodedTtaaii,
    TtaaiiProvider,
    ValidationResult,
    get_default_provider,
)


# Decoded attribute -> field whose label names it in the output
DECODED_FIELD_NAMES = {
    "data_type": TtaaiiField.T1,
    "data_subtype": TtaaiiField.T2,
    "area_or_type1": TtaaiiField.A1,
    "area_or_time2": TtaaiiField.A2,
    "level": TtaaiiField.II,
}


def format_decoded_value(code: str, label: str) -> str:
    """Render a decoded field as "CODE: label"."""
    return f"{code}: {label}"


def format_decoded_dict(
    result: DecodedTtaaii,
    include_code_forms: bool = False,
) -> Dict[str, Any]:
    """
    Format a decode result as a flat, human-named dictionary.

    Args:
        result: Result of TtaaiiProvider.decode()
        include_code_forms: Add the WMO code form of each field, if any

    Returns:
        Dictionary keyed by field label, starting with the heading itself
    """
    output: Dict[str, Any] = {"TTAAII": result.input}

    for attr, decoded in result.decoded_fields().items():
        field_name = result.field_labels.get(DECODED_FIELD_NAMES[attr].value, attr)
        if attr == "area_or_type1" and len(decoded.code) == 2:
            field_name = result.field_labels.get(JOINT_AREA_FIELD, JOINT_AREA_FIELD)

        if include_code_forms and decoded.code_form:
            output[field_name] = {
                "value": format_decoded_value(decoded.code, decoded.label),
                "code_form": decoded.code_form,
            }
        else:
            output[field_name] = format_decoded_value(decoded.code, decoded.label)

    return output


def format_decoded_json(result: DecodedTtaaii, include_code_forms: bool = False) -> str:
    """Format a decode result as JSON."""
    return json.dumps(
        format_decoded_dict(result, include_code_forms=include_code_forms),
        ensure_ascii=False,
        indent=2,
    )


def decode_ttaaii_to_dict(
    heading: str,
    provider: Optional[TtaaiiProvider] = None,
    include_code_forms: bool = False,
) -> Dict[str, Any]:
    """
    Decode a heading and return a human-named dictionary.

    Example:
        >>> decode_ttaaii_to_dict("FCUK31")
        {
          "TTAAII": "FCUK31",
          "Data Type": "F: Forecasts",
          "Data Subtype": "C: Aerodrome (VT < 12 hours)",
          "Area": "UK: United Kingdom of Great Britain and Northern Ireland",
          "Level/Sequence": "31: Bulletin 31"
        }
    """
    provider = provider or get_default_provider()
    return format_decoded_dict(provider.decode(heading), include_code_forms=include_code_forms)


def decode_ttaaii_to_json(
    heading: str,
    provider: Optional[TtaaiiProvider] = None,
    include_code_forms: bool = False,
) -> str:
    """Decode a heading and return clean JSON output."""
    return json.dumps(
        decode_ttaaii_to_dict(heading, provider, include_code_forms=include_code_forms),
        ensure_ascii=False,
        indent=2,
    )


def format_validation_dict(result: ValidationResult) -> Dict[str, Any]:
    """Format a validation result with one readable line per error."""
    return {
        "TTAAII": result.input,
        "Valid": result.valid,
        "Complete": result.complete,
        "Errors": [
            f"[{error.code.value}] position {error.position} ({error.field.value}): {error.message}"
            for error in result.errors
        ],
    }


def validate_ttaaii_to_dict(
    heading: str,
    provider: Optional[TtaaiiProvider] = None,
) -> Dict[str, Any]:
    """Validate a heading and return a readable dictionary."""
    provider = provider or get_default_provider()
    return format_validation_dict(provider.validate(heading))


def completion_rows(result: CompletionResult) -> List[Dict[str, Any]]:
    """
    Flatten completion items into table rows (one dict per item).

    The group of each item is included when the result was grouped.
    """
    group_of: Dict[int, str] = {}
    for group in result.groups or []:
        for item in group.items:
            group_of[id(item)] = group.label

    rows = []
    for item in result.items:
        row: Dict[str, Any] = {
            "Code": item.code,
            "Label": item.label,
            "Code Form": item.code_form or "",
        }
        if result.groups is not None:
            row["Group"] = group_of.get(id(item), "")
        rows.append(row)
    return rows
