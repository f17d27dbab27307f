"""
WMO-386 TTAAII Abbreviated Heading Resolver

Decodes, validates and auto-completes the TTAAII part of WMO bulletin
abbreviated headings (T1 T2 A1 A2 ii), driven by the WMO-386 reference
tables A, B1-B7, C1-C7 and D1-D3.
"""

from .core.context import parse_context, get_field_at_position, TtaaiiContext, TtaaiiField
from .core.tables import (
    TableEntry,
    TableDefinition,
    TtaaiiTables,
    RegionalConfig,
    TableExtension,
    TableSetError,
)
from .core.table_loader import load_tables, apply_regional_config
from .core.resolver import resolve_table, validate_character, ErrorCode
from .core.provider import (
    TtaaiiProvider,
    ProviderConfig,
    CompletionOptions,
    CompletionResult,
    CompletionItem,
    CompletionGroup,
    ValidationResult,
    ValidationError,
    DecodedTtaaii,
    DecodedField,
    complete,
    validate,
    decode,
    get_field_suggestions,
)
from .formatters.json_formatter import (
    decode_ttaaii_to_dict,
    decode_ttaaii_to_json,
    validate_ttaaii_to_dict,
)

__version__ = "1.0.0"
__all__ = [
    "parse_context",
    "get_field_at_position",
    "TtaaiiContext",
    "TtaaiiField",
    "TableEntry",
    "TableDefinition",
    "TtaaiiTables",
    "RegionalConfig",
    "TableExtension",
    "TableSetError",
    "load_tables",
    "apply_regional_config",
    "resolve_table",
    "validate_character",
    "ErrorCode",
    "TtaaiiProvider",
    "ProviderConfig",
    "CompletionOptions",
    "CompletionResult",
    "CompletionItem",
    "CompletionGroup",
    "ValidationResult",
    "ValidationError",
    "DecodedTtaaii",
    "DecodedField",
    "complete",
    "validate",
    "decode",
    "get_field_suggestions",
    "decode_ttaaii_to_dict",
    "decode_ttaaii_to_json",
    "validate_ttaaii_to_dict",
]
