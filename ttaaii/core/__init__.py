"""
Core resolution modules for the TTAAII resolver.
"""

from .context import parse_context, get_field_at_position, TtaaiiContext, TtaaiiField
from .tables import (
    TableEntry,
    TableGroup,
    TableDefinition,
    NumericRange,
    TtaaiiTables,
    RegionalConfig,
    TableExtension,
    TableSetError,
)
from .table_loader import load_tables, apply_regional_config, available_locales
from .resolver import (
    resolve_table,
    validate_character,
    get_t1_table,
    get_t2_table,
    get_a1_table,
    get_a2_table,
    get_ii_table,
    get_table_for_field,
    get_country_entry,
    uses_country_table,
    ErrorCode,
    T1Route,
    T1_ROUTES,
)
from .provider import (
    TtaaiiProvider,
    ProviderConfig,
    CompletionOptions,
    CompletionResult,
    ValidationResult,
    DecodedTtaaii,
)

__all__ = [
    "parse_context",
    "get_field_at_position",
    "TtaaiiContext",
    "TtaaiiField",
    "TableEntry",
    "TableGroup",
    "TableDefinition",
    "NumericRange",
    "TtaaiiTables",
    "RegionalConfig",
    "TableExtension",
    "TableSetError",
    "load_tables",
    "apply_regional_config",
    "available_locales",
    "resolve_table",
    "validate_character",
    "get_t1_table",
    "get_t2_table",
    "get_a1_table",
    "get_a2_table",
    "get_ii_table",
    "get_table_for_field",
    "get_country_entry",
    "uses_country_table",
    "ErrorCode",
    "T1Route",
    "T1_ROUTES",
    "TtaaiiProvider",
    "ProviderConfig",
    "CompletionOptions",
    "CompletionResult",
    "ValidationResult",
    "DecodedTtaaii",
]
