"""
TTAAII Completion / Validation / Decoding Provider

UI-agnostic front end over the table resolver. Answers four queries about
a (partial) abbreviated heading:

- complete():              what can come next
- validate():              is this input valid, and where not
- decode():                what does this input mean
- get_field_suggestions(): valid values of one field for an explicit context

All queries are pure functions of the table-set and the input. Malformed
input never raises; it is reported through empty item lists and
validation errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .context import (
    TTAAII_LENGTH,
    TtaaiiContext,
    TtaaiiField,
    get_field_at_position,
    parse_context,
)
from .resolver import (
    A1Family,
    ErrorCode,
    get_a1_table,
    get_a2_table,
    get_country_entry,
    get_ii_table,
    get_route,
    get_t1_table,
    get_t2_table,
    get_table_for_field,
    resolve_table,
    station_type_codes,
    uses_country_table,
    validate_character,
)
from .table_loader import DEFAULT_LOCALE, apply_regional_config, load_tables
from .tables import RegionalConfig, TableDefinition, TableEntry, TableSetError, TtaaiiTables
from ..validators.validators import normalize_input

logger = logging.getLogger(__name__)

OTHER_GROUP = "OTHER"

# labels.fields key naming a joint A1A2 country decode
JOINT_AREA_FIELD = "A1A2"


@dataclass
class CompletionOptions:
    """
    Options for completion queries.

    Attributes:
        group_by: "continent", "table" (static table groups) or any
            metadata key to group items by
        locale: Locale of the table-set to answer from (defaults to the
            provider's table-set)
        prefix: Uncommitted filter characters; only items whose code starts
            with them are returned
    """
    group_by: Optional[str] = None
    locale: Optional[str] = None
    prefix: Optional[str] = None


@dataclass(frozen=True)
class ProviderConfig:
    """
    Provider configuration, constructed once and passed by reference.

    Attributes:
        locale: Locale of the packaged table-set
        tables_path: Explicit table-set file (overrides ``locale``)
        regional: Regional extension applied on top of the table-set
    """
    locale: str = DEFAULT_LOCALE
    tables_path: Optional[Path] = None
    regional: Optional[RegionalConfig] = None


@dataclass
class CompletionItem:
    """One completion suggestion."""
    code: str
    label: str
    code_form: Optional[str] = None
    priority: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_entry(cls, entry: TableEntry) -> "CompletionItem":
        return cls(
            code=entry.code,
            label=entry.label,
            code_form=entry.code_form,
            priority=entry.priority,
            metadata=dict(entry.metadata),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'label': self.label,
            'code_form': self.code_form,
            'priority': self.priority,
            'metadata': self.metadata,
        }


@dataclass
class CompletionGroup:
    """Named group of completion items."""
    key: str
    label: str
    items: List[CompletionItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'label': self.label,
            'items': [item.to_dict() for item in self.items],
        }


@dataclass
class CompletionResult:
    """
    Result of a completion query.

    Attributes:
        position: Position being completed (length of the input)
        field: Field being completed
        items: Valid values for that field
        groups: Grouped items, when grouping was requested
        is_complete: True once the input holds all 6 characters
        input: Normalized input
        context: Parsed context of the input
        table_id: Id of the governing table, None if there is none
    """
    position: int
    field: TtaaiiField
    items: List[CompletionItem] = field(default_factory=list)
    groups: Optional[List[CompletionGroup]] = None
    is_complete: bool = False
    input: str = ""
    context: TtaaiiContext = field(default_factory=TtaaiiContext)
    table_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'input': self.input,
            'position': self.position,
            'field': self.field.value,
            'table_id': self.table_id,
            'is_complete': self.is_complete,
            'context': self.context.to_dict(),
            'items': [item.to_dict() for item in self.items],
            'groups': (
                [group.to_dict() for group in self.groups]
                if self.groups is not None else None
            ),
        }


@dataclass
class FieldSuggestions:
    """Result of get_field_suggestions(); ``field`` is None for an unknown field name."""
    field: Optional[TtaaiiField]
    items: List[CompletionItem] = field(default_factory=list)
    groups: Optional[List[CompletionGroup]] = None
    table_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'field': self.field.value if self.field is not None else None,
            'table_id': self.table_id,
            'items': [item.to_dict() for item in self.items],
            'groups': (
                [group.to_dict() for group in self.groups]
                if self.groups is not None else None
            ),
        }


@dataclass
class ValidationError:
    """One invalid position of a heading."""
    position: int
    field: TtaaiiField
    character: str
    message: str
    code: ErrorCode = ErrorCode.INVALID_CHARACTER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'position': self.position,
            'field': self.field.value,
            'character': self.character,
            'code': self.code.value,
            'message': self.message,
        }


@dataclass
class ValidationResult:
    """
    Result of validating a heading.

    Attributes:
        valid: True when no position is invalid
        complete: True when the heading has 6 characters and is valid
        errors: One error per invalid position
        context: Parsed context of the whole input
        input: Normalized input
    """
    valid: bool
    complete: bool
    errors: List[ValidationError] = field(default_factory=list)
    context: TtaaiiContext = field(default_factory=TtaaiiContext)
    input: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'input': self.input,
            'valid': self.valid,
            'complete': self.complete,
            'context': self.context.to_dict(),
            'errors': [error.to_dict() for error in self.errors],
        }


@dataclass
class DecodedField:
    """Human-readable decoding of one heading field."""
    code: str
    label: str
    name: str = ""
    code_form: Optional[str] = None
    priority: Optional[int] = None
    table: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'code': self.code, 'label': self.label, 'name': self.name}
        if self.code_form is not None:
            data['code_form'] = self.code_form
        if self.priority is not None:
            data['priority'] = self.priority
        if self.table is not None:
            data['table'] = self.table
        if self.metadata:
            data['metadata'] = self.metadata
        return data


@dataclass
class DecodedTtaaii:
    """
    Decoded heading.

    For country-table data types, A1A2 decode jointly into
    ``area_or_type1`` and ``area_or_time2`` stays empty.
    """
    input: str
    data_type: Optional[DecodedField] = None
    data_subtype: Optional[DecodedField] = None
    area_or_type1: Optional[DecodedField] = None
    area_or_time2: Optional[DecodedField] = None
    level: Optional[DecodedField] = None
    field_labels: Dict[str, str] = field(default_factory=dict)

    def decoded_fields(self) -> Dict[str, DecodedField]:
        """Present decoded fields keyed by attribute name."""
        names = ('data_type', 'data_subtype', 'area_or_type1', 'area_or_time2', 'level')
        return {n: getattr(self, n) for n in names if getattr(self, n) is not None}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'input': self.input}
        for name, decoded in self.decoded_fields().items():
            data[name] = decoded.to_dict()
        data['field_labels'] = dict(self.field_labels)
        return data


def _matches_prefix(item: CompletionItem, prefix: Optional[str]) -> bool:
    return not prefix or item.code.startswith(prefix.upper())


def group_items(
    items: List[CompletionItem],
    group_by: str,
    tables: TtaaiiTables,
    table: Optional[TableDefinition] = None,
) -> List[CompletionGroup]:
    """
    Partition completion items into named groups.

    ``group_by="table"`` uses the table's declared groups in their declared
    order. Any other value groups by that metadata key ("continent" labels
    come from the table-set); those groups are sorted by label. Items that
    fit no group land in OTHER, which is always last. Every item lands in
    exactly one group.
    """
    other_label = tables.label('continents', OTHER_GROUP, 'Other')

    if group_by == 'table':
        declared = table.groups if table is not None else []
        groups: List[CompletionGroup] = []
        placed = set()
        for table_group in declared:
            codes = set(table_group.codes)
            members = [
                item for i, item in enumerate(items)
                if item.code in codes and i not in placed
            ]
            placed.update(i for i, item in enumerate(items) if item.code in codes)
            if members:
                groups.append(CompletionGroup(table_group.key, table_group.label, members))
        leftovers = [item for i, item in enumerate(items) if i not in placed]
        if leftovers:
            groups.append(CompletionGroup(OTHER_GROUP, other_label, leftovers))
        return groups

    buckets: Dict[str, List[CompletionItem]] = {}
    for item in items:
        value = item.metadata.get(group_by)
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        key = str(value) if value not in (None, "") else OTHER_GROUP
        buckets.setdefault(key, []).append(item)

    groups = []
    for key, members in buckets.items():
        if key == OTHER_GROUP:
            label = other_label
        elif group_by == 'continent':
            label = tables.label('continents', key)
        else:
            label = key
        groups.append(CompletionGroup(key, label, members))

    groups.sort(key=lambda g: (g.key == OTHER_GROUP, g.label))
    return groups


class TtaaiiProvider:
    """
    TTAAII completion provider.

    Holds one immutable table-set; ``with_tables()`` returns a provider
    bound to another one.

    Example:
        provider = TtaaiiProvider()
        provider.complete("SA").items     # A1 values for METAR bulletins
        provider.decode("SAUK31").area_or_type1.label
    """

    def __init__(
        self,
        tables: Optional[TtaaiiTables] = None,
        config: Optional[ProviderConfig] = None,
    ):
        self.config = config or ProviderConfig()
        if tables is None:
            tables = load_tables(self.config.locale, self.config.tables_path)
        if self.config.regional is not None:
            tables = apply_regional_config(tables, self.config.regional)
        self._tables = tables

    @property
    def tables(self) -> TtaaiiTables:
        return self._tables

    def with_tables(self, tables: TtaaiiTables) -> "TtaaiiProvider":
        """New provider bound to another table-set (regional config not re-applied)."""
        return TtaaiiProvider(tables=tables, config=ProviderConfig(
            locale=tables.locale,
            tables_path=self.config.tables_path,
        ))

    def _tables_for(self, options: Optional[CompletionOptions]) -> TtaaiiTables:
        if options is None or not options.locale or options.locale == self._tables.locale:
            return self._tables
        logger.debug("Answering from locale %s", options.locale)
        try:
            tables = load_tables(options.locale)
            if self.config.regional is not None:
                tables = apply_regional_config(tables, self.config.regional)
        except TableSetError as e:
            logger.warning("Locale %r unavailable, answering from %r: %s",
                           options.locale, self._tables.locale, e)
            return self._tables
        return tables

    def _items(
        self,
        tables: TtaaiiTables,
        table: Optional[TableDefinition],
        options: CompletionOptions,
    ):
        if table is None:
            return [], ([] if options.group_by else None)
        items = [
            item for item in map(CompletionItem.from_entry, table.entries)
            if _matches_prefix(item, options.prefix)
        ]
        groups = None
        if options.group_by:
            groups = group_items(items, options.group_by, tables, table)
        return items, groups

    def complete(
        self,
        text: str,
        options: Optional[CompletionOptions] = None,
    ) -> CompletionResult:
        """
        Get completion suggestions for a partial TTAAII string.

        Args:
            text: Current input (0-6 characters)
            options: Grouping, locale and prefix filtering

        Returns:
            CompletionResult with items and optional groups
        """
        options = options or CompletionOptions()
        tables = self._tables_for(options)
        normalized = normalize_input(text)
        resolved = resolve_table(tables, normalized)
        items, groups = self._items(tables, resolved.table, options)

        return CompletionResult(
            position=resolved.position,
            field=resolved.field,
            items=items,
            groups=groups,
            is_complete=len(normalized) >= TTAAII_LENGTH,
            input=normalized,
            context=resolved.context,
            table_id=resolved.table.id if resolved.table is not None else None,
        )

    def validate(self, text: str) -> ValidationResult:
        """
        Validate a TTAAII string position by position.

        The context used for each position holds only the characters
        before it. Incomplete input is not an error.
        """
        tables = self._tables
        normalized = normalize_input(text)
        errors: List[ValidationError] = []

        for position, char in enumerate(normalized):
            partial = parse_context(normalized[:position])
            ii_first = normalized[4] if position == 5 else None
            result = validate_character(tables, char, position, partial, ii_first=ii_first)
            if not result.valid:
                errors.append(ValidationError(
                    position=position,
                    field=get_field_at_position(position),
                    character=char,
                    message=result.error or f"Invalid character at position {position}",
                    code=result.code or ErrorCode.INVALID_CHARACTER,
                ))

        return ValidationResult(
            valid=not errors,
            complete=len(normalized) == TTAAII_LENGTH and not errors,
            errors=errors,
            context=parse_context(normalized),
            input=normalized,
        )

    def _decoded(
        self,
        entry: TableEntry,
        field_name: TtaaiiField,
        table: Optional[TableDefinition] = None,
    ) -> DecodedField:
        return DecodedField(
            code=entry.code,
            label=entry.label,
            name=self._tables.label('fields', field_name.value),
            code_form=entry.code_form,
            priority=entry.priority,
            table=entry.metadata.get('table') or (table.id if table is not None else None),
            metadata=dict(entry.metadata),
        )

    def _decode_country_area(self, result: DecodedTtaaii, context: TtaaiiContext) -> None:
        """Decode A1A2 for data types that use the country table."""
        tables = self._tables
        a1_table = get_a1_table(tables, context)
        if a1_table is None or context.a1 not in a1_table:
            return

        if context.a2 is None:
            candidates = a1_table.find_all(context.a1)
            if all(e.metadata.get('table') == 'C2' for e in candidates):
                result.area_or_type1 = self._decoded(candidates[0], TtaaiiField.A1, a1_table)
                return
            result.area_or_type1 = DecodedField(
                code=context.a1,
                label=tables.template('countriesStartingWith', letter=context.a1),
                name=tables.label('fields', TtaaiiField.A1.value),
                table=a1_table.id,
            )
            return

        country = get_country_entry(tables, context.a1 + context.a2)
        if country is not None:
            result.area_or_type1 = DecodedField(
                code=country.code,
                label=country.label,
                name=tables.label('fields', TtaaiiField.A1.value),
                table=tables.c1.id,
                metadata=dict(country.metadata),
            )
            return

        # Ship/station headings: A1 station type, A2 ocean area (Table C2)
        route = get_route(context.t1)
        if route.a1 is A1Family.COUNTRY_OR_STATION and context.a1 in station_type_codes(tables):
            a2_table = get_a2_table(tables, context)
            stations = [e for e in a1_table.find_all(context.a1)
                        if e.metadata.get('table') == 'C2']
            areas = [e for e in (a2_table.find_all(context.a2) if a2_table else [])
                     if e.metadata.get('table') == 'C2']
            if stations and areas:
                result.area_or_type1 = self._decoded(stations[0], TtaaiiField.A1)
                area = areas[0]
                area_entry = next(
                    e for e in tables.c2.entries
                    if e.code == area.code and e.metadata.get('position') == 'A2'
                )
                result.area_or_time2 = DecodedField(
                    code=area.code,
                    label=area_entry.label,
                    name=tables.label('fields', TtaaiiField.A2.value),
                    table=tables.c2.id,
                    metadata=dict(area.metadata),
                )

    def decode(self, text: str) -> DecodedTtaaii:
        """
        Decode a TTAAII string into human-readable form.

        Fields whose code is not valid in context are left as None.
        """
        tables = self._tables
        normalized = normalize_input(text)
        context = parse_context(normalized)
        result = DecodedTtaaii(
            input=normalized,
            field_labels={f.value: tables.label('fields', f.value) for f in TtaaiiField},
        )
        result.field_labels[JOINT_AREA_FIELD] = tables.label('fields', JOINT_AREA_FIELD)

        if context.t1:
            t1_table = get_t1_table(tables, context)
            entry = t1_table.find(context.t1)
            if entry is not None:
                result.data_type = self._decoded(entry, TtaaiiField.T1, t1_table)

        if context.t2:
            t2_table = get_t2_table(tables, context)
            entry = t2_table.find(context.t2) if t2_table is not None else None
            if entry is not None:
                result.data_subtype = self._decoded(entry, TtaaiiField.T2, t2_table)

        if context.a1:
            if uses_country_table(context.t1):
                self._decode_country_area(result, context)
            else:
                a1_table = get_a1_table(tables, context)
                entry = a1_table.find(context.a1) if a1_table is not None else None
                if entry is not None:
                    result.area_or_type1 = self._decoded(entry, TtaaiiField.A1, a1_table)

                if context.a2:
                    a2_table = get_a2_table(tables, context)
                    entry = a2_table.find(context.a2) if a2_table is not None else None
                    if entry is not None:
                        result.area_or_time2 = self._decoded(entry, TtaaiiField.A2, a2_table)

        if context.ii:
            ii_table = get_ii_table(tables, context)
            entry = ii_table.find(context.ii) if ii_table is not None else None
            if entry is not None:
                result.level = self._decoded(entry, TtaaiiField.II, ii_table)

        return result

    def get_field_suggestions(
        self,
        field_name: TtaaiiField,
        context: TtaaiiContext,
        options: Optional[CompletionOptions] = None,
    ) -> FieldSuggestions:
        """
        Valid values for one field given an explicit context.

        Same resolution as complete(), but keyed by a context object
        rather than a literal prefix string.
        """
        options = options or CompletionOptions()
        try:
            field_name = TtaaiiField(field_name)
        except ValueError:
            logger.debug("Unknown field %r", field_name)
            return FieldSuggestions(field=None, groups=[] if options.group_by else None)
        tables = self._tables_for(options)
        table = get_table_for_field(tables, field_name, context)
        items, groups = self._items(tables, table, options)
        return FieldSuggestions(
            field=field_name,
            items=items,
            groups=groups,
            table_id=table.id if table is not None else None,
        )


# Global cached default provider instance
_default_provider: Optional[TtaaiiProvider] = None


def get_default_provider() -> TtaaiiProvider:
    """Provider over the packaged English table-set, created on first use."""
    global _default_provider
    if _default_provider is None:
        _default_provider = TtaaiiProvider()
    return _default_provider


def complete(text: str, options: Optional[CompletionOptions] = None) -> CompletionResult:
    """Completion suggestions from the default provider."""
    return get_default_provider().complete(text, options)


def validate(text: str) -> ValidationResult:
    """Validate a heading with the default provider."""
    return get_default_provider().validate(text)


def decode(text: str) -> DecodedTtaaii:
    """Decode a heading with the default provider."""
    return get_default_provider().decode(text)


def get_field_suggestions(
    field_name: TtaaiiField,
    context: TtaaiiContext,
    options: Optional[CompletionOptions] = None,
) -> FieldSuggestions:
    """Field suggestions from the default provider."""
    return get_default_provider().get_field_suggestions(field_name, context, options)
