"""
TTAAII Table Resolver

Given a parsed context and a table-set, selects or synthesizes the table
that governs each heading field. Most fields are a plain lookup, but
several need synthesis:

- A1 for country-table data types is derived from Table C1 by grouping
  country codes on their first letter, with a count in each label.
- A1/A2 for surface and upper-air data (T1 = S, U) is the union of the
  country table and the ship/station table C2. Colliding letters are kept
  as separate entries tagged with the table they came from.
- ii for T1T2 = FA/UA is expanded from the numeric ranges of Table D3.
- ii for data types without a level table is the generic 00-99 series.

The WMO-386 Table A mapping from T1 to table families is a closed
enumeration (``T1_ROUTES``); a T1 without a route resolves every later
field to None.

Resolved tables are built on every call and never cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from .context import (
    TtaaiiContext,
    TtaaiiField,
    get_field_at_position,
    parse_context,
)
from .tables import TableDefinition, TableEntry, TtaaiiTables
from ..validators.validators import DIGITS, check_character_syntax

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Validation error codes."""
    UNKNOWN_TABLE = "UNKNOWN_TABLE"
    INVALID_CHARACTER = "INVALID_CHARACTER"
    INVALID_II = "INVALID_II"
    INVALID_FORMAT = "INVALID_FORMAT"
    TOO_LONG = "TOO_LONG"


class T2Family(Enum):
    """Table governing T2."""
    B1 = "B1"
    B2 = "B2"
    B3 = "B3"
    B4 = "B4"
    B5 = "B5"
    B6 = "B6"
    B7 = "B7"
    C7_T2 = "C7_T2"


class A1Family(Enum):
    """Table governing A1."""
    COUNTRY = "C1"
    COUNTRY_OR_STATION = "C1/C2"
    AREA = "C3"
    BUFR = "C6"
    CREX = "C7"


class A2Family(Enum):
    """Table governing A2."""
    COUNTRY = "C1"
    COUNTRY_OR_STATION = "C1/C2"
    AREA = "C3"
    REFERENCE_TIME = "C4"
    REFERENCE_TIME_FINE = "C5"


class IiFamily(Enum):
    """Table governing ii (FA/UA are handled before the family applies)."""
    GENERIC = "generic_ii"
    DEPTH = "D1"
    PRESSURE = "D2"


@dataclass(frozen=True)
class T1Route:
    """Table families used by one data type designator."""
    t2: T2Family
    a1: A1Family
    a2: A2Family
    ii: IiFamily


_COUNTRY = T1Route(T2Family.B1, A1Family.COUNTRY, A2Family.COUNTRY, IiFamily.GENERIC)
_SURFACE = T1Route(T2Family.B1, A1Family.COUNTRY_OR_STATION,
                   A2Family.COUNTRY_OR_STATION, IiFamily.GENERIC)
_GRID = T1Route(T2Family.B2, A1Family.AREA, A2Family.REFERENCE_TIME, IiFamily.PRESSURE)
_GRID_FINE = T1Route(T2Family.B2, A1Family.AREA, A2Family.REFERENCE_TIME_FINE,
                     IiFamily.PRESSURE)

# WMO-386 Table A dispatch. B, M, R, Z and unassigned letters have no route.
T1_ROUTES: Dict[str, T1Route] = {
    'A': _COUNTRY,
    'C': _COUNTRY,
    'F': _COUNTRY,
    'N': _COUNTRY,
    'W': _COUNTRY,
    'S': _SURFACE,
    'U': _SURFACE,
    'T': T1Route(T2Family.B1, A1Family.AREA, A2Family.REFERENCE_TIME, IiFamily.GENERIC),
    'E': T1Route(T2Family.B5, A1Family.COUNTRY, A2Family.COUNTRY, IiFamily.GENERIC),
    'L': T1Route(T2Family.B7, A1Family.COUNTRY, A2Family.COUNTRY, IiFamily.GENERIC),
    'V': T1Route(T2Family.B2, A1Family.COUNTRY, A2Family.COUNTRY, IiFamily.GENERIC),
    'D': _GRID,
    'G': _GRID,
    'H': _GRID,
    'X': _GRID_FINE,
    'Y': _GRID_FINE,
    'I': T1Route(T2Family.B3, A1Family.BUFR, A2Family.AREA, IiFamily.GENERIC),
    'J': T1Route(T2Family.B3, A1Family.BUFR, A2Family.REFERENCE_TIME, IiFamily.PRESSURE),
    'K': T1Route(T2Family.C7_T2, A1Family.CREX, A2Family.AREA, IiFamily.GENERIC),
    'O': T1Route(T2Family.B4, A1Family.AREA, A2Family.REFERENCE_TIME, IiFamily.DEPTH),
    'P': T1Route(T2Family.B6, A1Family.AREA, A2Family.REFERENCE_TIME, IiFamily.PRESSURE),
    'Q': T1Route(T2Family.B6, A1Family.AREA, A2Family.REFERENCE_TIME_FINE,
                 IiFamily.PRESSURE),
}

COUNTRY_TABLE = "C1"
STATION_TABLE = "C2"
UNION_TABLE = "C1/C2"


def get_route(t1: Optional[str]) -> Optional[T1Route]:
    """Route for a T1 letter, or None when the letter has no mapping."""
    if not t1:
        return None
    route = T1_ROUTES.get(t1)
    if route is None:
        logger.debug("No table route for T1=%r", t1)
    return route


@dataclass
class ResolvedTable:
    """Table governing the next character of an input string."""
    position: int
    field: TtaaiiField
    table: Optional[TableDefinition]
    context: TtaaiiContext


@dataclass
class CharacterValidation:
    """Result of validating one character against its resolved table."""
    valid: bool
    error: Optional[str] = None
    code: Optional[ErrorCode] = None


# ---------------------------------------------------------------------------
# Table C1 / C2 helpers
# ---------------------------------------------------------------------------

def get_country_entry(tables: TtaaiiTables, code: str) -> Optional[TableEntry]:
    """Look up a two-letter country or area code in Table C1."""
    return tables.c1.find(code)


def station_type_codes(tables: TtaaiiTables) -> FrozenSet[str]:
    """A1 letters of Table C2 (ocean weather station, mobile ship, float)."""
    return frozenset(
        e.code for e in tables.c2.entries if e.metadata.get('position') == 'A1'
    )


def _station_entries(tables: TtaaiiTables, position: str) -> List[TableEntry]:
    return [
        e.with_metadata(table=STATION_TABLE)
        for e in tables.c2.entries
        if e.metadata.get('position') == position
    ]


def uses_country_table(t1: Optional[str]) -> bool:
    """True when A1A2 for this data type may be read jointly as a C1 country code."""
    route = get_route(t1)
    return route is not None and route.a1 in (A1Family.COUNTRY, A1Family.COUNTRY_OR_STATION)


def _country_prefix_entries(tables: TtaaiiTables) -> List[TableEntry]:
    """One entry per distinct first letter of the C1 country codes."""
    by_letter: Dict[str, List[TableEntry]] = {}
    for entry in tables.c1.entries:
        if len(entry.code) == 2:
            by_letter.setdefault(entry.code[0], []).append(entry)

    entries = []
    for letter in sorted(by_letter):
        countries = by_letter[letter]
        continents: List[str] = []
        for country in countries:
            continent = country.metadata.get('continent')
            if continent and continent not in continents:
                continents.append(continent)
        template = 'countryPrefixOne' if len(countries) == 1 else 'countryPrefix'
        metadata = {'table': COUNTRY_TABLE, 'count': len(countries), 'continents': continents}
        if continents:
            metadata['continent'] = continents[0]
        entries.append(TableEntry(
            code=letter,
            label=tables.template(template, letter=letter, count=len(countries)),
            metadata=metadata,
        ))
    return entries


def _country_second_letter_entries(tables: TtaaiiTables, letter: str) -> List[TableEntry]:
    """Second letters of the C1 countries whose code starts with ``letter``."""
    entries = []
    for country in tables.c1.entries:
        if len(country.code) == 2 and country.code[0] == letter:
            metadata = dict(country.metadata)
            metadata.update(table=COUNTRY_TABLE, country=country.code)
            entries.append(TableEntry(
                code=country.code[1],
                label=country.label,
                code_form=country.code_form,
                priority=country.priority,
                metadata=metadata,
            ))
    return entries


# ---------------------------------------------------------------------------
# Per-field dispatch
# ---------------------------------------------------------------------------

def get_t1_table(tables: TtaaiiTables, context: Optional[TtaaiiContext] = None) -> TableDefinition:
    """T1 is always Table A."""
    return tables.a.copy()


def get_t2_table(tables: TtaaiiTables, context: TtaaiiContext) -> Optional[TableDefinition]:
    """T2 table, selected by T1 alone."""
    route = get_route(context.t1)
    if route is None:
        return None

    if route.t2 is T2Family.B1:
        table = tables.b1.get(context.t1)
        if table is None:
            logger.debug("Table B1 has no entry for T1=%r", context.t1)
            return None
        return table.copy()

    return {
        T2Family.B2: tables.b2,
        T2Family.B3: tables.b3,
        T2Family.B4: tables.b4,
        T2Family.B5: tables.b5,
        T2Family.B6: tables.b6,
        T2Family.B7: tables.b7,
        T2Family.C7_T2: tables.c7_t2,
    }[route.t2].copy()


def _keyed_table(keyed: Dict[str, TableDefinition], key: str) -> Optional[TableDefinition]:
    table = keyed.get(key)
    if table is None:
        table = keyed.get('default')
    if table is None:
        logger.debug("No keyed table for %r", key)
        return None
    return table.copy()


def get_a1_table(tables: TtaaiiTables, context: TtaaiiContext) -> Optional[TableDefinition]:
    """A1 table, selected by T1 and, for BUFR and CREX, by T2."""
    route = get_route(context.t1)
    if route is None:
        return None

    if route.a1 is A1Family.BUFR:
        if not context.t2:
            return None
        return _keyed_table(tables.c6, context.t1t2)

    if route.a1 is A1Family.CREX:
        if not context.t2:
            return None
        return _keyed_table(tables.c7, context.t2)

    if route.a1 is A1Family.AREA:
        return tables.c3.copy()

    countries = _country_prefix_entries(tables)
    if route.a1 is A1Family.COUNTRY:
        return TableDefinition(
            id=COUNTRY_TABLE,
            name=tables.template('countryA1Name'),
            description=tables.c1.description,
            entries=countries,
        )

    return TableDefinition(
        id=UNION_TABLE,
        name=tables.template('unionA1Name'),
        description=tables.c2.description,
        entries=countries + _station_entries(tables, 'A1'),
    )


def get_a2_table(tables: TtaaiiTables, context: TtaaiiContext) -> Optional[TableDefinition]:
    """A2 table, selected by T1 and, for country tables, by A1."""
    route = get_route(context.t1)
    if route is None:
        return None

    if route.a2 is A2Family.AREA:
        return tables.c3.copy()
    if route.a2 is A2Family.REFERENCE_TIME:
        return tables.c4.copy()
    if route.a2 is A2Family.REFERENCE_TIME_FINE:
        return tables.c5.copy()

    if not context.a1:
        return None

    countries = _country_second_letter_entries(tables, context.a1)
    name = tables.template('countryA2Name', letter=context.a1)

    if route.a2 is A2Family.COUNTRY_OR_STATION and context.a1 in station_type_codes(tables):
        station = next(e for e in _station_entries(tables, 'A1') if e.code == context.a1)
        areas = [
            TableEntry(
                code=area.code,
                label=tables.template('stationArea', station=station.label, area=area.label),
                metadata=area.metadata,
            )
            for area in _station_entries(tables, 'A2')
        ]
        union_name = tables.template('unionA2Name', letter=context.a1)
        if countries:
            return TableDefinition(id=UNION_TABLE, name=union_name,
                                   entries=countries + areas)
        return TableDefinition(id=STATION_TABLE, name=union_name,
                               description=tables.c2.description, entries=areas)

    if not countries:
        logger.debug("No C1 countries start with A1=%r", context.a1)
        return None
    return TableDefinition(id=COUNTRY_TABLE, name=name, entries=countries)


def _generic_ii_table(tables: TtaaiiTables) -> TableDefinition:
    codes = [f"{n:02d}" for n in range(100)]
    return TableDefinition(
        id=IiFamily.GENERIC.value,
        name=tables.template('genericIiName'),
        description=tables.template('genericIiDescription'),
        entries=[TableEntry(code=c, label=tables.template('genericIi', code=c)) for c in codes],
    )


def _range_ii_table(tables: TtaaiiTables, t1t2: str) -> TableDefinition:
    entries = []
    for numeric_range in tables.d3[t1t2]:
        span = f"{numeric_range.start:02d}-{numeric_range.end:02d}"
        for n in range(numeric_range.start, numeric_range.end + 1):
            code = f"{n:02d}"
            entries.append(TableEntry(
                code=code,
                label=tables.template('rangeIi', label=numeric_range.label, code=code),
                code_form=numeric_range.code_form,
                metadata={'range': span},
            ))
    return TableDefinition(
        id=f"D3_{t1t2}",
        name=tables.template('d3Name', t1t2=t1t2),
        entries=entries,
    )


def get_ii_table(tables: TtaaiiTables, context: TtaaiiContext) -> Optional[TableDefinition]:
    """ii table, selected by T1 and, for the D3 ranges, by T1T2."""
    route = get_route(context.t1)
    if route is None:
        return None

    if context.t2 and context.t1t2 in tables.d3:
        return _range_ii_table(tables, context.t1t2)

    if route.ii is IiFamily.DEPTH:
        return tables.d1.copy()
    if route.ii is IiFamily.PRESSURE:
        return tables.d2.copy()
    return _generic_ii_table(tables)


_FIELD_RESOLVERS = {
    TtaaiiField.T1: get_t1_table,
    TtaaiiField.T2: get_t2_table,
    TtaaiiField.A1: get_a1_table,
    TtaaiiField.A2: get_a2_table,
    TtaaiiField.II: get_ii_table,
}


def get_table_for_field(
    tables: TtaaiiTables,
    field_name: TtaaiiField,
    context: TtaaiiContext,
) -> Optional[TableDefinition]:
    """Resolve the table governing one field in the given context."""
    return _FIELD_RESOLVERS[TtaaiiField(field_name)](tables, context)


def resolve_table(tables: TtaaiiTables, text: str) -> ResolvedTable:
    """
    Resolve the table governing the next character of ``text``.

    Args:
        tables: Table-set to resolve against
        text: Input string (0-6 characters), already uppercased

    Returns:
        ResolvedTable with the position, field, table (None if there is
        no valid table in this context) and parsed context
    """
    context = parse_context(text)
    position = len(text)
    field_name = get_field_at_position(position)
    table = get_table_for_field(tables, field_name, context)
    return ResolvedTable(position=position, field=field_name, table=table, context=context)


def validate_character(
    tables: TtaaiiTables,
    char: str,
    position: int,
    context: TtaaiiContext,
    ii_first: Optional[str] = None,
) -> CharacterValidation:
    """
    Validate a character at a position given the context before it.

    ii is validated two characters at a time: the first digit is accepted
    if it is a digit, the second looks up the full code in the ii table.
    ``ii_first`` carries the first digit, since a context parsed from the
    first five characters holds no ii.

    Args:
        tables: Table-set to validate against
        char: Character to check
        position: Zero-based position of ``char`` in the heading
        context: Context parsed from the characters before ``position``
        ii_first: First ii digit, when validating position 5

    Returns:
        CharacterValidation; never raises for malformed input
    """
    field_name = get_field_at_position(position)
    field_label = tables.label('fields', field_name.value)

    syntax = check_character_syntax(char, position)
    if not syntax.valid:
        if syntax.meta.get('code') == ErrorCode.TOO_LONG.value:
            return CharacterValidation(
                valid=False,
                error=tables.message('tooLong', char=char),
                code=ErrorCode.TOO_LONG,
            )
        if field_name is TtaaiiField.II:
            message = tables.message('iiDigit', char=char)
        else:
            message = tables.message(
                'invalidFormat', char=char, position=position,
                expected=syntax.meta.get('expected', ''),
            )
        return CharacterValidation(valid=False, error=message, code=ErrorCode.INVALID_FORMAT)

    table = get_table_for_field(tables, field_name, context)
    if table is None:
        return CharacterValidation(
            valid=False,
            error=tables.message('noTable', field=field_label),
            code=ErrorCode.UNKNOWN_TABLE,
        )

    if field_name is TtaaiiField.II:
        if position == 4:
            return CharacterValidation(valid=True)
        first = ii_first
        if first is None and context.ii and len(context.ii) == 1:
            first = context.ii
        if first is None or first not in DIGITS:
            # a bad first digit is reported at position 4
            return CharacterValidation(valid=True)
        full_ii = first + char
        if full_ii not in table:
            return CharacterValidation(
                valid=False,
                error=tables.message('invalidIi', code=full_ii),
                code=ErrorCode.INVALID_II,
            )
        return CharacterValidation(valid=True)

    if char not in table:
        return CharacterValidation(
            valid=False,
            error=tables.message('invalidCharacter', char=char, field=field_label),
            code=ErrorCode.INVALID_CHARACTER,
        )
    return CharacterValidation(valid=True)
