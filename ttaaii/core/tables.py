"""
WMO-386 reference table data model

Tables A, B1-B7, C1-C7 and D1-D3 as loaded from a table-set JSON file.
A table-set is immutable once built; changing locale or adding regional
entries produces a new ``TtaaiiTables`` rather than editing one in place.

Exchange format (``tables.<locale>.json``):
    locale              locale code
    A, B2..B7, C1..C5,  flat tables {id, name, description?, entries, groups?}
    C7_T2, D1, D2
    B1                  tables keyed by T1
    C6                  tables keyed by T1T2 (optional "default")
    C7                  tables keyed by T2 (optional "default")
    D3                  numeric ranges keyed by T1T2
    labels              localised strings (fields, continents, messages, templates)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


class TableSetError(ValueError):
    """Raised when a table-set cannot be loaded or extended."""


@dataclass(frozen=True)
class TableEntry:
    """
    One valid code value for a field in some context.

    Attributes:
        code: Literal 1-2 character value at that position of the heading
        label: Human-readable description
        code_form: Cross-reference to a WMO code form (e.g. "METAR")
        priority: GTS priority
        metadata: Open key/value bag used for grouping and filtering
    """
    code: str
    label: str
    code_form: Optional[str] = None
    priority: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_metadata(self, **extra: Any) -> "TableEntry":
        """Copy of this entry with extra metadata keys merged in."""
        merged = dict(self.metadata)
        merged.update(extra)
        return replace(self, metadata=merged)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to exchange-format dictionary."""
        data: Dict[str, Any] = {'code': self.code, 'label': self.label}
        if self.code_form is not None:
            data['codeForm'] = self.code_form
        if self.priority is not None:
            data['priority'] = self.priority
        if self.metadata:
            data['metadata'] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableEntry":
        try:
            return cls(
                code=str(data['code']),
                label=str(data['label']),
                code_form=data.get('codeForm'),
                priority=data.get('priority'),
                metadata=dict(data.get('metadata') or {}),
            )
        except (KeyError, TypeError) as exc:
            raise TableSetError(f"Malformed table entry: {data!r}") from exc


@dataclass(frozen=True)
class TableGroup:
    """Named partition of a table's codes, used for UI grouping."""
    key: str
    label: str
    codes: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {'key': self.key, 'label': self.label, 'codes': list(self.codes)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableGroup":
        try:
            return cls(
                key=str(data['key']),
                label=str(data['label']),
                codes=tuple(data.get('codes', [])),
            )
        except (KeyError, TypeError) as exc:
            raise TableSetError(f"Malformed table group: {data!r}") from exc


@dataclass
class TableDefinition:
    """
    A resolved, field-specific set of valid entries.

    Attributes:
        id: Underlying WMO table ("B1", "C1/C2", "D3_FA", "generic_ii", ...)
        name: Display name
        entries: Valid entries, in table order
        description: Optional longer description
        groups: Optional static partitions of the entry codes
    """
    id: str
    name: str
    entries: List[TableEntry] = field(default_factory=list)
    description: Optional[str] = None
    groups: List[TableGroup] = field(default_factory=list)

    def find(self, code: str) -> Optional[TableEntry]:
        """Return the first entry with the given code, or None."""
        for entry in self.entries:
            if entry.code == code:
                return entry
        return None

    def find_all(self, code: str) -> List[TableEntry]:
        """Return every entry with the given code (unions may hold several)."""
        return [entry for entry in self.entries if entry.code == code]

    def codes(self) -> List[str]:
        return [entry.code for entry in self.entries]

    def copy(self) -> "TableDefinition":
        """Shallow copy with fresh entry and group lists."""
        return TableDefinition(
            id=self.id,
            name=self.name,
            entries=list(self.entries),
            description=self.description,
            groups=list(self.groups),
        )

    def __contains__(self, code: object) -> bool:
        return any(entry.code == code for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to exchange-format dictionary."""
        data: Dict[str, Any] = {'id': self.id, 'name': self.name}
        if self.description is not None:
            data['description'] = self.description
        data['entries'] = [entry.to_dict() for entry in self.entries]
        if self.groups:
            data['groups'] = [group.to_dict() for group in self.groups]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableDefinition":
        if not isinstance(data, dict) or 'id' not in data or 'entries' not in data:
            raise TableSetError(f"Malformed table definition: {str(data)[:80]}")
        return cls(
            id=str(data['id']),
            name=str(data.get('name', data['id'])),
            entries=[TableEntry.from_dict(e) for e in data['entries']],
            description=data.get('description'),
            groups=[TableGroup.from_dict(g) for g in data.get('groups', [])],
        )


@dataclass(frozen=True)
class NumericRange:
    """Inclusive range of ii values sharing one meaning (Table D3)."""
    start: int
    end: int
    label: str
    code_form: Optional[str] = None

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.start <= value <= self.end

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'start': self.start, 'end': self.end, 'label': self.label}
        if self.code_form is not None:
            data['codeForm'] = self.code_form
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NumericRange":
        try:
            start, end = int(data['start']), int(data['end'])
        except (KeyError, TypeError, ValueError) as exc:
            raise TableSetError(f"Malformed numeric range: {data!r}") from exc
        if not 0 <= start <= end <= 99:
            raise TableSetError(f"Numeric range out of bounds: {start}-{end}")
        return cls(start=start, end=end, label=str(data.get('label', '')),
                   code_form=data.get('codeForm'))


@dataclass(frozen=True)
class TableExtension:
    """Extra entries for one table of a table-set."""
    table_id: str
    entries: Tuple[TableEntry, ...] = ()


@dataclass(frozen=True)
class RegionalConfig:
    """
    Regional extension of the reference tables.

    ``table_id`` of each extension names a flat table ("A", "C1", "D2", ...)
    or a keyed one as "B1:<T1>", "C6:<T1T2>" or "C7:<T2>".
    """
    id: str
    name: str
    extensions: Tuple[TableExtension, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegionalConfig":
        try:
            extensions = tuple(
                TableExtension(
                    table_id=str(ext['tableId']),
                    entries=tuple(TableEntry.from_dict(e) for e in ext.get('entries', [])),
                )
                for ext in data.get('extensions', [])
            )
            return cls(id=str(data['id']), name=str(data.get('name', data['id'])),
                       extensions=extensions)
        except (KeyError, TypeError) as exc:
            raise TableSetError(f"Malformed regional config: {exc}") from exc


# Flat tables: exchange key -> attribute name
FLAT_TABLES: Dict[str, str] = {
    'A': 'a',
    'B2': 'b2',
    'B3': 'b3',
    'B4': 'b4',
    'B5': 'b5',
    'B6': 'b6',
    'B7': 'b7',
    'C1': 'c1',
    'C2': 'c2',
    'C3': 'c3',
    'C4': 'c4',
    'C5': 'c5',
    'C7_T2': 'c7_t2',
    'D1': 'd1',
    'D2': 'd2',
}

# Tables keyed by part of the heading: exchange key -> attribute name
KEYED_TABLES: Dict[str, str] = {
    'B1': 'b1',
    'C6': 'c6',
    'C7': 'c7',
}

REQUIRED_LABEL_SECTIONS = ('fields', 'continents', 'messages', 'templates')


@dataclass(frozen=True)
class TtaaiiTables:
    """
    Full reference-data bundle for one locale.

    Never mutated after construction; see ``table_loader.apply_regional_config``
    for producing an extended copy.
    """
    locale: str
    a: TableDefinition
    b1: Dict[str, TableDefinition]
    b2: TableDefinition
    b3: TableDefinition
    b4: TableDefinition
    b5: TableDefinition
    b6: TableDefinition
    b7: TableDefinition
    c1: TableDefinition
    c2: TableDefinition
    c3: TableDefinition
    c4: TableDefinition
    c5: TableDefinition
    c6: Dict[str, TableDefinition]
    c7_t2: TableDefinition
    c7: Dict[str, TableDefinition]
    d1: TableDefinition
    d2: TableDefinition
    d3: Dict[str, Tuple[NumericRange, ...]]
    labels: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def label(self, section: str, key: str, default: Optional[str] = None) -> str:
        """Look up a localised label, falling back to ``default`` or the key."""
        return self.labels.get(section, {}).get(key, default if default is not None else key)

    def template(self, name: str, **values: Any) -> str:
        """Format a synthetic-table template from ``labels.templates``."""
        return self.label('templates', name).format(**values)

    def message(self, name: str, **values: Any) -> str:
        """Format a validation message from ``labels.messages``."""
        return self.label('messages', name).format(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the exchange format."""
        data: Dict[str, Any] = {'locale': self.locale}
        for key, attr in FLAT_TABLES.items():
            data[key] = getattr(self, attr).to_dict()
        for key, attr in KEYED_TABLES.items():
            data[key] = {k: t.to_dict() for k, t in getattr(self, attr).items()}
        data['D3'] = {k: [r.to_dict() for r in ranges] for k, ranges in self.d3.items()}
        data['labels'] = {section: dict(values) for section, values in self.labels.items()}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TtaaiiTables":
        """
        Build a table-set from the exchange format.

        Raises:
            TableSetError: if a required section is missing or malformed
        """
        if not isinstance(data, dict):
            raise TableSetError("Table-set must be a JSON object")

        missing = [key for key in (*FLAT_TABLES, *KEYED_TABLES, 'D3', 'labels')
                   if key not in data]
        if missing:
            raise TableSetError(f"Table-set is missing sections: {', '.join(missing)}")

        labels = data['labels']
        if not isinstance(labels, dict) or any(
            not isinstance(labels.get(s), dict) for s in REQUIRED_LABEL_SECTIONS
        ):
            raise TableSetError(
                f"labels must contain sections: {', '.join(REQUIRED_LABEL_SECTIONS)}"
            )

        kwargs: Dict[str, Any] = {}
        for key, attr in FLAT_TABLES.items():
            kwargs[attr] = TableDefinition.from_dict(data[key])
        for key, attr in KEYED_TABLES.items():
            keyed = data[key]
            if not isinstance(keyed, dict):
                raise TableSetError(f"{key} must be keyed by heading letters")
            kwargs[attr] = {k: TableDefinition.from_dict(t) for k, t in keyed.items()}
        if not isinstance(data['D3'], dict):
            raise TableSetError("D3 must be keyed by T1T2")
        kwargs['d3'] = {
            k: tuple(NumericRange.from_dict(r) for r in ranges)
            for k, ranges in data['D3'].items()
        }
        kwargs['labels'] = {s: dict(v) for s, v in labels.items() if isinstance(v, dict)}

        return cls(locale=str(data.get('locale', 'en')), **kwargs)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Export the table-set to JSON."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "TtaaiiTables":
        """Load a table-set from JSON."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise TableSetError(f"Invalid table-set JSON: {exc}") from exc
        return cls.from_dict(data)
