"""
Table-set loader

Loads the WMO-386 reference tables for a locale from package data
(``ttaaii/data/tables.<locale>.json``) or from an explicit file, and
builds regional extensions on top of a loaded table-set.

Parsed table-sets are cached per file path in-process. Resolved tables are
never cached; the resolver builds them fresh on every call.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

from .tables import (
    FLAT_TABLES,
    KEYED_TABLES,
    RegionalConfig,
    TableDefinition,
    TableEntry,
    TableSetError,
    TtaaiiTables,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_LOCALE = "en"

_LOCALE_RE = re.compile(r'^[a-z]{2,3}(-[A-Za-z0-9]{2,8})?$')

# Global cached table-sets, keyed by resolved file path
_cached_tables: Dict[Path, TtaaiiTables] = {}


def tables_path_for_locale(locale: str) -> Path:
    """
    Return the package data file for a locale.

    Raises:
        TableSetError: if the locale code is malformed
    """
    if not _LOCALE_RE.match(locale or ""):
        raise TableSetError(f"Invalid locale code: {locale!r}")
    return DATA_DIR / f"tables.{locale}.json"


def available_locales() -> List[str]:
    """Locales shipped as package data."""
    return sorted(
        p.name[len("tables."):-len(".json")]
        for p in DATA_DIR.glob("tables.*.json")
    )


def load_tables(
    locale: str = DEFAULT_LOCALE,
    path: Optional[Path] = None,
    force_reload: bool = False,
) -> TtaaiiTables:
    """
    Load a table-set, using cache when possible.

    Args:
        locale: Locale of the packaged table-set to load
        path: Explicit table-set file (overrides ``locale``)
        force_reload: Re-read the file even if cached

    Returns:
        Immutable TtaaiiTables

    Raises:
        TableSetError: unknown locale, missing file, malformed JSON or
            missing required sections
    """
    json_path = Path(path) if path is not None else tables_path_for_locale(locale)
    try:
        json_path = json_path.resolve()
    except OSError as exc:
        raise TableSetError(f"Cannot resolve table-set path {json_path}: {exc}") from exc

    cached = _cached_tables.get(json_path)
    if cached is not None and not force_reload:
        logger.debug("Table-set cache hit for %s", json_path)
        return cached

    if not json_path.is_file():
        if path is None:
            raise TableSetError(
                f"No table-set for locale {locale!r} "
                f"(available: {', '.join(available_locales()) or 'none'})"
            )
        raise TableSetError(f"Table-set file not found: {json_path}")

    try:
        with open(json_path, 'r', encoding='utf-8') as f:
            tables = TtaaiiTables.from_json(f.read())
    except OSError as exc:
        raise TableSetError(f"Cannot read table-set {json_path}: {exc}") from exc

    logger.info("Loaded table-set %s (locale=%s)", json_path.name, tables.locale)
    _cached_tables[json_path] = tables
    return tables


def save_tables(tables: TtaaiiTables, json_path: Path) -> None:
    """Save a table-set to a JSON file in the exchange format."""
    with open(json_path, 'w', encoding='utf-8') as f:
        f.write(tables.to_json())


def clear_cache() -> None:
    """Drop every cached table-set."""
    _cached_tables.clear()


def _merge_entries(table: TableDefinition, entries) -> TableDefinition:
    """New table with ``entries`` appended; matching codes replace in place."""
    merged: List[TableEntry] = list(table.entries)
    index = {entry.code: i for i, entry in enumerate(merged)}
    for entry in entries:
        if entry.code in index:
            merged[index[entry.code]] = entry
        else:
            index[entry.code] = len(merged)
            merged.append(entry)
    return TableDefinition(
        id=table.id,
        name=table.name,
        entries=merged,
        description=table.description,
        groups=list(table.groups),
    )


def apply_regional_config(tables: TtaaiiTables, config: RegionalConfig) -> TtaaiiTables:
    """
    Build a new table-set with regional entries added.

    The source table-set is left untouched. Extension targets are flat
    table ids ("A", "C1", ...) or keyed ids "B1:<T1>", "C6:<T1T2>",
    "C7:<T2>". A keyed target that does not exist yet is created.

    Raises:
        TableSetError: if an extension names an unknown table
    """
    changes: Dict[str, object] = {}

    for extension in config.extensions:
        table_id, _, key = extension.table_id.partition(':')

        if table_id in FLAT_TABLES and not key:
            attr = FLAT_TABLES[table_id]
            current = changes.get(attr, getattr(tables, attr))
            changes[attr] = _merge_entries(current, extension.entries)

        elif table_id in KEYED_TABLES and key:
            attr = KEYED_TABLES[table_id]
            keyed = dict(changes.get(attr, getattr(tables, attr)))
            base = keyed.get(key) or TableDefinition(
                id=table_id,
                name=f"{table_id} ({key}) - {config.name}",
            )
            keyed[key] = _merge_entries(base, extension.entries)
            changes[attr] = keyed

        else:
            raise TableSetError(
                f"Regional config {config.id!r} targets unknown table {extension.table_id!r}"
            )

    logger.info(
        "Applied regional config %s to %d table(s)", config.id, len(config.extensions)
    )
    return replace(tables, **changes)
