"""
CLI interface for the TTAAII resolver.

Usage:
    python -m ttaaii "<heading>" [options]

Options:
    --complete            Show what can come next (default)
    --validate            Validate the heading (exit code 1 on errors)
    --decode              Decode the heading
    --group-by KEY        Group completions ("continent", "table", metadata key)
    --locale CODE         Table-set locale
    --tables PATH         Table-set JSON file (overrides --locale)
    --json                Output as JSON
    --verbose             Log table loading and resolution
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .core.provider import (
    CompletionOptions,
    CompletionResult,
    DecodedTtaaii,
    ProviderConfig,
    TtaaiiProvider,
    ValidationResult,
)
from .core.tables import TableSetError
from .formatters.json_formatter import format_decoded_dict


def format_completion(result: CompletionResult, limit: int = 0) -> str:
    """Format completion result for display."""
    lines = [
        "=" * 60,
        "TTAAII Completion",
        "=" * 60,
        f"Input: {result.input!r}",
        f"Position: {result.position} ({result.field.value})",
        f"Table: {result.table_id or '-'}",
        f"Complete: {result.is_complete}",
        "",
    ]

    if result.table_id is None:
        lines.append("No valid table in this context.")
        return '\n'.join(lines)

    def item_line(item) -> str:
        line = f"  {item.code:<3} {item.label}"
        if item.code_form:
            line += f"  [{item.code_form}]"
        return line

    if result.groups is not None:
        for group in result.groups:
            lines.extend([f"{group.label} ({group.key}):", "-" * 40])
            lines.extend(item_line(item) for item in group.items)
            lines.append("")
    else:
        items = result.items[:limit] if limit else result.items
        lines.extend(["Items:", "-" * 40])
        lines.extend(item_line(item) for item in items)
        if len(items) < len(result.items):
            lines.append(f"  ... {len(result.items) - len(items)} more")

    return '\n'.join(lines)


def format_validation(result: ValidationResult) -> str:
    """Format validation result for display."""
    lines = [
        "=" * 60,
        "TTAAII Validation",
        "=" * 60,
        f"Input: {result.input!r}",
        f"Valid: {result.valid}",
        f"Complete: {result.complete}",
    ]

    if result.errors:
        lines.extend(["", "Errors:", "-" * 40])
        for error in result.errors:
            lines.append(f"  [{error.code.value}] {error.message}")
            lines.append(f"    at position {error.position} ({error.field.value}), "
                         f"character {error.character!r}")

    return '\n'.join(lines)


def format_decoded(result: DecodedTtaaii) -> str:
    """Format decoded heading for display."""
    lines = [
        "=" * 60,
        "TTAAII Decode",
        "=" * 60,
    ]
    for name, value in format_decoded_dict(result, include_code_forms=False).items():
        lines.append(f"{name}: {value}")

    code_forms = [
        f"  {decoded.code}: {decoded.code_form}"
        for decoded in result.decoded_fields().values()
        if decoded.code_form
    ]
    if code_forms:
        lines.extend(["", "Code forms:"] + code_forms)

    return '\n'.join(lines)


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='ttaaii',
        description='Complete, validate and decode WMO-386 TTAAII abbreviated headings'
    )

    parser.add_argument(
        'heading',
        nargs='?',
        default='',
        help='Heading or heading prefix (0-6 characters)'
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '--complete',
        dest='mode',
        action='store_const',
        const='complete',
        help='Show valid values for the next character (default)'
    )
    mode.add_argument(
        '--validate',
        dest='mode',
        action='store_const',
        const='validate',
        help='Validate the heading; exit code 1 if it has errors'
    )
    mode.add_argument(
        '--decode',
        dest='mode',
        action='store_const',
        const='decode',
        help='Decode the heading into human-readable fields'
    )

    parser.add_argument(
        '--group-by',
        default=None,
        help='Group completions by "continent", "table" or a metadata key'
    )

    parser.add_argument(
        '--locale',
        default='en',
        help='Locale of the packaged table-set (default: en)'
    )

    parser.add_argument(
        '--tables',
        default=None,
        help='Path to a table-set JSON file (overrides --locale)'
    )

    parser.add_argument(
        '--limit',
        type=int,
        default=0,
        help='Show at most this many ungrouped completion items'
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help='Output result as JSON'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log table loading and resolution to stderr'
    )

    args = parser.parse_args(argv)
    mode = args.mode or 'complete'

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(levelname)s %(name)s: %(message)s',
        )

    config = ProviderConfig(
        locale=args.locale,
        tables_path=Path(args.tables) if args.tables else None,
    )
    try:
        provider = TtaaiiProvider(config=config)
    except TableSetError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if mode == 'validate':
        result = provider.validate(args.heading)
        if args.json:
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(format_validation(result))
        return 0 if result.valid else 1

    if mode == 'decode':
        decoded = provider.decode(args.heading)
        if args.json:
            print(json.dumps(decoded.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(format_decoded(decoded))
        return 0

    completion = provider.complete(args.heading, CompletionOptions(group_by=args.group_by))
    if args.json:
        print(json.dumps(completion.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_completion(completion, limit=args.limit))
    return 0


if __name__ == '__main__':
    sys.exit(main())
