"""
Demo script for TTAAII autocompletion

Types a heading one character at a time and shows, at each step, which
table governs the next character and what can be typed there.
"""

from ttaaii import CompletionOptions, TtaaiiProvider


def print_step(provider, text, options=None, limit=8):
    """Print the completion for one partial heading."""
    result = provider.complete(text, options)
    print("\n" + "=" * 80)
    print(f"  Input: {text!r}  ->  {result.field.value} (table {result.table_id or '-'})")
    print("=" * 80)

    if result.groups is not None:
        for group in result.groups:
            codes = " ".join(item.code for item in group.items)
            print(f"  {group.label:30s} {codes}")
        return

    for item in result.items[:limit]:
        form = f"  [{item.code_form}]" if item.code_form else ""
        print(f"  {item.code:3s} {item.label}{form}")
    if len(result.items) > limit:
        print(f"  ... {len(result.items) - limit} more")


def main():
    provider = TtaaiiProvider()

    heading = "SAWA01"
    for i in range(len(heading) + 1):
        print_step(provider, heading[:i])

    # A1 for surface data, grouped by continent (ship/station types under Other)
    print_step(provider, "SA", CompletionOptions(group_by="continent"))

    # FA ii values come from numeric ranges
    print_step(provider, "FAUK", CompletionOptions(group_by="range"))

    # Unassigned data type: nothing can follow
    print_step(provider, "B")

    decoded = provider.decode(heading)
    print("\nDecoded:")
    for name, value in decoded.decoded_fields().items():
        print(f"  {name:15s} {value.code}: {value.label}")


if __name__ == "__main__":
    main()
