"""
Demo: Clean JSON Output

Shows the decode and validation output for a set of typical headings.
"""

from ttaaii import decode_ttaaii_to_json, decode_ttaaii_to_dict, validate_ttaaii_to_dict


def demo_json_output():
    """Demonstrate clean JSON output for typical headings."""

    print("=" * 80)
    print("  CLEAN JSON OUTPUT DEMO")
    print("=" * 80)

    test_cases = [
        ("METAR, United Kingdom", "SAUK31"),
        ("TAF, France", "FCFR31"),
        ("GAMET (FA range 50-59)", "FAUK50"),
        ("Ocean weather station, area A", "SAWA01"),
        ("GRIB temperature, 850 hPa", "HTAA85"),
    ]

    for title, heading in test_cases:
        print(f"\n{title}")
        print("-" * 80)
        print(f"Input: {heading}")
        print("\nJSON Output:")
        print(decode_ttaaii_to_json(heading))

    # Show dictionary format
    print("\n\n" + "=" * 80)
    print("  DICTIONARY FORMAT EXAMPLE")
    print("=" * 80)

    heading = "SAUK31"
    data = decode_ttaaii_to_dict(heading, include_code_forms=True)

    print(f"\nHeading: {heading}")
    print("\nDecoded Fields:")
    for key, value in data.items():
        print(f"  {key:20s}: {value}")

    # Show validation output
    print("\n\n" + "=" * 80)
    print("  VALIDATION EXAMPLES")
    print("=" * 80)

    for heading in ["SAUK31", "FAUK60", "Z1", "SAUK311"]:
        result = validate_ttaaii_to_dict(heading)
        print(f"\n{heading}: valid={result['Valid']} complete={result['Complete']}")
        for error in result["Errors"]:
            print(f"  {error}")


if __name__ == "__main__":
    demo_json_output()
