"""
Context Parser for TTAAII abbreviated headings

Splits a raw heading string into its named fields by fixed position:

    position  0   1   2   3   4-5
    field     T1  T2  A1  A2  ii

The parser never validates characters. It only slices by length, so it is
a total function over all strings. A lone fifth character does not populate
``ii``: the caller holds it as an uncommitted filter character until the
second digit arrives.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class TtaaiiField(str, Enum):
    """Fields of a TTAAII heading, in positional order."""
    T1 = "T1"
    T2 = "T2"
    A1 = "A1"
    A2 = "A2"
    II = "ii"


FIELD_ORDER: Tuple[TtaaiiField, ...] = (
    TtaaiiField.T1,
    TtaaiiField.T2,
    TtaaiiField.A1,
    TtaaiiField.A2,
    TtaaiiField.II,
)

# First character position of each field
FIELD_POSITIONS: Dict[TtaaiiField, int] = {
    TtaaiiField.T1: 0,
    TtaaiiField.T2: 1,
    TtaaiiField.A1: 2,
    TtaaiiField.A2: 3,
    TtaaiiField.II: 4,
}

TTAAII_LENGTH = 6


@dataclass(frozen=True)
class TtaaiiContext:
    """
    Parsed, partial interpretation of a TTAAII string.

    Attributes:
        t1: Data type designator
        t2: Data subtype designator
        a1: First area/type designator
        a2: Second area/time designator
        ii: Level or bulletin sequence (one or two digits)

    A field may only be present when every field before it is present.
    """
    t1: Optional[str] = None
    t2: Optional[str] = None
    a1: Optional[str] = None
    a2: Optional[str] = None
    ii: Optional[str] = None

    def __post_init__(self) -> None:
        values = [self.t1, self.t2, self.a1, self.a2, self.ii]
        seen_gap = False
        for field_name, value in zip(FIELD_ORDER, values):
            if value is None:
                seen_gap = True
            elif seen_gap:
                raise ValueError(
                    f"{field_name.value} is set but a preceding field is missing"
                )
        for value in (self.t1, self.t2, self.a1, self.a2):
            if value is not None and len(value) != 1:
                raise ValueError(f"Single-character field expected, got {value!r}")
        if self.ii is not None and not 1 <= len(self.ii) <= 2:
            raise ValueError(f"ii must be one or two characters, got {self.ii!r}")

    def get(self, field_name: TtaaiiField) -> Optional[str]:
        """Return the value of a field, or None if absent."""
        return {
            TtaaiiField.T1: self.t1,
            TtaaiiField.T2: self.t2,
            TtaaiiField.A1: self.a1,
            TtaaiiField.A2: self.a2,
            TtaaiiField.II: self.ii,
        }[TtaaiiField(field_name)]

    @property
    def t1t2(self) -> str:
        """T1 and T2 joined (partial if T2 is absent)."""
        return (self.t1 or "") + (self.t2 or "")

    @property
    def a1a2(self) -> Optional[str]:
        """A1 and A2 joined, or None unless both are present."""
        if self.a1 and self.a2:
            return self.a1 + self.a2
        return None

    def present_fields(self) -> Tuple[TtaaiiField, ...]:
        """Fields that carry a value, in positional order."""
        return tuple(f for f in FIELD_ORDER if self.get(f) is not None)

    def to_string(self) -> str:
        """Rebuild the heading prefix this context was parsed from."""
        return "".join(self.get(f) or "" for f in FIELD_ORDER)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary keyed by field name, absent fields omitted."""
        return {f.value: self.get(f) for f in self.present_fields()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TtaaiiContext":
        """Build a context from a mapping keyed by field name (``T1``..``ii``)."""
        return cls(
            t1=data.get("T1"),
            t2=data.get("T2"),
            a1=data.get("A1"),
            a2=data.get("A2"),
            ii=data.get("ii"),
        )


def parse_context(text: str) -> TtaaiiContext:
    """
    Parse a TTAAII string into its context components.

    Args:
        text: Input string, already uppercased by the caller

    Returns:
        TtaaiiContext populated strictly by length thresholds
    """
    length = len(text)
    return TtaaiiContext(
        t1=text[0] if length >= 1 else None,
        t2=text[1] if length >= 2 else None,
        a1=text[2] if length >= 3 else None,
        a2=text[3] if length >= 4 else None,
        ii=text[4:6] if length >= 6 else None,
    )


def get_field_at_position(position: int) -> TtaaiiField:
    """Field being completed at a character position (clamped to ii)."""
    if position == 0:
        return TtaaiiField.T1
    if position == 1:
        return TtaaiiField.T2
    if position == 2:
        return TtaaiiField.A1
    if position == 3:
        return TtaaiiField.A2
    return TtaaiiField.II
