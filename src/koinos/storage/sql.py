from __future__ import annotations

from koinos.core.reference import Reference


_NOTHING = "(1 = 0)"


def between_clause(ref: Reference, column: str = "reference") -> str:
    """
    e.g. "(reference BETWEEN 1001019001 AND 1001019006) OR (...)", for a column
    holding one index per row.
    """
    if not ref.ranges:
        return _NOTHING
    return " OR ".join(f"({column} BETWEEN {start} AND {end})" for start, end in ref.ranges)


def range_clause(ref: Reference, col1: str = "range_begins", col2: str = "range_ends") -> str:
    """For rows that store a range in two columns: matches rows lying inside the reference."""
    if not ref.ranges:
        return _NOTHING
    return " OR ".join(f"({col1} >= {start} AND {col2} <= {end})" for start, end in ref.ranges)
