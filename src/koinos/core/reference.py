"""
A DB-friendly set of verse ranges.

Matthew 19:1-6,10-14 (with Matthew as book #1) is stored as two index ranges:

    [(1001019001, 1001019006), (1001019010, 1001019014)]

Whole units use 999 as the end point, so they match whatever verses exist:

    Matt 19 = [(1001019001, 1001019999)]
    Matthew = [(1001001001, 1999999999)]

Ranges are kept sorted, non-overlapping and non-adjacent after every change.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from koinos.errors import InvalidRange, MalformedIndex
from koinos.utils.index_codec import IndexCodec, Quadruple


IndexRange = Tuple[int, int]
QuadrupleRange = Tuple[Quadruple, Quadruple]


class Reference:
    def __init__(self, ranges: Optional[Iterable[Any]] = None, codec: Optional[IndexCodec] = None) -> None:
        self.codec = codec or IndexCodec()
        self._ranges: List[IndexRange] = []
        if ranges is not None:
            self.add_ranges(ranges)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def is_valid_range(self, range_: Any) -> bool:
        try:
            self.require_valid_range(range_)
        except InvalidRange:
            return False
        return True

    def require_valid_range(self, range_: Any) -> IndexRange:
        if not isinstance(range_, (tuple, list)) or len(range_) != 2:
            raise InvalidRange(f"Invalid range: {range_!r}")
        start, end = range_
        try:
            self.codec.decode(start)
            self.codec.decode(end)
        except MalformedIndex as e:
            raise InvalidRange(f"Invalid range: {range_!r}") from e
        if start > end:
            raise InvalidRange(f"Range runs backwards: {range_!r}")
        return (start, end)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_ranges(self, ranges: Iterable[Any]) -> None:
        if isinstance(ranges, (str, bytes)) or not isinstance(ranges, Iterable):
            raise InvalidRange("An iterable of ranges is required.")
        checked = [self.require_valid_range(r) for r in ranges]
        self._ranges = self._simplify(sorted(self._ranges + checked))

    def add_range(self, range_: Any) -> None:
        self.add_ranges([range_])

    def set_ranges(self, ranges: Iterable[Any]) -> None:
        self._ranges = []
        self.add_ranges(ranges)

    def merged(self, ranges: Iterable[Any]) -> "Reference":
        """Return a new reference holding these ranges plus the given ones."""
        other = self.copy()
        other.add_ranges(ranges)
        return other

    def add_range_by_quadruples(self, quadruple1: Any, quadruple2: Any) -> None:
        b1, s1, c1, v1 = self.codec.require_valid_quadruple(quadruple1)
        b2, s2, c2, v2 = self.codec.require_valid_quadruple(quadruple2)

        # Lower tiers may run backwards only where a higher tier already spans units.
        if b1 > b2:
            raise InvalidRange(f"Bad book range: {b1} > {b2}")
        if b1 == b2:
            if s1 > s2:
                raise InvalidRange(f"Bad section range: {s1} > {s2}")
            if s1 == s2:
                if c1 > c2:
                    raise InvalidRange(f"Bad chapter range: {c1} > {c2}")
                if c1 == c2 and v1 > v2:
                    raise InvalidRange(f"Bad verse range: {v1} > {v2}")

        self.add_range((self.codec.encode(quadruple1), self.codec.encode(quadruple2)))

    def add_book(self, b: int) -> None:
        self.add_range_by_quadruples((b, 1, 1, 1), (b, 999, 999, 999))

    def add_book_and_chapter(self, b: int, c: int) -> None:
        self.add_range_by_quadruples((b, 1, c, 1), (b, 1, c, 999))

    def add_book_chapter_and_verse(self, b: int, c: int, v: int) -> None:
        self.add_range_by_quadruples((b, 1, c, v), (b, 1, c, v))

    def add_book_chapter_and_verse_range(self, b: int, c: int, v1: int, v2: int) -> None:
        self.add_range_by_quadruples((b, 1, c, v1), (b, 1, c, v2))

    def add_multi_chapter_range(self, b: int, c1: int, v1: int, c2: int, v2: int) -> None:
        self.add_range_by_quadruples((b, 1, c1, v1), (b, 1, c2, v2))

    def _simplify(self, ranges: List[IndexRange]) -> List[IndexRange]:
        # Expects sorted input, like uniq.
        out: List[IndexRange] = []
        for start, end in ranges:
            if out:
                last_start, last_end = out[-1]
                if last_end >= start or self.codec.indexes_adjacent(last_end, start):
                    out[-1] = (last_start, max(last_end, end))
                    continue
            out.append((start, end))
        return out

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def ranges(self) -> List[IndexRange]:
        return list(self._ranges)

    def quadruple_ranges(self) -> List[QuadrupleRange]:
        return [(self.codec.decode(start), self.codec.decode(end)) for start, end in self._ranges]

    def first_quadruple(self) -> Optional[Quadruple]:
        if not self._ranges:
            return None
        return self.codec.decode(self._ranges[0][0])

    def copy(self) -> "Reference":
        other = Reference(codec=self.codec)
        other._ranges = list(self._ranges)
        return other

    def to_dict(self) -> Dict[str, Any]:
        return {"ranges": [[start, end] for start, end in self._ranges]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reference":
        return cls([tuple(r) for r in data.get("ranges", [])])

    def __len__(self) -> int:
        return len(self._ranges)

    def __iter__(self) -> Iterator[IndexRange]:
        return iter(list(self._ranges))

    def __repr__(self) -> str:
        return f"Reference({self._ranges!r})"

    # ------------------------------------------------------------------
    # Comparators
    # ------------------------------------------------------------------

    def equals(self, other: "Reference") -> bool:
        return self._ranges == other._ranges

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        return self.equals(other)

    __hash__ = None  # type: ignore[assignment]

    def contains(self, other: "Reference") -> bool:
        """True if merging the other reference into this one changes nothing."""
        return self.equals(self.merged(other.ranges))

    def __contains__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return False
        return self.contains(other)

    # ------------------------------------------------------------------
    # Formatting support
    # ------------------------------------------------------------------

    def group_ranges(self) -> List[List[IndexRange]]:
        """
        Group ranges for formatting. A group is either a run of ranges in the
        same book and chapter, or any one range of another kind (a range
        spanning chapters or books never takes a successor).
        """
        groups: List[List[IndexRange]] = []
        for range_ in self._ranges:
            if not groups:
                groups.append([range_])
                continue

            last_start, last_end = groups[-1][-1]
            lbs, _, lcs, _ = self.codec.decode(last_start)
            lbe, _, lce, _ = self.codec.decode(last_end)
            bs, _, cs, _ = self.codec.decode(range_[0])

            if bs < lbe:
                raise InvalidRange("Ranges are disordered for books.")
            if bs == lbe and cs < lce:
                raise InvalidRange("Ranges are disordered for chapters.")

            same_chapter = bs == lbe and cs == lce
            last_is_single_chapter = lbs == lbe and lcs == lce
            if same_chapter and last_is_single_chapter:
                groups[-1].append(range_)
            else:
                groups.append([range_])
        return groups
