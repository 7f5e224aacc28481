from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from koinos.core.query_filter import QueryFilter, is_range_number_string
from koinos.data.catalog import BookCatalog
from koinos.errors import BookNotFound, ParseError
from koinos.utils.index_codec import FIELD_MAX, FIELD_MIN, Quadruple


logger = logging.getLogger(__name__)

QuadrupleRange = Tuple[Quadruple, Quadruple]

_DIGITS_RE = re.compile(r"[0-9]+")
_BOOK = r"[a-z0-9_]*[a-z][a-z0-9_]*"
_CROSS_BOOK_RE = re.compile(
    rf"^(?P<book1>{_BOOK})(?:\+(?P<pos1>[0-9.]+))?-(?P<book2>{_BOOK})(?:\+(?P<pos2>[0-9.]+))?$"
)


@dataclass(frozen=True)
class ParserState:
    """State carried between the comma-separated parts of one clause."""

    chapter: Optional[int] = None
    verse_explicit: bool = False


class QueryParser:
    """
    Turn a citation query into quadruple ranges.

    e.g. with Matthew as book #1, "Matt 5:6-7,9-10" gives:

        [((1, 1, 5, 6), (1, 1, 5, 7)),
         ((1, 1, 5, 9), (1, 1, 5, 10))]

    A book named in one clause carries forward to later clauses that hold only
    range numbers ("matt+5.6;7.1").
    """

    def __init__(self, catalog: BookCatalog, query_filter: Optional[QueryFilter] = None) -> None:
        self.catalog = catalog
        self.query_filter = query_filter or QueryFilter()

    def parse(self, query: str, strict: bool = False) -> Optional[List[QuadrupleRange]]:
        """Strict mode raises ParseError; lenient mode returns None instead."""
        try:
            return self.parse_filtered(self.query_filter.filter(query))
        except ParseError as e:
            if strict:
                raise
            logger.debug("Could not parse %r: %s", query, e)
            return None

    def parse_filtered(self, query: str) -> List[QuadrupleRange]:
        clauses = [c for c in query.split(";") if c.strip("+ ") != ""]
        ranges: List[QuadrupleRange] = []
        book: Optional[int] = None
        for clause in clauses:
            clause_ranges, book = self.parse_clause(clause, book)
            ranges.extend(clause_ranges)
        if book is None:
            raise ParseError(f"No book given in reference: {query!r}", token=query)
        return ranges

    def parse_clause(self, clause: str, book: Optional[int]) -> Tuple[List[QuadrupleRange], int]:
        """Return the clause's ranges and the book that carries forward."""
        clause = clause.strip("+ ")

        m = _CROSS_BOOK_RE.match(clause)
        if m:
            b1 = self.match_book_name(m.group("book1"))
            b2 = self.match_book_name(m.group("book2"))
            start = self._position(b1, m.group("pos1"), at_end=False)
            end = self._position(b2, m.group("pos2"), at_end=True)
            return [self._range(start, end, clause)], b1

        parts = clause.split("+")
        if len(parts) == 1:
            if is_range_number_string(clause):
                if book is None:
                    raise ParseError(f"Missing book for {clause!r}", token=clause)
                return self.range_numbers(book, clause), book
            b = self.match_book_name(clause)
            return [(Quadruple(b, 1, 1, 1), Quadruple(b, 999, 999, 999))], b

        if len(parts) == 2:
            book_name, numbers = parts
            b = self.match_book_name(book_name)
            return self.range_numbers(b, numbers), b

        raise ParseError(f"Could not understand: {clause!r}", token=clause)

    def match_book_name(self, name: str) -> int:
        try:
            return self.catalog.resolve(name)
        except BookNotFound as e:
            raise ParseError(f"Book not recognized: {name!r}", token=name) from e

    def range_numbers(self, b: int, numbers: str) -> List[QuadrupleRange]:
        """Quadruple ranges for the range numbers of one book, e.g. '2-3,5,7.4-9,12'."""
        if not numbers or not is_range_number_string(numbers):
            raise ParseError(f"Malformed range numbers: {numbers!r}", token=numbers)
        ranges: List[QuadrupleRange] = []
        state = ParserState()
        for part in numbers.split(","):
            part_ranges, state = self.parse_part(b, part, state)
            ranges.extend(part_ranges)
        return ranges

    def parse_part(self, b: int, part: str, state: ParserState) -> Tuple[List[QuadrupleRange], ParserState]:
        depth = self._depth(b)
        name = self.catalog.name(b)
        dots = part.count(".")

        if dots == 2:
            # c.v-c.v
            if depth != 2:
                raise ParseError(f"The book {name!r} cannot have the reference {part!r}", token=part)
            ends = part.split("-")
            if len(ends) != 2:
                raise ParseError(f"Could not understand: {part!r}", token=part)
            cv1, cv2 = (e.split(".") for e in ends)
            if len(cv1) != 2 or len(cv2) != 2:
                raise ParseError(f"Could not understand: {part!r}", token=part)
            c1, v1 = self._number(cv1[0]), self._number(cv1[1])
            c2, v2 = self._number(cv2[0]), self._number(cv2[1])
            rng = self._range(Quadruple(b, 1, c1, v1), Quadruple(b, 1, c2, v2), part)
            return [rng], replace(state, chapter=None, verse_explicit=True)

        if dots == 1:
            # c.v or c.v-v
            if depth != 2:
                raise ParseError(f"Bad reference depth {depth} for {name!r}: {part!r}", token=part)
            chapter_text, verses = part.split(".")
            c = self._number(chapter_text)
            v1, v2 = self._verse_span(verses, part)
            rng = self._range(Quadruple(b, 1, c, v1), Quadruple(b, 1, c, v2), part)
            return [rng], replace(state, chapter=c, verse_explicit=True)

        if dots == 0:
            n1, n2 = self._verse_span(part, part)
            if state.chapter is not None and state.verse_explicit:
                # v or v-v in the current chapter
                c = state.chapter
                rng = self._range(Quadruple(b, 1, c, n1), Quadruple(b, 1, c, n2), part)
                return [rng], replace(state, verse_explicit=True)
            if depth == 1:
                rng = self._range(Quadruple(b, 1, 1, n1), Quadruple(b, 1, 1, n2), part)
                return [rng], replace(state, verse_explicit=True)
            # c or c-c, whole chapters
            rng = self._range(Quadruple(b, 1, n1, 1), Quadruple(b, 1, n2, 999), part)
            return [rng], replace(state, verse_explicit=False)

        raise ParseError(f"Malformed verse numbers: {part!r}", token=part)

    def _depth(self, b: int) -> int:
        depth = self.catalog.depth(b)
        if depth not in (1, 2):
            raise ParseError(f"Bad reference depth {depth} for #{b}")
        return depth

    def _position(self, b: int, position: Optional[str], at_end: bool) -> Quadruple:
        """One side of a cross-book range: a bare book, 'c', 'c.v', or 'v' for depth 1."""
        if not position:
            return Quadruple(b, 999, 999, 999) if at_end else Quadruple(b, 1, 1, 1)
        depth = self._depth(b)
        fields = position.split(".")
        if depth == 1 and len(fields) == 1:
            return Quadruple(b, 1, 1, self._number(fields[0]))
        if depth == 2 and len(fields) == 1:
            return Quadruple(b, 1, self._number(fields[0]), 999 if at_end else 1)
        if depth == 2 and len(fields) == 2:
            return Quadruple(b, 1, self._number(fields[0]), self._number(fields[1]))
        raise ParseError(f"The book {self.catalog.name(b)!r} cannot have the reference {position!r}", token=position)

    def _verse_span(self, text: str, part: str) -> Tuple[int, int]:
        bounds = text.split("-")
        if len(bounds) == 1:
            n = self._number(bounds[0])
            return n, n
        if len(bounds) == 2:
            return self._number(bounds[0]), self._number(bounds[1])
        raise ParseError(f"Could not understand: {part!r}", token=part)

    @staticmethod
    def _number(token: str) -> int:
        if not _DIGITS_RE.fullmatch(token):
            raise ParseError(f"Bad number: {token!r}", token=token)
        n = int(token)
        if n < FIELD_MIN or n > FIELD_MAX:
            raise ParseError(f"Number out of range 1-999: {token!r}", token=token)
        return n

    @staticmethod
    def _range(start: Quadruple, end: Quadruple, part: str) -> QuadrupleRange:
        if start > end:
            raise ParseError(f"Range runs backwards: {part!r}", token=part)
        return (start, end)
