from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from koinos.core.reference import IndexRange, Reference
from koinos.data.catalog import BookCatalog, LabelStyle
from koinos.utils.index_codec import FIELD_MAX, FIELD_MIN, IndexCodec, Quadruple


@dataclass(frozen=True)
class Separators:
    spacer: str  # between book label and numbers
    delimiter: str  # between chapter and verse


SEPARATORS: Dict[str, Separators] = {
    LabelStyle.HANDLE: Separators(spacer="+", delimiter="."),
    LabelStyle.TITLE: Separators(spacer=" ", delimiter=":"),
    LabelStyle.SHORT_TITLE: Separators(spacer=" ", delimiter=":"),
}

# (section, chapter, verse) at the edges of a book
BOOK_START = (FIELD_MIN, FIELD_MIN, FIELD_MIN)
BOOK_END = (FIELD_MAX, FIELD_MAX, FIELD_MAX)


class Formatter:
    """
    Render a Reference as a handle ('matt+5.39-42,44;8'), a title
    ('Matthew 5:39-42,44;8') or a short title ('Matt 5:39-42,44;8').

    Output parses back to the same Reference. A book label is written for the
    first group in each book and left off later groups in that book, the same
    way the parser carries the current book forward.
    """

    def __init__(self, catalog: BookCatalog, codec: Optional[IndexCodec] = None) -> None:
        self.catalog = catalog
        self.codec = codec or IndexCodec()

    def handle(self, ref: Reference) -> str:
        return self.format(ref, LabelStyle.HANDLE)

    def title(self, ref: Reference) -> str:
        return self.format(ref, LabelStyle.TITLE)

    def short_title(self, ref: Reference) -> str:
        return self.format(ref, LabelStyle.SHORT_TITLE)

    def format(self, ref: Reference, style: str) -> str:
        if style not in SEPARATORS:
            raise ValueError(f"Invalid label style: {style!r}")
        sep = SEPARATORS[style]

        out: List[str] = []
        last_book: Optional[int] = None
        for group in ref.group_ranges():
            if len(group) == 1:
                text, last_book = self._single_range(group[0], style, sep, last_book)
            else:
                text, last_book = self._multi_range(group, style, sep, last_book)
            out.append(text)
        return ";".join(out)

    def _single_range(self, range_: IndexRange, style: str, sep: Separators, last_book: Optional[int]):
        b1, s1, c1, v1 = self.codec.decode(range_[0])
        b2, s2, c2, v2 = self.codec.decode(range_[1])

        book = self.catalog.label(b1, style)
        if b1 == b2 and (s1, c1, v1) == BOOK_START and (s2, c2, v2) == BOOK_END:
            return book, b1
        if b1 != b2 or s1 != FIELD_MIN or s2 != FIELD_MIN:
            return self._book_span(range_, style, sep), b1

        numbers = self.range_numbers(b1, c1, v1, c2, v2, sep.delimiter)
        if last_book == b1:
            return numbers, b1
        return f"{book}{sep.spacer}{numbers}", b1

    def _multi_range(self, group: List[IndexRange], style: str, sep: Separators, last_book: Optional[int]):
        b, _, _, _ = self.codec.decode(group[0][0])
        numbers = self.single_chapter_verse_ranges(group, sep.delimiter)
        if last_book == b:
            return numbers, b
        return f"{self.catalog.label(b, style)}{sep.spacer}{numbers}", b

    def _book_span(self, range_: IndexRange, style: str, sep: Separators) -> str:
        """
        'Book1[ pos]-Book2[ pos]', for ranges that cross books or run to a book
        boundary. Each side drops its numbers when it sits on the boundary.
        """
        start = self.codec.decode(range_[0])
        end = self.codec.decode(range_[1])
        sides = []
        for q, boundary, whole_verse in ((start, BOOK_START, FIELD_MIN), (end, BOOK_END, FIELD_MAX)):
            label = self.catalog.label(q.book, style)
            position = self.span_position(q, boundary, whole_verse, sep.delimiter)
            sides.append(f"{label}{sep.spacer}{position}" if position else label)
        return "-".join(sides)

    def span_position(self, q: Quadruple, boundary: Tuple[int, int, int], whole_verse: int, delimiter: str) -> str:
        """
        One side of a book span: '' at the book boundary, 'c' for a whole
        chapter, 'c:v' otherwise ('v' for depth-1 books).
        """
        if (q.section, q.chapter, q.verse) == boundary:
            return ""
        if q.section == FIELD_MIN and self.catalog.depth(q.book) == 2 and q.verse == whole_verse:
            return f"{q.chapter}"
        return self.verse_number(q.book, q.chapter, q.verse, delimiter)

    def verse_number(self, b: int, c: int, v: int, delimiter: str) -> str:
        """'v' or 'c:v', depending on the book's depth."""
        if self.catalog.depth(b) == 1:
            return f"{v}"
        return f"{c}{delimiter}{v}"

    def range_numbers(self, b: int, c1: int, v1: int, c2: int, v2: int, delimiter: str) -> str:
        """Numbers for one range within one section of a book."""
        whole_chapters = v1 == FIELD_MIN and v2 == FIELD_MAX
        if self.catalog.depth(b) == 1:
            # '1-999' for a whole chapter; a bare label is the whole book.
            if v1 == v2:
                return f"{v1}"
            return f"{v1}-{v2}"
        if c1 == c2:
            if v1 == v2:
                return f"{c1}{delimiter}{v1}"
            if whole_chapters:
                return f"{c1}"
            return f"{c1}{delimiter}{v1}-{v2}"
        if whole_chapters:
            return f"{c1}-{c2}"
        return f"{c1}{delimiter}{v1}-{c2}{delimiter}{v2}"

    def single_chapter_verse_ranges(self, group: List[IndexRange], delimiter: str) -> str:
        """e.g. '3-4,7-9' or '2:3-4,7-9'. All ranges share the first range's book and chapter."""
        b, _, c, _ = self.codec.decode(group[0][0])
        prefix = "" if self.catalog.depth(b) == 1 else f"{c}{delimiter}"
        verses = []
        for start, end in group:
            v1 = self.codec.decode(start).verse
            v2 = self.codec.decode(end).verse
            verses.append(f"{v1}" if v1 == v2 else f"{v1}-{v2}")
        return prefix + ",".join(verses)
