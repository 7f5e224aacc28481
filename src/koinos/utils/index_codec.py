from __future__ import annotations

from typing import Any, NamedTuple

from koinos.errors import InvalidQuadruple, MalformedIndex


FIELD_MIN = 1
FIELD_MAX = 999

MIN_INDEX = 1_001_001_001
MAX_INDEX = 999_999_999_999


class Quadruple(NamedTuple):
    book: int
    section: int
    chapter: int
    verse: int


class IndexCodec:
    """
    Canonical index encoding:
      index = book . SSS . CCC . VVV   (book unpadded, 1-3 digits)

    which is the same number as
      (book * 10**9) + (section * 10**6) + (chapter * 10**3) + verse

    Indexes are 10-12 digits long; the trailing 9 digits are always the
    fixed-width section/chapter/verse fields.
    """

    def is_valid_quadruple(self, quadruple: Any) -> bool:
        if not isinstance(quadruple, (tuple, list)) or len(quadruple) != 4:
            return False
        for value in quadruple:
            if isinstance(value, bool) or not isinstance(value, int):
                return False
            if value < FIELD_MIN or value > FIELD_MAX:
                return False
        return True

    def require_valid_quadruple(self, quadruple: Any) -> Quadruple:
        if not self.is_valid_quadruple(quadruple):
            raise InvalidQuadruple(f"Invalid quadruple: {quadruple!r}")
        return Quadruple(*quadruple)

    def encode(self, quadruple: Any) -> int:
        book, section, chapter, verse = self.require_valid_quadruple(quadruple)
        return (book * 1_000_000_000) + (section * 1_000_000) + (chapter * 1_000) + verse

    def decode(self, index: Any) -> Quadruple:
        if isinstance(index, bool) or not isinstance(index, int):
            raise MalformedIndex(f"Index must be an integer: {index!r}")
        if index < 1_000_000_000 or index > MAX_INDEX:
            raise MalformedIndex(f"Index must have 10-12 digits: {index!r}")
        book = index // 1_000_000_000
        section = (index // 1_000_000) % 1_000
        chapter = (index // 1_000) % 1_000
        verse = index % 1_000
        if section == 0 or chapter == 0 or verse == 0:
            raise MalformedIndex(f"Index has an empty field: {index!r}")
        return Quadruple(book, section, chapter, verse)

    def is_valid_index(self, index: Any) -> bool:
        try:
            self.decode(index)
        except MalformedIndex:
            return False
        return True

    def indexes_adjacent(self, index1: int, index2: int) -> bool:
        """
        Structural adjacency: consecutive verses in one chapter, or the end of
        a chapter (verse 999) followed by verse 1 of the next chapter.

        Real per-chapter verse counts are never consulted.
        """
        b1, s1, c1, v1 = self.decode(index1)
        b2, s2, c2, v2 = self.decode(index2)
        if b1 != b2 or s1 != s2:
            return False
        verses_adjacent = c1 == c2 and v1 + 1 == v2
        chapters_adjacent = c1 + 1 == c2 and v1 == FIELD_MAX and v2 == FIELD_MIN
        return verses_adjacent or chapters_adjacent


_default_codec = IndexCodec()


def quadruple_to_index(quadruple: Any) -> int:
    return _default_codec.encode(quadruple)


def index_to_quadruple(index: Any) -> Quadruple:
    return _default_codec.decode(index)
