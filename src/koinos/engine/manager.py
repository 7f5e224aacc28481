from __future__ import annotations

import math
from html import escape
from typing import Any, Dict, Iterable, List, Optional, Union

from koinos.config import KoinosConfig
from koinos.core.formatter import Formatter
from koinos.core.parser import QuadrupleRange, QueryParser
from koinos.core.query_filter import QueryFilter
from koinos.core.reference import Reference
from koinos.data.catalog import BookCatalog
from koinos.utils.index_codec import IndexCodec


class ReferenceManager:
    """Ties the book catalog to parsing, formatting and chapter navigation."""

    def __init__(
        self,
        catalog: BookCatalog,
        *,
        query_filter: Optional[QueryFilter] = None,
        codec: Optional[IndexCodec] = None,
    ) -> None:
        self.catalog = catalog
        self.codec = codec or IndexCodec()
        self.query_filter = query_filter or QueryFilter()
        self.parser = QueryParser(catalog, self.query_filter)
        self.formatter = Formatter(catalog, self.codec)

    @classmethod
    def from_config(cls, cfg: Union[KoinosConfig, Dict[str, Any]]) -> "ReferenceManager":
        if not isinstance(cfg, KoinosConfig):
            cfg = KoinosConfig.from_dict(cfg)
        catalog = BookCatalog.bundled(*cfg.libraries)
        for path in cfg.library_paths:
            catalog.load_path(path)
        return cls(catalog)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def create_reference_from_ranges(self, ranges: Iterable[Any]) -> Reference:
        return Reference(ranges, codec=self.codec)

    def create_reference_from_quadruple_ranges(self, quadruple_ranges: Iterable[QuadrupleRange]) -> Reference:
        ref = Reference(codec=self.codec)
        for start, end in quadruple_ranges:
            ref.add_range_by_quadruples(start, end)
        return ref

    def create_reference_from_book_and_chapter(self, b: int, c: int) -> Reference:
        ref = Reference(codec=self.codec)
        ref.add_book_and_chapter(b, c)
        return ref

    def create_reference_from_book_chapter_and_verse(self, b: int, c: int, v: int) -> Reference:
        ref = Reference(codec=self.codec)
        ref.add_book_chapter_and_verse(b, c, v)
        return ref

    def create_reference_from_query(self, query: str, strict: bool = False) -> Optional[Reference]:
        """None when the query cannot be parsed, unless strict."""
        quadruple_ranges = self.parser.parse(query, strict=strict)
        if quadruple_ranges is None:
            return None
        return self.create_reference_from_quadruple_ranges(quadruple_ranges)

    def filter_query(self, query: str) -> str:
        return self.query_filter.filter(query)

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def handle(self, ref: Reference) -> str:
        return self.formatter.handle(ref)

    def title(self, ref: Reference) -> str:
        return self.formatter.title(ref)

    def short_title(self, ref: Reference) -> str:
        return self.formatter.short_title(ref)

    def link(self, ref: Reference, uri_prefix: str = "/r/") -> str:
        """e.g. '<a href="/r/matt+5.3-12">Matthew 5:3-12</a>'"""
        return f'<a href="{escape(uri_prefix + self.handle(ref))}">{escape(self.title(ref))}</a>'

    def short_link(self, ref: Reference, uri_prefix: str = "/r/") -> str:
        return f'<a href="{escape(uri_prefix + self.handle(ref))}">{escape(self.short_title(ref))}</a>'

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def chapter_reference(self, ref: Reference) -> Optional[Reference]:
        first = ref.first_quadruple()
        if first is None:
            return None
        return self.create_reference_from_book_and_chapter(first.book, first.chapter)

    def previous_chapter_reference(self, ref: Reference) -> Optional[Reference]:
        """The chapter before the reference's first chapter; wraps within the book's library."""
        first = ref.first_quadruple()
        if first is None:
            return None
        b, c = first.book, first.chapter
        if c > 1:
            return self.create_reference_from_book_and_chapter(b, c - 1)
        books = self._library_books(b)
        prev_book = books[books.index(b) - 1]
        return self.create_reference_from_book_and_chapter(prev_book, self.catalog.chapter_count(prev_book))

    def next_chapter_reference(self, ref: Reference) -> Optional[Reference]:
        """The chapter after the reference's first chapter; wraps within the book's library."""
        first = ref.first_quadruple()
        if first is None:
            return None
        b, c = first.book, first.chapter
        if c < self.catalog.chapter_count(b):
            return self.create_reference_from_book_and_chapter(b, c + 1)
        books = self._library_books(b)
        next_book = books[(books.index(b) + 1) % len(books)]
        return self.create_reference_from_book_and_chapter(next_book, 1)

    def chapter_handle_grid(self, ref: Reference, width: int = 10) -> List[List[str]]:
        """Handles for every chapter of the reference's first book, in rows of `width`."""
        if width < 1:
            raise ValueError(f"width must be positive: {width}")
        first = ref.first_quadruple()
        if first is None:
            return []
        handles = [
            self.handle(self.create_reference_from_book_and_chapter(first.book, c))
            for c in range(1, self.catalog.chapter_count(first.book) + 1)
        ]
        return [handles[i : i + width] for i in range(0, len(handles), width)]

    def tag_cloud(self, steps: int = 5) -> Dict[str, List[Dict[str, Any]]]:
        """
        Per library, one entry per book linking to its first chapter, weighted
        1..steps by chapter count. Books of 55 chapters or more (Psalms) do not
        set the scale; they take the top weight.
        """
        if steps < 1:
            raise ValueError(f"steps must be positive: {steps}")
        cloud: Dict[str, List[Dict[str, Any]]] = {}
        for library, book_ids in self.catalog.library_books().items():
            counts = [self.catalog.chapter_count(b) for b in book_ids]
            max_weight = max([1] + [n for n in counts if n < 55])
            divider = max_weight / steps
            cloud[library] = [
                {
                    "handle": self.handle(self.create_reference_from_book_and_chapter(b, 1)),
                    "title": self.catalog.short_name(b),
                    "weight": min(math.ceil(n / divider), steps),
                }
                for b, n in zip(book_ids, counts)
            ]
        return cloud

    def _library_books(self, b: int) -> List[int]:
        return list(self.catalog.library_books(self.catalog.library(b)))
