from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from koinos.core.query_filter import filter_query
from koinos.errors import BookNotFound


logger = logging.getLogger(__name__)

LIBRARIES_DIR = Path(__file__).parent / "libraries"


class LabelStyle:
    """Book label styles used when formatting references."""

    HANDLE = "handle"  # '1cor'
    TITLE = "title"  # '1 Corinthians'
    SHORT_TITLE = "short_title"  # '1 Cor'

    @classmethod
    def all_styles(cls) -> List[str]:
        return [cls.HANDLE, cls.TITLE, cls.SHORT_TITLE]


@dataclass(frozen=True)
class BookDef:
    id: int
    library: str
    name: str
    short_name: str
    abbreviation: str
    depth: int
    aliases: tuple[str, ...]
    chapters: int

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "BookDef":
        """Row layout: id, library, name, short name, abbreviation, depth, aliases (a/b/c), chapters."""
        book_id, library, name, short_name, abbreviation, depth, aliases, chapters = row
        if isinstance(aliases, str):
            aliases = [a.strip() for a in aliases.split("/") if a.strip()]
        return cls(
            id=int(book_id),
            library=str(library).strip(),
            name=str(name).strip(),
            short_name=str(short_name).strip(),
            abbreviation=str(abbreviation).strip(),
            depth=int(depth),
            aliases=tuple(str(a) for a in aliases),
            chapters=int(chapters),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookDef":
        return cls(
            id=int(data["id"]),
            library=str(data["library"]),
            name=str(data["name"]),
            short_name=str(data.get("short_name", data["name"])),
            abbreviation=str(data["abbreviation"]),
            depth=int(data.get("depth", 2)),
            aliases=tuple(str(x) for x in data.get("aliases", [])),
            chapters=int(data.get("chapters", 1)),
        )


class BookCatalog:
    """
    Read-only registry of books for one or more libraries.

    Lookups by name are exact; callers pass names through the query filter
    first (the catalog registers filtered forms of each name as aliases).
    """

    def __init__(self, books: Optional[Iterable[BookDef]] = None) -> None:
        self._books: Dict[int, BookDef] = {}
        self._by_abbreviation: Dict[str, int] = {}
        self._by_alias: Dict[str, int] = {}
        self._aliases: Dict[int, List[str]] = {}
        self._libraries: Dict[str, List[int]] = {}
        for book in books or []:
            self.add_book(book)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]]) -> "BookCatalog":
        return cls(BookDef.from_row(row) for row in rows)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "BookCatalog":
        catalog = cls()
        catalog.load_path(path)
        return catalog

    @classmethod
    def bundled(cls, *names: str) -> "BookCatalog":
        catalog = cls()
        for name in names:
            path = LIBRARIES_DIR / f"{name}.json"
            if not path.exists():
                raise FileNotFoundError(f"Library not found: {name!r}")
            catalog.load_path(path)
        return catalog

    @staticmethod
    def bundled_names() -> List[str]:
        return sorted(p.stem for p in LIBRARIES_DIR.glob("*.json"))

    def load_path(self, path: Union[str, Path]) -> None:
        p = Path(path)
        if p.suffix.lower() == ".csv":
            with p.open("r", encoding="utf-8", newline="") as f:
                books = [BookDef.from_row(row) for row in csv.reader(f) if row]
        else:
            data = json.loads(p.read_text(encoding="utf-8"))
            books = [BookDef.from_dict(b) for b in data["books"]]
        for book in books:
            self.add_book(book)
        logger.debug("Loaded %d books from %s", len(books), p)

    def add_book(self, book: BookDef) -> None:
        if book.id in self._books:
            raise ValueError(f"Duplicate book id: {book.id}")
        if book.depth not in (1, 2):
            raise ValueError(f"Bad reference depth {book.depth} for {book.name!r}")

        self._books[book.id] = book
        self._by_abbreviation[book.abbreviation] = book.id
        self._aliases[book.id] = []
        self._libraries.setdefault(book.library, []).append(book.id)

        self._add_alias(book.name.lower().replace(" ", ""), book.id, strict=True)
        for alias in book.aliases:
            if filter_query(alias) != alias:
                raise ValueError(f"Bad alias name: {alias!r} (try {filter_query(alias)!r})")
            self._add_alias(alias, book.id, strict=True)
        self._add_alias(filter_query(book.name), book.id, strict=False)
        self._add_alias(filter_query(book.short_name), book.id, strict=False)

    def _add_alias(self, alias: str, book_id: int, strict: bool = True) -> None:
        alias = alias.strip()
        if alias in self._by_alias:
            if strict:
                raise ValueError(f"Alias {alias!r} is already set for #{self._by_alias[alias]}")
            return
        self._by_alias[alias] = book_id
        self._aliases[book_id].append(alias)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> int:
        key = name.strip()
        if key in self._by_abbreviation:
            return self._by_abbreviation[key]
        if key in self._by_alias:
            return self._by_alias[key]
        raise BookNotFound(f"Book not recognized: {name!r}")

    def book(self, book_id: int) -> BookDef:
        try:
            return self._books[int(book_id)]
        except KeyError:
            raise BookNotFound(f"Book not found for #{book_id}") from None

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._books

    def __len__(self) -> int:
        return len(self._books)

    def books(self) -> List[BookDef]:
        return [self._books[i] for i in sorted(self._books)]

    def depth(self, book_id: int) -> int:
        return self.book(book_id).depth

    def chapter_count(self, book_id: int) -> int:
        return self.book(book_id).chapters

    def name(self, book_id: int) -> str:
        return self.book(book_id).name

    def short_name(self, book_id: int) -> str:
        return self.book(book_id).short_name

    def abbreviation(self, book_id: int) -> str:
        return self.book(book_id).abbreviation

    def aliases(self, book_id: int) -> List[str]:
        self.book(book_id)
        return list(self._aliases[int(book_id)])

    def library(self, book_id: int) -> str:
        return self.book(book_id).library

    def library_books(self, name: Optional[str] = None) -> Union[List[int], Dict[str, List[int]]]:
        if name is None:
            return {k: list(v) for k, v in self._libraries.items()}
        key = name.strip()
        if key not in self._libraries:
            raise BookNotFound(f"Library not found: {name!r}")
        return list(self._libraries[key])

    def label(self, book_id: int, style: str) -> str:
        if style == LabelStyle.HANDLE:
            return self.abbreviation(book_id)
        if style == LabelStyle.TITLE:
            return self.name(book_id)
        if style == LabelStyle.SHORT_TITLE:
            return self.short_name(book_id)
        raise ValueError(f"Invalid label style: {style!r}")
