import pytest

from koinos.data.catalog import BookCatalog
from koinos.engine.manager import ReferenceManager


BOOK_ROWS = [
    [1, "LIB", "Big Book", "Big", "big", 2, "bg/bbk/bb", 21],
    [2, "LIB", "Small Book", "Small", "small", 1, "sm", 1],
]


@pytest.fixture
def catalog() -> BookCatalog:
    """Two-book library: a depth-2 book with 21 chapters and a depth-1 book."""
    return BookCatalog.from_rows(BOOK_ROWS)


@pytest.fixture
def manager(catalog: BookCatalog) -> ReferenceManager:
    return ReferenceManager(catalog)


@pytest.fixture(scope="session")
def nt_manager() -> ReferenceManager:
    return ReferenceManager(BookCatalog.bundled("nt"))
