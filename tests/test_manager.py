import pytest

from koinos.config import KoinosConfig
from koinos.core.reference import Reference
from koinos.engine.manager import ReferenceManager
from koinos.errors import ParseError


def test_basic_formatters(manager: ReferenceManager) -> None:
    ref = manager.create_reference_from_book_and_chapter(1, 2)
    assert manager.handle(ref) == "big+2"
    assert manager.title(ref) == "Big Book 2"
    assert manager.short_title(ref) == "Big 2"

    assert manager.handle(manager.create_reference_from_book_and_chapter(2, 1)) == "small+1-999"

    ref = manager.create_reference_from_book_chapter_and_verse(1, 2, 5)
    assert manager.handle(ref) == "big+2.5"
    assert manager.title(ref) == "Big Book 2:5"
    assert manager.short_title(ref) == "Big 2:5"


def test_factories(manager: ReferenceManager) -> None:
    ref = manager.create_reference_from_ranges([(1001002005, 1001002009)])
    assert ref == manager.create_reference_from_quadruple_ranges([((1, 1, 2, 5), (1, 1, 2, 9))])
    assert manager.create_reference_from_query("Big 2:5-9") == ref


def test_query_failure_modes(manager: ReferenceManager) -> None:
    assert manager.create_reference_from_query("Medium 2") is None
    with pytest.raises(ParseError):
        manager.create_reference_from_query("Medium 2", strict=True)


@pytest.mark.parametrize("title,handle", [("Big Book 1:1,3-5;2:1-16", "big+1.1,3-5;2.1-16"), ("Big Book-Small Book", "big-small")])
def test_title_handle_conversion(manager: ReferenceManager, title: str, handle: str) -> None:
    assert manager.handle(manager.create_reference_from_query(title)) == handle
    assert manager.title(manager.create_reference_from_query(handle)) == title


def test_chapter_navigation(manager: ReferenceManager) -> None:
    big10 = manager.create_reference_from_query("big+10.4-6")
    assert manager.handle(manager.chapter_reference(big10)) == "big+10"
    assert manager.handle(manager.previous_chapter_reference(big10)) == "big+9"
    assert manager.handle(manager.next_chapter_reference(big10)) == "big+11"

    small = manager.create_reference_from_book_and_chapter(2, 1)
    assert manager.handle(manager.previous_chapter_reference(small)) == "big+21"
    assert manager.handle(manager.next_chapter_reference(small)) == "big+1"

    big1 = manager.create_reference_from_book_and_chapter(1, 1)
    assert manager.handle(manager.previous_chapter_reference(big1)) == "small+1-999"
    big21 = manager.create_reference_from_book_and_chapter(1, 21)
    assert manager.handle(manager.next_chapter_reference(big21)) == "small+1-999"


def test_navigation_of_empty_reference(manager: ReferenceManager) -> None:
    assert manager.chapter_reference(Reference()) is None
    assert manager.previous_chapter_reference(Reference()) is None
    assert manager.next_chapter_reference(Reference()) is None
    assert manager.chapter_handle_grid(Reference()) == []


def test_chapter_handle_grid(manager: ReferenceManager) -> None:
    grid = manager.chapter_handle_grid(manager.create_reference_from_book_and_chapter(1, 5))
    assert [len(row) for row in grid] == [10, 10, 1]
    assert grid[0][0] == "big+1"
    assert grid[1][9] == "big+20"
    assert grid[2] == ["big+21"]
    assert manager.chapter_handle_grid(manager.create_reference_from_book_and_chapter(2, 1)) == [["small+1-999"]]


@pytest.mark.parametrize(
    "handle",
    [
        "rev+22",
        "rev+22.22",
        "matt+18.23-35;20.1-16",
        "matt+5.39-42,44,46-47,49",
        "matt+5.39-42,44;8",
        "1cor+7-8",
        "2jn-3jn",
        "rom",
        "rom-gal",
        "rom+3.21-gal+2.16",
        "rom+3.5-gal",
        "rom-gal+3.5",
        "jude+1-999",
        "rom+1;1cor+13",
        "phm+7-8",
        "jude+3,20-25",
    ],
)
def test_nt_handles_roundtrip(nt_manager: ReferenceManager, handle: str) -> None:
    ref = nt_manager.create_reference_from_query(handle, strict=True)
    assert nt_manager.handle(ref) == handle
    assert nt_manager.create_reference_from_query(nt_manager.title(ref)) == ref
    assert nt_manager.create_reference_from_query(nt_manager.short_title(ref)) == ref


@pytest.mark.parametrize(
    "query,title",
    [
        ("1cor+7-8", "1 Corinthians 7-8"),
        ("phm+7-8", "Philemon 7-8"),
        ("2jn-3jn", "2 John-3 John"),
        ("matt+19.1,5,3,7", "Matthew 19:1,3,5,7"),
        ("matt+18;19.1,3,5,7", "Matthew 18:1-19:1;19:3,5,7"),
        ("rom", "Romans"),
        ("rom-gal", "Romans-Galatians"),
        ("rom 1; 1cor 13", "Romans 1;1 Corinthians 13"),
        ("Mt 5:3-12", "Matthew 5:3-12"),
        ("1 John 4:7", "1 John 4:7"),
    ],
)
def test_nt_titles(nt_manager: ReferenceManager, query: str, title: str) -> None:
    assert nt_manager.title(nt_manager.create_reference_from_query(query)) == title


def test_nt_short_titles(nt_manager: ReferenceManager) -> None:
    assert nt_manager.short_title(nt_manager.create_reference_from_query("1cor+7-8")) == "1 Cor 7-8"
    assert nt_manager.short_title(nt_manager.create_reference_from_query("rom-gal")) == "Rom-Gal"


def test_nt_navigation_wraps(nt_manager: ReferenceManager) -> None:
    matt1 = nt_manager.create_reference_from_query("matt+1")
    rev22 = nt_manager.create_reference_from_query("rev+22")
    assert nt_manager.previous_chapter_reference(matt1) == rev22
    assert nt_manager.next_chapter_reference(rev22) == matt1
    jude = nt_manager.create_reference_from_query("jude+5")
    assert nt_manager.handle(nt_manager.next_chapter_reference(jude)) == "rev+1"


def test_from_config_mapping() -> None:
    rm = ReferenceManager.from_config({"libraries": ["nt"]})
    assert len(rm.catalog) == 27
    rm = ReferenceManager.from_config(KoinosConfig())
    assert rm.title(rm.create_reference_from_query("jn 3:16")) == "John 3:16"


@pytest.mark.parametrize(
    "quadruple_ranges",
    [
        [((6, 1, 3, 5), (9, 999, 999, 999))],
        [((6, 1, 1, 1), (9, 1, 3, 5))],
        [((6, 1, 3, 1), (9, 1, 2, 999))],
        [((6, 1, 3, 21), (9, 1, 2, 16))],
        [((18, 1, 1, 1), (26, 1, 1, 999))],
        [((24, 1, 1, 3), (25, 1, 1, 4))],
        [((26, 1, 1, 1), (26, 1, 1, 999))],
        [((26, 1, 1, 1), (26, 999, 999, 999))],
        [((1, 1, 5, 1), (1, 999, 999, 999))],
        [((1, 1, 5, 3), (1, 1, 7, 29))],
        [((1, 1, 5, 1), (1, 1, 7, 999))],
        [((1, 1, 5, 3), (1, 1, 5, 12)), ((1, 1, 5, 14), (1, 1, 5, 14)), ((1, 1, 6, 1), (1, 1, 6, 999)), ((4, 1, 3, 16), (4, 1, 3, 16))],
        [((24, 1, 1, 1), (24, 1, 1, 999)), ((25, 1, 1, 2), (25, 1, 1, 2))],
    ],
)
def test_built_references_roundtrip(nt_manager: ReferenceManager, quadruple_ranges) -> None:
    ref = nt_manager.create_reference_from_quadruple_ranges(quadruple_ranges)
    for text in (nt_manager.handle(ref), nt_manager.title(ref), nt_manager.short_title(ref)):
        assert nt_manager.create_reference_from_query(text, strict=True) == ref, text


def test_navigation_references_roundtrip(nt_manager: ReferenceManager) -> None:
    for book in nt_manager.catalog.books():
        first = nt_manager.create_reference_from_book_and_chapter(book.id, 1)
        neighbours = [nt_manager.previous_chapter_reference(first), nt_manager.next_chapter_reference(first)]
        for ref in [first] + neighbours:
            assert nt_manager.create_reference_from_query(nt_manager.handle(ref), strict=True) == ref
        for row in nt_manager.chapter_handle_grid(first):
            for handle in row:
                assert nt_manager.handle(nt_manager.create_reference_from_query(handle, strict=True)) == handle


def test_links(nt_manager: ReferenceManager) -> None:
    ref = nt_manager.create_reference_from_query("Matt 5:3-12")
    assert nt_manager.link(ref) == '<a href="/r/matt+5.3-12">Matthew 5:3-12</a>'
    assert nt_manager.short_link(ref, uri_prefix="/bible/") == '<a href="/bible/matt+5.3-12">Matt 5:3-12</a>'


def test_tag_cloud(manager: ReferenceManager) -> None:
    assert manager.tag_cloud() == {
        "LIB": [
            {"handle": "big+1", "title": "Big", "weight": 5},
            {"handle": "small+1-999", "title": "Small", "weight": 1},
        ]
    }
    with pytest.raises(ValueError):
        manager.tag_cloud(steps=0)


def test_nt_tag_cloud_weights(nt_manager: ReferenceManager) -> None:
    cloud = nt_manager.tag_cloud(steps=5)
    weights = {entry["title"]: entry["weight"] for entry in cloud["nt"]}
    assert weights["Matt"] == 5
    assert weights["Jude"] == 1
    assert all(1 <= w <= 5 for w in weights.values())
