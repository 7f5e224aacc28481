from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from koinos.config import KoinosConfig, load_config
from koinos.data.catalog import BookCatalog
from koinos.engine.manager import ReferenceManager
from koinos.errors import KoinosError
from koinos.storage.sql import between_clause


def _config(args: argparse.Namespace) -> KoinosConfig:
    if args.config:
        return load_config(args.config)
    return KoinosConfig()


def _library_manager(cfg: KoinosConfig, library: str) -> ReferenceManager:
    """A manager whose catalog holds only one library, bundled or from library_paths."""
    bundled = [library] if library in BookCatalog.bundled_names() else []
    catalog = ReferenceManager.from_config(replace(cfg, libraries=bundled)).catalog
    books = [b for b in catalog.books() if b.library == library]
    if not books:
        raise FileNotFoundError(f"Library not found: {library!r}")
    return ReferenceManager(BookCatalog(books))


def cmd_query(args: argparse.Namespace) -> int:
    try:
        rm = _library_manager(_config(args), args.library)
    except (FileNotFoundError, ValueError) as e:
        print(f"Could not initialise library {args.library!r}: {e}")
        return 1
    try:
        ref = rm.create_reference_from_query(args.query, strict=True)
    except KoinosError as e:
        print(f"Could not create reference for query {args.query!r}: {e}")
        return 1

    print(f"Title:       {rm.title(ref)}")
    print(f"Short Title: {rm.short_title(ref)}")
    print(f"Handle:      {rm.handle(ref)}")
    for i, (start, end) in enumerate(ref.quadruple_ranges()):
        print(f"{i:<13}{json.dumps([list(start), list(end)])}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    rm = ReferenceManager.from_config(_config(args))
    catalog = rm.catalog
    for library, book_ids in catalog.library_books().items():
        print(f"{'-' * 15} {library} {'-' * 75}")
        for b in book_ids:
            names = f"{catalog.name(b)}, {catalog.short_name(b)}"
            labels = ", ".join([catalog.abbreviation(b)] + catalog.aliases(b))
            print(f" #{b:>3}  {names:>40}  {'(' + str(catalog.chapter_count(b)) + ')':>5}  {labels}")
    return 0


def cmd_sql(args: argparse.Namespace) -> int:
    cfg = _config(args)
    rm = ReferenceManager.from_config(cfg)
    try:
        ref = rm.create_reference_from_query(args.query, strict=True)
    except KoinosError as e:
        print(f"Could not create reference for query {args.query!r}: {e}")
        return 1
    print(between_clause(ref, column=args.column or cfg.sql_column))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="koinos", description="Parse and format Bible references.")
    p.add_argument("--config", default=None, help="Path to koinos.yaml.")
    p.add_argument("--verbose", action="store_true", help="Log debug output to stderr.")
    sub = p.add_subparsers(dest="cmd", required=True)

    s_query = sub.add_parser("query", help="Look up a reference; display it in canonical form.")
    s_query.add_argument("library", help="Name of a bundled library, e.g. 'nt'.")
    s_query.add_argument("query", help="Reference to a text, e.g. 'Matt 5:3-12'.")
    s_query.set_defaults(func=cmd_query)

    s_list = sub.add_parser("list", help="List libraries and books.")
    s_list.set_defaults(func=cmd_list)

    s_sql = sub.add_parser("sql", help="Print a SQL WHERE clause matching a reference.")
    s_sql.add_argument("query", help="Reference to a text.")
    s_sql.add_argument("--column", default=None, help="Index column name (default from config).")
    s_sql.set_defaults(func=cmd_sql)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
