from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple


# Delimiters after filtering:
#   ';' = clause separator
#   '_' = spaces inside book names
#   '+' = book name / range numbers
#   '.' = chapter.verse
#   '-' = ranges (c.v-c.v, v-v, book-book)
ALLOWED_CHARS = frozenset("-, +;:.0123456789abcdefghijklmnopqrstuvwxyz")

_RANGE_NUMBER_RE = re.compile(r"^[0-9.,-]*$")


@dataclass(frozen=True)
class FilterConfig:
    url_friendly: bool = True


class QueryFilter:
    def __init__(self, cfg: Optional[FilterConfig] = None) -> None:
        self.cfg = cfg or FilterConfig()
        self.steps: List[Tuple[str, Callable[[str], str]]] = [
            ("lowercase", lambda s: s.lower()),
            ("whitelist", lambda s: "".join(ch for ch in s if ch in ALLOWED_CHARS)),
            ("trim", lambda s: s.strip()),
            ("collapse spacing", lambda s: re.sub(r"[ +]+", " ", s)),
            ("number before word", lambda s: re.sub(r"([0-9])[ +]+([a-z])", r"\1\2", s)),
            ("underscores between words", lambda s: re.sub(r"([a-z])[ +]+(?=[a-z])", r"\1_", s)),
            ("word before number", lambda s: re.sub(r"([a-z])([0-9])", r"\1 \2", s)),
            ("non-word before number", lambda s: re.sub(r"([^a-z])[ +]+([0-9])", r"\1\2", s)),
        ]
        if self.cfg.url_friendly:
            self.steps.append(("url friendly", lambda s: s.replace(":", ".").replace(" ", "+")))

    def filter(self, text: str) -> str:
        out = text
        for _, step in self.steps:
            out = step(out)
        return out


_default_filter = QueryFilter()


def filter_query(text: str) -> str:
    return _default_filter.filter(text)


def is_range_number_string(text: str) -> bool:
    """A range number string holds only digits and '.', ',', '-'."""
    return bool(_RANGE_NUMBER_RE.match(text))
