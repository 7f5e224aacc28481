from __future__ import annotations

from typing import Optional


class KoinosError(Exception):
    """Base class for reference codec, parsing and catalog failures."""


class InvalidQuadruple(KoinosError, ValueError):
    pass


class MalformedIndex(KoinosError, ValueError):
    pass


class InvalidRange(KoinosError, ValueError):
    pass


class ParseError(KoinosError, ValueError):
    def __init__(self, message: str, token: Optional[str] = None) -> None:
        super().__init__(message)
        self.token = token


class BookNotFound(KoinosError, LookupError):
    pass
