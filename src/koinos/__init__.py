from koinos.core.reference import Reference
from koinos.data.catalog import BookCatalog, LabelStyle
from koinos.engine.manager import ReferenceManager
from koinos.errors import BookNotFound, InvalidQuadruple, InvalidRange, KoinosError, MalformedIndex, ParseError

__all__ = [
    "BookCatalog",
    "BookNotFound",
    "InvalidQuadruple",
    "InvalidRange",
    "KoinosError",
    "LabelStyle",
    "MalformedIndex",
    "ParseError",
    "Reference",
    "ReferenceManager",
]
