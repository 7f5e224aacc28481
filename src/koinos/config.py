from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml


@dataclass(frozen=True)
class KoinosConfig:
    """
    Settings read from koinos.yaml:

        libraries: [nt]            # bundled catalogs
        library_paths: [books.csv] # extra JSON or CSV catalogs
        sql_column: reference
    """

    libraries: List[str] = field(default_factory=lambda: ["nt"])
    library_paths: List[str] = field(default_factory=list)
    sql_column: str = "reference"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "KoinosConfig":
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config (expected mapping): {data!r}")
        libraries = data.get("libraries", ["nt"])
        if isinstance(libraries, str):
            libraries = [libraries]
        return cls(
            libraries=[str(x) for x in libraries or []],
            library_paths=[str(x) for x in data.get("library_paths", []) or []],
            sql_column=str(data.get("sql_column", "reference")),
        )


def load_config(path: str) -> KoinosConfig:
    with open(path, "r", encoding="utf-8") as f:
        return KoinosConfig.from_dict(yaml.safe_load(f))
