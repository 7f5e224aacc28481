from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from koinos.core.reference import Reference


def load_references(path: Path) -> Dict[str, Reference]:
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Invalid references format (expected mapping): {path}")
    return {name: Reference.from_dict(entry) for name, entry in data.items()}


def save_references(path: Path, refs: Dict[str, Reference]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {name: ref.to_dict() for name, ref in refs.items()}
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def add_reference(path: Path, name: str, ref: Reference) -> None:
    refs = load_references(path)
    refs[name] = ref
    save_references(path, refs)
