"""Utility helpers for bundle/manifest IO and user-facing messages."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import yaml


def stable_json_dumps(obj: object) -> str:
    """Serialize JSON in a stable, human-readable way with a trailing newline."""
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def read_text(path: Path) -> str:
    with path.open("r", encoding="utf-8") as fh:
        return fh.read()


def read_config(path: Path) -> Any:
    """Load a YAML or JSON document; JSON files go through the JSON parser."""
    text = read_text(path)
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def write_json_stable(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(stable_json_dumps(data), encoding="utf-8")


def warn(msg: str) -> None:
    print(msg, file=sys.stderr)
