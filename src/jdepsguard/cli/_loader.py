import json
import sys
from pathlib import Path
from typing import Any


class LoadError(Exception):
    """Raised when a dependency facts file cannot be loaded."""


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Could not read facts file {path!r}: {exc}"
        raise LoadError(msg) from exc


def _dependencies(type_name: str, value: Any) -> frozenset[str]:
    if not isinstance(value, list) or not all(isinstance(d, str) for d in value):
        msg = f"Dependencies of {type_name!r} must be a list of strings"
        raise LoadError(msg)
    return frozenset(value)


def load_facts(path: str) -> dict[str, frozenset[str]]:
    """Load dependency facts from a JSON file (``-`` reads stdin).

    Two shapes are accepted::

        {"com.example.Foo": ["sun.misc.Unsafe"]}

        [{"type": "com.example.Foo", "dependencies": ["sun.misc.Unsafe"]}]

    Dependencies of a type listed twice are merged.
    """
    try:
        data = json.loads(_read(path))
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path!r}: {exc}"
        raise LoadError(msg) from exc

    facts: dict[str, frozenset[str]] = {}
    if isinstance(data, dict):
        for type_name, deps in data.items():
            facts[type_name] = _dependencies(type_name, deps)
    elif isinstance(data, list):
        for i, entry in enumerate(data):
            if not isinstance(entry, dict) or not isinstance(entry.get("type"), str):
                msg = f"Entry {i} in {path!r} must be an object with a 'type' string"
                raise LoadError(msg)
            type_name = entry["type"]
            deps = _dependencies(type_name, entry.get("dependencies", []))
            facts[type_name] = facts.get(type_name, frozenset()) | deps
    else:
        msg = f"{path!r} must contain a JSON object or array (got {type(data).__name__})"
        raise LoadError(msg)

    return facts
