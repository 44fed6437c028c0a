"""JSON serialization helpers using optional orjson."""

from __future__ import annotations

try:
    import orjson  # type: ignore[import-not-found]
except ImportError:  # pragma: no cover - optional dependency
    orjson = None  # type: ignore[assignment]

import json

from attrs import asdict, has


def to_builtins(data: object) -> object:
    """Convert attrs instances to plain dictionaries.

    Args:
        data: Model instance or already serializable data.

    Returns:
        ``data`` with attrs instances replaced by nested dictionaries.
    """

    if has(type(data)):
        return asdict(data)  # type: ignore[arg-type]
    return data


def json_dumps(data: object, *, indent: bool = False) -> str:
    """Serialize data to a JSON string.

    Args:
        data: Data structure or attrs model to serialize.
        indent: Pretty print with two-space indentation.

    Returns:
        JSON representation of ``data``.
    """

    data = to_builtins(data)
    if orjson is not None:
        option = orjson.OPT_INDENT_2 if indent else 0
        return orjson.dumps(data, option=option).decode()
    return json.dumps(data, ensure_ascii=False, indent=2 if indent else None)
