"""
Normalization of query-string input.

Handlers receive Starlette ``QueryParams``; tests and CLI code pass plain
mappings. Everything downstream works on ``dict[str, list[str]]``.
"""

from collections.abc import Mapping
from typing import Any


def query_multidict(query: Any) -> dict[str, list[str]]:
    """
    Normalize query parameters into ``{key: [value, ...]}`` preserving value order.

    Accepts Starlette ``QueryParams`` (anything with ``multi_items()``), a mapping
    of str to str, or a mapping of str to a list of str.
    """
    if query is None:
        return {}

    result: dict[str, list[str]] = {}
    if hasattr(query, "multi_items"):
        for key, value in query.multi_items():
            result.setdefault(key, []).append(value)
        return result

    if isinstance(query, Mapping):
        for key, value in query.items():
            if isinstance(value, (list, tuple)):
                result[key] = [str(v) for v in value]
            else:
                result[key] = [str(value)]
        return result

    raise TypeError(f"Unsupported query parameter container: {type(query).__name__}")


def first_value(query: Any, key: str) -> str | None:
    """
    First value supplied for ``key``, or None when the key is absent.

    ``?status=active&status=inactive`` yields ``"active"``.
    """
    if hasattr(query, "getlist"):
        values = query.getlist(key)
    else:
        values = query_multidict(query).get(key)
    return values[0] if values else None
