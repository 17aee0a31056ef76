"""
Field-name sanitizing for dynamic filters and ordering.

Ordering fields are stripped to ``[A-Za-z0-9_.]`` before use, then every field
name (filter or order) is resolved against the entity's mapped columns, so no
client-supplied identifier ever reaches SQL as text.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from sqlalchemy import Column

if TYPE_CHECKING:
    from rest_api.services.crud.entity import EntityDescriptor

_DISALLOWED_ORDER_CHARS = re.compile(r"[^A-Za-z0-9_.]")


def sanitize_order_field(raw: str | None) -> str:
    """
    Remove every character outside ``[A-Za-z0-9_.]``.

    ``"age; DROP TABLE x"`` becomes ``"ageDROPTABLEx"``. May return an empty string,
    which callers treat as "no ordering".
    """
    if not raw:
        return ""
    return _DISALLOWED_ORDER_CHARS.sub("", raw)


def resolve_field(descriptor: EntityDescriptor, name: str) -> Column | None:
    """
    Map a field name to the entity's column, or None if it is not a column.

    A ``<table>.`` prefix is accepted when it names the entity's own table
    (``users.age`` resolves like ``age``).
    """
    if not name:
        return None

    if "." in name:
        prefix, _, name = name.rpartition(".")
        if prefix != descriptor.table_name:
            return None

    return descriptor.columns.get(name)
