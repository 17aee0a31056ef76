"""
Entity descriptor: everything the generic operations need to know about one
entity type, resolved once when the viewset is built.

Usage:
    USER = EntityDescriptor(
        model=User,
        create_schema=UserCreate,
        update_schema=UserUpdate,
        output_schema=UserOutput,
        search_fields=("name", "email"),
    )

    pk = USER.parse_pk("42")
    data = USER.bind_create({"name": "Ann", "email": "ann@example.com"})
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, Iterable, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import Column
from sqlalchemy import inspect as sa_inspect

from shared.config.constants import Limits
from shared.utils.exceptions import InvalidIdError, PayloadValidationError

ModelT = TypeVar("ModelT")
CreateT = TypeVar("CreateT", bound=BaseModel)
UpdateT = TypeVar("UpdateT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

_UNSIGNED = re.compile(r"[0-9]+")


def is_zero_value(value: Any) -> bool:
    """
    True for values a partial update leaves untouched: None, "", 0, False,
    and empty collections.
    """
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) == 0
    if isinstance(value, (bool, int, float, Decimal)):
        return value == 0
    return False


@dataclass(frozen=True)
class EntityDescriptor(Generic[ModelT, CreateT, UpdateT, OutputT]):
    """Static description of an entity type served by a GenericViewSet."""

    model: type[ModelT]
    create_schema: type[CreateT]
    update_schema: type[UpdateT]
    output_schema: type[OutputT]
    name: str | None = None
    search_fields: tuple[str, ...] = ()

    # Derived from the mapper in __post_init__
    table_name: str = field(init=False)
    pk_name: str = field(init=False)
    columns: dict[str, Column] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        mapper = sa_inspect(self.model)
        primary_key = mapper.primary_key
        if len(primary_key) != 1:
            raise ValueError(f"{self.model.__name__} must have a single-column primary key")

        columns = {attr.key: attr.columns[0] for attr in mapper.column_attrs}
        unknown = [name for name in self.search_fields if name not in columns]
        if unknown:
            raise ValueError(f"Unknown search fields for {self.model.__name__}: {unknown}")

        pk_column = primary_key[0]
        pk_name = next(key for key, column in columns.items() if column is pk_column)

        object.__setattr__(self, "name", self.name or self.model.__name__)
        object.__setattr__(self, "table_name", mapper.local_table.name)
        object.__setattr__(self, "pk_name", pk_name)
        object.__setattr__(self, "columns", columns)

    # =========================================================================
    # Identity
    # =========================================================================

    @property
    def pk_column(self) -> Column:
        return self.columns[self.pk_name]

    @property
    def search_columns(self) -> list[Column]:
        return [self.columns[name] for name in self.search_fields]

    def new_instance(self, **values: Any) -> ModelT:
        """Fresh, unsaved model instance."""
        return self.model(**values)

    def parse_pk(self, raw: str | None) -> Any:
        """
        Convert a path segment to a primary-key value.

        Integer keys accept unsigned base-10 digits only; UUID keys accept any
        form ``uuid.UUID`` understands; string keys are passed through.

        Raises:
            InvalidIdError: empty or unparsable identifier
        """
        if raw is None or raw == "":
            raise InvalidIdError(raw, entity=self.name)

        try:
            python_type = self.pk_column.type.python_type
        except NotImplementedError:
            python_type = str

        if python_type is int:
            if not _UNSIGNED.fullmatch(raw) or int(raw) > Limits.MAX_SQL_INTEGER:
                raise InvalidIdError(raw, entity=self.name)
            return int(raw)

        if python_type is uuid.UUID:
            try:
                return uuid.UUID(raw)
            except ValueError as exc:
                raise InvalidIdError(raw, entity=self.name) from exc

        return raw

    # =========================================================================
    # Binding
    # =========================================================================

    def _bind(self, schema: type[BaseModel], payload: Any) -> BaseModel:
        if not isinstance(payload, dict):
            raise PayloadValidationError(reason="expected a JSON object", entity=self.name)
        try:
            return schema.model_validate(payload)
        except ValidationError as exc:
            raise PayloadValidationError(exc.errors(include_url=False), entity=self.name) from exc

    def bind_create(self, payload: Any) -> CreateT:
        """Validate a POST body against the create schema."""
        return self._bind(self.create_schema, payload)

    def bind_update(self, payload: Any) -> UpdateT:
        """Validate a PUT body against the update schema."""
        return self._bind(self.update_schema, payload)

    def merge(self, instance: ModelT, values: BaseModel | dict[str, Any]) -> list[str]:
        """
        Partial merge: copy every non-zero value onto ``instance``.

        Fields that are not mapped columns, and the primary key, are ignored.
        Returns the names of the fields that were written.
        """
        if isinstance(values, BaseModel):
            values = values.model_dump(exclude_unset=True)

        changed = []
        for key, value in values.items():
            if key == self.pk_name or key not in self.columns or is_zero_value(value):
                continue
            setattr(instance, key, value)
            changed.append(key)
        return changed

    # =========================================================================
    # Output
    # =========================================================================

    def serialize(self, instance: ModelT) -> dict[str, Any]:
        """JSON-ready representation of a single row."""
        return self.output_schema.model_validate(instance).model_dump(mode="json")

    def serialize_many(self, instances: Iterable[ModelT]) -> list[dict[str, Any]]:
        return [self.serialize(instance) for instance in instances]
