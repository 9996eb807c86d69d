"""
Record base model and column binding registry.

A record is a SQLModel (non-table) model describing one row. Each record type
declares which of its fields persist to which column through a class-level
``__columns__`` mapping; the mapping is resolved into an immutable
``ColumnBindings`` object once, when the class is created.
"""

from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, Mapping, Optional, Tuple

from sqlmodel import SQLModel

from tablerepo.config.exceptions import ConfigurationError


class ColumnBindings:
    """Immutable field name -> column name mapping for one record type."""

    __slots__ = ("_field_to_column", "_column_to_field")

    def __init__(self, field_to_column: Mapping[str, str]):
        columns: Dict[str, str] = {}
        for field_name, column in field_to_column.items():
            if not isinstance(column, str) or not column:
                raise ConfigurationError(
                    f"Column binding for field '{field_name}' must be a non-empty string, got {column!r}"
                )
            if column in columns:
                raise ConfigurationError(
                    f"Column '{column}' is bound to both '{columns[column]}' and '{field_name}'"
                )
            columns[column] = field_name

        self._field_to_column = MappingProxyType(dict(field_to_column))
        self._column_to_field = MappingProxyType(columns)

    def column_for(self, field_name: str) -> Optional[str]:
        """Column bound to ``field_name``, or None when the field is not persisted."""
        return self._field_to_column.get(field_name)

    def field_for(self, column: str) -> Optional[str]:
        """Field bound to ``column``, or None when no field maps to it."""
        return self._column_to_field.get(column)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._field_to_column.items())

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._field_to_column

    def __len__(self) -> int:
        return len(self._field_to_column)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnBindings):
            return NotImplemented
        return dict(self._field_to_column) == dict(other._field_to_column)

    def __repr__(self) -> str:
        return f"ColumnBindings({dict(self._field_to_column)!r})"


class Record(SQLModel):
    """
    Base class for records persisted through a repository.

    Subclasses declare their persisted fields with ``__columns__``::

        class User(Record):
            __columns__ = {"id": "id", "login": "user_login"}

            id: Optional[int] = None
            login: Optional[str] = None
            display_name: Optional[str] = None  # not persisted

    Bindings declared on parent records are inherited; a subclass may rebind a
    field to a different column.
    """

    __columns__: ClassVar[Mapping[str, str]] = {}
    column_bindings: ClassVar[ColumnBindings] = ColumnBindings({})

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)

        declared: Dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            declared.update(klass.__dict__.get("__columns__", {}))

        unknown = [name for name in declared if name not in cls.model_fields]
        if unknown:
            raise ConfigurationError(
                f"{cls.__name__} binds columns for unknown fields: {', '.join(sorted(unknown))}"
            )

        cls.column_bindings = ColumnBindings(declared)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Record":
        """
        Build a record from a raw driver row.

        Bound columns are renamed to their field. Other keys pass through under
        their own name unless that name belongs to a bound field, and are
        dropped by validation when no field matches.
        """
        bindings = cls.column_bindings
        data = {}
        for column, value in row.items():
            field_name = bindings.field_for(column)
            if field_name is not None:
                data[field_name] = value
        for column, value in row.items():
            if bindings.field_for(column) is None and column not in bindings:
                data[column] = value
        return cls.model_validate(data)


def _is_defined(record: Record, field_name: str) -> bool:
    if field_name in record.model_fields_set:
        return True
    # An unset field with a None default has no value of its own
    field_info = type(record).model_fields[field_name]
    return field_info.default_factory is not None or field_info.default is not None


def parse_model(record: Record) -> Dict[str, Any]:
    """
    Serialize a record into a column -> value mapping for a write statement.

    Only bound fields with a defined value are included: fields set on the
    instance (an explicit None is kept and becomes NULL) and unset fields
    whose default is not None. Unset fields defaulting to None are left out.
    """
    return {
        column: getattr(record, field_name)
        for field_name, column in type(record).column_bindings.items()
        if _is_defined(record, field_name)
    }
