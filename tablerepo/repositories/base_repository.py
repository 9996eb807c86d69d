"""
Base repository pattern for single-table CRUD.

Provides the shared CRUD engine and the base class concrete repositories
derive from. Every operation issues one parameterized statement through the
injected driver (create and update issue a second one to read the row back).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Protocol, Type, TypeVar, runtime_checkable

from tablerepo.config.exceptions import ConfigurationError
from tablerepo.database.driver import Driver, StatementResult
from tablerepo.models.record import Record, parse_model
from tablerepo.repositories.exceptions import NotFoundError
from tablerepo.utils.logger import get_module_logger

logger = get_module_logger(__name__)

# Generic type for record classes
RecordType = TypeVar("RecordType", bound=Record)

SELECT_ALL = "SELECT * FROM ??"
SELECT_BY_ID = "SELECT * FROM ?? WHERE ?? = ?"
INSERT = "INSERT INTO ?? SET ?"
UPDATE_BY_ID = "UPDATE ?? SET ? WHERE ?? = ?"
DELETE_BY_ID = "DELETE FROM ?? WHERE ?? = ?"


@runtime_checkable
class TableSource(Protocol):
    """Anything that names the table a CRUD engine works on."""

    def table_name(self) -> str:
        ...


class CrudOperations(Generic[RecordType]):
    """
    CRUD engine bound to one table, one driver and one record class.

    Holds no rows, no transaction and no other mutable state; concurrent
    operations on the same instance are not ordered or serialized.
    """

    def __init__(self, source: TableSource, driver: Driver, model_class: Type[RecordType]):
        """
        Initialize the engine, reading the table identifier once.

        Args:
            source: Provider of the table identifier
            driver: Driver capability statements are executed on
            model_class: Record class rows are converted to

        Raises:
            ConfigurationError: If the table identifier is missing or empty
        """
        table = source.table_name()
        if not isinstance(table, str) or not table:
            raise ConfigurationError(
                f"{type(source).__name__}.table_name() must return a non-empty string, got {table!r}"
            )

        self.table = table
        self.driver = driver
        self.model_class = model_class

    async def _execute(self, action: str, template: str, args: List[Any]) -> StatementResult:
        try:
            return await self.driver.execute(template, args)
        except Exception as e:
            logger.error(f"Failed to {action} on table '{self.table}': {str(e)}")
            raise

    async def get_all(self) -> List[RecordType]:
        """
        Get every row of the table.

        Returns:
            Records in the order the driver returned them, possibly empty
        """
        rows = await self._execute("get all rows", SELECT_ALL, [self.table])
        logger.debug(f"Retrieved {len(rows)} row(s) from '{self.table}'")
        return [self.model_class.from_row(row) for row in rows]

    async def get(self, id_value: Any, id_field_name: str = "id") -> RecordType:
        """
        Get one row by key.

        Args:
            id_value: Key value to match
            id_field_name: Column compared against ``id_value``

        Returns:
            The first matching row

        Raises:
            NotFoundError: If no row matches
        """
        rows = await self._execute("get row", SELECT_BY_ID, [self.table, id_field_name, id_value])
        if not rows:
            logger.debug(f"No row in '{self.table}' with {id_field_name}={id_value!r}")
            raise NotFoundError(self.table, id_field_name, id_value)
        return self.model_class.from_row(rows[0])

    async def create(self, model: RecordType, id_field_name: str = "id") -> RecordType:
        """
        Insert a row and read it back by its generated key.

        The insert and the read are separate statements. If the read fails the
        inserted row stays in the table and the read's error is raised.

        Args:
            model: Record whose bound, set fields are inserted
            id_field_name: Column the generated key is looked up by

        Returns:
            The stored row as a fresh record
        """
        parsed = self.parse_model(model)
        result = await self._execute("insert row", INSERT, [self.table, parsed])
        logger.debug(f"Inserted row into '{self.table}' with {id_field_name}={result.insert_id!r}")
        return await self.get(result.insert_id, id_field_name)

    async def update(self, id_value: Any, model: RecordType, id_field_name: str = "id") -> RecordType:
        """
        Update a row by key and read it back.

        A zero affected-row count raises NotFoundError whether the row is
        missing or the driver counted no change for it.

        Args:
            id_value: Key value of the row to update
            model: Record whose bound, set fields are written
            id_field_name: Column compared against ``id_value``

        Returns:
            The updated row as a fresh record

        Raises:
            NotFoundError: If the driver reports zero affected rows
        """
        parsed = self.parse_model(model)
        result = await self._execute(
            "update row", UPDATE_BY_ID, [self.table, parsed, id_field_name, id_value]
        )
        if result.affected_rows == 0:
            logger.debug(f"Update on '{self.table}' with {id_field_name}={id_value!r} affected no rows")
            raise NotFoundError(self.table, id_field_name, id_value)
        return await self.get(id_value, id_field_name)

    async def delete(self, id_value: Any, id_field_name: str = "id") -> None:
        """
        Delete a row by key.

        Raises:
            NotFoundError: If the driver reports zero affected rows
        """
        result = await self._execute("delete row", DELETE_BY_ID, [self.table, id_field_name, id_value])
        if result.affected_rows == 0:
            logger.debug(f"Delete on '{self.table}' with {id_field_name}={id_value!r} affected no rows")
            raise NotFoundError(self.table, id_field_name, id_value)
        logger.debug(f"Deleted {result.affected_rows} row(s) from '{self.table}'")

    def parse_model(self, model: RecordType) -> Dict[str, Any]:
        """Column -> value mapping of the model's bound, set fields."""
        return parse_model(model)


class BaseRepository(ABC, Generic[RecordType]):
    """
    Abstract base for single-table repositories.

    Subclasses supply ``table_name()``; every CRUD operation is delegated to a
    ``CrudOperations`` engine built once at construction.
    """

    NOT_FOUND = NotFoundError.MESSAGE

    def __init__(self, driver: Driver, model_class: Type[RecordType]):
        """
        Initialize base repository with a driver and record class.

        Args:
            driver: Driver capability, shared and not owned by the repository
            model_class: The record class this repository returns
        """
        self.driver = driver
        self.model_class = model_class
        self._crud: CrudOperations[RecordType] = CrudOperations(self, driver, model_class)

    @abstractmethod
    def table_name(self) -> str:
        """Name of the table this repository reads and writes."""

    @property
    def table(self) -> str:
        return self._crud.table

    async def get_all(self) -> List[RecordType]:
        return await self._crud.get_all()

    async def get(self, id_value: Any, id_field_name: str = "id") -> RecordType:
        return await self._crud.get(id_value, id_field_name)

    async def create(self, model: RecordType, id_field_name: str = "id") -> RecordType:
        return await self._crud.create(model, id_field_name)

    async def update(self, id_value: Any, model: RecordType, id_field_name: str = "id") -> RecordType:
        return await self._crud.update(id_value, model, id_field_name)

    async def delete(self, id_value: Any, id_field_name: str = "id") -> None:
        await self._crud.delete(id_value, id_field_name)

    def parse_model(self, model: RecordType) -> Dict[str, Any]:
        return self._crud.parse_model(model)
