"""
Test utilities shared by unit and integration tests.

Provides a sample record type, a concrete repository for it, and an
in-memory driver that records every statement it receives.

USAGE PATTERNS
=============

    from tests.utils import MockDriver, User, UserRepository

    driver = MockDriver()
    driver.seed("test", {"id": 1234, "login": "Foo"})
    repository = UserRepository(driver)

    user = await repository.get(1234)
    assert driver.requests[-1].sql == "SELECT * FROM ?? WHERE ?? = ?"
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tablerepo.database.driver import MutationResult, StatementResult
from tablerepo.models.record import Record
from tablerepo.repositories.base_repository import BaseRepository


class User(Record):
    """Sample record: ``display_name`` is not persisted, ``email`` maps to a renamed column."""

    __columns__ = {"id": "id", "login": "login", "email": "email_address"}

    id: Optional[int] = None
    login: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None


class UserRepository(BaseRepository[User]):
    """Repository over the ``test`` table."""

    def __init__(self, driver, table: str = "test"):
        self._table = table
        super().__init__(driver, User)

    def table_name(self) -> str:
        return self._table


@dataclass
class MockRequest:
    """One statement received by MockDriver."""

    sql: str
    args: List[Any] = field(default_factory=list)


class MockDriver:
    """
    In-memory driver understanding the repository's statement templates.

    Attributes:
        tables: Table name -> list of row dicts
        requests: Every statement received, in order
        insert_overrides: Values merged into every inserted row
        next_insert_id: Key assigned to the next inserted row
        update_affected_rows: Forced affected count for UPDATE (None = matched rows)
        delete_affected_rows: Forced affected count for DELETE (None = matched rows)
        apply_updates: Whether UPDATE writes values into matched rows
        error: Raised by the next and every later execute() call when set
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.requests: List[MockRequest] = []
        self.insert_overrides: Dict[str, Any] = {}
        self.next_insert_id = 1
        self.update_affected_rows: Optional[int] = None
        self.delete_affected_rows: Optional[int] = None
        self.apply_updates = True
        self.error: Optional[BaseException] = None

    def seed(self, table: str, *rows: Dict[str, Any]) -> None:
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)

    def _matching(self, table: str, column: str, value: Any) -> List[Dict[str, Any]]:
        return [row for row in self.tables.get(table, []) if row.get(column) == value]

    async def execute(self, template: str, args=()) -> StatementResult:
        args = list(args)
        self.requests.append(MockRequest(sql=template, args=args))
        if self.error is not None:
            raise self.error

        verb = template.split()[0].upper()

        if verb == "SELECT":
            if len(args) == 1:
                return [dict(row) for row in self.tables.get(args[0], [])]
            table, column, value = args
            return [dict(row) for row in self._matching(table, column, value)]

        if verb == "INSERT":
            table, values = args
            insert_id = self.next_insert_id
            self.next_insert_id += 1
            row = {**values, **self.insert_overrides, "id": insert_id}
            self.tables.setdefault(table, []).append(row)
            return MutationResult(affected_rows=1, insert_id=insert_id)

        if verb == "UPDATE":
            table, values, column, value = args
            matched = self._matching(table, column, value)
            if self.apply_updates:
                for row in matched:
                    row.update(values)
            affected = self.update_affected_rows if self.update_affected_rows is not None else len(matched)
            return MutationResult(affected_rows=affected)

        if verb == "DELETE":
            table, column, value = args
            matched = self._matching(table, column, value)
            self.tables[table] = [row for row in self.tables.get(table, []) if row not in matched]
            affected = self.delete_affected_rows if self.delete_affected_rows is not None else len(matched)
            return MutationResult(affected_rows=affected)

        raise ValueError(f"MockDriver cannot execute: {template}")
