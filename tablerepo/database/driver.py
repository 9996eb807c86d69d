"""
Driver capability used by repositories.

A driver executes one parameterized statement template and returns either the
rows it produced or a mutation summary. Templates use two placeholder kinds:

- ``??`` identifier placeholder, replaced by a quoted table/column name
- ``?`` value placeholder, replaced by a bound parameter; a mapping argument
  expands to a column/value list (``SET ?`` style)

Repositories never build SQL text from caller data themselves; they hand the
template and its arguments to the driver, which does the substitution here.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

# Ordered raw rows from a read statement
RowSet = List[Dict[str, Any]]


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a write statement."""

    affected_rows: int
    insert_id: Optional[Any] = None


StatementResult = Union[RowSet, MutationResult]


@runtime_checkable
class Driver(Protocol):
    """Minimal execute-and-return-result interface required by repositories."""

    async def execute(self, template: str, args: Sequence[Any] = ()) -> StatementResult:
        ...


_PLACEHOLDER = re.compile(r"\?\?|\?")
_INSERT_SET = re.compile(r"^(\s*INSERT\s+INTO\s+\?\?\s+)SET\s+(\?\s*;?\s*)$", re.IGNORECASE)


def quote_identifier(name: Any, quote: Callable[[str], str]) -> str:
    """
    Quote a possibly dotted identifier (``schema.table``) part by part.

    Raises:
        ValueError: If ``name`` is not a non-empty string
    """
    if not isinstance(name, str) or not name:
        raise ValueError(f"Identifier placeholder requires a non-empty string, got {name!r}")
    return ".".join(quote(part) for part in name.split("."))


def expand_statement(
    template: str,
    args: Sequence[Any],
    quote: Callable[[str], str],
    insert_set: bool = True,
) -> Tuple[str, Dict[str, Any]]:
    """
    Substitute placeholders in a statement template.

    Args:
        template: Statement text with ``??`` and ``?`` placeholders
        args: One positional argument per placeholder, in order
        quote: Dialect-specific quoting function for a single identifier part
        insert_set: Keep ``INSERT INTO ?? SET ?`` as is (MySQL); when False it
            is rendered as ``INSERT INTO t (cols) VALUES (...)``

    Returns:
        Tuple of SQL text with ``:pN`` bind markers and the bind parameter dict

    Raises:
        ValueError: On placeholder/argument count mismatch or a bad identifier
    """
    args = list(args)
    params: Dict[str, Any] = {}
    position = 0

    insert_values = not insert_set and _INSERT_SET.match(template) is not None
    if insert_values:
        template = _INSERT_SET.sub(r"\1\2", template)

    def bind(value: Any) -> str:
        name = f"p{len(params)}"
        params[name] = value
        return f":{name}"

    def substitute(match: "re.Match[str]") -> str:
        nonlocal position
        if position >= len(args):
            raise ValueError(
                f"Statement has more placeholders than arguments ({len(args)} given): {template}"
            )
        arg = args[position]
        position += 1

        if match.group(0) == "??":
            return quote_identifier(arg, quote)

        if isinstance(arg, Mapping):
            if insert_values:
                columns = ", ".join(quote_identifier(column, quote) for column in arg)
                values = ", ".join(bind(value) for value in arg.values())
                return f"({columns}) VALUES ({values})"
            return ", ".join(
                f"{quote_identifier(column, quote)} = {bind(value)}" for column, value in arg.items()
            )

        return bind(arg)

    sql = _PLACEHOLDER.sub(substitute, template)

    if position != len(args):
        raise ValueError(
            f"Statement has {position} placeholder(s) but {len(args)} argument(s): {template}"
        )

    return sql, params
