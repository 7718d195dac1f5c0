"""Query filters rendered in the data store's REST query syntax.

Filters become ``column=operator.value`` query parameters, OR groups become
``or=(a.op.v,b.op.v)`` and ordering becomes ``order=column.asc``.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Literal

from pydantic import BaseModel

Operator = Literal["eq", "gt", "gte", "lt", "in", "ilike"]

# Characters that must be quoted inside list and logical-group values
_RESERVED = set(',().:"\\ ')


def format_value(value: Any) -> str:
    """Render a Python value the way the REST API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _quote(text: str) -> str:
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


class Filter(BaseModel):
    """A single column condition."""

    column: str
    operator: Operator
    value: Any

    def rendered_value(self, quoted: bool = False) -> str:
        if self.operator == "in":
            items = ",".join(_quote(format_value(v)) for v in self.value)
            return f"({items})"
        text = format_value(self.value)
        return _quote(text) if quoted else text

    def to_param(self) -> tuple[str, str]:
        """Render as a (column, "op.value") query parameter."""
        return self.column, f"{self.operator}.{self.rendered_value()}"

    def to_expression(self) -> str:
        """Render as a "column.op.value" term inside a logical group."""
        return f"{self.column}.{self.operator}.{self.rendered_value(quoted=True)}"


class AnyOf(BaseModel):
    """OR group of filters."""

    filters: list[Filter]

    def to_param(self) -> tuple[str, str]:
        return "or", "(" + ",".join(f.to_expression() for f in self.filters) + ")"


class Order(BaseModel):
    """Result ordering on one column."""

    column: str
    ascending: bool = True

    def to_param(self) -> tuple[str, str]:
        return "order", f"{self.column}.{'asc' if self.ascending else 'desc'}"


def eq(column: str, value: Any) -> Filter:
    return Filter(column=column, operator="eq", value=value)


def gt(column: str, value: Any) -> Filter:
    return Filter(column=column, operator="gt", value=value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column=column, operator="gte", value=value)


def lt(column: str, value: Any) -> Filter:
    return Filter(column=column, operator="lt", value=value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column=column, operator="in", value=list(values))


def ilike(column: str, pattern: str) -> Filter:
    return Filter(column=column, operator="ilike", value=pattern)


def escape_like(text: str) -> str:
    """Make LIKE wildcards in ``text`` match literally.

    ``*`` is the REST API's alias for ``%`` and has no escape, so a literal
    asterisk is narrowed to a single-character match.
    """
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped.replace("*", "_")


def contains(column: str, text: str) -> Filter:
    """Case-insensitive substring match."""
    return ilike(column, f"*{escape_like(text)}*")


def any_of(*filters: Filter) -> AnyOf:
    return AnyOf(filters=list(filters))


def asc(column: str) -> Order:
    return Order(column=column, ascending=True)


def desc(column: str) -> Order:
    return Order(column=column, ascending=False)
