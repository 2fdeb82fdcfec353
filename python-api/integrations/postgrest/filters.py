"""
PostgREST filter helpers.

Builds the query-string operators understood by PostgREST, e.g.
``{"event_id": eq(event_id), "competition_id": in_(ids)}``.
"""

from typing import Any, Iterable

# Characters PostgREST treats as syntax inside in-lists and logic trees
_RESERVED = set(',.:()" \\')


def format_value(value: Any) -> str:
    """Render a Python value the way PostgREST expects it in a filter."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def quote(value: Any) -> str:
    """Double-quote a value if it contains reserved characters."""
    text = format_value(value)
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def eq(value: Any) -> str:
    return f"eq.{format_value(value)}"


def neq(value: Any) -> str:
    return f"neq.{format_value(value)}"


def gte(value: Any) -> str:
    return f"gte.{format_value(value)}"


def lte(value: Any) -> str:
    return f"lte.{format_value(value)}"


def in_(values: Iterable[Any]) -> str:
    return f"in.({','.join(quote(v) for v in values)})"


def condition(column: str, operator: str, value: Any) -> str:
    """A single condition for use inside or_()/and_() trees."""
    return f"{column}.{operator}.{quote(value)}"


def and_(*conditions: str) -> str:
    return f"and({','.join(conditions)})"


def or_(*conditions: str) -> str:
    """Value for the top-level ``or`` query parameter."""
    return f"({','.join(conditions)})"
