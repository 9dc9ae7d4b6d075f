"""Helpers for building parameterized SQL.

Everything here returns a SQL fragment alongside the values it binds. Values
are always passed as named parameters; the only text interpolated into a
fragment is a column name the caller already trusts or a generated
placeholder name.
"""

from typing import Any, Iterable, Mapping

from domain.errors import BadRequestError


def sql_for_partial_update(
    data: Mapping[str, Any],
    remap: Mapping[str, str] | None = None,
) -> tuple[str, dict[str, Any]]:
    """Build the ``SET`` clause of a partial update.

    ``remap`` translates incoming field names into column names; fields it
    does not mention are used as-is.

        >>> sql_for_partial_update({"firstName": "Al", "age": 32}, {"firstName": "first_name"})
        ('first_name = :set1, age = :set2', {'set1': 'Al', 'set2': 32})
    """
    if not data:
        raise BadRequestError("No data")

    remap = {} if remap is None else remap
    assignments: list[str] = []
    values: dict[str, Any] = {}
    for idx, (field, value) in enumerate(data.items(), start=1):
        column = remap.get(field, field)
        if not column.isidentifier():
            raise BadRequestError(f"Invalid field: {field}")
        name = f"set{idx}"
        assignments.append(f"{column} = :{name}")
        values[name] = value

    return ", ".join(assignments), values


def placeholders(
    values: Iterable[Any],
    prefix: str = "id",
) -> tuple[str, dict[str, Any]]:
    """``(":id1, :id2", {"id1": a, "id2": b})`` for use inside ``IN (...)``."""
    bound = {f"{prefix}{idx}": value for idx, value in enumerate(values, start=1)}
    return ", ".join(f":{name}" for name in bound), bound


def paired_rows(
    first: str,
    first_value: Any,
    rest: Iterable[Any],
    prefix: str = "id",
) -> tuple[str, dict[str, Any]]:
    """Multi-row ``VALUES`` list where every row shares the first column."""
    _, bound = placeholders(rest, prefix=prefix)
    if not bound:
        raise BadRequestError("No values")
    rows = ", ".join(f"(:{first}, :{name})" for name in bound)
    return rows, {first: first_value, **bound}
