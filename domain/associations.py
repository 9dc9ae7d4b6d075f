"""Many-to-many links between recipes and the lookup tables.

The same store serves ingredients, categories and tags; an `Association`
names the junction table and its two columns. Table and column names come
only from the module level constants below, never from callers.
"""

import logging
from typing import Any, Sequence

from databases import Database

from db import row_to_dict
from domain.errors import BadRequestError
from domain.sql import paired_rows, placeholders


logger = logging.getLogger(__name__)


class Association:
    def __init__(
        self,
        *,
        table: str,
        owner_table: str,
        owner_column: str,
        linked_table: str,
        linked_column: str,
    ) -> None:
        self.table = table
        self.owner_table = owner_table
        self.owner_column = owner_column
        self.linked_table = linked_table
        self.linked_column = linked_column

    def __repr__(self) -> str:
        return f"<Association({self.owner_table} <-> {self.linked_table})>"


INGREDIENTS = Association(
    table="ingredients_recipes",
    owner_table="recipes",
    owner_column="recipe_id",
    linked_table="ingredients",
    linked_column="ingredient_id",
)


CATEGORIES = Association(
    table="recipes_categories",
    owner_table="recipes",
    owner_column="recipe_id",
    linked_table="categories",
    linked_column="category_id",
)


TAGS = Association(
    table="tags_recipes",
    owner_table="recipes",
    owner_column="recipe_id",
    linked_table="tags",
    linked_column="tag_id",
)


def as_ids(values: Any) -> list[int]:
    """Validate a filter or link payload and collapse repeated ids."""
    if not values or isinstance(values, (str, bytes)):
        raise BadRequestError("No ids")
    if not isinstance(values, (list, tuple)):
        raise BadRequestError("Ids must be a list")

    ids: list[int] = []
    for value in values:
        if isinstance(value, bool):
            raise BadRequestError(f"Invalid id: {value!r}")
        try:
            id = int(value)
        except (TypeError, ValueError):
            raise BadRequestError(f"Invalid id: {value!r}") from None
        if id not in ids:
            ids.append(id)
    return ids


class AssociationStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def linked(self, association: Association, owner_id: int) -> list[dict[str, Any]]:
        a = association
        rows = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"""
            SELECT l.id, l.name
            FROM {a.linked_table} AS l
            JOIN {a.table} AS j ON (l.id = j.{a.linked_column})
            WHERE j.{a.owner_column} = :owner_id
            """,
            values={"owner_id": owner_id},
        )
        return [row_to_dict(r) for r in rows]

    async def ensure_exist(self, association: Association, ids: Sequence[Any]) -> list[int]:
        """Raise `BadRequestError` unless every id is in the linked table."""
        ids = as_ids(ids)
        in_clause, values = placeholders(ids)
        found = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT id FROM {association.linked_table} WHERE id IN ({in_clause})",
            values=values,
        )
        if len(found) != len(ids):
            known = {row_to_dict(r)["id"] for r in found}
            missing = [id for id in ids if id not in known]
            raise BadRequestError(
                f"Not found in {association.linked_table}: "
                f"{', '.join(str(id) for id in missing)}"
            )
        return ids

    async def link(
        self,
        association: Association,
        owner_id: int,
        ids: Sequence[Any],
    ) -> list[int]:
        a = association
        ids = await self.ensure_exist(a, ids)
        rows, values = paired_rows("owner_id", owner_id, ids)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            f"""
            INSERT INTO {a.table} ({a.owner_column}, {a.linked_column})
            VALUES {rows}
            """,
            values=values,
        )
        logger.debug("Linked %s %s to %s", a.linked_table, ids, owner_id)
        return ids

    async def unlink_all(self, association: Association, owner_id: int) -> None:
        a = association
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            f"DELETE FROM {a.table} WHERE {a.owner_column} = :owner_id",
            values={"owner_id": owner_id},
        )
        logger.debug("Unlinked all %s from %s", a.linked_table, owner_id)

    async def replace(
        self,
        association: Association,
        owner_id: int,
        ids: Sequence[Any],
    ) -> list[int]:
        """Swap the whole link set. Never merges with the previous one."""
        async with self.db.transaction():
            await self.unlink_all(association, owner_id)
            return await self.link(association, owner_id, ids)

    async def owners_linked_to_all(
        self,
        association: Association,
        ids: Sequence[Any],
        *,
        order_by: str = "id",
    ) -> list[dict[str, Any]]:
        """Owner rows linked to every one of `ids`, not just any of them."""
        a = association
        ids = await self.ensure_exist(a, ids)
        in_clause, values = placeholders(ids)
        rows = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"""
            SELECT o.*
            FROM {a.owner_table} AS o
            JOIN {a.table} AS j ON (o.id = j.{a.owner_column})
            WHERE j.{a.linked_column} IN ({in_clause})
            GROUP BY o.id
            HAVING COUNT(DISTINCT j.{a.linked_column}) = :count
            ORDER BY o.{order_by}
            """,
            values={**values, "count": len(ids)},
        )
        return [row_to_dict(r) for r in rows]
