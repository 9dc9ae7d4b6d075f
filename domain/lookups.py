"""Ingredients, categories and tags.

All three are a single unique `name` column; the repositories only differ in
the table they point at and the type they return.
"""

import logging
from typing import Generic, Sequence, TypeVar

from databases import Database

from db import row_to_dict
from domain.errors import BadRequestError, KitchenlyError, NotFoundError
from domain.models import Category, Ingredient, Lookup, Tag
from domain.sql import placeholders


logger = logging.getLogger(__name__)


L = TypeVar("L", bound=Lookup)


class LookupRepository(Generic[L]):
    table: str
    entity: type[L]

    def __init__(self, db: Database) -> None:
        self.db = db

    @property
    def label(self) -> str:
        return self.entity.__name__.lower()

    async def create(self, name: str) -> L:
        """Find-or-create by exact name. An existing row comes back unchanged."""
        if not name:
            raise BadRequestError(f"No {self.label} name")

        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            f"INSERT INTO {self.table} (name) VALUES (:name) ON CONFLICT (name) DO NOTHING",
            values={"name": name},
        )
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT id, name FROM {self.table} WHERE name = :name",
            values={"name": name},
        )
        if row is None:
            # Removed between the insert and the select.
            raise KitchenlyError(f"Could not create {self.label}: {name}")
        return self.entity.from_row(row_to_dict(row))

    async def find_all(self, name: str | None = None) -> list[L]:
        query = f"SELECT id, name FROM {self.table}"
        values: dict[str, str] | None = None
        if name is not None:
            query += " WHERE LOWER(name) LIKE LOWER(:name)"
            values = {"name": f"%{name}%"}
        query += " ORDER BY name"

        rows = await self.db.fetch_all(query, values=values)  # pyright: ignore[reportUnknownMemberType]
        return [self.entity.from_row(row_to_dict(r)) for r in rows]

    async def get(self, id: int) -> L:
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT id, name FROM {self.table} WHERE id = :id",
            values={"id": id},
        )
        if row is None:
            raise NotFoundError(f"No {self.label}: {id}")
        return self.entity.from_row(row_to_dict(row))

    async def update(self, id: int, name: str) -> L:
        """Rename. Any row already holding `name`, this one included, is a clash."""
        if not name:
            raise BadRequestError(f"No {self.label} name")

        duplicate = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT id FROM {self.table} WHERE name = :name",
            values={"name": name},
        )
        if duplicate is not None:
            raise BadRequestError(f"Duplicate {self.label} name: {name}")

        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"UPDATE {self.table} SET name = :name WHERE id = :id RETURNING id, name",
            values={"id": id, "name": name},
        )
        if row is None:
            raise NotFoundError(f"No {self.label}: {id}")

        logger.info("Renamed %s %s to %r", self.label, id, name)
        return self.entity.from_row(row_to_dict(row))

    async def remove(self, id: int) -> dict[str, int | str]:
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"DELETE FROM {self.table} WHERE id = :id RETURNING id",
            values={"id": id},
        )
        if row is None:
            raise NotFoundError(f"No {self.label}: {id}")

        logger.info("Deleted %s %s", self.label, id)
        return {"id": id, "message": f"{self.entity.__name__} deleted successfully!"}


class IngredientRepository(LookupRepository[Ingredient]):
    table = "ingredients"
    entity = Ingredient

    async def create_multiple(self, names: Sequence[str]) -> list[Ingredient]:
        """Insert every name as a new row. Duplicates are the caller's problem."""
        if not names:
            raise BadRequestError("No ingredient names")

        _, values = placeholders(names, prefix="name")
        rows_clause = ", ".join(f"(:{name})" for name in values)
        rows = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"INSERT INTO {self.table} (name) VALUES {rows_clause} RETURNING id, name",
            values=values,
        )
        logger.info("Created %d ingredients", len(rows))
        return [self.entity.from_row(row_to_dict(r)) for r in rows]


class CategoryRepository(LookupRepository[Category]):
    table = "categories"
    entity = Category


class TagRepository(LookupRepository[Tag]):
    table = "tags"
    entity = Tag
