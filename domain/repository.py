import logging
from typing import Any, Mapping, Sequence

from databases import Database
from pydantic import ValidationError

from db import row_to_dict
from domain.associations import CATEGORIES, INGREDIENTS, TAGS, Association, AssociationStore
from domain.errors import BadRequestError, NotFoundError
from domain.models import Category, Ingredient, Recipe, RecipeDraft, RecipePatch, Tag
from domain.sql import sql_for_partial_update


logger = logging.getLogger(__name__)


RECIPE_COLUMNS = """
    id,
    username,
    title,
    recipe_description,
    preparation_time,
    cooking_time,
    servings,
    created_at
"""


ASSOCIATIONS: dict[str, Association] = {
    "ingredients": INGREDIENTS,
    "categories": CATEGORIES,
    "tags": TAGS,
}


class RecipeRepository:
    """Recipes together with their ingredients, categories and tags."""

    def __init__(self, db: Database) -> None:
        self.db = db
        self.links = AssociationStore(db)

    async def create(self, data: Mapping[str, Any]) -> Recipe:
        """Insert a recipe and link whatever associations came with it.

        ``data`` needs ``username`` and ``title``; ``recipe_description``,
        ``preparation_time``, ``cooking_time`` and ``servings`` default to
        null. ``ingredients``, ``categories`` and ``tags`` are lists of ids.
        The owner must be an existing user.
        """
        if not data.get("username") or not data.get("title"):
            raise BadRequestError("No username/title")

        try:
            draft = RecipeDraft.model_validate(data)
        except ValidationError as e:
            raise BadRequestError(f"Invalid recipe data: {e}") from None

        async with self.db.transaction():
            id = await self.db.fetch_val(  # pyright: ignore[reportUnknownMemberType]
                """
                INSERT INTO recipes (
                    username,
                    title,
                    recipe_description,
                    preparation_time,
                    cooking_time,
                    servings
                )
                SELECT
                    username,
                    :title,
                    :recipe_description,
                    :preparation_time,
                    :cooking_time,
                    :servings
                FROM users
                WHERE username = :username
                RETURNING id
                """,
                values=draft.columns(),
            )
            if id is None:
                raise BadRequestError(f"No user: {draft.username}")

            for field, ids in draft.associations().items():
                await self.links.link(ASSOCIATIONS[field], id, ids)

        logger.info("Created recipe %s for %s", id, draft.username)
        return await self.get(id)

    async def find_all(self, title: str | None = None) -> list[Recipe]:
        query = f"SELECT {RECIPE_COLUMNS} FROM recipes"
        values: dict[str, str] | None = None
        if title is not None:
            query += " WHERE LOWER(title) LIKE LOWER(:title)"
            values = {"title": f"%{title}%"}
        query += " ORDER BY title"

        rows = await self.db.fetch_all(query, values=values)  # pyright: ignore[reportUnknownMemberType]
        return [Recipe.from_row(row_to_dict(r)) for r in rows]

    async def _get_row(self, id: int) -> dict[str, Any]:
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {RECIPE_COLUMNS} FROM recipes WHERE id = :id",
            values={"id": id},
        )
        if row is None:
            raise NotFoundError(f"No recipe: {id}")
        return row_to_dict(row)

    async def get(self, id: int) -> Recipe:
        recipe = Recipe.from_row(await self._get_row(id))
        await self._hydrate(recipe)
        return recipe

    async def _hydrate(self, recipe: Recipe) -> None:
        recipe.ingredients = [
            Ingredient.from_row(r) for r in await self.links.linked(INGREDIENTS, recipe.id)
        ]
        recipe.categories = [
            Category.from_row(r) for r in await self.links.linked(CATEGORIES, recipe.id)
        ]
        recipe.tags = [Tag.from_row(r) for r in await self.links.linked(TAGS, recipe.id)]

    async def update(self, id: int, data: Mapping[str, Any]) -> Recipe:
        """Partial update.

        Scalar fields that are present are overwritten. Each association list
        that is present and non-empty replaces the recipe's whole set of that
        kind; the other kinds are left alone. ``username`` and ``id`` can
        never change.
        """
        if "username" in data or "id" in data:
            raise BadRequestError("Cannot change a recipe's id or username")

        try:
            patch = RecipePatch.from_dict(data)
        except ValidationError as e:
            raise BadRequestError(f"Invalid recipe data: {e}") from None

        columns = patch.columns()
        if "title" in columns and not columns["title"]:
            raise BadRequestError("Title cannot be empty")

        async with self.db.transaction():
            if columns:
                set_cols, values = sql_for_partial_update(columns)
                row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
                    f"UPDATE recipes SET {set_cols} WHERE id = :id RETURNING id",
                    values={**values, "id": id},
                )
                if row is None:
                    raise NotFoundError(f"No recipe: {id}")
            else:
                # Nothing to SET; still refuse to link onto a missing recipe.
                await self._get_row(id)

            for field, ids in patch.associations().items():
                await self.links.replace(ASSOCIATIONS[field], id, ids)

        logger.info("Updated recipe %s: %s", id, ", ".join(data))
        return await self.get(id)

    async def recipes_by_categories(self, category_ids: Sequence[Any]) -> list[Recipe]:
        """Recipes in every one of the categories."""
        rows = await self.links.owners_linked_to_all(
            CATEGORIES, category_ids, order_by="title"
        )
        return [Recipe.from_row(r) for r in rows]

    async def recipes_by_tags(self, tag_ids: Sequence[Any]) -> list[Recipe]:
        """Recipes carrying every one of the tags."""
        rows = await self.links.owners_linked_to_all(TAGS, tag_ids, order_by="title")
        return [Recipe.from_row(r) for r in rows]

    async def remove(self, id: int) -> dict[str, Any]:
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            "DELETE FROM recipes WHERE id = :id RETURNING username, title",
            values={"id": id},
        )
        if row is None:
            raise NotFoundError(f"No recipe: {id}")

        recipe = row_to_dict(row)
        logger.info("Deleted recipe %s", id)
        return {
            "id": id,
            "username": recipe["username"],
            "title": recipe["title"],
            "message": "Recipe deleted successfully!",
        }
