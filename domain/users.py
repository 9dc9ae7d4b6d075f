import logging
from typing import Any, Mapping

from databases import Database

from db import row_to_dict
from domain.errors import BadRequestError, NotFoundError
from domain.models import Recipe, User
from domain.sql import sql_for_partial_update


logger = logging.getLogger(__name__)


USER_COLUMNS = "username, first_name, last_name, email, is_admin"


# Profile fields a user may change, keyed by the name callers send.
UPDATE_FIELDS: dict[str, str] = {
    "first_name": "first_name",
    "firstName": "first_name",
    "last_name": "last_name",
    "lastName": "last_name",
    "email": "email",
    "is_admin": "is_admin",
    "isAdmin": "is_admin",
}


class UserRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def find_all(self) -> list[User]:
        rows = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {USER_COLUMNS} FROM users ORDER BY username"
        )
        return [User.from_row(row_to_dict(r)) for r in rows]

    async def get(self, username: str) -> User:
        """A user with the recipes they wrote and the ones they saved."""
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {USER_COLUMNS} FROM users WHERE username = :username",
            values={"username": username},
        )
        if row is None:
            raise NotFoundError(f"No user: {username}")

        user = User.from_row(row_to_dict(row))
        recipes = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            "SELECT r.* FROM recipes AS r WHERE r.username = :username ORDER BY r.id",
            values={"username": username},
        )
        user.recipes = [Recipe.from_row(row_to_dict(r)) for r in recipes]
        favorites = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            """
            SELECT r.*
            FROM recipes AS r
            JOIN recipes_users AS ru ON (r.id = ru.recipe_id)
            WHERE ru.username = :username
            ORDER BY r.id
            """,
            values={"username": username},
        )
        user.favorites = [Recipe.from_row(row_to_dict(r)) for r in favorites]
        return user

    async def update(self, username: str, data: Mapping[str, Any]) -> User:
        """Partial update of profile fields.

        Usernames never change and passwords go through the authentication
        service, so both are rejected here along with unknown fields.
        """
        unknown = [field for field in data if field not in UPDATE_FIELDS]
        if unknown:
            raise BadRequestError(f"Cannot update: {', '.join(unknown)}")
        if len({UPDATE_FIELDS[field] for field in data}) != len(data):
            raise BadRequestError("Field given twice")

        set_cols, values = sql_for_partial_update(data, UPDATE_FIELDS)
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"""
            UPDATE users
            SET {set_cols}
            WHERE username = :username
            RETURNING {USER_COLUMNS}
            """,
            values={**values, "username": username},
        )
        if row is None:
            raise NotFoundError(f"No user: {username}")

        logger.info("Updated user %s", username)
        return User.from_row(row_to_dict(row))

    async def remove(self, username: str) -> dict[str, str]:
        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            "DELETE FROM users WHERE username = :username RETURNING username",
            values={"username": username},
        )
        if row is None:
            raise NotFoundError(f"No user: {username}")

        logger.info("Deleted user %s", username)
        return {"username": username, "message": "User deleted successfully!"}

    async def _ensure_pair(self, username: str, recipe_id: int) -> None:
        if not username or not recipe_id:
            raise BadRequestError("Invalid username/recipe_id")

        row = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            """
            SELECT u.username, r.id
            FROM users AS u
            JOIN recipes AS r ON (r.id = :recipe_id)
            WHERE u.username = :username
            """,
            values={"recipe_id": recipe_id, "username": username},
        )
        if row is None:
            raise NotFoundError(
                f"Recipe or user not found: recipe {recipe_id}, user {username}"
            )

    async def save_recipe(self, username: str, recipe_id: int) -> dict[str, Any]:
        """Add a favorite. Saving the same recipe twice is a no-op."""
        await self._ensure_pair(username, recipe_id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            """
            INSERT INTO recipes_users (recipe_id, username)
            VALUES (:recipe_id, :username)
            ON CONFLICT DO NOTHING
            """,
            values={"recipe_id": recipe_id, "username": username},
        )
        logger.info("%s saved recipe %s", username, recipe_id)
        return {
            "username": username,
            "recipe_id": int(recipe_id),
            "message": "Recipe saved successfully",
        }

    async def unsave_recipe(self, username: str, recipe_id: int) -> dict[str, Any]:
        """Drop a favorite. Dropping one that is not there is fine."""
        await self._ensure_pair(username, recipe_id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            """
            DELETE FROM recipes_users
            WHERE recipe_id = :recipe_id AND username = :username
            """,
            values={"recipe_id": recipe_id, "username": username},
        )
        logger.info("%s unsaved recipe %s", username, recipe_id)
        return {
            "username": username,
            "recipe_id": int(recipe_id),
            "message": "Recipe unsaved successfully",
        }
