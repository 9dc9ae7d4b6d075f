from pathlib import Path
from typing import AsyncIterator

from databases import Database
import pytest_asyncio

import db
from domain.services import Kitchen


class Seed:
    """Ids of the rows every test starts with."""

    def __init__(self) -> None:
        self.recipe_ids: list[int] = []
        self.ingredient_ids: list[int] = []
        self.category_ids: list[int] = []
        self.tag_ids: list[int] = []


RECIPES = (
    ("user1", "Recipe1", "Delicious dish 1", 10, 20, 2),
    ("user2", "Recipe2", "Tasty meal 2", 15, 30, 4),
    ("user1", "Recipe3", "Amazing dish 3", 5, 15, 1),
)


async def _insert(database: Database, query: str, values: dict[str, object]) -> int:
    return await database.fetch_val(  # pyright: ignore[reportUnknownMemberType]
        query + " RETURNING id", values=values
    )


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    # Everything a test does is rolled back on disconnect.
    database = Database(
        f"sqlite+aiosqlite:///{tmp_path / 'kitchenly_test.db'}",
        force_rollback=True,
    )
    await database.connect()
    await db.create_db(database)
    yield database
    await database.disconnect()


@pytest_asyncio.fixture
async def seed(database: Database) -> Seed:
    seed = Seed()

    for n, admin in ((1, False), (2, True)):
        await database.execute(  # pyright: ignore[reportUnknownMemberType]
            """
            INSERT INTO users (username, password, first_name, last_name, email, is_admin)
            VALUES (:username, :password, :first_name, :last_name, :email, :is_admin)
            """,
            values={
                "username": f"user{n}",
                "password": f"hashed-password{n}",
                "first_name": f"User{n}First",
                "last_name": f"User{n}Last",
                "email": f"user{n}@example.com",
                "is_admin": admin,
            },
        )

    for username, title, description, prep, cook, servings in RECIPES:
        seed.recipe_ids.append(
            await _insert(
                database,
                """
                INSERT INTO recipes (
                    username, title, recipe_description, preparation_time, cooking_time, servings
                )
                VALUES (:username, :title, :description, :prep, :cook, :servings)
                """,
                {
                    "username": username,
                    "title": title,
                    "description": description,
                    "prep": prep,
                    "cook": cook,
                    "servings": servings,
                },
            )
        )

    for table, label, ids in (
        ("ingredients", "ingredient", seed.ingredient_ids),
        ("categories", "category", seed.category_ids),
        ("tags", "tag", seed.tag_ids),
    ):
        for n in range(1, 11):
            ids.append(
                await _insert(
                    database,
                    f"INSERT INTO {table} (name) VALUES (:name)",
                    {"name": f"{label}{n}"},
                )
            )

    r, i, c, t = seed.recipe_ids, seed.ingredient_ids, seed.category_ids, seed.tag_ids
    links = (
        ("recipes_users", "recipe_id", "username", [(r[0], "user1"), (r[1], "user2")]),
        ("tags_recipes", "tag_id", "recipe_id", [(t[0], r[0]), (t[0], r[1]), (t[1], r[0])]),
        ("recipes_categories", "recipe_id", "category_id", [(r[0], c[0]), (r[0], c[1]), (r[1], c[0])]),
        ("ingredients_recipes", "recipe_id", "ingredient_id", [(r[0], i[0]), (r[1], i[1]), (r[1], i[0])]),
    )
    for table, first, second, pairs in links:
        for a, b in pairs:
            await database.execute(  # pyright: ignore[reportUnknownMemberType]
                f"INSERT INTO {table} ({first}, {second}) VALUES (:a, :b)",
                values={"a": a, "b": b},
            )

    return seed


@pytest_asyncio.fixture
async def kitchen(database: Database) -> Kitchen:
    return Kitchen(database)
