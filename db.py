from typing import Any

from databases import Database
from databases.interfaces import Record

import config


CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    username VARCHAR(25) PRIMARY KEY,
    password TEXT NOT NULL,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    email TEXT NOT NULL,
    is_admin BOOLEAN NOT NULL DEFAULT FALSE
)
"""


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS recipes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username VARCHAR(25) NOT NULL
        REFERENCES users (username) ON DELETE CASCADE,
    title TEXT NOT NULL,
    recipe_description TEXT,
    preparation_time INTEGER,
    cooking_time INTEGER,
    servings INTEGER,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


def _lookup_table(table: str) -> str:
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
)
"""


def _junction_table(
    table: str,
    first: tuple[str, str],
    second: tuple[str, str],
) -> str:
    first_column, first_table = first
    second_column, second_table = second
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    {first_column} INTEGER NOT NULL
        REFERENCES {first_table} (id) ON DELETE CASCADE,
    {second_column} INTEGER NOT NULL
        REFERENCES {second_table} (id) ON DELETE CASCADE,
    PRIMARY KEY ({first_column}, {second_column})
)
"""


CREATE_FAVORITES_TABLE = """
CREATE TABLE IF NOT EXISTS recipes_users (
    recipe_id INTEGER NOT NULL
        REFERENCES recipes (id) ON DELETE CASCADE,
    username VARCHAR(25) NOT NULL
        REFERENCES users (username) ON DELETE CASCADE,
    PRIMARY KEY (recipe_id, username)
)
"""


# SQLite only enforces foreign keys per connection behind a pragma, so the
# cascades are repeated as triggers.
CASCADE_TRIGGERS = (
    """
CREATE TRIGGER IF NOT EXISTS users_cascade AFTER DELETE ON users
BEGIN
    DELETE FROM recipes_users WHERE username = OLD.username;
    DELETE FROM recipes WHERE username = OLD.username;
END
""",
    """
CREATE TRIGGER IF NOT EXISTS recipes_cascade AFTER DELETE ON recipes
BEGIN
    DELETE FROM ingredients_recipes WHERE recipe_id = OLD.id;
    DELETE FROM recipes_categories WHERE recipe_id = OLD.id;
    DELETE FROM tags_recipes WHERE recipe_id = OLD.id;
    DELETE FROM recipes_users WHERE recipe_id = OLD.id;
END
""",
    """
CREATE TRIGGER IF NOT EXISTS ingredients_cascade AFTER DELETE ON ingredients
BEGIN
    DELETE FROM ingredients_recipes WHERE ingredient_id = OLD.id;
END
""",
    """
CREATE TRIGGER IF NOT EXISTS categories_cascade AFTER DELETE ON categories
BEGIN
    DELETE FROM recipes_categories WHERE category_id = OLD.id;
END
""",
    """
CREATE TRIGGER IF NOT EXISTS tags_cascade AFTER DELETE ON tags
BEGIN
    DELETE FROM tags_recipes WHERE tag_id = OLD.id;
END
""",
)


SCHEMA = (
    CREATE_USERS_TABLE,
    CREATE_RECIPES_TABLE,
    _lookup_table("ingredients"),
    _lookup_table("categories"),
    _lookup_table("tags"),
    _junction_table(
        "ingredients_recipes",
        ("recipe_id", "recipes"),
        ("ingredient_id", "ingredients"),
    ),
    _junction_table(
        "recipes_categories",
        ("recipe_id", "recipes"),
        ("category_id", "categories"),
    ),
    _junction_table(
        "tags_recipes",
        ("tag_id", "tags"),
        ("recipe_id", "recipes"),
    ),
    CREATE_FAVORITES_TABLE,
    *CASCADE_TRIGGERS,
)


TABLES = (
    "recipes_users",
    "tags_recipes",
    "recipes_categories",
    "ingredients_recipes",
    "tags",
    "categories",
    "ingredients",
    "recipes",
    "users",
)


def database(
    cfg: config.Config | None = None,
    *,
    force_rollback: bool = False,
) -> Database:
    cfg = config.Config() if cfg is None else cfg
    return Database(cfg.db_url, force_rollback=force_rollback)


async def create_db(db: Database) -> None:
    for statement in SCHEMA:
        await db.execute(query=statement)  # pyright: ignore[reportUnknownMemberType]


async def drop_db(db: Database) -> None:
    for table in TABLES:
        await db.execute(  # pyright: ignore[reportUnknownMemberType]
            query=f"DROP TABLE IF EXISTS {table}"
        )


def row_to_dict(record: Record) -> dict[str, Any]:
    return dict(record._mapping)  # pyright: ignore[reportPrivateUsage]
