import asyncio
import contextlib
import logging
from typing import AsyncIterator

from rich import print
from rich.logging import RichHandler

import config
import db
from domain.services import Kitchen


CONFIG = config.Config()


def configure_logging(cfg: config.Config | None = None) -> None:
    cfg = CONFIG if cfg is None else cfg
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=cfg.env != config.Env.prod)],
        force=True,
    )


@contextlib.asynccontextmanager
async def lifespan(
    cfg: config.Config | None = None,
    *,
    reset: bool = False,
) -> AsyncIterator[Kitchen]:
    """Connect, make sure the schema exists and hand out a `Kitchen`.

    With `reset` every table is dropped first, so the kitchen starts empty.
    """
    cfg = CONFIG if cfg is None else cfg
    database = db.database(cfg)
    await database.connect()
    try:
        if reset:
            await db.drop_db(database)
        await db.create_db(database)
        yield Kitchen(database)
    finally:
        await database.disconnect()


async def main() -> None:
    configure_logging()
    async with lifespan(reset=CONFIG.reset_db) as kitchen:
        recipes = await kitchen.recipes.find_all()
        print(f"[green]Kitchenly database ready[/green] at {CONFIG.db_url}")
        print(f"{len(recipes)} recipes")


if __name__ == "__main__":
    asyncio.run(main())
