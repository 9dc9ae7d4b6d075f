from enum import Enum

from pydantic_settings import BaseSettings


class Env(Enum):
    local = "local"
    dev = "dev"
    test = "test"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    db_url: str = "sqlite+aiosqlite:///kitchenly.db"
    log_level: str = "INFO"
    reset_db: bool = False
