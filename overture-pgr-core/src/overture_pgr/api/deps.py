from functools import lru_cache

from sqlalchemy import Engine, create_engine

from overture_pgr.config import TopologySettings


@lru_cache
def get_settings() -> TopologySettings:
    return TopologySettings.from_env()


@lru_cache
def _engine_for(database_url: str) -> Engine:
    return create_engine(database_url)


def get_engine() -> Engine:
    settings = get_settings()
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not configured")
    return _engine_for(settings.database_url)
