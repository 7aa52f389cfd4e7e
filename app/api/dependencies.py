"""FastAPI dependencies shared by the routers."""
from functools import lru_cache

from app.services import Database


@lru_cache(maxsize=1)
def get_database() -> Database:
    """Stores bound to the global Supabase client; overridden in tests."""
    return Database()
