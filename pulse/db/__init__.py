from pulse.db.base import Base
from pulse.db.database import build_engine, build_session_factory, get_async_session, init_db

__all__ = ["Base", "build_engine", "build_session_factory", "get_async_session", "init_db"]
