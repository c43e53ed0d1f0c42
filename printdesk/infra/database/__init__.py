"""
printdesk.infra.database – async SQLAlchemy 2.0 layer for the database order backend.

    from printdesk.infra.database import build_engine, build_session_factory, init_db
    from printdesk.infra.database.models import OrderRecord
    from printdesk.infra.database.repositories import OrderRepository
"""
from printdesk.infra.database.engine import (
    build_engine,
    build_session_factory,
    ensure_database_exists,
    init_db,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "ensure_database_exists",
    "init_db",
]
