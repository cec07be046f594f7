"""
Farm Inventory Database Layer

Usage:
    from poultry_inventory.database import (
        create_db_engine, create_session_factory, init_db, session_scope,
        BatchRow, ProductionRow,
    )

    engine = create_db_engine(get_database_url())
    init_db(engine)
    factory = create_session_factory(engine)
"""

from .models import Base, BatchRow, ProductionRow
from .session import (
    check_db_connection,
    create_db_engine,
    create_session_factory,
    get_database_url,
    init_db,
    session_scope,
)

__all__ = [
    # Models
    "Base",
    "BatchRow",
    "ProductionRow",
    # Session
    "check_db_connection",
    "create_db_engine",
    "create_session_factory",
    "get_database_url",
    "init_db",
    "session_scope",
]
