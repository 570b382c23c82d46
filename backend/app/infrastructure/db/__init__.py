"""
Database Infrastructure Package for the Admission Probability Engine

Exports session management, repositories and the readers used by the
prediction service.
"""

from app.infrastructure.db.database import (
    DatabaseManager,
    get_db_manager,
    get_session_context,
    init_db,
    close_db,
)
from app.infrastructure.db.readers import (
    SqlProfileReader,
    SqlSchoolReader,
)


__all__ = [
    # Database management
    "DatabaseManager",
    "get_db_manager",
    "get_session_context",
    "init_db",
    "close_db",
    # Readers
    "SqlProfileReader",
    "SqlSchoolReader",
]
