"""
core — MongoDB connection layer for the healthcare portal.

Re-exports the public API:
    - get_database          (process-wide accessor, ``None`` when unavailable)
    - get_manager / set_manager
    - ConnectionManager
    - requires_database     (handler decorator answering 503 on ``None``)
"""

from core.database import ConnectionManager, get_database, get_manager, set_manager
from core.guards import database_unavailable, requires_database

__all__ = [
    "ConnectionManager",
    "get_database",
    "get_manager",
    "set_manager",
    "database_unavailable",
    "requires_database",
]
