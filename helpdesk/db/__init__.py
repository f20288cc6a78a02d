"""Database package"""

from helpdesk.db.session import Database, get_database, get_db
from helpdesk.models.base import Base

__all__ = ["Base", "Database", "get_database", "get_db"]
