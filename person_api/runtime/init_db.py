"""Database initialization script."""

from person_api.core.services.database.db_session import DbSessionService
from person_api.runtime.context import get_config


def init_db() -> None:
    """Create all database tables."""
    DbSessionService(get_config()).create_all()


if __name__ == "__main__":
    init_db()
