"""Core services exports."""

# Database Service
from .database.db_session import DbSessionService

# Person Services
from .person.person_service import PersonService

__all__ = [
    # Database Service
    "DbSessionService",
    # Person Services
    "PersonService",
]
