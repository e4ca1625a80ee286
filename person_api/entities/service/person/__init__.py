"""Entity package: Person."""

from .entity import Person
from .repository import PersonRepository
from .table import PersonTable

__all__ = ["Person", "PersonRepository", "PersonTable"]
