"""Entities module with entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .service.person import Person, PersonRepository, PersonTable

__all__ = [
    "Person",
    "PersonTable",
    "PersonRepository",
]
