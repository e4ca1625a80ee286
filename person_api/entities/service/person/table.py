"""Person database table model."""

from sqlmodel import Field

from person_api.entities._base import EntityTable


class PersonTable(EntityTable, table=True):
    """Database persistence model for persons.

    The UNIQUE constraint on ``email`` is what actually guarantees
    uniqueness; the service-level check only produces a friendlier error.
    """

    __tablename__ = "person"

    email: str = Field(unique=True, index=True)
    phone: str
    first_name: str
    last_name: str
