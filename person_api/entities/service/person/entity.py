"""Entity: Person."""

from typing import Any

from pydantic import Field

from person_api.entities._base import Entity


class Person(Entity):
    """Person entity representing a managed contact record.

    This is the domain model handed between the transport, the service and
    the repository. ``firstName`` and ``lastName`` are the wire names.
    """

    email: str = Field(description="Email address, unique among persons")
    phone: str = Field(description="Phone number")
    first_name: str = Field(description="First name")
    last_name: str = Field(description="Last name")

    def __eq__(self, other: Any) -> bool:
        """Compare persons by business attributes."""
        if not isinstance(other, Person):
            return False

        return (
            self.id == other.id
            and self.email == other.email
            and self.phone == other.phone
            and self.first_name == other.first_name
            and self.last_name == other.last_name
        )

    def __hash__(self) -> int:
        """Hash based on business attributes."""
        return hash((
            self.id,
            self.email,
            self.phone,
            self.first_name,
            self.last_name,
        ))
