from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


class Entity(BaseModel):
    """Base entity class with a server-assigned integer identifier.

    An id of ``0`` means the entity has not been persisted yet. Fields are
    exposed in camelCase on the wire and accepted in either spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int = PydanticField(
        default=0, strict=True, description="Unique identifier for the entity"
    )


class EntityTable(SQLModel, table=False):
    """Base table class with an auto-incremented integer primary key."""

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Unique identifier for the entity",
    )
