"""Person repository for data access operations."""

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from person_api.core.deadline import settle_deadline
from person_api.core.exceptions import (
    ConflictError,
    NotFoundError,
    OperationTimeoutError,
    RepositoryError,
)

from .entity import Person
from .table import PersonTable


class PersonRepository:
    """Data-access layer for persons.

    Lookups raise ``NotFoundError`` or return ``None`` instead of handing
    back an empty record, so absence is never confused with a blank row.
    Every write commits on success and rolls back on failure, including
    when the current operation has run out of time before its commit.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def store(self, person: Person) -> Person:
        """Insert a new row and write the assigned id back into ``person``."""
        row = PersonTable(
            email=person.email,
            phone=person.phone,
            first_name=person.first_name,
            last_name=person.last_name,
        )
        self._session.add(row)
        self._commit("can't save person", person.email)
        self._session.refresh(row)

        person.id = row.id
        logger.debug("Stored person {} with id {}", person.email, person.id)
        return person

    def get_by_id(self, person_id: int) -> Person:
        try:
            row = self._session.get(PersonTable, person_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"can't get person: {e}") from e

        if row is None:
            raise NotFoundError(f"person with ID {person_id} doesn't exist")
        return self._to_entity(row)

    def get_by_email(self, email: str, exclude_id: int) -> Person | None:
        """Return the person holding ``email`` whose id differs from ``exclude_id``."""
        statement = select(PersonTable).where(
            (PersonTable.email == email) & (PersonTable.id != exclude_id)
        )
        try:
            row = self._session.exec(statement).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"can't get person: {e}") from e

        if row is None:
            return None
        return self._to_entity(row)

    def update(self, person: Person) -> Person:
        """Replace every mutable field of the row keyed by ``person.id``."""
        try:
            row = self._session.get(PersonTable, person.id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"can't update person: {e}") from e

        if row is None:
            raise NotFoundError("updating error. Affected rows: 0")

        row.email = person.email
        row.phone = person.phone
        row.first_name = person.first_name
        row.last_name = person.last_name
        self._session.add(row)
        self._commit("can't update person", person.email)
        return person

    def delete(self, person_id: int) -> None:
        try:
            row = self._session.get(PersonTable, person_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"can't delete person: {e}") from e

        if row is None:
            raise NotFoundError("can't delete. person doesn't exist")

        self._session.delete(row)
        self._commit("can't delete person")

    def get_person_list(self, offset_id: int, batch_size: int) -> list[Person]:
        """Return up to ``batch_size`` persons with an id greater than ``offset_id``."""
        statement = (
            select(PersonTable)
            .where(PersonTable.id > offset_id)
            .order_by(PersonTable.id)
            .limit(batch_size)
        )
        try:
            rows = self._session.exec(statement).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"can't get persons list: {e}") from e
        return [self._to_entity(row) for row in rows]

    def _commit(self, failure: str, email: str | None = None) -> None:
        try:
            settle_deadline()
        except OperationTimeoutError:
            self._session.rollback()
            raise

        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            # The UNIQUE constraint on email is the only one a caller can hit.
            raise ConflictError(
                f"{failure}: another person with email address: {email} already exist"
            ) from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise RepositoryError(f"{failure}: {e}") from e

    @staticmethod
    def _to_entity(row: PersonTable) -> Person:
        return Person.model_validate(row.model_dump())
