import asyncio
from collections.abc import Callable
from typing import TypeVar

from loguru import logger

from person_api.core.deadline import Deadline, check_deadline, run_with_deadline
from person_api.core.exceptions import ConflictError, NotFoundError, PersonError
from person_api.entities.service.person import Person, PersonRepository

T = TypeVar("T")


class PersonService:
    """Business rules for persons on top of a ``PersonRepository``.

    Every public operation runs its repository work in a worker thread and
    fails with ``OperationTimeoutError`` if it does not finish within
    ``timeout`` seconds. An operation that times out stops before its next
    repository call and never commits. The email uniqueness check is best
    effort: two concurrent creates can both pass it, and the UNIQUE
    constraint on the table rejects the loser.
    """

    def __init__(self, repository: PersonRepository, timeout: float) -> None:
        self._repository = repository
        self._timeout = timeout

    async def store_person(self, person: Person) -> Person:
        """Persist a new person; ``person.id`` holds the assigned id afterwards."""

        def _store() -> Person:
            try:
                exists = self._is_email_exist(person.email, 0)
            except PersonError as e:
                raise e.with_context("can't check is person already exist") from e

            if exists:
                raise ConflictError(
                    f"another person with email address: {person.email} already exist"
                )

            check_deadline()
            return self._repository.store(person)

        return await self._with_deadline("store person", _store)

    async def get_person_by_id(self, person_id: int) -> Person:
        return await self._with_deadline(
            "get person", lambda: self._repository.get_by_id(person_id)
        )

    async def update_person(self, person: Person) -> Person:
        """Replace all fields of an existing person.

        Fails with ``NotFoundError`` when the id is unknown and with
        ``ConflictError`` when a different person already uses the email.
        Keeping one's own email is allowed.
        """

        def _update() -> Person:
            try:
                self._repository.get_by_id(person.id)
            except NotFoundError as e:
                raise e.with_context("can't update person") from e

            check_deadline()
            try:
                exists = self._is_email_exist(person.email, person.id)
            except PersonError as e:
                raise e.with_context("can't check if the email is already using") from e

            if exists:
                raise ConflictError(
                    f"another person already using this email address: {person.email}"
                )

            check_deadline()
            return self._repository.update(person)

        return await self._with_deadline("update person", _update)

    async def delete_person(self, person_id: int) -> None:
        await self._with_deadline(
            "delete person", lambda: self._repository.delete(person_id)
        )

    async def get_person_list(self, offset_id: int, batch_size: int) -> list[Person]:
        def _list() -> list[Person]:
            try:
                return self._repository.get_person_list(offset_id, batch_size)
            except PersonError as e:
                raise e.with_context("getting persons list failed") from e

        return await self._with_deadline("get person list", _list)

    def _is_email_exist(self, email: str, exclude_id: int) -> bool:
        return self._repository.get_by_email(email, exclude_id) is not None

    async def _with_deadline(self, operation: str, func: Callable[[], T]) -> T:
        deadline = Deadline(operation, self._timeout)
        worker = asyncio.ensure_future(asyncio.to_thread(run_with_deadline, deadline, func))
        try:
            return await asyncio.wait_for(asyncio.shield(worker), timeout=self._timeout)
        except TimeoutError as e:
            if isinstance(e, PersonError):
                logger.warning("{}", e)
                raise
            # The worker shares the request's session; it must stop before teardown
            if deadline.cancel():
                logger.warning("{} timed out after {}s", operation, self._timeout)
            else:
                logger.warning("{} committed after its {}s deadline", operation, self._timeout)
            return await worker
        except ConflictError as e:
            logger.warning("{} rejected: {}", operation, e)
            raise
