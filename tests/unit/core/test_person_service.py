"""Unit tests for the person service."""

import time

import pytest

from person_api.core.exceptions import (
    ConflictError,
    NotFoundError,
    OperationTimeoutError,
    RepositoryError,
)
from person_api.core.services import PersonService
from person_api.entities.service.person import PersonRepository


class TestStorePerson:
    """Creating persons."""

    @pytest.mark.asyncio
    async def test_store_assigns_positive_id(self, person_service, make_person):
        person = make_person()

        stored = await person_service.store_person(person)

        assert stored is person
        assert person.id > 0

    @pytest.mark.asyncio
    async def test_store_duplicate_email_conflicts(self, person_service, make_person):
        await person_service.store_person(make_person())

        with pytest.raises(ConflictError, match="a@x.com"):
            await person_service.store_person(make_person(phone="+2"))

    @pytest.mark.asyncio
    async def test_lookup_failure_keeps_its_kind(self, mock_repository, make_person):
        mock_repository.get_by_email.side_effect = RepositoryError("connection reset")
        service = PersonService(mock_repository, timeout=1.0)

        with pytest.raises(RepositoryError) as exc_info:
            await service.store_person(make_person())

        assert str(exc_info.value) == (
            "can't check is person already exist: connection reset"
        )
        mock_repository.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_checks_email_against_all_persisted_ids(
        self, mock_repository, make_person
    ):
        mock_repository.get_by_email.return_value = None
        mock_repository.store.side_effect = lambda person: person
        service = PersonService(mock_repository, timeout=1.0)

        await service.store_person(make_person())

        mock_repository.get_by_email.assert_called_once_with("a@x.com", 0)


class TestGetPerson:
    """Reading persons by id."""

    @pytest.mark.asyncio
    async def test_get_existing_returns_stored_fields(self, person_service, make_person):
        stored = await person_service.store_person(make_person())

        fetched = await person_service.get_person_by_id(stored.id)

        assert fetched == stored
        assert fetched.first_name == "A"
        assert fetched.last_name == "B"

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, person_service):
        with pytest.raises(NotFoundError, match="person with ID 42 doesn't exist"):
            await person_service.get_person_by_id(42)


class TestUpdatePerson:
    """Replacing persons."""

    @pytest.mark.asyncio
    async def test_update_to_own_email_succeeds(self, person_service, make_person):
        stored = await person_service.store_person(make_person())

        updated = await person_service.update_person(
            make_person(id=stored.id, phone="+99", first_name="Z")
        )

        assert updated.phone == "+99"
        fetched = await person_service.get_person_by_id(stored.id)
        assert fetched.phone == "+99"
        assert fetched.first_name == "Z"

    @pytest.mark.asyncio
    async def test_update_to_other_persons_email_conflicts(
        self, person_service, make_person
    ):
        await person_service.store_person(make_person(email="a@x.com"))
        second = await person_service.store_person(make_person(email="b@x.com"))

        with pytest.raises(ConflictError, match="a@x.com"):
            await person_service.update_person(make_person(id=second.id, email="a@x.com"))

        fetched = await person_service.get_person_by_id(second.id)
        assert fetched.email == "b@x.com"

    @pytest.mark.asyncio
    async def test_update_missing_person_raises_not_found(
        self, person_service, make_person
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await person_service.update_person(make_person(id=7))

        assert str(exc_info.value).startswith("can't update person: ")


class TestDeletePerson:
    """Removing persons."""

    @pytest.mark.asyncio
    async def test_delete_existing_removes_it(self, person_service, make_person):
        stored = await person_service.store_person(make_person())

        await person_service.delete_person(stored.id)

        with pytest.raises(NotFoundError):
            await person_service.get_person_by_id(stored.id)

    @pytest.mark.asyncio
    async def test_delete_missing_fails(self, person_service):
        with pytest.raises(NotFoundError, match="person doesn't exist"):
            await person_service.delete_person(5)


class TestGetPersonList:
    """Paginated listing."""

    @pytest.mark.asyncio
    async def test_batch_size_limits_result(self, person_service, make_person):
        for index in range(3):
            await person_service.store_person(make_person(email=f"p{index}@x.com"))

        batch = await person_service.get_person_list(0, 2)

        assert len(batch) == 2
        assert all(person.id > 0 for person in batch)
        assert [person.email for person in batch] == ["p0@x.com", "p1@x.com"]

    @pytest.mark.asyncio
    async def test_offset_is_exclusive(self, person_service, make_person):
        stored = [
            await person_service.store_person(make_person(email=f"p{index}@x.com"))
            for index in range(3)
        ]

        batch = await person_service.get_person_list(stored[0].id, 10)

        assert [person.id for person in batch] == [stored[1].id, stored[2].id]

    @pytest.mark.asyncio
    async def test_list_failure_gets_context(self, mock_repository):
        mock_repository.get_person_list.side_effect = RepositoryError("boom")
        service = PersonService(mock_repository, timeout=1.0)

        with pytest.raises(RepositoryError, match="^getting persons list failed: boom$"):
            await service.get_person_list(0, 10)


class SlowLookupRepository(PersonRepository):
    """Repository whose email lookup outlives a short deadline."""

    def get_by_email(self, email, exclude_id):
        time.sleep(0.2)
        return super().get_by_email(email, exclude_id)


class TestDeadline:
    """Every operation is bounded by the configured timeout."""

    @pytest.mark.asyncio
    async def test_slow_repository_times_out(self, mock_repository, make_person):
        mock_repository.get_by_id.side_effect = lambda person_id: time.sleep(0.5)
        service = PersonService(mock_repository, timeout=0.05)

        with pytest.raises(OperationTimeoutError, match="get person timed out"):
            await service.get_person_by_id(1)

    @pytest.mark.asyncio
    async def test_timeout_covers_the_uniqueness_check(self, mock_repository, make_person):
        mock_repository.get_by_email.side_effect = lambda email, exclude_id: time.sleep(0.5)
        service = PersonService(mock_repository, timeout=0.05)

        with pytest.raises(TimeoutError):
            await service.store_person(make_person())

    @pytest.mark.asyncio
    async def test_no_store_after_the_lookup_overruns(self, mock_repository, make_person):
        mock_repository.get_by_email.side_effect = lambda email, exclude_id: time.sleep(0.2)
        service = PersonService(mock_repository, timeout=0.05)

        with pytest.raises(OperationTimeoutError, match="store person timed out"):
            await service.store_person(make_person())

        mock_repository.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_timed_out_store_leaves_no_row(self, session, make_person):
        service = PersonService(SlowLookupRepository(session), timeout=0.05)

        with pytest.raises(OperationTimeoutError):
            await service.store_person(make_person())

        assert PersonRepository(session).get_person_list(0, 10) == []

    @pytest.mark.asyncio
    async def test_timed_out_update_leaves_row_unchanged(
        self, session, person_service, make_person
    ):
        stored = await person_service.store_person(make_person())
        service = PersonService(SlowLookupRepository(session), timeout=0.05)

        with pytest.raises(OperationTimeoutError, match="update person timed out"):
            await service.update_person(make_person(id=stored.id, email="new@x.com"))

        fetched = await person_service.get_person_by_id(stored.id)
        assert fetched.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_timeout_returns_only_after_the_worker_stops(self, mock_repository):
        finished = []

        def slow_get(person_id):
            time.sleep(0.2)
            finished.append(person_id)

        mock_repository.get_by_id.side_effect = slow_get
        service = PersonService(mock_repository, timeout=0.05)

        with pytest.raises(OperationTimeoutError):
            await service.get_person_by_id(3)

        assert finished == [3]


class TestScenario:
    """End-to-end lifecycle of a single person through the service."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, person_service, make_person):
        stored = await person_service.store_person(make_person())
        assert stored.id == 1

        with pytest.raises(ConflictError):
            await person_service.store_person(make_person())

        await person_service.update_person(make_person(id=1))

        await person_service.delete_person(1)

        with pytest.raises(NotFoundError):
            await person_service.get_person_by_id(1)
