"""Person API router with CRUD operations.

Request bodies are decoded here rather than by FastAPI's body binding so
that a malformed payload (422) stays distinguishable from a payload that
is well formed but misses a required field (400). Service failures surface
as ``PersonError`` and are turned into responses by the application's
exception handlers.
"""

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from person_api.api.http.deps import get_person_service
from person_api.core.exceptions import FieldValidationError, MalformedInputError
from person_api.core.services import PersonService
from person_api.entities.service.person import Person

router = APIRouter(prefix="/person", tags=["person"])

DELETED_MESSAGE = "The person's data has been deleted"

_REQUIRED_FIELDS = ("email", "phone", "firstName", "lastName")


async def decode_person(request: Request) -> Person:
    """Decode and validate a Person from the request body."""
    try:
        payload = await request.json()
    except ValueError as e:
        raise MalformedInputError(f"malformed request body: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedInputError(
            f"malformed request body: expected a JSON object, got {type(payload).__name__}"
        )

    try:
        person = Person.model_validate(payload)
    except ValidationError as e:
        errors = e.errors()
        malformed = [err for err in errors if err["type"] != "missing"]
        if malformed:
            raise MalformedInputError(
                f"malformed request body: {_describe(malformed)}"
            ) from e
        raise FieldValidationError(f"invalid request data: {_describe(errors)}") from e

    empty = [name for name in _REQUIRED_FIELDS if not getattr(person, _attribute(name))]
    if empty:
        raise FieldValidationError(
            "invalid request data: "
            + "; ".join(f"field '{name}' is required" for name in empty)
        )
    return person


def parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise FieldValidationError(f"invalid {name}: {value!r} is not an integer") from e


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Person)
async def store_person(
    request: Request,
    service: PersonService = Depends(get_person_service),
) -> Person:
    """Create a new person."""
    person = await decode_person(request)
    return await service.store_person(person)


@router.get("/{person_id}", response_model=Person)
async def get_person(
    person_id: str,
    service: PersonService = Depends(get_person_service),
) -> Person:
    """Get a person by ID."""
    return await service.get_person_by_id(parse_int(person_id, "id"))


@router.put("", response_model=Person)
async def update_person(
    request: Request,
    service: PersonService = Depends(get_person_service),
) -> Person:
    """Replace a person's fields."""
    person = await decode_person(request)
    return await service.update_person(person)


@router.delete("/{person_id}")
async def delete_person(
    person_id: str,
    service: PersonService = Depends(get_person_service),
) -> str:
    """Delete a person."""
    await service.delete_person(parse_int(person_id, "id"))
    return DELETED_MESSAGE


@router.get("/{offset_id}/{batch_size}", response_model=list[Person])
async def list_persons(
    offset_id: str,
    batch_size: str,
    service: PersonService = Depends(get_person_service),
) -> list[Person]:
    """List persons after ``offset_id``, at most ``batch_size`` of them."""
    offset = parse_int(offset_id, "offsetId")
    size = parse_int(batch_size, "batchSize")
    if size < 1:
        raise FieldValidationError(f"invalid batchSize: {size} must be positive")
    return await service.get_person_list(offset, size)


def _attribute(wire_name: str) -> str:
    return {"firstName": "first_name", "lastName": "last_name"}.get(wire_name, wire_name)


def _describe(errors: list[dict]) -> str:
    parts = []
    for err in errors:
        field = ".".join(str(part) for part in err["loc"]) or "body"
        if err["type"] == "missing":
            parts.append(f"field '{field}' is required")
        else:
            parts.append(f"field '{field}': {err['msg']}")
    return "; ".join(parts)
