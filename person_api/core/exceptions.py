"""Error taxonomy shared by the repository, service and transport layers."""

from __future__ import annotations

from typing import Self


class PersonError(Exception):
    """Base class for every failure reported by the person API."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def with_context(self, context: str) -> Self:
        """Return an error of the same kind with ``context`` prepended.

        The service layer uses this to say which operation was attempted
        without reclassifying the underlying failure.
        """
        return type(self)(f"{context}: {self.message}")


class FieldValidationError(PersonError):
    """A required field or parameter is missing, empty or out of range."""


class MalformedInputError(PersonError):
    """The request body could not be decoded into a Person."""


class ConflictError(PersonError):
    """Another person already holds the email address."""


class NotFoundError(PersonError):
    """No person exists with the requested id."""


class OperationTimeoutError(PersonError, TimeoutError):
    """The repository did not answer within the configured deadline."""


class RepositoryError(PersonError):
    """Any other storage failure."""


class ConfigurationError(Exception):
    """Startup configuration is missing or invalid."""
