"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from person_api.api.http.app_data import ApplicationDependencies
from person_api.core.services import DbSessionService, PersonService
from person_api.entities.service.person import PersonRepository


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.database_service


def get_db_session(request: Request) -> Iterator[Session]:
    """Get a database session that lives for the duration of the request."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    with app_deps.database_service.session_scope() as session:
        yield session


def get_person_service(
    request: Request,
    session: Session = Depends(get_db_session),
) -> PersonService:
    """Get a person service bound to the request's database session."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return PersonService(
        PersonRepository(session),
        timeout=app_deps.config.app.request_timeout,
    )
