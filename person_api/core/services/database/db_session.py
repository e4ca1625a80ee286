"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlmodel import Session, SQLModel, create_engine

from person_api.runtime.config.config_data import ConfigData


class DbSessionService:
    def __init__(self, config: ConfigData):
        """Initialize the shared database engine and session factory."""

        db_config = config.database
        connection_string = db_config.connection_string

        logger.info("Configuring database engine for environment: {}", config.app.environment)
        engine_kwargs = {
            "pool_pre_ping": True,  # Validate connections before use
            "echo": False,
            "connect_args": self._get_connect_args(config),
        }

        if connection_string in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory database
            engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                }
            )

        self._engine = create_engine(connection_string, **engine_kwargs)
        logger.info(
            "Database engine initialized",
            pool_size=db_config.pool_size,
            sqlite=db_config.is_sqlite,
        )

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args = {}

        if config.database.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,  # Sessions are used from worker threads
                    "timeout": 20,  # Lock timeout
                }
            )

            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )

        elif config.database.driver.startswith("postgresql"):
            # The server cancels statements that outlive the service deadline
            statement_timeout_ms = int(config.app.request_timeout * 1000)
            connect_args.update(
                {
                    "application_name": f"{config.app.environment}_person_api",
                    "connect_timeout": 30,
                    "options": f"-c statement_timeout={statement_timeout_ms}",
                }
            )

        return connect_args

    @property
    def engine(self):
        return self._engine

    def create_all(self) -> None:
        """Create all database tables."""
        from person_api.entities.service.person import PersonTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Prevent lazy loading issues
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that is always closed, rolled back on error."""
        db = self.get_session()
        try:
            yield db
        except Exception as e:
            db.rollback()
            logger.error(
                "Database session failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
