"""FastAPI dependency injection for database sessions and services."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from golf_configurator.config import ConfiguratorConfig, load_configurator_config
from golf_configurator.database.engine import get_session_factory
from golf_configurator.services.session_service import SessionService


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session.

    Yields:
        Database session that is automatically closed after use.
    """
    session_factory = get_session_factory()
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_configurator_config() -> ConfiguratorConfig:
    """Dependency that provides the configurator configuration.

    Returns:
        Loaded ConfiguratorConfig from config file.
    """
    return load_configurator_config()


def get_session_service(
    session: Annotated[Session, Depends(get_db)],
    config: Annotated[ConfiguratorConfig, Depends(get_configurator_config)],
) -> SessionService:
    """Dependency that provides a SessionService instance.

    Args:
        session: Database session from get_db dependency.
        config: Configuration from get_configurator_config dependency.

    Returns:
        SessionService instance.
    """
    return SessionService(session, config)


# Type aliases for cleaner dependency injection
DbSession = Annotated[Session, Depends(get_db)]
ConfigDep = Annotated[ConfiguratorConfig, Depends(get_configurator_config)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
