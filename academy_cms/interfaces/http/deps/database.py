"""Database session dependency."""

from academy_cms.infrastructure.database import get_session as get_db_session

__all__ = ["get_db_session"]
