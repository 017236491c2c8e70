import logging

from .config import settings
from .database import Base, engine
from .middleware import get_current_principal, require_ownership, require_roles
from .ownership import ResourceAccessGuard
from .scheduling import ScheduleConflictChecker


def init_school_module() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler()],
    )
    Base.metadata.create_all(bind=engine)


__all__ = [
    "ResourceAccessGuard",
    "ScheduleConflictChecker",
    "get_current_principal",
    "init_school_module",
    "require_ownership",
    "require_roles",
]
