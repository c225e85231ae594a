from typing import Callable, Optional, Dict, Any
from sqlmodel import Session

from .....models import ActivityLog
from .....application.ports.activity_repo import ActivityRepository


class SqlActivityRepository(ActivityRepository):
    """Writes through its own session so it can run after the request session is closed."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def append(self, log_name: str, description: str, causer_id: Optional[int], causer_type: Optional[str] = "User", properties: Optional[Dict[str, Any]] = None) -> None:
        with self.session_factory() as session:
            session.add(ActivityLog(
                log_name=log_name,
                description=description,
                causer_type=causer_type,
                causer_id=causer_id,
                properties=properties,
            ))
            session.commit()
