import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

from ..ports.activity_repo import ActivityRepository

logger = logging.getLogger(__name__)


@dataclass
class ActivityRecorder:
    """Best-effort audit trail: a failed write is logged and never reaches the caller."""
    activity_repo: ActivityRepository

    def record(self, actor_id: Optional[int], action: str, description: str, properties: Optional[Dict[str, Any]] = None) -> bool:
        try:
            self.activity_repo.append(
                log_name=action,
                description=description,
                causer_id=actor_id,
                causer_type="User",
                properties=properties,
            )
            return True
        except Exception as e:
            logger.error(f"Failed to record activity '{action}' for user {actor_id}: {e}")
            return False
