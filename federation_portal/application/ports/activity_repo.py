from typing import Protocol, Optional, Dict, Any


class ActivityRepository(Protocol):
    def append(self, log_name: str, description: str, causer_id: Optional[int], causer_type: Optional[str] = "User", properties: Optional[Dict[str, Any]] = None) -> None:
        ...
