from typing import Protocol, Optional
from dataclasses import dataclass
from datetime import datetime


@dataclass
class PinRecord:
    id: int
    phone: str
    user_id: Optional[int]
    code: str
    attempt_count: int
    expires_at: datetime
    used_at: Optional[datetime]
    created_at: datetime


class PinRepository(Protocol):
    def create(self, phone: str, user_id: Optional[int], code: str, expires_at: datetime, created_at: datetime) -> PinRecord:
        ...

    def delete_for_phone(self, phone: str) -> int:
        ...

    def latest_for_phone(self, phone: str) -> Optional[PinRecord]:
        ...

    def claim_attempt(self, pin_id: int, max_attempts: int) -> bool:
        """Count one attempt if fewer than max_attempts were made. Returns False at the cap."""
        ...

    def consume(self, pin_id: int, at: datetime) -> bool:
        """Mark the PIN used if it is still unused. Returns False when another request won."""
        ...

    def delete(self, pin_id: int) -> None:
        ...

    def purge_expired(self, before: datetime) -> int:
        ...
