from typing import Protocol, Optional
from dataclasses import dataclass


@dataclass
class SmsSettings:
    provider: Optional[str] = None
    api_key: Optional[str] = None
    api_url: Optional[str] = None
    sender: Optional[str] = None
    enabled: bool = False


@dataclass
class SmsSettingsUpdate:
    # None leaves the stored value untouched
    provider: Optional[str] = None
    api_key: Optional[str] = None
    api_url: Optional[str] = None
    sender: Optional[str] = None
    enabled: Optional[bool] = None


class SmsSettingsRepository(Protocol):
    def get(self, federation_id: int) -> SmsSettings:
        ...

    def save(self, federation_id: int, update: SmsSettingsUpdate) -> None:
        ...

    def federation_exists(self, federation_id: int) -> bool:
        ...

    def federation_id_for_code(self, code: str) -> Optional[int]:
        ...
