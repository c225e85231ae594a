# Re-export the canonical models so code can depend on federation_portal.models
from .db.models import (
    Federation,
    Setting,
    User,
    UserType,
    TelegramBotUser,
    LoginPin,
    Sportsman,
    Trainer,
    Representative,
    ActivityLog,
)

__all__ = [
    "Federation",
    "Setting",
    "User",
    "UserType",
    "TelegramBotUser",
    "LoginPin",
    "Sportsman",
    "Trainer",
    "Representative",
    "ActivityLog",
]
