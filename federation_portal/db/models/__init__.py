# Models package (re-export feature modules for stable imports)
from .federation.federation import Federation, Setting
from .users.user import User, UserType
from .users.telegram_bot_user import TelegramBotUser
from .auth.login_pin import LoginPin
from .people.profiles import Sportsman, Trainer, Representative
from .activity.activity_log import ActivityLog

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
