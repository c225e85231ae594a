# Routers package
from . import auth_router
from . import sms_settings_router

__all__ = [
    "auth_router",
    "sms_settings_router",
]
