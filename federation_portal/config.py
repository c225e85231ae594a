#config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

DEFAULT_SECRET_KEY = "change-me-in-prod"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    # Application Settings
    APP_NAME: str = "Federation Portal API"
    APP_VERSION: str = "1.0.0"
    ENV: str = "development"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # Database Settings
    DATABASE_URL: str = "sqlite:///./federation_portal.db"

    # Security Settings
    SECRET_KEY: str = Field(default=DEFAULT_SECRET_KEY, alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    SESSION_TTL_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "auth-token"

    # CORS Settings (comma-separated)
    ALLOWED_ORIGINS: str = "*"

    # Middleware settings
    GZIP_MIN_SIZE: int = 500

    # PIN Settings
    PIN_LENGTH: int = 6
    PIN_TTL_MINUTES: int = 5
    PIN_MAX_ATTEMPTS: int = 5
    PHONE_COUNTRY_PREFIXES: str = "996,7,998,971,1"

    # Rate Limiting
    PIN_SEND_MAX_PER_WINDOW: int = 5
    PIN_SEND_WINDOW_SEC: int = 3600
    PIN_VERIFY_MAX_PER_WINDOW: int = 20
    PIN_VERIFY_WINDOW_SEC: int = 900
    REDIS_URL: Optional[str] = None
    # Proxies whose X-Forwarded-For header is honoured (comma-separated IPs)
    TRUSTED_PROXIES: str = ""

    # Telegram Settings
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_API_URL: str = "https://api.telegram.org"

    # SMS Settings (used when a federation has no SMS settings of its own)
    SMS_PROVIDER: str = "nikita"
    SMS_API_KEY: str = ""
    SMS_API_URL: str = "https://smspro.nikita.kg/api/message"
    SMS_SENDER_ID: str = "GTF"
    SMS_TIMEOUT_SEC: int = 15

    # Twilio Settings
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""

    # Tenancy
    FEDERATION_CODES: str = "kg,kz,uz,ru,ae"
    LOCALES: str = "ru,en,kg,kz,uz,ar"
    DEFAULT_LOCALE: str = "ru"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Accept comma-separated strings for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def trusted_proxies(self) -> List[str]:
        return self._split_csv(self.TRUSTED_PROXIES)

    @property
    def phone_prefixes(self) -> List[str]:
        return self._split_csv(self.PHONE_COUNTRY_PREFIXES)

    @property
    def federation_codes(self) -> List[str]:
        return [code.lower() for code in self._split_csv(self.FEDERATION_CODES)]

    @property
    def locales(self) -> List[str]:
        return self._split_csv(self.LOCALES)

    @property
    def secret_key_configured(self) -> bool:
        return bool(self.SECRET_KEY) and self.SECRET_KEY != DEFAULT_SECRET_KEY


@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    if s.is_production and not s.secret_key_configured:
        raise RuntimeError("JWT_SECRET_KEY must be set in production")
    return s


settings: Settings = get_settings()
