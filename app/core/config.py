from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Retell Cal.com Receptionist"

    # Server
    PORT: int = 3000
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_FILE: str = "logs/errors.log"

    # Cal.com
    CAL_API_BASE_URL: str = "https://api.cal.com/v1"
    CAL_API_TIMEOUT_SECONDS: float = 5.0

    # Tenant directory
    CLIENTS_CONFIG_PATH: str = "data/clients.json"
    DEFAULT_TIMEZONE: str = "America/New_York"

    # Single-clinic fallback, used when no clients file is present
    DEFAULT_TENANT_ID: str = "default"
    CAL_API_KEY: str = ""
    CAL_EVENT_CLEANING: str = ""
    CAL_EVENT_EXAM: str = ""
    CAL_EVENT_NEW_PATIENT: str = ""
    CAL_EVENT_EMERGENCY: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
