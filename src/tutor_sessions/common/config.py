'''
Holds all the configurations
'''
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    # Application Metadata
    APP_NAME: str = "TutorSessions Backend"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "The backend API for the TutorSessions administration app."
    TEST_MODE: bool = False
    LOG_LEVEL: str = "INFO"

    # Database URL
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str = "sqlite+aiosqlite:///:memory:"
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # JWT Settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REMEMBER_ME_EXPIRE_DAYS: int = 30
    PASSWORD_RESET_EXPIRE_MINUTES: int = 30

    # Frontend
    FRONTEND_URL: str = "http://localhost:8080"
    BACKEND_CORS_ORIGINS: list[str] = []

    # Approval gate
    APPROVAL_POLL_INTERVAL_SECONDS: int = 5
    APPROVAL_CACHE_TTL_SECONDS: int = 60

    # WhatsApp (system-wide fallback credentials)
    WHATSAPP_TOKEN: str = ""
    WHATSAPP_PHONE_NUMBER_ID: str = ""
    WHATSAPP_GRAPH_URL: str = "https://graph.facebook.com/v19.0"
    REMINDER_DISPATCH_SECRET: str = ""
    # An IN_PROGRESS claim older than this is treated as abandoned and may be requeued
    REMINDER_CLAIM_TIMEOUT_MINUTES: int = 10

    # Zoom
    ZOOM_API_URL: str = "https://api.zoom.us/v2"
    ZOOM_OAUTH_URL: str = "https://zoom.us/oauth/token"
    ZOOM_DEFAULT_TIMEZONE: str = "UTC"

    # Email relay
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "TutorSessions <noreply@tutorsessions.com>"
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SUPPORT_EMAIL: str = ""

    # Object storage
    STORAGE_BUCKET: str = "ledger-images"
    RECEIPT_MAX_BYTES: int = 5 * 1024 * 1024
    RECEIPT_ALLOWED_TYPES: list[str] = ["image/jpeg", "image/png", "image/gif", "image/webp"]

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 15.0

    class Config:
        env_file = ".env" # automatically loads the .env

# Create a single, importable instance of the settings
settings = Settings()
