from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENV: str = Field(default="dev", validation_alias=AliasChoices("ENV", "env"))
    APP_NAME: str = Field(default="ppdb_bot", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    PORT: int = Field(default=3000, validation_alias=AliasChoices("PORT", "port"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/ppdb",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    DATABASE_SSL: bool = Field(default=False, validation_alias=AliasChoices("DATABASE_SSL", "database_ssl"))
    REDIS_URL: str = Field(
        default="redis://redis:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "redis_url"),
    )
    # "memory" keeps sessions in-process, "redis" shares them across workers
    SESSION_BACKEND: str = Field(default="memory", validation_alias=AliasChoices("SESSION_BACKEND", "session_backend"))

    # WhatsApp Meta
    WHATSAPP_VERIFY_TOKEN: str = Field(default="", validation_alias=AliasChoices("WHATSAPP_VERIFY_TOKEN", "whatsapp_verify_token"))
    WHATSAPP_ACCESS_TOKEN: str = Field(default="", validation_alias=AliasChoices("WHATSAPP_ACCESS_TOKEN", "whatsapp_access_token"))
    WHATSAPP_PHONE_NUMBER_ID: str = Field(default="", validation_alias=AliasChoices("WHATSAPP_PHONE_NUMBER_ID", "whatsapp_phone_number_id"))
    DEFAULT_COUNTRY_CODE: str = Field(default="62", validation_alias=AliasChoices("DEFAULT_COUNTRY_CODE", "default_country_code"))

    # Supabase storage (uploaded documents)
    SUPABASE_URL: str = Field(default="", validation_alias=AliasChoices("SUPABASE_URL", "supabase_url"))
    SUPABASE_SERVICE_KEY: str = Field(default="", validation_alias=AliasChoices("SUPABASE_SERVICE_KEY", "supabase_service_key"))
    STORAGE_BUCKET: str = Field(default="ppdb-files", validation_alias=AliasChoices("STORAGE_BUCKET", "storage_bucket"))

    # Operator dashboard
    DASHBOARD_ORIGIN: str = Field(
        default="https://dashboard-ppdb-production.up.railway.app",
        validation_alias=AliasChoices("DASHBOARD_ORIGIN", "dashboard_origin"),
    )

    # Intake flow
    TERMINAL_FIELD_KEY: str = Field(default="foto", validation_alias=AliasChoices("TERMINAL_FIELD_KEY", "terminal_field_key"))


settings = Settings()
