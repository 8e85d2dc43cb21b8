from decimal import Decimal
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """
    App configuration.

    Values come from the process environment first, then from `config.env`
    or `.env` at the repository root (or the current directory).
    """

    model_config = SettingsConfigDict(
        env_file=(
            str(_PROJECT_ROOT / "config.env"),
            str(_PROJECT_ROOT / ".env"),
            "config.env",
            ".env",
        ),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_user: str = Field(default="pos", validation_alias="DB_USER")
    db_password: str = Field(default="pos", validation_alias="DB_PASSWORD")
    db_name: str = Field(default="pos", validation_alias="DB_NAME")
    # Full SQLAlchemy URL; takes precedence over the DB_* parts when set.
    database_url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")

    secret_key: str = Field(default="CHANGE_THIS_IN_PRODUCTION", validation_alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", validation_alias="ALGORITHM")
    access_token_expire_minutes: int = Field(default=480, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # CORS configuration
    cors_origins: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS"
    )

    # Pricing
    tax_rate: Decimal = Field(default=Decimal("0.0825"), validation_alias="TAX_RATE")
    service_charge_rate: Decimal = Field(default=Decimal("0.05"), validation_alias="SERVICE_CHARGE_RATE")

    # First order number handed out on an empty database
    order_number_start: int = Field(default=1000, validation_alias="ORDER_NUMBER_START")

    seed_demo_data: bool = Field(default=True, validation_alias="SEED_DEMO_DATA")
    restaurant_name: str = Field(default="Bistro", validation_alias="RESTAURANT_NAME")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        # psycopg driver (v3)
        return (
            f"postgresql+psycopg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
