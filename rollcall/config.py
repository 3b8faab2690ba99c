# rollcall/config.py
from pydantic_settings import BaseSettings
from typing import List, Optional
from pydantic import Field

class Settings(BaseSettings):
    DATABASE_URL: str = Field("sqlite+aiosqlite:///./rollcall.db")
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)
    DB_TIMEOUT_SECONDS: float = Field(30.0)
    AUTO_CREATE_TABLES: bool = Field(True)

    # IANA zone that decides where "today" starts and ends
    TIMEZONE: str = Field("UTC")

    # Comma-separated origins. "*" → allow any origin.
    CORS_ORIGINS: str = Field("*")

    LOG_LEVEL: str = Field("INFO")

    # Observer side (rollcall-watch)
    WS_RECONNECT_BASE_DELAY: float = Field(1.0)
    WS_MAX_RECONNECT_ATTEMPTS: int = Field(5)
    WS_SEND_TIMEOUT_SECONDS: float = Field(5.0)
    REFRESH_INTERVAL_SECONDS: float = Field(30.0)

    HOST: str = Field("0.0.0.0")
    PORT: int = Field(3001)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        db_url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL
        # Ensure asyncpg is used
        if db_url.startswith("postgresql://"):
            db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return db_url

    @property
    def allowed_origins(self) -> List[str]:
        if not self.CORS_ORIGINS or self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

settings = Settings()
