# tally_dashboard/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./tally_dashboard.db"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]
    ALLOWED_HOSTS: List[str] = ["*"]

    # Tally (ERP) listener, read once at startup
    TALLY_HOST: str = "http://localhost:9000"
    TALLY_COMPANY_NAME: str = "DevCompany"
    TALLY_SALES_ACCOUNT: str = "Sales"
    TALLY_TIMEOUT: float = 30
    TALLY_PROBE_TIMEOUT: float = 5
    TALLY_MAX_ATTEMPTS: int = 1
    TALLY_RETRY_BACKOFF: float = 0.5

    LOG_LEVEL: str = "INFO"
    SQL_ECHO: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding='utf-8', extra='ignore')

    def tally_config(self) -> dict:
        """Subset of settings yang dibutuhkan TallyService"""
        return {
            'tally_host': self.TALLY_HOST,
            'tally_company_name': self.TALLY_COMPANY_NAME,
            'tally_sales_account': self.TALLY_SALES_ACCOUNT,
            'tally_timeout': self.TALLY_TIMEOUT,
            'tally_probe_timeout': self.TALLY_PROBE_TIMEOUT,
            'tally_max_attempts': self.TALLY_MAX_ATTEMPTS,
            'tally_retry_backoff': self.TALLY_RETRY_BACKOFF,
            'secret_key': self.SECRET_KEY,
            'algorithm': self.ALGORITHM,
            'access_token_expire_minutes': self.ACCESS_TOKEN_EXPIRE_MINUTES,
        }

settings = Settings()
