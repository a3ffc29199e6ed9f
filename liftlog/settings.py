from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./liftlog.db"
    store_backend: str = "sql"  # "sql" or "memory"

    # Remote MongoDB for contact and newsletter submissions
    documents_uri: str | None = None
    documents_database: str = "VISAWISE"

    class Config:
        env_file = ".env"
        env_prefix = "LIFTLOG_"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
