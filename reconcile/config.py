"""Configuration settings for the row reconciler."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys (comma-separated for several keys)
    companies_house_api_key: str = ""
    opencorporates_api_token: str = ""

    # HTTP Client Settings
    user_agent: str = "RowReconciler/0.1 (+contact@example.com)"
    connect_timeout: float = 10.0
    read_timeout: float = 30.0

    # In-flight requests allowed per credential
    request_fanout_factor: int = 2

    # Entries processed at once by a batch run
    entry_concurrency: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
