import os

from pydantic_settings import BaseSettings

# Vercel serverless: only /tmp is writable
if os.environ.get("VERCEL"):
    _db_path = "/tmp/countrieslib.db"
else:
    _db_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "countrieslib.db")


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Store (SQLite) backing the cached country payload
    DATABASE_URL: str = f"sqlite+aiosqlite:///{_db_path}"

    # Country reference API
    COUNTRY_URL: str = "http://localhost:8080/api/countries"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Cached model
    CACHE_KEY: str = "countrieslib"
    COUNTRY_INTERVAL_SECONDS: int = 3600  # API poll
    STORE_INTERVAL_SECONDS: int = 60  # store poll
    VERBOSE: bool = False

    # Presentation
    DEFAULT_PIN_CODE: str = "GB"

    # Outbound logging
    OUTBOUND_BODY_MAX_LENGTH: int = 400


settings = Settings()
