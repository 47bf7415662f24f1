# companion_app/core/config.py
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    GEMINI_API_KEY: Optional[str] = None

    DATABASE_ECHO_SQL: bool = False
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30

    SECRET_KEY: str = "your_super_secret_key_change_me_in_production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    LOG_LEVEL: str = "INFO"

    # Companion form rules, shared by the client form and the API handlers
    COMPANION_INSTRUCTIONS_MIN_LENGTH: int = 200
    COMPANION_SEED_MIN_LENGTH: int = 200

    DEFAULT_CATEGORIES: List[str] = [
        "Cartoons",
        "Animals",
        "Princesses",
        "Superheroes",
        "Games",
        "Movies & TV",
    ]

    # Chat
    CHAT_MODEL_NAME: str = "gemini-1.5-flash"
    CHAT_TEMPERATURE: float = 0.7
    CHAT_HISTORY_LIMIT: int = 20 # turns sent to the model as history
    CHAT_MEMORY_MAX_LENGTH: int = 100 # turns kept in redis per companion/user

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
