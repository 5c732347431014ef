from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENV: str = "dev"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: float = 10
    DB_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    SCHOOL_NAME: str = "School Management System"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() in ("production", "prod")

settings = Settings()
