import json

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    BACKEND_CORS_ORIGINS: str = '["http://localhost:5173","http://localhost:5174"]'

    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Campus Helpdesk API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Rate limiting (slowapi, in-memory storage per process)
    RATE_LIMIT_ENABLED: bool = True
    TICKET_CREATE_RATE_LIMIT: str = "10/minute"
    LOGIN_RATE_LIMIT: str = "5/minute"

    TICKET_NUMBER_PREFIX: str = "TKT"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
                return parsed
            except json.JSONDecodeError:
                return ["http://localhost:5173", "http://localhost:5174"]
        return self.BACKEND_CORS_ORIGINS


settings = Settings()
