from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://127.0.0.1:8000", "http://localhost:8000", "http://localhost:3000"]
    # Upper bound on time_horizon accepted by the API (the engine itself takes any value)
    MAX_TIME_HORIZON: int = 365

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "LAUNCHPAD_"}


settings = Settings()
