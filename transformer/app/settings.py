from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    kafka_address: str
    kafka_user: str
    kafka_password: str
    consumer_topic: str
    provider_topic: str
    consumer_group: str = "transform-consume"
    consumer_instance: str = "transform-1"

    poll_timeout_ms: int = 1000
    http_timeout_seconds: float = 20.0

    # Driver loop policy
    error_backoff_seconds: float = 10.0
    max_consecutive_failures: int = 5
    worker_enabled: bool = True

    log_level: str = "INFO"

settings = Settings()
