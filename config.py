from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Application Settings
    PROJECT_NAME: str = "Droplert Relay"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    # Comma-separated list of allowed origins for the HTTP API
    CORS_ORIGINS: str = "*"

    # Liveness sweep period for subscribed websockets, also the uvicorn ws ping interval
    HEARTBEAT_INTERVAL_SECONDS: float = 30.0
    # Native websocket ping/pong, sent by uvicorn; a peer that misses the timeout is closed
    WS_PING_TIMEOUT_SECONDS: float = 30.0

    # Optional keep-warm ping against the public URL of this service
    KEEPALIVE_URL: str | None = None
    KEEPALIVE_INTERVAL_SECONDS: float = 600.0

    # When set, /notify requires an `apikey` header matching the stored key for the account
    REQUIRE_API_KEY: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def _post_init(self):
        if self.HEARTBEAT_INTERVAL_SECONDS <= 0:
            raise ValueError("HEARTBEAT_INTERVAL_SECONDS must be positive")
        if self.WS_PING_TIMEOUT_SECONDS <= 0:
            raise ValueError("WS_PING_TIMEOUT_SECONDS must be positive")
        if self.KEEPALIVE_INTERVAL_SECONDS <= 0:
            raise ValueError("KEEPALIVE_INTERVAL_SECONDS must be positive")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(',') if o.strip()]

settings = Settings()
settings._post_init()
