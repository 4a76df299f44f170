"""Application configuration and settings using Pydantic Settings."""


from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = "Vault Secrets Wizard"
    version: str = "1.0.0"
    environment: str = Field(default="development", description="Environment: development, staging, production, test")
    debug: bool = Field(default=True, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server Settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    reload: bool = Field(default=True, description="Auto-reload on changes")

    allowed_hosts: list[str] = Field(default=["*"], description="Hosts accepted in production")

    # CORS Settings
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True, description="Allow CORS credentials")
    cors_allow_methods: list[str] = Field(default=["*"], description="Allowed CORS methods")
    cors_allow_headers: list[str] = Field(default=["*"], description="Allowed CORS headers")

    # Vault Client Settings
    vault_timeout_seconds: float = Field(default=30.0, description="Total timeout for a single Vault request")
    vault_verify_tls: bool = Field(default=True, description="Verify Vault TLS certificates")

    # Upload Settings
    max_csv_bytes: int = Field(default=1_048_576, description="Maximum accepted CSV upload size (bytes)")

    # Session Settings
    session_ttl_minutes: int = Field(default=60, description="Idle wizard session lifetime (minutes)")
    max_sessions: int = Field(default=1000, description="Maximum concurrent wizard sessions")

    # Monitoring
    structured_logging: bool = Field(default=True, description="Enable structured logging")

    @validator("environment")
    def validate_environment(cls, v: str) -> str:
        """Validate environment setting."""
        allowed = ["development", "staging", "production", "test"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level setting."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @validator("vault_timeout_seconds")
    def validate_vault_timeout(cls, v: float) -> float:
        """Validate Vault request timeout."""
        if v <= 0:
            raise ValueError("Vault timeout must be greater than 0")
        return v

    @validator("max_csv_bytes", "session_ttl_minutes", "max_sessions")
    def validate_positive(cls, v: int) -> int:
        """Validate limits are positive."""
        if v <= 0:
            raise ValueError("Value must be greater than 0")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    def get_cors_config(self) -> dict:
        """Get CORS configuration dictionary."""
        return {
            "allow_origins": self.cors_origins,
            "allow_credentials": self.cors_allow_credentials,
            "allow_methods": self.cors_allow_methods,
            "allow_headers": self.cors_allow_headers,
        }

    def get_vault_client_config(self) -> dict:
        """Get Vault HTTP client configuration dictionary."""
        return {
            "timeout_seconds": self.vault_timeout_seconds,
            "verify_tls": self.vault_verify_tls,
        }


# Global settings instance
settings = Settings()
