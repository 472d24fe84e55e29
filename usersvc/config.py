from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    profile_bucket: str = Field(default="user-profiles", alias="PROFILE_BUCKET")
    users_table: str = Field(default="Users", alias="USERS_TABLE")

    tracing_enabled: bool = Field(default=True, alias="TRACING_ENABLED")
    otel_service_name: str = Field(default="OTel-Python-Service", alias="OTEL_SERVICE_NAME")
    otel_exporter_endpoint: str = Field(
        default="https://otlp.nr-data.net:4318/v1/traces",
        alias="OTEL_EXPORTER_ENDPOINT",
    )
    otel_api_key: str = Field(default="", alias="OTEL_API_KEY")
    otel_concurrency_limit: int = Field(default=10, ge=1, alias="OTEL_CONCURRENCY_LIMIT")
    otel_console_export: bool = Field(default=True, alias="OTEL_CONSOLE_EXPORT")
    otel_diagnostic_log_level: str = Field(default="DEBUG", alias="OTEL_DIAGNOSTIC_LOG_LEVEL")

    @property
    def otel_headers(self) -> dict[str, str]:
        if not self.otel_api_key:
            return {}
        return {"api-key": self.otel_api_key}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
