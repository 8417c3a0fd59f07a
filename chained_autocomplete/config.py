from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from chained_autocomplete.schemas.places import PlaceType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Google Places API ---
    GOOGLE_PLACES_API_KEY: str = Field(
        default="",
        description="API key for the Google Places web-service API.",
    )
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout for a single Places API request.",
    )

    # --- Autocomplete ---
    AUTOCOMPLETE_LANGUAGE: str = Field(
        default="pt_BR",
        description="Language tag sent with every predictions request.",
    )
    AUTOCOMPLETE_CITY_PLACE_TYPE: PlaceType = Field(
        default=PlaceType.ALL,
        description="Type filter for the city phase (the address phase always uses 'address').",
    )

    # --- Logging ---
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Minimum loguru level for the stderr sink.",
    )

    # --- Observability ---
    OTEL_SERVICE_NAME: str = Field(
        default="chained-autocomplete",
        description="Service name reported on OpenTelemetry spans.",
    )
    AGENT_OBSERVABILITY_ENABLED: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing of requests and tools.",
    )

    # --- MCP server ---
    MCP_HOST: str = Field(default="0.0.0.0", description="Bind address for the MCP server.")
    MCP_PORT: int = Field(default=8000, description="Port for the MCP server.")


settings = Settings()
