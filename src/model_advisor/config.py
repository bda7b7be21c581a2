"""Configuration management for model-advisor using environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    MODEL_CATALOG_CSV_PATH: str = "model_catalog.csv"
    """Path to the model catalog CSV file.
    Resolution strategy:
    - Absolute: /app/config/model_catalog.csv (e.g., Docker mount)
    - Relative: ./config/model_catalog.csv (from current working directory)
    - Filename: model_catalog.csv (from project root)

    Example (Docker):
        docker run -e MODEL_CATALOG_CSV_PATH=/app/config/catalog.csv \\
          -v /host/config:/app/config model-advisor
    """

    # Models priced by estimate_text_cost when the caller names none
    DEFAULT_COST_MODELS: list[str] = [
        "GPT-4.1",
        "GPT-4o",
        "GPT-4.1-Mini",
        "GPT-4o-Mini",
        "GPT-3.5-Turbo",
    ]

    # Token counting
    EXACT_TOKEN_COUNT_ENABLED: bool = True
    TOKENIZER_ENCODING: str = "o200k_base"
    APPROX_CHARS_PER_TOKEN: float = 4.0

    # Selection scoring
    SCORE_TIE_EPSILON: float = 1e-6
    CONTEXT_HEADROOM_RATIO: float = 8.0
    """Headroom (max_context / requested context) up to this ratio counts as a close fit."""

    LOG_LEVEL: str = "INFO"

    # API Authentication
    API_KEY: str = ""
    """API key for protected endpoints.
    If empty and REQUIRE_AUTH=true, all requests will be rejected.
    Set via API_KEY env var."""

    REQUIRE_AUTH: bool = False
    """Whether to require authentication for protected endpoints.
    Set via REQUIRE_AUTH=true env var."""


# Global settings instance
settings = Settings()
