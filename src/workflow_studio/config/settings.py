"""Configuration and settings management using pydantic-settings."""
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core service settings
    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")

    # Simulated execution
    success_probability: float = Field(
        default=0.9,
        description="Probability that a simulated node succeeds",
    )
    node_min_duration_ms: float = Field(
        default=1000,
        description="Lower bound of a simulated node duration",
    )
    node_max_duration_ms: float = Field(
        default=3000,
        description="Upper bound of a simulated node duration",
    )
    failure_penalty: float = Field(
        default=10,
        description="Success-rate points lost per failed node",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for the random outcome source",
    )
    time_scale: float = Field(
        default=1.0,
        description="Multiplier applied to simulated waits (0 runs instantly)",
    )

    # Canvas
    min_zoom: float = Field(default=0.5, description="Smallest zoom factor")
    max_zoom: float = Field(default=2.0, description="Largest zoom factor")
    zoom_step: float = Field(default=0.1, description="Zoom in/out increment")

    # Catalog collaborator
    tool_catalog_path: str | None = Field(
        default=None,
        description="JSON file with the tool catalog",
    )

    @field_validator("success_probability")
    @classmethod
    def validate_probability(cls, v: float) -> float:
        """Validate that the probability is within [0, 1]."""
        if not 0 <= v <= 1:
            raise ValueError("success_probability must be between 0 and 1")
        return v

    @field_validator("node_min_duration_ms", "failure_penalty", "time_scale")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("value must be non-negative")
        return v

    @field_validator("min_zoom", "zoom_step")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @model_validator(mode="after")
    def validate_ranges(self) -> "Settings":
        """Validate that every lower bound sits below its upper bound."""
        if self.node_max_duration_ms < self.node_min_duration_ms:
            raise ValueError("node_max_duration_ms must be >= node_min_duration_ms")
        if self.max_zoom < self.min_zoom:
            raise ValueError("max_zoom must be >= min_zoom")
        return self


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
