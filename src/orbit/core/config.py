"""
Configuration management.

Loads settings from environment variables and .env file.
Prefix: ORBIT_
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ORBIT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Data storage directory")
    db_name: str = Field(default="orbit.db", description="SQLite database name")
    storage_key: str = Field(
        default="orbit_memory_v1",
        description="Key/value slot holding the serialized memory bank",
    )

    # Inference
    device: int = Field(default=-1, description="Torch device index (-1 = CPU)")
    sentiment_model: str = Field(default="", description="Override sentiment model id")
    generation_model: str = Field(default="", description="Override generation model id")
    embedding_model: str = Field(default="", description="Override feature-extraction model id")

    # Retrieval
    ask_top_k: int = Field(default=3, ge=1, description="Facts retrieved per question")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    def model_overrides(self) -> dict[str, str]:
        """Non-empty model id overrides keyed by task value."""
        overrides = {
            "sentiment-analysis": self.sentiment_model,
            "generation": self.generation_model,
            "feature-extraction": self.embedding_model,
        }
        return {task: model for task, model in overrides.items() if model}


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
