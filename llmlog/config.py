"""Configuration management for llmlog."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="LLMLOG_", env_file=".env", case_sensitive=False)

    # Data storage
    data_root: Path = Field(Path("./data"))
    backend: Literal["file", "memory"] = Field("file")
    records_key: str = Field("llm_logs_data")
    models_key: str = Field("llm_logs_models")

    # Export
    export_dir: Optional[Path] = Field(None)
    export_indent: int = Field(2, ge=0)

    log_level: str = Field("INFO")

    @property
    def resolved_export_dir(self) -> Path:
        """Directory used for backups when no explicit path is given."""

        return Path(self.export_dir or self.data_root)


# Global settings instance
settings = Settings()
