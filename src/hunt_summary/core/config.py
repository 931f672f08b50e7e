from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INPUT_PATH = Path(
    r"C:\Program Files (x86)\Steam\steamapps\common\Hunt Showdown\user\profiles\default\attributes.xml"
)
DEFAULT_TEMP_FILE = "TEMP.CSV"


def default_output_dir() -> Path:
    return Path.home() / "Documents" / "Hunt" / "MatchData"


class SupersedingPolicy(StrEnum):
    # Write the corrected match as a new table next to the old one.
    APPEND = "append"
    # Rewrite the previously emitted table in place.
    OVERWRITE = "overwrite"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HUNT_SUMMARY_",
        extra="ignore",
    )

    # Source / destination
    input_path: Path = DEFAULT_INPUT_PATH
    output_dir: Path = Field(default_factory=default_output_dir)
    temp_file: str = DEFAULT_TEMP_FILE

    # Numbering and emission
    zero_based: bool = False
    superseding_policy: SupersedingPolicy = SupersedingPolicy.APPEND

    # Loop behavior
    single: bool = False
    poll_interval_s: float = Field(default=2.0, gt=0.0)
    error_backoff_s: float = Field(default=5.0, ge=0.0)
    malformed_threshold: int = Field(default=3, ge=1)
    resume_from_marker: bool = True

    log_level: str = "INFO"

    # -----------------------------
    # Derived paths
    # -----------------------------

    @property
    def marker_path(self) -> Path:
        return self.output_dir / self.temp_file


settings = Settings()
