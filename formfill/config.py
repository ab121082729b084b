"""Runtime settings loaded from the environment (prefix ``FORMFILL_``) or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from formfill.coords.calibration import DEFAULT_CALIBRATION, CalibrationConfig, CalibrationOffset


class Settings(BaseSettings):
    preview_x_offset: float = DEFAULT_CALIBRATION.preview.dx
    preview_y_offset: float = DEFAULT_CALIBRATION.preview.dy
    pdf_x_offset: float = DEFAULT_CALIBRATION.pdf.dx
    pdf_y_offset: float = DEFAULT_CALIBRATION.pdf.dy

    image_fetch_timeout: float = Field(default=10.0, gt=0)
    image_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    field_store_dir: Path = Path("data/fields")

    log_level: str = "INFO"
    json_logs: bool = False

    model_config = SettingsConfigDict(env_prefix="FORMFILL_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    def calibration(self) -> CalibrationConfig:
        return CalibrationConfig(
            preview=CalibrationOffset(dx=self.preview_x_offset, dy=self.preview_y_offset),
            pdf=CalibrationOffset(dx=self.pdf_x_offset, dy=self.pdf_y_offset),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
