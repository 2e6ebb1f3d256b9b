"""Configuration models for omni-ocr."""

import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OcrEngine(str, Enum):
    """Native OCR engine enum."""

    AUTO = "auto"
    VISION = "vision"  # Apple Vision framework (macOS)
    WINDOWS = "windows"  # Windows.Media.Ocr
    EASYOCR = "easyocr"
    TESSERACT = "tesseract"


class OcrSettings(BaseSettings):
    """Recognition service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OMNI_OCR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Engine selection
    engine: OcrEngine = OcrEngine.AUTO
    languages: List[str] = Field(default_factory=lambda: ["en"])
    use_gpu: bool = False

    # Retry behaviour for the "model not downloaded yet" condition
    max_attempts: int = Field(default=5, ge=1)
    retry_delay_seconds: float = Field(default=5.0, ge=0.0)

    # Shared thread pool for blocking native calls
    executor_workers: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)

    # Model management
    auto_download_models: bool = True
    model_cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "omni_ocr" / "models"
    )

    # Tesseract
    tesseract_cmd: Optional[str] = None
    tessdata_best_dir: Optional[Path] = None  # used by the accurate profile

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


@lru_cache(maxsize=1)
def get_settings() -> OcrSettings:
    """Return process-wide settings loaded from the environment."""
    return OcrSettings()
