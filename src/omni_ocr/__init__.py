"""omni-ocr - One OCR interface over the platform's native text recognizers."""

__version__ = "0.1.0"

from omni_ocr.core.cancellation import CancellationToken
from omni_ocr.core.recognizer import RecognizerAdapter
from omni_ocr.core.service import OcrService
from omni_ocr.engines.base import NativeEngine
from omni_ocr.engines.factory import EngineFactory
from omni_ocr.errors import (
    ConfigError,
    EngineBusyError,
    EngineUnavailableError,
    FatalEngineError,
    InvalidImageError,
    InvalidStateError,
    OcrError,
    UnsupportedLanguageError,
)
from omni_ocr.models.config import OcrEngine, OcrSettings, get_settings
from omni_ocr.models.options import PatternConfig, RecognitionOptions
from omni_ocr.models.result import OcrCompletedEventArgs, OcrElement, OcrResult
from omni_ocr.monitoring.logger import setup_logging
from omni_ocr.monitoring.metrics import MetricsCollector
from omni_ocr.patterns import extract_pattern, extract_patterns
from omni_ocr.plugin import get_default, set_default

__all__ = [
    # Core
    "OcrService",
    "RecognizerAdapter",
    "CancellationToken",
    "get_default",
    "set_default",
    # Engines
    "NativeEngine",
    "EngineFactory",
    # Config
    "OcrSettings",
    "OcrEngine",
    "get_settings",
    # Models
    "RecognitionOptions",
    "PatternConfig",
    "OcrResult",
    "OcrElement",
    "OcrCompletedEventArgs",
    # Patterns
    "extract_patterns",
    "extract_pattern",
    # Errors
    "OcrError",
    "ConfigError",
    "InvalidStateError",
    "InvalidImageError",
    "UnsupportedLanguageError",
    "EngineBusyError",
    "FatalEngineError",
    "EngineUnavailableError",
    # Monitoring
    "setup_logging",
    "MetricsCollector",
]
