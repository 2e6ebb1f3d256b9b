"""Logging and metrics."""

from omni_ocr.monitoring.logger import InterceptHandler, setup_logging
from omni_ocr.monitoring.metrics import MetricsCollector, RecognitionMetrics

__all__ = [
    "setup_logging",
    "InterceptHandler",
    "MetricsCollector",
    "RecognitionMetrics",
]
