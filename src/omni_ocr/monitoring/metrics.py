"""Recognition metrics tracking."""

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List

from loguru import logger


@dataclass
class RecognitionMetrics:
    """Counters for recognition calls."""

    total_recognitions: int = 0
    successful: int = 0
    failed: int = 0
    cancelled: int = 0
    total_attempts: int = 0
    busy_retries: int = 0
    total_time_seconds: float = 0.0
    recognition_times: List[float] = field(default_factory=list)

    @property
    def avg_time_per_recognition(self) -> float:
        """Calculate average time per recognition."""
        if self.total_recognitions == 0:
            return 0.0
        return self.total_time_seconds / self.total_recognitions

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total_recognitions == 0:
            return 0.0
        return (self.successful / self.total_recognitions) * 100

    def to_dict(self) -> Dict:
        """Convert metrics to dictionary."""
        return {
            "total_recognitions": self.total_recognitions,
            "successful": self.successful,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "total_attempts": self.total_attempts,
            "busy_retries": self.busy_retries,
            "total_time_seconds": round(self.total_time_seconds, 2),
            "avg_time_per_recognition": round(self.avg_time_per_recognition, 2),
            "success_rate": round(self.success_rate, 2),
        }


class MetricsCollector:
    """Collects recognizer metrics. Safe to update from concurrent calls."""

    def __init__(self):
        self.recognition_metrics = RecognitionMetrics()
        self.start_time = time.time()
        self._lock = threading.Lock()

    def record_recognition(self, success: bool, attempts: int, processing_time: float) -> None:
        """
        Record a finished recognition call.

        Args:
            success: Whether recognition succeeded
            attempts: Native attempts made
            processing_time: Time taken in seconds
        """
        with self._lock:
            metrics = self.recognition_metrics
            metrics.total_recognitions += 1
            if success:
                metrics.successful += 1
            else:
                metrics.failed += 1
            metrics.total_attempts += attempts
            metrics.total_time_seconds += processing_time
            metrics.recognition_times.append(processing_time)

        logger.debug(
            f"Recorded recognition: success={success}, attempts={attempts}, time={processing_time:.2f}s"
        )

    def record_cancelled(self) -> None:
        with self._lock:
            self.recognition_metrics.total_recognitions += 1
            self.recognition_metrics.cancelled += 1

    def record_retry(self) -> None:
        with self._lock:
            self.recognition_metrics.busy_retries += 1

    def get_summary(self) -> Dict:
        """
        Get summary of all metrics.

        Returns:
            Dictionary with all metrics
        """
        return {
            "elapsed_time_seconds": round(time.time() - self.start_time, 2),
            "recognition": self.recognition_metrics.to_dict(),
        }

    def log_summary(self) -> None:
        """Log metrics summary."""
        summary = self.get_summary()

        logger.info("=" * 60)
        logger.info("OCR METRICS SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Total elapsed time: {summary['elapsed_time_seconds']}s")
        for key, value in summary["recognition"].items():
            logger.info(f"  {key}: {value}")
        logger.info("=" * 60)

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            self.recognition_metrics = RecognitionMetrics()
            self.start_time = time.time()
        logger.info("Metrics reset")
