"""Process-wide default OCR service."""

import threading
from typing import Optional

from loguru import logger

from omni_ocr.core.executor import shutdown_shared_executor
from omni_ocr.core.service import OcrService

_default: Optional[OcrService] = None
_lock = threading.Lock()


def get_default() -> OcrService:
    """
    Get the default OCR service (singleton).

    The service is built on first access from the environment settings
    and lives for the rest of the process unless replaced.
    """
    global _default

    if _default is None:
        with _lock:
            if _default is None:
                _default = OcrService.create()
                logger.info(f"Default OCR service created ({_default.adapter.engine.name})")
    return _default


def set_default(service: Optional[OcrService]) -> None:
    """Replace the default service. Passing None restores lazy construction."""
    global _default

    with _lock:
        _default = service


def reset_default() -> None:
    """Dispose the default service and its shared executor."""
    global _default

    with _lock:
        service, _default = _default, None

    if service is not None:
        service.dispose()
    shutdown_shared_executor()
