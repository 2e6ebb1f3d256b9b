"""Process-wide thread pool for blocking native OCR calls."""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from loguru import logger

from omni_ocr.models.config import get_settings

_executor: Optional[ThreadPoolExecutor] = None
_lock = threading.Lock()


def get_shared_executor() -> ThreadPoolExecutor:
    """
    Get the shared executor, creating it on first use.

    The pool is shared by every recognizer so repeated accurate-profile calls
    do not create a pool each.
    """
    global _executor

    if _executor is None:
        with _lock:
            if _executor is None:
                workers = get_settings().executor_workers
                _executor = ThreadPoolExecutor(
                    max_workers=workers, thread_name_prefix="omni-ocr"
                )
                logger.debug(f"Shared OCR executor created with {workers} workers")
    return _executor


def shutdown_shared_executor(wait: bool = True) -> None:
    """Shut down the shared executor. A later call to get_shared_executor() recreates it."""
    global _executor

    with _lock:
        executor, _executor = _executor, None

    if executor is not None:
        executor.shutdown(wait=wait)
        logger.debug("Shared OCR executor shut down")
