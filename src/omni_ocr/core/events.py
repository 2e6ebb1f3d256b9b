"""Completion event for event-driven recognition."""

import threading
from typing import Any, Callable, List

from loguru import logger

from omni_ocr.models.result import OcrCompletedEventArgs

CompletionHandler = Callable[[Any, OcrCompletedEventArgs], None]


class CompletionEvent:
    """
    Multicast event fired when an event-driven recognition completes.

    Handlers receive ``(sender, args)``. Handlers registered with ``once()``
    detach themselves after their first call.
    """

    def __init__(self):
        self._handlers: List[CompletionHandler] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def subscribe(self, handler: CompletionHandler) -> CompletionHandler:
        with self._lock:
            self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: CompletionHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def once(self, handler: CompletionHandler) -> CompletionHandler:
        """Subscribe a handler that is removed after it fires."""

        def _one_shot(sender: Any, args: OcrCompletedEventArgs) -> None:
            self.unsubscribe(_one_shot)
            handler(sender, args)

        return self.subscribe(_one_shot)

    def fire(self, sender: Any, args: OcrCompletedEventArgs) -> None:
        with self._lock:
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(sender, args)
            except Exception as e:
                # A failing subscriber must not stop delivery to the others
                logger.exception(f"Recognition completed handler failed: {e}")
