"""Base native engine interface."""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from omni_ocr.errors import EngineBusyError, FatalEngineError, OcrError
from omni_ocr.models.config import OcrSettings, get_settings
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrElement, OcrResult
from omni_ocr.utils.image import DecodedImage, decode_image

# Message fragments native engines use while a model or language pack is downloading
MODEL_PENDING_MARKERS = (
    "waiting for the text optional module to be downloaded",
    "waiting for the text recognition model to be downloaded",
)

# Supported languages keyed by profile: False = fast, True = accurate
SupportedLanguages = Dict[bool, Tuple[str, ...]]


class AttemptStatus(str, Enum):
    """Outcome of one native recognition attempt."""

    OK = "ok"
    BUSY = "busy"  # model not ready yet, retry later
    FATAL = "fatal"


@dataclass
class AttemptOutcome:
    """Tagged result of a native attempt."""

    status: AttemptStatus
    raw: Any = None
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, raw: Any) -> "AttemptOutcome":
        return cls(AttemptStatus.OK, raw=raw)

    @classmethod
    def busy(cls, error: EngineBusyError) -> "AttemptOutcome":
        return cls(AttemptStatus.BUSY, error=error)

    @classmethod
    def fatal(cls, error: Exception) -> "AttemptOutcome":
        return cls(AttemptStatus.FATAL, error=error)


@dataclass
class RecognizerSession:
    """
    A native recognizer handle acquired for one attempt.

    Shared sessions belong to the engine and live for the process; private
    sessions are closed by release().
    """

    handle: Any
    try_hard: bool
    shared: bool = False
    lock: Optional[threading.Lock] = None
    closer: Optional[Callable[[Any], None]] = field(default=None, repr=False)

    def release(self) -> None:
        if self.shared or self.closer is None:
            return
        closer, self.closer = self.closer, None
        closer(self.handle)


class NativeEngine(ABC):
    """Abstract base class for native OCR engines."""

    name: str = "native"
    # Separator used to join recognized lines into all_text
    text_separator: str = "\n"

    def __init__(self, settings: Optional[OcrSettings] = None):
        self.settings = settings or get_settings()
        self._shared_session: Optional[RecognizerSession] = None
        self._shared_lock = threading.Lock()

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the native engine can be used on this machine.

        Returns:
            True if the engine's binding imports and the platform matches
        """

    @abstractmethod
    def setup(self) -> SupportedLanguages:
        """
        Perform one-time native setup.

        Returns:
            Supported BCP-47 language tags per profile
        """

    @abstractmethod
    def create_recognizer(self, try_hard: bool, language: Optional[str]) -> Any:
        """Construct a native recognizer handle for the given profile."""

    @abstractmethod
    def process(self, handle: Any, image: DecodedImage, options: RecognitionOptions) -> Any:
        """Run the blocking native recognition call and return the raw native result."""

    @abstractmethod
    def to_result(self, raw: Any, image: DecodedImage) -> OcrResult:
        """Map the raw native result into an OcrResult."""

    def dispose_recognizer(self, handle: Any) -> None:
        """Release a private recognizer handle."""

    def shares_fast_recognizer_across_threads(self) -> bool:
        """Whether the shared fast recognizer tolerates concurrent use."""
        return True

    def decode(self, image_bytes: bytes) -> DecodedImage:
        return decode_image(image_bytes)

    def acquire(self, try_hard: bool, language: Optional[str] = None) -> RecognizerSession:
        """
        Acquire a recognizer session.

        The fast profile reuses the engine's shared recognizer; the accurate
        profile constructs a private recognizer that is disposed on release.

        Raises:
            EngineBusyError: If the recognizer's model is not available yet
            FatalEngineError: If the recognizer cannot be constructed
        """
        try:
            if try_hard:
                handle = self.create_recognizer(True, language)
                return RecognizerSession(
                    handle=handle, try_hard=True, closer=self.dispose_recognizer
                )

            with self._shared_lock:
                if self._shared_session is None:
                    handle = self.create_recognizer(False, None)
                    lock = None if self.shares_fast_recognizer_across_threads() else threading.Lock()
                    self._shared_session = RecognizerSession(
                        handle=handle, try_hard=False, shared=True, lock=lock
                    )
                    logger.debug(f"{self.name}: shared fast recognizer created")
                return self._shared_session
        except OcrError:
            raise
        except Exception as e:
            if self.is_model_pending(e):
                raise EngineBusyError(str(e)) from e
            logger.error(f"{self.name}: failed to create recognizer: {e}")
            raise FatalEngineError(f"Failed to create {self.name} recognizer: {e}", engine=self.name) from e

    def attempt(
        self, session: RecognizerSession, image: DecodedImage, options: RecognitionOptions
    ) -> AttemptOutcome:
        """Run one native attempt and classify its outcome."""
        try:
            if session.lock is not None:
                with session.lock:
                    raw = self.process(session.handle, image, options)
            else:
                raw = self.process(session.handle, image, options)
        except EngineBusyError as e:
            return AttemptOutcome.busy(e)
        except Exception as e:
            if self.is_model_pending(e):
                return AttemptOutcome.busy(EngineBusyError(str(e)))
            logger.error(f"{self.name} recognition failed: {e}")
            return AttemptOutcome.fatal(e)
        return AttemptOutcome.ok(raw)

    def is_model_pending(self, error: Exception) -> bool:
        """
        Check whether a native error means the model is still downloading.

        Engines that cannot raise EngineBusyError themselves fall back to
        matching the native error message.
        """
        message = str(error).lower()
        return any(marker in message for marker in MODEL_PENDING_MARKERS)

    def build_result(
        self,
        lines: Iterable[str],
        elements: Iterable[OcrElement],
        all_text: Optional[str] = None,
    ) -> OcrResult:
        """Assemble a successful OcrResult from mapped lines and elements."""
        lines = list(lines)
        if all_text is None:
            all_text = self.text_separator.join(lines)
        return OcrResult(
            success=True,
            all_text=all_text.strip(),
            lines=lines,
            elements=list(elements),
            engine=self.name,
        )

    def close(self) -> None:
        """Release the shared fast recognizer."""
        with self._shared_lock:
            session, self._shared_session = self._shared_session, None
        if session is not None:
            self.dispose_recognizer(session.handle)
            logger.debug(f"{self.name}: shared fast recognizer released")


def clamp_confidence(value: Optional[float]) -> float:
    """Clamp a native confidence value into [0, 1]."""
    if value is None:
        return 0.0
    return min(max(float(value), 0.0), 1.0)


def split_words(text: str) -> List[str]:
    return [word for word in text.split(" ") if word]
