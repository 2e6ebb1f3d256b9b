"""Recognizer adapter: options, native invocation with retry, result mapping."""

import asyncio
import time
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from omni_ocr.core.cancellation import CancellationToken, raise_if_cancelled, wait_or_cancel
from omni_ocr.core.events import CompletionEvent
from omni_ocr.core.executor import get_shared_executor
from omni_ocr.engines.base import AttemptOutcome, AttemptStatus, NativeEngine
from omni_ocr.errors import (
    EngineBusyError,
    FatalEngineError,
    InvalidStateError,
    OcrError,
    UnsupportedLanguageError,
)
from omni_ocr.models.config import OcrSettings
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrCompletedEventArgs, OcrResult
from omni_ocr.monitoring.metrics import MetricsCollector
from omni_ocr.patterns import apply_patterns
from omni_ocr.utils.image import DecodedImage

CompletionCallback = Callable[[OcrCompletedEventArgs], None]


class RecognizerAdapter:
    """
    Drives one native engine through a recognition call.

    Per call: decode the image, validate the requested language, run the
    native recognizer with bounded retries while its model is still
    downloading, map the native result and run pattern extraction and the
    custom callback over the recognized text.
    """

    def __init__(
        self,
        engine: NativeEngine,
        settings: Optional[OcrSettings] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the adapter.

        Args:
            engine: Native engine this adapter owns
            settings: OCR settings; the engine's settings when omitted
            metrics: Metrics collector; a private one when omitted
        """
        self.engine = engine
        self.settings = settings or engine.settings
        self.metrics = metrics or MetricsCollector()
        self.recognition_completed = CompletionEvent()

        self._init_lock = asyncio.Lock()
        self._initialized = False
        self._supported: Dict[bool, Tuple[str, ...]] = {False: (), True: ()}

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def supported_languages(self) -> Tuple[str, ...]:
        """Languages supported by the fast profile."""
        return self._supported[False]

    def supported_languages_for(self, try_hard: bool) -> Tuple[str, ...]:
        return self._supported[try_hard]

    async def _run_blocking(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(get_shared_executor(), func, *args)

    async def initialize(self, cancellation: Optional[CancellationToken] = None) -> None:
        """
        Run native setup once.

        Concurrent and repeated calls wait for the first setup and then return.
        """
        raise_if_cancelled(cancellation)

        async with self._init_lock:
            if self._initialized:
                return

            raise_if_cancelled(cancellation)
            supported = await self._run_blocking(self.engine.setup)
            fast = tuple(supported.get(False, ()))
            self._supported = {False: fast, True: tuple(supported.get(True, fast))}
            self._initialized = True

        logger.info(
            f"{self.engine.name} recognizer initialized "
            f"({len(self._supported[False])} fast / {len(self._supported[True])} accurate languages)"
        )

    async def recognize(
        self,
        image_bytes: bytes,
        options: Optional[RecognitionOptions] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> OcrResult:
        """
        Recognize text in an encoded image.

        Args:
            image_bytes: Encoded image (PNG, JPEG, ...)
            options: Recognition options; defaults to the fast profile
            cancellation: Optional cancellation token

        Returns:
            Populated OcrResult

        Raises:
            InvalidStateError: If initialize() has not completed
            InvalidImageError: If the image cannot be decoded
            UnsupportedLanguageError: If the language is not supported by the profile
            EngineBusyError: If the model is still unavailable after every attempt
            FatalEngineError: If the native engine fails
            asyncio.CancelledError: If the token is cancelled
        """
        options = options or RecognitionOptions()
        raise_if_cancelled(cancellation)

        if not self._initialized:
            raise InvalidStateError("initialize() must be called before recognize().")

        started = time.perf_counter()
        try:
            result = await self._recognize(image_bytes, options, cancellation)
        except asyncio.CancelledError:
            self.metrics.record_cancelled()
            raise
        except OcrError:
            self.metrics.record_recognition(False, 0, time.perf_counter() - started)
            raise

        self.metrics.record_recognition(True, result.attempts, time.perf_counter() - started)
        return result

    async def _recognize(
        self,
        image_bytes: bytes,
        options: RecognitionOptions,
        cancellation: Optional[CancellationToken],
    ) -> OcrResult:
        image = await self._run_blocking(self.engine.decode, image_bytes)

        if options.language:
            self._validate_language(options.language, options.try_hard)

        raw, attempts = await self._recognize_with_retry(image, options, cancellation)

        result = self.engine.to_result(raw, image)
        result.success = True
        result.engine = self.engine.name
        result.attempts = attempts

        result.matched_values = apply_patterns(result.all_text, options.pattern_configs)
        if options.custom_callback is not None:
            options.custom_callback(result.all_text)

        logger.info(
            f"{self.engine.name} recognized {len(result.lines)} line(s), "
            f"{len(result.matched_values)} pattern match(es) in {attempts} attempt(s)"
        )
        return result

    def _validate_language(self, language: str, try_hard: bool) -> None:
        supported = self.supported_languages_for(try_hard)
        if language not in supported:
            raise UnsupportedLanguageError(language, supported)

    async def _attempt(
        self,
        image: DecodedImage,
        options: RecognitionOptions,
        cancellation: Optional[CancellationToken],
    ) -> AttemptOutcome:
        raise_if_cancelled(cancellation)
        try:
            session = await self._run_blocking(
                self.engine.acquire, options.try_hard, options.language
            )
        except EngineBusyError as e:
            return AttemptOutcome.busy(e)

        try:
            raise_if_cancelled(cancellation)
            return await self._run_blocking(self.engine.attempt, session, image, options)
        finally:
            session.release()

    def _unwrap(self, outcome: AttemptOutcome) -> Any:
        """Return the raw result of an OK outcome, raise for BUSY and FATAL."""
        if outcome.status is AttemptStatus.OK:
            return outcome.raw
        if outcome.status is AttemptStatus.BUSY:
            raise outcome.error
        if isinstance(outcome.error, FatalEngineError):
            raise outcome.error
        raise FatalEngineError(
            f"{self.engine.name} recognition failed: {outcome.error}",
            engine=self.engine.name,
        ) from outcome.error

    def _before_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            f"OCR model is not ready. Attempt {retry_state.attempt_number}/"
            f"{self.settings.max_attempts}: {retry_state.outcome.exception()}"
        )
        self.metrics.record_retry()

    async def _recognize_with_retry(
        self,
        image: DecodedImage,
        options: RecognitionOptions,
        cancellation: Optional[CancellationToken],
    ) -> Tuple[Any, int]:
        """
        Run native attempts until one succeeds.

        Only EngineBusyError is retried. The backoff between attempts observes
        the cancellation token, and the last busy error is re-raised once
        every attempt is used.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_attempts),
            wait=wait_fixed(self.settings.retry_delay_seconds),
            retry=retry_if_exception_type(EngineBusyError),
            sleep=lambda seconds: wait_or_cancel(seconds, cancellation),
            before_sleep=self._before_retry,
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                outcome = await self._attempt(image, options, cancellation)
                raw = self._unwrap(outcome)
        return raw, attempt.retry_state.attempt_number

    async def start_recognize(
        self,
        image_bytes: bytes,
        options: Optional[RecognitionOptions] = None,
        cancellation: Optional[CancellationToken] = None,
        callback: Optional[CompletionCallback] = None,
    ) -> None:
        """
        Recognize text and deliver the outcome through recognition_completed.

        Recognition failures never raise; they are delivered as unsuccessful
        event args. Cancellation still raises asyncio.CancelledError.

        Args:
            image_bytes: Encoded image
            options: Recognition options
            cancellation: Optional cancellation token
            callback: Optional one-shot callback receiving the same event args
        """
        try:
            result = await self.recognize(image_bytes, options, cancellation)
            args = OcrCompletedEventArgs(result)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Event-driven recognition failed: {e}")
            args = OcrCompletedEventArgs(None, str(e) or type(e).__name__)

        self.recognition_completed.fire(self, args)
        if callback is not None:
            try:
                callback(args)
            except Exception as e:
                logger.exception(f"Recognition completed callback failed: {e}")

    def close(self) -> None:
        """Release the engine's shared recognizer."""
        self.engine.close()
