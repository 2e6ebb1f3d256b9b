"""OCR service facade."""

from typing import Optional, Tuple, Union

from loguru import logger

from omni_ocr.core.cancellation import CancellationToken
from omni_ocr.core.events import CompletionEvent
from omni_ocr.core.recognizer import CompletionCallback, RecognizerAdapter
from omni_ocr.engines.factory import EngineFactory
from omni_ocr.models.config import OcrSettings, get_settings
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrResult


class OcrService:
    """
    Unified OCR entry point over the platform's native recognizer.

    Example:
        ```python
        service = OcrService.create()
        await service.init_async()
        result = await service.recognize_async(image_bytes, try_hard=True)
        print(result.all_text)
        ```
    """

    def __init__(self, adapter: RecognizerAdapter):
        self.adapter = adapter

    @classmethod
    def create(cls, settings: Optional[OcrSettings] = None) -> "OcrService":
        """Create a service around the engine selected for this platform."""
        settings = settings or get_settings()
        engine = EngineFactory.create(settings)
        return cls(RecognizerAdapter(engine, settings))

    @property
    def recognition_completed(self) -> CompletionEvent:
        return self.adapter.recognition_completed

    @property
    def supported_languages(self) -> Tuple[str, ...]:
        return self.adapter.supported_languages

    async def init_async(self, cancellation: Optional[CancellationToken] = None) -> None:
        await self.adapter.initialize(cancellation)

    async def recognize_async(
        self,
        image_bytes: bytes,
        options: Union[bool, RecognitionOptions, None] = None,
        cancellation: Optional[CancellationToken] = None,
        *,
        try_hard: bool = False,
    ) -> OcrResult:
        """
        Recognize text in an image.

        Args:
            image_bytes: Encoded image data
            options: RecognitionOptions, or a bool selecting the accurate profile
            cancellation: Optional cancellation token
            try_hard: Accurate profile flag used when options is omitted

        Returns:
            The OCR result
        """
        if options is None or isinstance(options, bool):
            options = RecognitionOptions(try_hard=bool(options) or try_hard)
        return await self.adapter.recognize(image_bytes, options, cancellation)

    async def start_recognize_async(
        self,
        image_bytes: bytes,
        options: Optional[RecognitionOptions] = None,
        cancellation: Optional[CancellationToken] = None,
        callback: Optional[CompletionCallback] = None,
    ) -> None:
        """Recognize text and fire recognition_completed exactly once with the outcome."""
        await self.adapter.start_recognize(image_bytes, options, cancellation, callback)

    def dispose(self) -> None:
        self.adapter.close()
        logger.debug("OCR service disposed")
