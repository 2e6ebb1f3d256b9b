"""Windows.Media.Ocr engine implementation."""

import asyncio
import platform
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from omni_ocr.engines.base import NativeEngine, SupportedLanguages
from omni_ocr.errors import FatalEngineError
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrElement, OcrResult
from omni_ocr.utils.image import DecodedImage


@dataclass(frozen=True)
class WindowsProfile:
    """Windows OCR has a single recognition level; the profile only records the request."""

    try_hard: bool


class WindowsEngine(NativeEngine):
    """Native Windows OCR engine (Windows.Media.Ocr via winocr)."""

    name = "windows"
    text_separator = " "

    def __init__(self, settings=None):
        super().__init__(settings)
        self.is_windows = platform.system() == "Windows"

    def is_available(self) -> bool:
        if not self.is_windows:
            return False

        try:
            import winocr  # noqa: F401

            return True
        except ImportError:
            return False

    def setup(self) -> SupportedLanguages:
        """List the recognizer languages installed in the user profile."""
        if not self.is_windows:
            raise FatalEngineError("Windows OCR is only available on Windows", engine=self.name)

        try:
            from winrt.windows.media.ocr import OcrEngine as WinRtOcrEngine
        except ImportError:
            logger.error("Windows OCR bindings not available. Install with: pip install winocr")
            raise

        languages = tuple(
            language.language_tag for language in WinRtOcrEngine.available_recognizer_languages
        )
        if not languages:
            raise FatalEngineError(
                "OCR not supported on this device or no languages are installed.",
                engine=self.name,
            )

        logger.info(f"Windows OCR initialized with languages: {list(languages)}")
        return {False: languages, True: languages}

    def create_recognizer(self, try_hard: bool, language: Optional[str]) -> WindowsProfile:
        return WindowsProfile(try_hard=try_hard)

    def process(self, handle: WindowsProfile, image: DecodedImage, options: RecognitionOptions) -> Any:
        import winocr

        language = options.language or self.settings.languages[0]
        # Runs on an executor thread, so a private event loop drives the WinRT call
        return asyncio.run(winocr.recognize_pil(image.image, language))

    def to_result(self, raw: Any, image: DecodedImage) -> OcrResult:
        lines = []
        elements = []

        for line in raw.lines:
            lines.append(line.text)
            for word in line.words:
                rect = word.bounding_rect
                # Windows OCR reports no per-word confidence
                elements.append(
                    OcrElement(
                        text=word.text,
                        x=int(rect.x),
                        y=int(rect.y),
                        width=int(rect.width),
                        height=int(rect.height),
                    )
                )

        return self.build_result(lines, elements, all_text=raw.text or "")
