"""Apple Vision engine for native macOS OCR."""

import platform
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from omni_ocr.engines.base import NativeEngine, SupportedLanguages, clamp_confidence, split_words
from omni_ocr.errors import FatalEngineError
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrElement, OcrResult
from omni_ocr.utils.image import DecodedImage

# (text, confidence, (x, y, width, height)) with normalized, bottom-left-origin boxes
VisionObservation = Tuple[str, float, Sequence[float]]


@dataclass(frozen=True)
class VisionProfile:
    """Recognition level passed to VNRecognizeTextRequest."""

    recognition_level: str  # "fast" or "accurate"


def to_pixel_rect(box: Sequence[float], width: int, height: int) -> Tuple[int, int, int, int]:
    """
    Convert a normalized Vision bounding box to top-left-origin pixels.

    Args:
        box: (x, y, w, h) normalized to [0, 1] with origin at the bottom left
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        (x, y, width, height) in pixels with origin at the top left
    """
    x, y, w, h = box
    return (
        int(round(x * width)),
        int(round((1.0 - y - h) * height)),  # flip the Y axis
        int(round(w * width)),
        int(round(h * height)),
    )


class VisionEngine(NativeEngine):
    """Native macOS OCR engine using the Vision framework."""

    name = "vision"
    text_separator = " "

    def __init__(self, settings=None):
        super().__init__(settings)
        self.is_macos = platform.system() == "Darwin"

    def is_available(self) -> bool:
        """
        Check if the Vision framework is available.

        Returns:
            True if running on macOS and ocrmac can be imported
        """
        if not self.is_macos:
            return False

        try:
            from ocrmac import ocrmac  # noqa: F401

            return True
        except ImportError:
            return False

    def setup(self) -> SupportedLanguages:
        """Query supported recognition languages for both recognition levels."""
        if not self.is_macos:
            raise FatalEngineError("Vision OCR is only available on macOS", engine=self.name)

        try:
            import Vision
        except ImportError:
            logger.error("Vision bindings not available. Install with: pip install ocrmac")
            raise

        supported = {}
        for try_hard, level in (
            (False, Vision.VNRequestTextRecognitionLevelFast),
            (True, Vision.VNRequestTextRecognitionLevelAccurate),
        ):
            request = Vision.VNRecognizeTextRequest.alloc().init()
            request.setRecognitionLevel_(level)
            languages, error = request.supportedRecognitionLanguagesAndReturnError_(None)
            if error is not None:
                raise FatalEngineError(
                    f"Failed to query Vision languages: {error.localizedDescription()}",
                    engine=self.name,
                )
            supported[try_hard] = tuple(str(language) for language in languages)

        logger.info(f"Vision OCR initialized with languages: {list(supported[True])}")
        return supported

    def create_recognizer(self, try_hard: bool, language: Optional[str]) -> VisionProfile:
        return VisionProfile(recognition_level="accurate" if try_hard else "fast")

    def process(
        self, handle: VisionProfile, image: DecodedImage, options: RecognitionOptions
    ) -> List[VisionObservation]:
        from ocrmac import ocrmac

        return ocrmac.OCR(
            image.image,
            recognition_level=handle.recognition_level,
            language_preference=[options.language] if options.language else None,
        ).recognize()

    def to_result(self, raw: List[VisionObservation], image: DecodedImage) -> OcrResult:
        lines = []
        elements = []

        for text, confidence, box in raw:
            lines.append(text)
            x, y, width, height = to_pixel_rect(box, image.width, image.height)

            # Vision reports boxes per line; words share the line box
            for word in split_words(text):
                elements.append(
                    OcrElement(
                        text=word,
                        confidence=clamp_confidence(confidence),
                        x=x,
                        y=y,
                        width=width,
                        height=height,
                    )
                )

        return self.build_result(lines, elements)
