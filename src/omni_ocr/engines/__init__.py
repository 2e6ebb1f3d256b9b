"""Native OCR engines."""

from omni_ocr.engines.base import AttemptOutcome, AttemptStatus, NativeEngine, RecognizerSession
from omni_ocr.engines.easyocr_engine import EasyOcrEngine
from omni_ocr.engines.factory import EngineFactory
from omni_ocr.engines.tesseract_engine import TesseractEngine
from omni_ocr.engines.vision_engine import VisionEngine
from omni_ocr.engines.windows_engine import WindowsEngine

__all__ = [
    "NativeEngine",
    "RecognizerSession",
    "AttemptOutcome",
    "AttemptStatus",
    "EngineFactory",
    "EasyOcrEngine",
    "TesseractEngine",
    "VisionEngine",
    "WindowsEngine",
]
