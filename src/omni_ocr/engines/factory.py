"""Factory for creating native OCR engines."""

import platform
from typing import Dict, List, Optional, Type

from loguru import logger

from omni_ocr.engines.base import NativeEngine
from omni_ocr.engines.easyocr_engine import EasyOcrEngine
from omni_ocr.engines.tesseract_engine import TesseractEngine
from omni_ocr.engines.vision_engine import VisionEngine
from omni_ocr.engines.windows_engine import WindowsEngine
from omni_ocr.errors import EngineUnavailableError
from omni_ocr.models.config import OcrEngine, OcrSettings, get_settings


class EngineFactory:
    """Factory for creating native OCR engines."""

    _engines: Dict[OcrEngine, Type[NativeEngine]] = {
        OcrEngine.VISION: VisionEngine,
        OcrEngine.WINDOWS: WindowsEngine,
        OcrEngine.EASYOCR: EasyOcrEngine,
        OcrEngine.TESSERACT: TesseractEngine,
    }

    @classmethod
    def platform_preference(cls, system: Optional[str] = None) -> List[OcrEngine]:
        """
        Engines to try for a platform, native engine first.

        Args:
            system: platform.system() value; detected when omitted

        Returns:
            Ordered engine preference
        """
        system = system or platform.system()
        if system == "Darwin":
            return [OcrEngine.VISION, OcrEngine.EASYOCR, OcrEngine.TESSERACT]
        if system == "Windows":
            return [OcrEngine.WINDOWS, OcrEngine.EASYOCR, OcrEngine.TESSERACT]
        return [OcrEngine.EASYOCR, OcrEngine.TESSERACT]

    @classmethod
    def create(cls, settings: Optional[OcrSettings] = None) -> NativeEngine:
        """
        Create the engine selected by settings.

        Args:
            settings: OCR settings; process-wide settings when omitted

        Returns:
            An available, not yet initialized engine

        Raises:
            EngineUnavailableError: If no engine is available
        """
        settings = settings or get_settings()

        if settings.engine != OcrEngine.AUTO:
            engine = cls._engines[settings.engine](settings)
            if engine.is_available():
                logger.info(f"Using OCR engine: {engine.name}")
                return engine
            logger.warning(f"{settings.engine.value} is not available, trying fallback")

        return cls._create_fallback(settings, exclude=settings.engine)

    @classmethod
    def _create_fallback(cls, settings: OcrSettings, exclude: OcrEngine) -> NativeEngine:
        """
        Create the first available engine for this platform.

        Raises:
            EngineUnavailableError: If no engines are available
        """
        for engine_type in cls.platform_preference():
            if engine_type == exclude:
                continue
            engine = cls._engines[engine_type](settings)
            if engine.is_available():
                logger.info(f"Using {engine.name} as OCR engine")
                return engine

        raise EngineUnavailableError(
            "No OCR engines available. Please install easyocr or tesseract."
        )
