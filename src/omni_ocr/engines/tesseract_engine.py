"""Tesseract OCR engine implementation."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from omni_ocr.engines.base import NativeEngine, SupportedLanguages, clamp_confidence
from omni_ocr.errors import FatalEngineError
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrElement, OcrResult
from omni_ocr.utils.image import DecodedImage

# Tesseract traineddata names for common BCP-47 tags
BCP47_TO_TESSERACT = {
    "ar": "ara",
    "da": "dan",
    "de": "deu",
    "el": "ell",
    "en": "eng",
    "es": "spa",
    "fi": "fin",
    "fr": "fra",
    "hi": "hin",
    "hu": "hun",
    "it": "ita",
    "ja": "jpn",
    "ko": "kor",
    "nl": "nld",
    "no": "nor",
    "pl": "pol",
    "pt": "por",
    "ru": "rus",
    "sv": "swe",
    "th": "tha",
    "tr": "tur",
    "vi": "vie",
    "zh-Hans": "chi_sim",
    "zh-Hant": "chi_tra",
}
TESSERACT_TO_BCP47 = {code: tag for tag, code in BCP47_TO_TESSERACT.items()}


def to_tesseract_language(language: str) -> str:
    return BCP47_TO_TESSERACT.get(language, language)


def to_bcp47_language(code: str) -> str:
    return TESSERACT_TO_BCP47.get(code, code)


@dataclass(frozen=True)
class TesseractProfile:
    """Command-line profile passed to tesseract for one recognition."""

    config: str
    try_hard: bool


class TesseractEngine(NativeEngine):
    """Tesseract OCR engine for CPU-only machines."""

    name = "tesseract"

    def _pytesseract(self):
        import pytesseract

        if self.settings.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.settings.tesseract_cmd
        return pytesseract

    def _profile_config(self, try_hard: bool) -> str:
        # LSTM engine, automatic page segmentation
        config = "--oem 1 --psm 3"
        if try_hard and self.settings.tessdata_best_dir:
            config += f' --tessdata-dir "{self.settings.tessdata_best_dir}"'
        return config

    def is_available(self) -> bool:
        """
        Check if Tesseract is available.

        Returns:
            True if pytesseract imports and the tesseract binary runs
        """
        try:
            self._pytesseract().get_tesseract_version()
            return True
        except Exception:
            return False

    def setup(self) -> SupportedLanguages:
        """
        Verify the tesseract binary and list installed languages per profile.

        Raises:
            FatalEngineError: If tesseract is not installed
        """
        try:
            pytesseract = self._pytesseract()
            version = pytesseract.get_tesseract_version()
        except ImportError:
            logger.error("pytesseract not installed. Install with: pip install pytesseract")
            raise
        except Exception as e:
            logger.error(
                "Tesseract not found. Install tesseract-ocr: "
                "brew install tesseract (macOS) or apt-get install tesseract-ocr (Linux)"
            )
            raise FatalEngineError(f"Tesseract is not available: {e}", engine=self.name) from e

        supported = {}
        for try_hard in (False, True):
            codes = pytesseract.get_languages(config=self._profile_config(try_hard))
            supported[try_hard] = tuple(
                to_bcp47_language(code) for code in codes if code != "osd"
            )

        logger.info(f"Tesseract {version} initialized with languages: {list(supported[False])}")
        return supported

    def create_recognizer(self, try_hard: bool, language: Optional[str]) -> TesseractProfile:
        # pytesseract spawns a process per call, so a recognizer is only its profile
        return TesseractProfile(config=self._profile_config(try_hard), try_hard=try_hard)

    def process(
        self, handle: TesseractProfile, image: DecodedImage, options: RecognitionOptions
    ) -> Dict[str, List[Any]]:
        pytesseract = self._pytesseract()

        if options.language:
            lang_str = to_tesseract_language(options.language)
        else:
            lang_str = "+".join(to_tesseract_language(lang) for lang in self.settings.languages)

        return pytesseract.image_to_data(
            image.image,
            lang=lang_str,
            config=handle.config,
            output_type=pytesseract.Output.DICT,
        )

    def to_result(self, raw: Dict[str, List[Any]], image: DecodedImage) -> OcrResult:
        """Group tesseract word rows into lines by (block, paragraph, line)."""
        lines: Dict[Tuple[int, int, int], List[str]] = {}
        elements = []

        for i in range(len(raw["text"])):
            text = (raw["text"][i] or "").strip()
            conf = float(raw["conf"][i])

            # Structural rows (page/block/line) carry conf -1 and no text
            if not text or conf < 0:
                continue

            key = (raw["block_num"][i], raw["par_num"][i], raw["line_num"][i])
            lines.setdefault(key, []).append(text)

            elements.append(
                OcrElement(
                    text=text,
                    confidence=clamp_confidence(conf / 100.0),  # tesseract uses 0-100
                    x=int(raw["left"][i]),
                    y=int(raw["top"][i]),
                    width=int(raw["width"][i]),
                    height=int(raw["height"][i]),
                )
            )

        return self.build_result((" ".join(words) for words in lines.values()), elements)
