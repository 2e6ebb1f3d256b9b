"""EasyOCR engine implementation."""

import threading
from concurrent.futures import Future
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from omni_ocr.core.executor import get_shared_executor
from omni_ocr.engines.base import NativeEngine, SupportedLanguages, clamp_confidence
from omni_ocr.errors import EngineBusyError, FatalEngineError
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrElement, OcrResult
from omni_ocr.utils.image import DecodedImage

MODEL_DOWNLOADING_MESSAGE = "Waiting for the text recognition model to be downloaded"


class EasyOcrEngine(NativeEngine):
    """
    EasyOCR engine for GPU-accelerated OCR.

    EasyOCR downloads its detection and recognition models on first use.
    Downloads run in the background on the shared executor; until a download
    finishes, attempts report the recoverable busy condition.
    """

    name = "easyocr"

    def __init__(self, settings=None):
        super().__init__(settings)
        self._downloads: Dict[Tuple[str, ...], Future] = {}
        self._downloads_lock = threading.Lock()

    def is_available(self) -> bool:
        """
        Check if EasyOCR is available.

        Returns:
            True if EasyOCR can be imported
        """
        try:
            import easyocr  # noqa: F401

            return True
        except ImportError:
            return False

    def setup(self) -> SupportedLanguages:
        """Start the fast-profile model download and report supported languages."""
        try:
            from easyocr.config import all_lang_list
        except ImportError:
            logger.error("EasyOCR not installed. Install with: pip install easyocr")
            raise

        fast_languages = tuple(self.settings.languages)
        if self.settings.auto_download_models:
            self._start_download(fast_languages)

        logger.info(
            f"EasyOCR initialized with languages: {list(fast_languages)}, GPU: {self.settings.use_gpu}"
        )
        return {False: fast_languages, True: tuple(all_lang_list)}

    def _new_reader(self, languages: Sequence[str], download_enabled: bool):
        import easyocr

        self.settings.model_cache_dir.mkdir(parents=True, exist_ok=True)
        return easyocr.Reader(
            lang_list=list(languages),
            gpu=self.settings.use_gpu,
            model_storage_directory=str(self.settings.model_cache_dir),
            download_enabled=download_enabled,
            verbose=False,
        )

    def _start_download(self, languages: Tuple[str, ...], keep_reader: bool = True) -> Future:
        """
        Start a model download unless one is already tracked for these languages.

        A failed download stays tracked until it has been reported, so callers
        see the failure instead of a silent restart.
        """
        with self._downloads_lock:
            future = self._downloads.get(languages)
            if future is not None:
                return future
            logger.info(f"Downloading EasyOCR models for {list(languages)}")
            future = get_shared_executor().submit(self._new_reader, languages, True)
            self._downloads[languages] = future

        if not keep_reader:
            # Only the models on disk are needed; drop the loaded reader once done
            future.add_done_callback(lambda done: self._forget_download(languages, done, failed=False))
        return future

    def _forget_download(self, languages: Tuple[str, ...], future: Future, failed: bool) -> None:
        if failed != (future.exception() is not None):
            return
        with self._downloads_lock:
            if self._downloads.get(languages) is future:
                del self._downloads[languages]

    def _raise_if_not_ready(self, languages: Tuple[str, ...], future: Future) -> None:
        if not future.done():
            raise EngineBusyError(MODEL_DOWNLOADING_MESSAGE)

        error = future.exception()
        if error is not None:
            # Reported once; the next recognition starts a fresh download
            self._forget_download(languages, future, failed=True)
            raise FatalEngineError(f"EasyOCR model download failed: {error}", engine=self.name) from error

    def create_recognizer(self, try_hard: bool, language: Optional[str]) -> Any:
        if not try_hard:
            return self._fast_reader()

        languages = (language,) if language else tuple(self.settings.languages)
        try:
            return self._new_reader(languages, download_enabled=False)
        except FileNotFoundError as e:
            # Reader raises FileNotFoundError when models are missing and downloads are disabled
            if not self.settings.auto_download_models:
                raise FatalEngineError(
                    f"EasyOCR models for {list(languages)} are not installed: {e}",
                    engine=self.name,
                ) from e
            future = self._start_download(languages, keep_reader=False)
            self._raise_if_not_ready(languages, future)
            raise EngineBusyError(MODEL_DOWNLOADING_MESSAGE) from e

    def _fast_reader(self) -> Any:
        languages = tuple(self.settings.languages)
        if not self.settings.auto_download_models:
            return self._new_reader(languages, download_enabled=False)

        future = self._start_download(languages)
        self._raise_if_not_ready(languages, future)
        return future.result()

    def dispose_recognizer(self, handle: Any) -> None:
        logger.debug("EasyOCR reader released")

    def shares_fast_recognizer_across_threads(self) -> bool:
        # easyocr.Reader keeps per-call state on the underlying torch models
        return False

    def process(self, handle: Any, image: DecodedImage, options: RecognitionOptions) -> List[Any]:
        return handle.readtext(
            image.array,
            detail=1,
            paragraph=False,
            decoder="beamsearch" if options.try_hard else "greedy",
        )

    def to_result(self, raw: List[Any], image: DecodedImage) -> OcrResult:
        lines = []
        elements = []

        for bbox, text, confidence in raw:
            # Convert bbox format: [[x1,y1], [x2,y1], [x2,y2], [x1,y2]]
            x_coords = [point[0] for point in bbox]
            y_coords = [point[1] for point in bbox]
            x, y = int(min(x_coords)), int(min(y_coords))

            lines.append(text)
            elements.append(
                OcrElement(
                    text=text,
                    confidence=clamp_confidence(confidence),
                    x=x,
                    y=y,
                    width=int(max(x_coords)) - x,
                    height=int(max(y_coords)) - y,
                )
            )

        return self.build_result(lines, elements)
