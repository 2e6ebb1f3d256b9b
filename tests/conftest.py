"""Shared fixtures: an in-memory native engine and encoded test images."""

import io
import time
from typing import Any, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from omni_ocr.engines.base import NativeEngine
from omni_ocr.models.config import OcrSettings
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.models.result import OcrElement, OcrResult
from omni_ocr.utils.image import DecodedImage

DOWNLOADING = "Waiting for the text recognition model to be downloaded"


class FakeEngine(NativeEngine):
    """
    Scripted engine for tests.

    Each native call consumes the next scripted outcome (the last one
    repeats). An outcome is a list of recognized lines, an exception to
    raise, or a callable returning either.
    """

    name = "fake"
    text_separator = " "

    def __init__(
        self,
        outcomes: Optional[List[Any]] = None,
        settings: Optional[OcrSettings] = None,
        supported: Optional[Dict[bool, Tuple[str, ...]]] = None,
    ):
        super().__init__(settings or OcrSettings(retry_delay_seconds=0.0))
        self.outcomes = list(outcomes or [["INVOICE 42"]])
        self.supported = supported or {False: ("en", "es"), True: ("en", "es", "fr")}
        self.setup_calls = 0
        self.process_calls = 0
        self.decode_calls = 0
        self.created: List[Tuple[bool, object]] = []
        self.disposed: List[object] = []

    def is_available(self) -> bool:
        return True

    def setup(self):
        self.setup_calls += 1
        time.sleep(0.01)
        return self.supported

    def decode(self, image_bytes: bytes) -> DecodedImage:
        self.decode_calls += 1
        return super().decode(image_bytes)

    def create_recognizer(self, try_hard: bool, language: Optional[str]) -> object:
        handle = object()
        self.created.append((try_hard, handle))
        return handle

    def dispose_recognizer(self, handle: object) -> None:
        self.disposed.append(handle)

    def process(self, handle: Any, image: DecodedImage, options: RecognitionOptions) -> Any:
        self.process_calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if callable(outcome):
            outcome = outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def to_result(self, raw: List[str], image: DecodedImage) -> OcrResult:
        elements = [
            OcrElement(text=word, confidence=0.9) for line in raw for word in line.split()
        ]
        return self.build_result(raw, elements)


def encode_image(fmt: str = "PNG", size=(64, 32)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, "white").save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_engine():
    """Build a FakeEngine with scripted outcomes."""
    return FakeEngine


@pytest.fixture
def busy_error():
    from omni_ocr.errors import EngineBusyError

    return EngineBusyError(DOWNLOADING)
