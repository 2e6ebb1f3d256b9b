"""Unit tests for native engine mapping, model management and selection."""

import sys
from concurrent.futures import Future
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from omni_ocr.engines.easyocr_engine import MODEL_DOWNLOADING_MESSAGE, EasyOcrEngine
from omni_ocr.engines.factory import EngineFactory
from omni_ocr.engines.tesseract_engine import (
    TesseractEngine,
    to_bcp47_language,
    to_tesseract_language,
)
from omni_ocr.engines.vision_engine import VisionEngine, VisionProfile, to_pixel_rect
from omni_ocr.engines.windows_engine import WindowsEngine
from omni_ocr.errors import EngineBusyError, EngineUnavailableError, FatalEngineError
from omni_ocr.models.config import OcrEngine, OcrSettings
from omni_ocr.models.options import RecognitionOptions
from omni_ocr.utils.image import DecodedImage


def blank_image(width: int = 200, height: int = 100) -> DecodedImage:
    return DecodedImage(image=Image.new("RGB", (width, height), "white"))


class TestTesseractEngine:
    """Test Tesseract language mapping and result grouping."""

    @pytest.fixture
    def engine(self):
        return TesseractEngine(OcrSettings(languages=["en", "es"]))

    def test_language_mapping(self):
        """Test BCP-47 tags map to Tesseract codes and back."""
        assert to_tesseract_language("en") == "eng"
        assert to_tesseract_language("zh-Hans") == "chi_sim"
        assert to_tesseract_language("xx") == "xx"
        assert to_bcp47_language("deu") == "de"

    def test_setup_reports_languages_per_profile(self, engine):
        """Test setup lists installed languages without osd."""
        pytesseract = MagicMock()
        pytesseract.get_tesseract_version.return_value = "5.3.0"
        pytesseract.get_languages.return_value = ["eng", "osd", "chi_sim"]

        with patch.object(engine, "_pytesseract", return_value=pytesseract):
            supported = engine.setup()

        assert supported[False] == ("en", "zh-Hans")
        assert supported[True] == ("en", "zh-Hans")

    def test_setup_without_binary_is_fatal(self, engine):
        """Test a missing tesseract binary is fatal."""
        pytesseract = MagicMock()
        pytesseract.get_tesseract_version.side_effect = OSError("tesseract is not installed")

        with patch.object(engine, "_pytesseract", return_value=pytesseract):
            with pytest.raises(FatalEngineError):
                engine.setup()

    def test_accurate_profile_uses_best_tessdata(self, tmp_path):
        """Test the accurate profile points at tessdata_best."""
        engine = TesseractEngine(OcrSettings(tessdata_best_dir=tmp_path))

        assert "--tessdata-dir" not in engine.create_recognizer(False, None).config
        assert str(tmp_path) in engine.create_recognizer(True, None).config

    def test_process_passes_language(self, engine):
        """Test the requested or configured languages reach tesseract."""
        pytesseract = MagicMock()

        with patch.object(engine, "_pytesseract", return_value=pytesseract):
            profile = engine.create_recognizer(False, None)
            engine.process(profile, blank_image(), RecognitionOptions())
            engine.process(profile, blank_image(), RecognitionOptions(language="fr"))

        langs = [call.kwargs["lang"] for call in pytesseract.image_to_data.call_args_list]
        assert langs == ["eng+spa", "fra"]

    def test_to_result_groups_words_into_lines(self, engine):
        """Test word rows are grouped into lines by block, paragraph and line."""
        raw = {
            "text": ["", "INVOICE", "42", "Total:", "  ", "9.99"],
            "conf": [-1, 96.0, 91.5, 88, -1, 120],
            "block_num": [1, 1, 1, 1, 1, 1],
            "par_num": [1, 1, 1, 1, 1, 1],
            "line_num": [0, 1, 1, 2, 2, 2],
            "left": [0, 10, 80, 10, 0, 60],
            "top": [0, 5, 5, 30, 0, 30],
            "width": [200, 60, 20, 40, 0, 30],
            "height": [100, 12, 12, 12, 0, 12],
        }

        result = engine.to_result(raw, blank_image())

        assert result.lines == ["INVOICE 42", "Total: 9.99"]
        assert result.all_text == "INVOICE 42\nTotal: 9.99"
        assert [e.text for e in result.elements] == ["INVOICE", "42", "Total:", "9.99"]
        assert result.elements[0].confidence == pytest.approx(0.96)
        assert result.elements[-1].confidence == 1.0
        assert (result.elements[1].x, result.elements[1].y) == (80, 5)


class TestVisionEngine:
    """Test Vision geometry and mapping."""

    def test_to_pixel_rect_flips_y_axis(self):
        """Test normalized bottom-left boxes become top-left pixels."""
        assert to_pixel_rect((0.1, 0.7, 0.5, 0.2), 200, 100) == (20, 10, 100, 20)

    def test_to_result_shares_line_box_across_words(self):
        """Test words split from a line share its box."""
        engine = VisionEngine(OcrSettings())
        raw = [("INVOICE 42", 0.98, (0.1, 0.7, 0.5, 0.2)), ("Total", 0.5, (0.1, 0.1, 0.2, 0.1))]

        result = engine.to_result(raw, blank_image())

        assert result.lines == ["INVOICE 42", "Total"]
        assert result.all_text == "INVOICE 42 Total"
        assert [e.text for e in result.elements] == ["INVOICE", "42", "Total"]
        first, second = result.elements[0], result.elements[1]
        assert (first.x, first.y, first.width, first.height) == (20, 10, 100, 20)
        assert (second.x, second.y, second.width, second.height) == (20, 10, 100, 20)

    def test_recognition_level_per_profile(self):
        """Test fast and accurate profiles select Vision levels."""
        engine = VisionEngine(OcrSettings())
        assert engine.create_recognizer(False, None) == VisionProfile("fast")
        assert engine.create_recognizer(True, "en-US") == VisionProfile("accurate")

    def test_unavailable_off_macos(self):
        """Test Vision is unavailable off macOS."""
        engine = VisionEngine(OcrSettings())
        engine.is_macos = False
        assert engine.is_available() is False


class TestWindowsEngine:
    """Test Windows OCR result mapping."""

    def test_to_result_maps_lines_and_words(self):
        """Test Windows lines and words map with geometry."""
        engine = WindowsEngine(OcrSettings())
        raw = SimpleNamespace(
            text=" INVOICE 42 ",
            lines=[
                SimpleNamespace(
                    text="INVOICE 42",
                    words=[
                        SimpleNamespace(
                            text="INVOICE",
                            bounding_rect=SimpleNamespace(x=10.0, y=5.0, width=60.0, height=12.0),
                        ),
                        SimpleNamespace(
                            text="42",
                            bounding_rect=SimpleNamespace(x=80.0, y=5.0, width=20.0, height=12.0),
                        ),
                    ],
                )
            ],
        )

        result = engine.to_result(raw, blank_image())

        assert result.all_text == "INVOICE 42"
        assert result.lines == ["INVOICE 42"]
        assert [(e.text, e.x, e.width) for e in result.elements] == [("INVOICE", 10, 60), ("42", 80, 20)]
        assert all(e.confidence == 0.0 for e in result.elements)

    def test_unavailable_off_windows(self):
        """Test Windows OCR is unavailable off Windows."""
        engine = WindowsEngine(OcrSettings())
        engine.is_windows = False
        assert engine.is_available() is False


class TestEasyOcrEngine:
    """Test EasyOCR background model downloads and mapping."""

    @pytest.fixture
    def settings(self, tmp_path):
        return OcrSettings(model_cache_dir=tmp_path / "models")

    def test_fast_reader_is_busy_until_download_finishes(self, settings):
        """Test the fast reader reports busy until its download completes."""
        engine = EasyOcrEngine(settings)
        download = Future()
        executor = MagicMock()
        executor.submit.return_value = download

        with patch("omni_ocr.engines.easyocr_engine.get_shared_executor", return_value=executor):
            with pytest.raises(EngineBusyError) as exc_info:
                engine.acquire(False)
            assert str(exc_info.value) == MODEL_DOWNLOADING_MESSAGE

            reader = MagicMock()
            download.set_result(reader)
            session = engine.acquire(False)

        assert session.handle is reader
        assert session.shared is True
        assert session.lock is not None
        executor.submit.assert_called_once()

    @pytest.fixture
    def fake_easyocr(self):
        """Stand in for the easyocr package so setup() can run."""
        modules = {
            "easyocr": MagicMock(),
            "easyocr.config": SimpleNamespace(all_lang_list=["en", "fr"]),
        }
        with patch.dict(sys.modules, modules):
            yield

    def test_failed_setup_download_is_fatal_then_restarted(self, settings, fake_easyocr):
        """Test a background download that fails after setup is reported as fatal once."""
        engine = EasyOcrEngine(settings)
        download, restarted = Future(), Future()
        executor = MagicMock()
        executor.submit.side_effect = [download, restarted]

        with patch("omni_ocr.engines.easyocr_engine.get_shared_executor", return_value=executor):
            supported = engine.setup()
            assert supported == {False: ("en",), True: ("en", "fr")}

            download.set_exception(ConnectionError("network unreachable"))
            with pytest.raises(FatalEngineError) as exc_info:
                engine.acquire(False)
            assert isinstance(exc_info.value.__cause__, ConnectionError)
            assert executor.submit.call_count == 1

            with pytest.raises(EngineBusyError):
                engine.acquire(False)

        assert executor.submit.call_count == 2

    def test_failed_accurate_download_is_fatal(self, settings):
        """Test a failed accurate-profile download is not reported as busy again."""
        engine = EasyOcrEngine(settings)
        download = Future()
        executor = MagicMock()
        executor.submit.return_value = download

        with patch.object(engine, "_new_reader", side_effect=FileNotFoundError("missing")):
            with patch("omni_ocr.engines.easyocr_engine.get_shared_executor", return_value=executor):
                with pytest.raises(EngineBusyError):
                    engine.acquire(True, "fr")

                download.set_exception(ConnectionError("network unreachable"))
                with pytest.raises(FatalEngineError):
                    engine.acquire(True, "fr")

        executor.submit.assert_called_once()

    def test_finished_accurate_download_is_not_retained(self, settings):
        """Test a completed accurate-profile download drops its loaded reader."""
        engine = EasyOcrEngine(settings)
        download = Future()
        executor = MagicMock()
        executor.submit.return_value = download

        with patch.object(engine, "_new_reader", side_effect=FileNotFoundError("missing")):
            with patch("omni_ocr.engines.easyocr_engine.get_shared_executor", return_value=executor):
                with pytest.raises(EngineBusyError):
                    engine.acquire(True, "fr")

        assert ("fr",) in engine._downloads
        download.set_result(MagicMock())
        assert ("fr",) not in engine._downloads

    def test_missing_accurate_model_starts_download(self, settings):
        """Test a missing accurate model starts a download and reports busy."""
        engine = EasyOcrEngine(settings)
        executor = MagicMock()
        executor.submit.return_value = Future()

        with patch.object(engine, "_new_reader", side_effect=FileNotFoundError("craft_mlt_25k.pth")):
            with patch("omni_ocr.engines.easyocr_engine.get_shared_executor", return_value=executor):
                with pytest.raises(EngineBusyError):
                    engine.acquire(True, "fr")

        assert executor.submit.call_args.args[1] == ("fr",)

    def test_missing_model_without_auto_download_is_fatal(self, tmp_path):
        """Test a missing model is fatal when downloads are disabled."""
        engine = EasyOcrEngine(OcrSettings(model_cache_dir=tmp_path, auto_download_models=False))

        with patch.object(engine, "_new_reader", side_effect=FileNotFoundError("missing")):
            with pytest.raises(FatalEngineError):
                engine.acquire(True)

    def test_process_selects_decoder_by_profile(self, settings):
        """Test the accurate profile uses beam search decoding."""
        engine = EasyOcrEngine(settings)
        reader = MagicMock()

        engine.process(reader, blank_image(), RecognitionOptions(try_hard=True))
        engine.process(reader, blank_image(), RecognitionOptions())

        decoders = [call.kwargs["decoder"] for call in reader.readtext.call_args_list]
        assert decoders == ["beamsearch", "greedy"]

    def test_to_result_maps_quads_to_boxes(self, settings):
        """Test EasyOCR quads map to bounding boxes."""
        engine = EasyOcrEngine(settings)
        raw = [
            ([[10, 20], [50, 20], [50, 40], [10, 40]], "Hello", 0.95),
            ([[60, 20], [90, 22], [90, 42], [60, 40]], "World", 0.5),
        ]

        result = engine.to_result(raw, blank_image())

        assert result.lines == ["Hello", "World"]
        assert result.all_text == "Hello\nWorld"
        first = result.elements[0]
        assert (first.x, first.y, first.width, first.height) == (10, 20, 40, 20)
        assert first.confidence == pytest.approx(0.95)


class TestEngineFactory:
    """Test engine selection and fallback."""

    @pytest.mark.parametrize(
        "system, expected",
        [
            ("Darwin", [OcrEngine.VISION, OcrEngine.EASYOCR, OcrEngine.TESSERACT]),
            ("Windows", [OcrEngine.WINDOWS, OcrEngine.EASYOCR, OcrEngine.TESSERACT]),
            ("Linux", [OcrEngine.EASYOCR, OcrEngine.TESSERACT]),
        ],
    )
    def test_platform_preference(self, system, expected):
        """Test engine preference order per platform."""
        assert EngineFactory.platform_preference(system) == expected

    def test_explicit_engine_when_available(self):
        """Test an available configured engine is used."""
        with patch.object(TesseractEngine, "is_available", return_value=True):
            engine = EngineFactory.create(OcrSettings(engine=OcrEngine.TESSERACT))

        assert isinstance(engine, TesseractEngine)

    def test_falls_back_when_explicit_engine_unavailable(self):
        """Test fallback when the configured engine is unavailable."""
        with patch.object(EngineFactory, "platform_preference", return_value=[OcrEngine.EASYOCR, OcrEngine.TESSERACT]):
            with patch.object(EasyOcrEngine, "is_available", return_value=False):
                with patch.object(TesseractEngine, "is_available", return_value=True):
                    engine = EngineFactory.create(OcrSettings(engine=OcrEngine.EASYOCR))

        assert isinstance(engine, TesseractEngine)

    def test_auto_picks_first_available(self):
        """Test auto selects the first available engine."""
        with patch.object(EngineFactory, "platform_preference", return_value=[OcrEngine.EASYOCR, OcrEngine.TESSERACT]):
            with patch.object(EasyOcrEngine, "is_available", return_value=True):
                engine = EngineFactory.create(OcrSettings(engine=OcrEngine.AUTO))

        assert isinstance(engine, EasyOcrEngine)

    def test_no_engine_available(self):
        """Test no available engine raises EngineUnavailableError."""
        with patch.object(EngineFactory, "platform_preference", return_value=[OcrEngine.EASYOCR, OcrEngine.TESSERACT]):
            with patch.object(EasyOcrEngine, "is_available", return_value=False):
                with patch.object(TesseractEngine, "is_available", return_value=False):
                    with pytest.raises(EngineUnavailableError):
                        EngineFactory.create(OcrSettings())
