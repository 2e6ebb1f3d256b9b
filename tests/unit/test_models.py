"""Unit tests for options, results and event args."""

import dataclasses

import pytest
from pydantic import ValidationError

from omni_ocr.models.options import PatternConfig, RecognitionOptions
from omni_ocr.models.result import OcrCompletedEventArgs, OcrElement, OcrResult


class TestRecognitionOptions:
    """Test RecognitionOptions and its builder."""

    def test_defaults(self):
        """Test options default to the fast profile with no patterns."""
        options = RecognitionOptions()
        assert options.language is None
        assert options.try_hard is False
        assert options.pattern_configs == ()
        assert options.custom_callback is None

    def test_builder_sets_every_field(self):
        """Test the builder sets every option."""
        callback = lambda text: True  # noqa: E731
        config = PatternConfig(r"\d+")

        options = (
            RecognitionOptions.Builder()
            .set_language("en")
            .set_try_hard(True)
            .add_pattern_config(config)
            .set_custom_callback(callback)
            .build()
        )

        assert options.language == "en"
        assert options.try_hard is True
        assert options.pattern_configs == (config,)
        assert options.custom_callback is callback

    def test_set_pattern_configs_none_resets(self):
        """Test passing None clears pattern configs."""
        options = (
            RecognitionOptions.builder()
            .add_pattern_config(PatternConfig("a"))
            .set_pattern_configs(None)
            .build()
        )
        assert options.pattern_configs == ()

    def test_add_pattern_config_preserves_order(self):
        """Test pattern configs keep insertion order."""
        first, second = PatternConfig("a"), PatternConfig("b")
        options = RecognitionOptions.builder().add_pattern_config(first).add_pattern_config(second).build()
        assert options.pattern_configs == (first, second)

    def test_options_are_immutable(self):
        """Test options cannot be modified after build."""
        options = RecognitionOptions(pattern_configs=[PatternConfig("a")])
        assert isinstance(options.pattern_configs, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.try_hard = True


class TestOcrResult:
    """Test the result model."""

    def test_defaults_are_empty_containers(self):
        """Test a default result has empty containers."""
        result = OcrResult()
        assert result.success is False
        assert result.all_text == ""
        assert result.lines == []
        assert result.elements == []
        assert result.matched_values == []

    def test_default_lists_are_not_shared(self):
        """Test results do not share default lists."""
        first, second = OcrResult(), OcrResult()
        first.lines.append("x")
        assert second.lines == []

    def test_element_confidence_range_is_validated(self):
        """Test confidence outside [0, 1] is rejected."""
        with pytest.raises(ValidationError):
            OcrElement(text="x", confidence=1.5)

    def test_element_geometry(self):
        """Test has_geometry requires every coordinate."""
        assert OcrElement(text="x", x=1, y=2, width=3, height=4).has_geometry
        assert not OcrElement(text="x").has_geometry

    def test_to_dict(self):
        """Test to_dict returns plain data."""
        result = OcrResult(success=True, all_text="hi", lines=["hi"])
        data = result.to_dict()
        assert data["all_text"] == "hi"
        assert data["lines"] == ["hi"]


class TestOcrCompletedEventArgs:
    """Test event args."""

    def test_successful_result(self):
        """Test args with a successful result."""
        args = OcrCompletedEventArgs(OcrResult(success=True, all_text="test"))
        assert args.is_successful
        assert args.error_message == ""

    def test_missing_result_is_unsuccessful(self):
        """Test args without a result are unsuccessful."""
        args = OcrCompletedEventArgs(None, "boom")
        assert not args.is_successful
        assert args.error_message == "boom"

    def test_unsuccessful_result(self):
        """Test args with an unsuccessful result."""
        assert not OcrCompletedEventArgs(OcrResult(success=False)).is_successful

    def test_none_error_message_normalized(self):
        """Test a None error message becomes empty."""
        assert OcrCompletedEventArgs(None, None).error_message == ""
