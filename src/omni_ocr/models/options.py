"""Recognition options and pattern configuration."""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

# Invoked once with the final recognized text. The return value is not consulted.
CustomOcrValidationCallback = Callable[[str], bool]


@dataclass(frozen=True)
class PatternConfig:
    """Regex extraction rule with an optional validator for each match."""

    regex_pattern: str
    validation_function: Optional[Callable[[str], bool]] = None


@dataclass(frozen=True)
class RecognitionOptions:
    """
    Options for a single recognition call.

    Attributes:
        language: BCP-47 language tag, validated against the engine's supported set
        try_hard: Use the slower, more accurate recognition profile
        pattern_configs: Extraction rules applied to the recognized text, in order
        custom_callback: Called once with the recognized text
    """

    language: Optional[str] = None
    try_hard: bool = False
    pattern_configs: Tuple[PatternConfig, ...] = field(default_factory=tuple)
    custom_callback: Optional[CustomOcrValidationCallback] = None

    def __post_init__(self) -> None:
        # Accept any iterable but store a tuple so the options stay immutable
        object.__setattr__(self, "pattern_configs", tuple(self.pattern_configs or ()))

    @classmethod
    def builder(cls) -> "RecognitionOptions.Builder":
        return cls.Builder()

    class Builder:
        """Fluent builder for RecognitionOptions."""

        def __init__(self):
            self._language: Optional[str] = None
            self._try_hard = False
            self._pattern_configs: List[PatternConfig] = []
            self._custom_callback: Optional[CustomOcrValidationCallback] = None

        def set_language(self, language: Optional[str]) -> "RecognitionOptions.Builder":
            self._language = language
            return self

        def set_try_hard(self, try_hard: bool) -> "RecognitionOptions.Builder":
            self._try_hard = try_hard
            return self

        def add_pattern_config(self, pattern_config: PatternConfig) -> "RecognitionOptions.Builder":
            self._pattern_configs.append(pattern_config)
            return self

        def set_pattern_configs(
            self, pattern_configs: Optional[Iterable[PatternConfig]]
        ) -> "RecognitionOptions.Builder":
            self._pattern_configs = list(pattern_configs or [])
            return self

        def set_custom_callback(
            self, custom_callback: Optional[CustomOcrValidationCallback]
        ) -> "RecognitionOptions.Builder":
            self._custom_callback = custom_callback
            return self

        def build(self) -> "RecognitionOptions":
            return RecognitionOptions(
                language=self._language,
                try_hard=self._try_hard,
                pattern_configs=tuple(self._pattern_configs),
                custom_callback=self._custom_callback,
            )
