"""Exception hierarchy for OCR recognition."""

from typing import Iterable, Optional


class OcrError(Exception):
    """Base class for all OCR errors."""


class ConfigError(OcrError):
    """Invalid recognition configuration (e.g. a regex that does not compile)."""


class InvalidStateError(OcrError):
    """Operation attempted before the service was initialized."""


class InvalidImageError(OcrError):
    """Image bytes could not be decoded."""


class UnsupportedLanguageError(OcrError):
    """Requested language is not supported by the selected recognition profile."""

    def __init__(self, language: str, supported: Iterable[str]):
        self.language = language
        self.supported = tuple(supported)
        super().__init__(
            f'Unsupported language "{language}". '
            f"Supported languages are: ({','.join(self.supported)})"
        )


class EngineBusyError(OcrError):
    """
    Recoverable engine condition.

    Raised when the native engine reports that its recognition model or
    language pack is still being downloaded. Retried by the recognizer.
    """


class FatalEngineError(OcrError):
    """Non-recoverable native engine failure."""

    def __init__(self, message: str, engine: Optional[str] = None):
        self.engine = engine
        super().__init__(message)


class EngineUnavailableError(OcrError):
    """No native OCR engine can be used on this machine."""
