"""Normalized OCR result models."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OcrElement(BaseModel):
    """A recognized word or token with optional pixel geometry (top-left origin)."""

    text: str
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def has_geometry(self) -> bool:
        return None not in (self.x, self.y, self.width, self.height)


class OcrResult(BaseModel):
    """Result of one recognition call."""

    success: bool = False
    all_text: str = ""
    lines: List[str] = Field(default_factory=list)
    elements: List[OcrElement] = Field(default_factory=list)
    matched_values: List[str] = Field(default_factory=list)
    engine: Optional[str] = None  # engine key that produced the result
    attempts: int = 0  # native attempts used

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a plain dictionary."""
        return self.model_dump()


@dataclass
class OcrCompletedEventArgs:
    """Payload delivered when an event-driven recognition finishes."""

    result: Optional[OcrResult]
    error_message: Optional[str] = ""

    def __post_init__(self) -> None:
        if self.error_message is None:
            self.error_message = ""

    @property
    def is_successful(self) -> bool:
        return self.result is not None and self.result.success
