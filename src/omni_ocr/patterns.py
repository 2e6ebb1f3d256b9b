"""Regex pattern extraction over recognized text."""

import re
import warnings
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern

from loguru import logger

from omni_ocr.errors import ConfigError
from omni_ocr.models.options import PatternConfig


@lru_cache(maxsize=256)
def _compile(regex_pattern: str) -> Pattern[str]:
    try:
        return re.compile(regex_pattern)
    except re.error as e:
        raise ConfigError(f"Invalid regex pattern {regex_pattern!r}: {e}") from e


def _accepts(config: PatternConfig, value: str) -> bool:
    if config.validation_function is None:
        return True
    return bool(config.validation_function(value))


def extract_patterns(text: str, config: Optional[PatternConfig]) -> List[str]:
    """
    Extract every match of a pattern from text.

    Args:
        text: Recognized text to search
        config: Pattern configuration; None or an empty pattern yields no matches

    Returns:
        Non-overlapping matches in order of appearance that pass validation

    Raises:
        ConfigError: If the pattern does not compile
    """
    if not text or config is None or not config.regex_pattern:
        return []

    regex = _compile(config.regex_pattern)
    return [
        match.group(0)
        for match in regex.finditer(text)
        if _accepts(config, match.group(0))
    ]


def extract_pattern(text: str, config: Optional[PatternConfig]) -> Optional[str]:
    """
    Extract the first match of a pattern from text.

    Deprecated: use extract_patterns(), which returns every match.
    """
    warnings.warn(
        "extract_pattern() is deprecated, use extract_patterns() instead",
        DeprecationWarning,
        stacklevel=2,
    )
    if not text or config is None or not config.regex_pattern:
        return None

    match = _compile(config.regex_pattern).search(text)
    if match and _accepts(config, match.group(0)):
        return match.group(0)
    return None


def apply_patterns(text: str, configs: Iterable[PatternConfig]) -> List[str]:
    """Run each pattern config over text and concatenate matches in config order."""
    matched: List[str] = []
    for config in configs:
        values = extract_patterns(text, config)
        if values:
            logger.debug(f"Pattern {config.regex_pattern!r} matched {len(values)} value(s)")
        matched.extend(values)
    return matched
