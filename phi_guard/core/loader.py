# phi_guard/core/loader.py

"""Pattern registry loader for the PHI detector."""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import regex
import yaml

from phi_guard.core.definitions import Confidence
from phi_guard.core.domain import PHIPattern
from phi_guard.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS_PATH = Path(__file__).parent / "patterns.yaml"

_REQUIRED_KEYS = ("name", "regex", "confidence", "category")


class PatternLoader:
    """Loads the ordered PHI pattern registry from a YAML file.

    The registry is read and validated once at construction and is
    read-only afterwards. Use get_instance() for the shared loader backed
    by the bundled patterns.yaml.
    """

    _instance: Optional["PatternLoader"] = None
    _lock = threading.Lock()

    def __init__(self, config_path: Optional[Union[str, Path]] = None) -> None:
        self.config_path = Path(config_path) if config_path else DEFAULT_PATTERNS_PATH
        self._patterns: Tuple[PHIPattern, ...] = self._load_config()

    def _load_config(self) -> Tuple[PHIPattern, ...]:
        """Loads and validates the pattern file.

        Raises:
            ConfigurationError: If file is missing, invalid, or empty.
        """
        if not self.config_path.exists():
            error_msg = f"Pattern file not found: {self.config_path}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}", exc_info=True)
            raise ConfigurationError(
                f"Failed to parse {self.config_path.name}: {e}"
            ) from e

        if not config or not isinstance(config, dict):
            raise ConfigurationError("Pattern file is empty or invalid")

        entries = config.get("patterns")
        if not entries or not isinstance(entries, list):
            raise ConfigurationError("Pattern file has no 'patterns' list")

        patterns = tuple(self._build_pattern(entry) for entry in entries)

        names = [p.name for p in patterns]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate pattern names: {duplicates}")

        logger.info(
            "Pattern registry loaded successfully",
            extra={
                "config_path": str(self.config_path),
                "pattern_count": len(patterns),
            },
        )
        return patterns

    @staticmethod
    def _build_pattern(entry: Dict[str, Any]) -> PHIPattern:
        """Validates a single registry entry and converts it to a PHIPattern.

        Raises:
            ConfigurationError: If keys are missing, the confidence tier is
                unknown, or the regex does not compile.
        """
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Invalid pattern entry: {entry!r}")

        missing = [k for k in _REQUIRED_KEYS if not entry.get(k)]
        if missing:
            raise ConfigurationError(
                f"Pattern entry {entry.get('name', '?')!r} is missing keys: {missing}"
            )

        confidence = str(entry["confidence"]).lower()
        if confidence not in Confidence.ALL:
            raise ConfigurationError(
                f"Pattern {entry['name']!r} has unknown confidence {confidence!r}"
            )

        try:
            regex.compile(entry["regex"], regex.ASCII)
        except regex.error as e:
            raise ConfigurationError(
                f"Pattern {entry['name']!r} has an invalid regex: {e}"
            ) from e

        return PHIPattern(
            name=str(entry["name"]),
            regex=entry["regex"],
            confidence=confidence,
            category=str(entry["category"]),
        )

    @classmethod
    def get_instance(cls) -> "PatternLoader":
        """Returns the shared loader for the bundled pattern registry."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def get_patterns(self) -> List[PHIPattern]:
        """Returns the registered patterns in registration order."""
        return list(self._patterns)

    def get_pattern(self, name: str) -> Optional[PHIPattern]:
        """Looks up a pattern by name, returning None if it is not registered."""
        for pattern in self._patterns:
            if pattern.name == name:
                return pattern
        return None

    def pattern_names(self) -> List[str]:
        return [p.name for p in self._patterns]
