"""Configuration stores for weight mappings.

The calculators never talk to a settings backend directly: they receive a
WeightStore and a namespaced key. Any object with ``read`` and ``write``
methods satisfies the protocol, so host applications can adapt their own
settings storage.

Implementations:
    InMemoryWeightStore: dict-backed store for tests and embedding.
    YamlWeightStore: a YAML settings document on disk.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog
import yaml

logger = structlog.get_logger(__name__)


@runtime_checkable
class WeightStore(Protocol):
    """Protocol for durable weight configuration storage.

    Example:
        >>> class OptionsStore:
        ...     def read(self, key: str) -> Mapping[str, Any] | None:
        ...         return options.get(key)
        ...     def write(self, key: str, weights: Mapping[str, int]) -> bool:
        ...         options[key] = dict(weights)
        ...         return True
    """

    def read(self, key: str) -> Mapping[str, Any] | None:
        """Return the mapping stored under key, or None when absent."""
        ...

    def write(self, key: str, weights: Mapping[str, int]) -> bool:
        """Persist weights under key. Return False when the write failed."""
        ...


class InMemoryWeightStore:
    """Process-local store backed by a dict.

    Attributes:
        writes: Number of successful writes (useful in tests).
    """

    def __init__(self, initial: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, Any]] = {
            key: dict(value) for key, value in (initial or {}).items()
        }
        self._lock = threading.Lock()
        self.writes = 0

    def read(self, key: str) -> Mapping[str, Any] | None:
        with self._lock:
            value = self._data.get(key)
            return dict(value) if value is not None else None

    def write(self, key: str, weights: Mapping[str, int]) -> bool:
        with self._lock:
            self._data[key] = dict(weights)
            self.writes += 1
        return True


class YamlWeightStore:
    """Store weight mappings as top-level keys of a YAML settings document.

    Other keys in the document are preserved on write. Writes go to a
    temporary sibling file that is then renamed over the document.

    Example:
        >>> store = YamlWeightStore(Path("ratings-settings.yaml"))
        >>> store.write("usability_weights", {"user_rating": 40, ...})
        True
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        content = self.path.read_text()
        if not content.strip():
            return {}
        document = yaml.safe_load(content)
        if not isinstance(document, dict):
            logger.warning("settings_document_not_a_mapping", path=str(self.path))
            return {}
        return document

    def read(self, key: str) -> Mapping[str, Any] | None:
        with self._lock:
            value = self._load_document().get(key)
        if value is None:
            return None
        if not isinstance(value, Mapping):
            logger.warning("stored_value_not_a_mapping", key=key, path=str(self.path))
            return None
        return dict(value)

    def write(self, key: str, weights: Mapping[str, int]) -> bool:
        with self._lock:
            try:
                document = self._load_document()
                document[key] = dict(weights)
                self.path.parent.mkdir(parents=True, exist_ok=True)
                temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
                temp_path.write_text(yaml.safe_dump(document, sort_keys=False))
                temp_path.replace(self.path)
            except (OSError, yaml.YAMLError) as exc:
                logger.error(
                    "settings_document_write_failed",
                    key=key,
                    path=str(self.path),
                    error=str(exc),
                )
                return False
        logger.debug("settings_document_written", key=key, path=str(self.path))
        return True


__all__ = [
    "InMemoryWeightStore",
    "WeightStore",
    "YamlWeightStore",
]
