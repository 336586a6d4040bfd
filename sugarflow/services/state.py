"""Durable key/value state (active ticket) in .sugarflow/state.yaml."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

import yaml

STATE_FILE = ".sugarflow/state.yaml"
ACTIVE_TICKET_KEY = "in_progress_ticket"

LOG = logging.getLogger("sugarflow.services.state")


class StateStore(ABC):
    """Minimal key/value store the workflow persists its pointer in."""

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return stored value or None."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key (None removes it)."""
        ...


class MemoryStateStore(StateStore):
    """Process-local store; nothing survives a restart."""

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value


class YamlStateStore(StateStore):
    """Store backed by one YAML mapping file, rewritten on every set."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @classmethod
    def for_workspace(cls, repo_dir: Path) -> "YamlStateStore":
        return cls(Path(repo_dir) / STATE_FILE)

    def _load(self) -> Dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            LOG.warning("Failed to load state %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Any:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False),
            encoding="utf-8",
        )
        LOG.debug("Saved state %s=%r to %s", key, value, self._path)
