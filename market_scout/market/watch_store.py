"""Key-value stores for watch specifications.

The store is injected into :class:`~market_scout.market.watch.WatchService`,
so persistence can change without touching scoring or decision logic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from market_scout.core.types import WatchSpec


@runtime_checkable
class WatchStore(Protocol):
    """Content-keyed watch storage."""

    def get(self, key: str) -> WatchSpec | None: ...

    def set(self, key: str, watch: WatchSpec) -> None: ...

    def has(self, key: str) -> bool: ...

    def list(self) -> list[WatchSpec]: ...


class InMemoryWatchStore:
    """Process-local store."""

    def __init__(self) -> None:
        self._items: dict[str, WatchSpec] = {}

    def get(self, key: str) -> WatchSpec | None:
        return self._items.get(key)

    def set(self, key: str, watch: WatchSpec) -> None:
        self._items[key] = watch

    def has(self, key: str) -> bool:
        return key in self._items

    def list(self) -> list[WatchSpec]:
        return list(self._items.values())


class JsonFileWatchStore:
    """Watches persisted as one JSON document mapping content key to spec."""

    def __init__(self, path: Path | str) -> None:
        """Initialize the store.

        Args:
            path: JSON file location. Parent directories are created on write.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, WatchSpec]:
        if not self._path.exists():
            return {}
        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return {key: WatchSpec.model_validate(value) for key, value in data.items()}

    def _write(self, items: dict[str, WatchSpec]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {key: spec.model_dump(mode="json") for key, spec in items.items()}
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    def get(self, key: str) -> WatchSpec | None:
        return self._read().get(key)

    def set(self, key: str, watch: WatchSpec) -> None:
        items = self._read()
        items[key] = watch
        self._write(items)

    def has(self, key: str) -> bool:
        return key in self._read()

    def list(self) -> list[WatchSpec]:
        return list(self._read().values())
