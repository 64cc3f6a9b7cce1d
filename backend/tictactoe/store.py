"""
Хранилище записей: ключ -> dict.
Ключи с пространством имён: "player:<id>", "session:<id>", "invite:<id>".
Чтение-изменение-запись одной записи выполняется под store.lock(key).
"""
import copy
import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from .config import get_config
from .errors import StoreFailure

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def player_key(player_id: str) -> str:
    return f"player:{player_id}"


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


def invite_key(invite_id: str) -> str:
    return f"invite:{invite_id}"


class _KeyLock:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class SessionStore(ABC):
    """Контракт хранилища: get / put / list и блокировка на ключ."""

    def __init__(self) -> None:
        self._locks: dict[str, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """
        Мьютекс на один ключ. Разные ключи друг друга не блокируют.
        Замок живёт, пока его кто-то держит или ждёт, потом удаляется.
        """
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def held_locks(self) -> int:
        with self._locks_guard:
            return len(self._locks)

    @abstractmethod
    def get(self, key: str) -> dict[str, Any] | None:
        """Запись по ключу или None."""

    @abstractmethod
    def put(self, key: str, record: dict[str, Any]) -> None:
        """Сохранить запись целиком. При ошибке — StoreFailure."""

    @abstractmethod
    def list(self, prefix: str) -> list[dict[str, Any]]:
        """Все записи, ключ которых начинается с prefix."""


class MemoryStore(SessionStore):
    """In-memory хранилище (живёт, пока живёт процесс)."""

    def __init__(self) -> None:
        super().__init__()
        self._data: dict[str, dict[str, Any]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        record = self._data.get(key)
        return copy.deepcopy(record) if record is not None else None

    def put(self, key: str, record: dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(record)

    def list(self, prefix: str) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(record)
            for key, record in list(self._data.items())
            if key.startswith(prefix)
        ]


class JsonFileStore(SessionStore):
    """
    Файловое хранилище: по JSON-файлу на запись,
    <root>/<namespace>/<id>.json. Запись атомарна (tmp + os.replace).
    """

    def __init__(self, base_path: Path | None = None) -> None:
        super().__init__()
        self._root = self._resolve_base_path(base_path)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreFailure(f"cannot create store dir {self._root}: {e}") from e

    @staticmethod
    def _resolve_base_path(base_path: Path | None = None) -> Path:
        if base_path is not None:
            return base_path
        configured = get_config().store_dir
        if configured:
            candidate = Path(configured)
            return candidate if candidate.is_absolute() else (PROJECT_ROOT / candidate)
        return PROJECT_ROOT / "data"

    def _path(self, key: str) -> Path:
        namespace, _, ident = key.partition(":")
        return self._root / namespace / f"{quote(ident, safe='')}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("store read failed key=%s: %s", key, e)
            raise StoreFailure(f"read failed for {key}") from e

    def put(self, key: str, record: dict[str, Any]) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            tmp.unlink(missing_ok=True)
            logger.error("store write failed key=%s: %s", key, e)
            raise StoreFailure(f"write failed for {key}") from e

    def list(self, prefix: str) -> list[dict[str, Any]]:
        namespace, _, ident_prefix = prefix.partition(":")
        directory = self._root / namespace
        if not directory.is_dir():
            return []
        items = []
        for child in sorted(directory.glob("*.json")):
            if not unquote(child.stem).startswith(ident_prefix):
                continue
            record = self.get(f"{namespace}:{unquote(child.stem)}")
            if record is not None:
                items.append(record)
        return items


def create_store() -> SessionStore:
    mode = get_config().store_mode
    if mode == "memory":
        return MemoryStore()
    if mode == "json":
        return JsonFileStore()
    raise RuntimeError(f"invalid STORE_MODE: {mode!r}, use 'memory' or 'json'")
