"""State store: last-applied snapshots, persisted atomically."""

import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional
from pydantic import ValidationError
from ..utils.errors import StateError
from ..utils.files import atomic_write_json
from ..utils.logging import get_logger
from .models import STATE_FORMAT_VERSION, ResourceState, StateFile

logger = get_logger("state.store")


class StateStore:
    """
    Mapping of resource address to last-applied ResourceState.

    Mutated only by successful apply steps. Writes to an entry are serialized
    by a per-address lock; the file itself is rewritten whole and atomically
    after every mutation. Without a path the store is in-memory only.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._state = StateFile()
        self._write_lock = threading.Lock()
        self._entry_locks: Dict[str, threading.Lock] = {}
        self._entry_locks_guard = threading.Lock()

        if self.path and self.path.exists():
            self.load()

    def load(self) -> None:
        """Re-read the state file, replacing in-memory entries."""
        if self.path is None or not self.path.exists():
            return
        state = self._read(self.path)
        with self._write_lock:
            self._state = state
        logger.info(
            f"Loaded state from {self.path} "
            f"(serial: {state.serial}, resources: {len(state.resources)})"
        )

    @staticmethod
    def _read(path: Path) -> StateFile:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateError(f"Invalid JSON in state file {path}: {e}")
        except OSError as e:
            raise StateError(f"Error reading state file {path}: {e}")

        try:
            state = StateFile(**data)
        except (ValidationError, TypeError) as e:
            raise StateError(f"Invalid state file {path}: {e}")

        if state.version > STATE_FORMAT_VERSION:
            raise StateError(
                f"State file {path} has format version {state.version}, "
                f"newer than supported version {STATE_FORMAT_VERSION}"
            )
        return state

    @property
    def serial(self) -> int:
        return self._state.serial

    @contextmanager
    def entry_lock(self, address: str) -> Iterator[None]:
        """Serialize read-modify-write sequences on one entry."""
        with self._entry_locks_guard:
            lock = self._entry_locks.setdefault(address, threading.Lock())
        with lock:
            yield

    def get(self, address: str) -> Optional[ResourceState]:
        with self._write_lock:
            entry = self._state.resources.get(address)
            return entry.model_copy(deep=True) if entry else None

    def addresses(self) -> List[str]:
        with self._write_lock:
            return list(self._state.resources.keys())

    def snapshot(self) -> Dict[str, ResourceState]:
        """Deep copy of all entries, used as the plan baseline."""
        with self._write_lock:
            return {
                address: entry.model_copy(deep=True)
                for address, entry in self._state.resources.items()
            }

    def put(self, entry: ResourceState) -> None:
        """Record a successfully applied resource and persist."""
        with self._write_lock:
            self._state.resources[entry.address] = entry.model_copy(deep=True)
            self._commit()
        logger.debug(f"State updated: {entry.address} (serial {self._state.serial})")

    def remove(self, address: str) -> None:
        """Forget a successfully deleted resource and persist."""
        with self._write_lock:
            if self._state.resources.pop(address, None) is None:
                return
            self._commit()
        logger.debug(f"State entry removed: {address} (serial {self._state.serial})")

    def _commit(self) -> None:
        self._state.serial += 1
        self._save_locked()

    def save(self) -> None:
        with self._write_lock:
            self._save_locked()

    def _save_locked(self) -> None:
        """Write the state file; caller holds the write lock."""
        if self.path is None:
            return
        try:
            atomic_write_json(self.path, self._state.model_dump(mode="json"))
        except OSError as e:
            raise StateError(f"Failed to write state file {self.path}: {e}")

    def __contains__(self, address: str) -> bool:
        with self._write_lock:
            return address in self._state.resources

    def __len__(self) -> int:
        with self._write_lock:
            return len(self._state.resources)
