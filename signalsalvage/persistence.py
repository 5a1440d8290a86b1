"""Durable save slots.

``SaveManager`` is the only object that touches storage. It writes one
named slot and reads a legacy slot as a fallback; the medium is whatever
``SaveStorage`` it is given.
"""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from signalsalvage.codec import deserialize, serialize

if TYPE_CHECKING:
    from signalsalvage.definition import GameDefinition
    from signalsalvage.state import GameState

logger = logging.getLogger(__name__)


class SaveStorage(ABC):
    """Key -> text slots."""

    @abstractmethod
    def read(self, key: str) -> str | None: ...

    @abstractmethod
    def write(self, key: str, text: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


class MemoryStorage(SaveStorage):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.slots: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.slots.get(key)

    def write(self, key: str, text: str) -> None:
        self.slots[key] = text

    def delete(self, key: str) -> None:
        self.slots.pop(key, None)


class FileStorage(SaveStorage):
    """One ``<key>.json`` file per slot under *directory*.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a reader never sees a half-written save.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("Could not read save slot %s", path, exc_info=True)
            return None

    def write(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_name(f".{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        finally:
            if tmp.exists():
                tmp.unlink()

    def delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            pass


class SaveManager:
    """save / load / export_text / import_text / clear over one storage."""

    def __init__(self, storage: SaveStorage, definition: GameDefinition) -> None:
        self.storage = storage
        self.definition = definition

    @property
    def slot(self) -> str:
        return self.definition.engine.save_slot

    @property
    def legacy_slot(self) -> str:
        return self.definition.engine.legacy_save_slot

    def save(self, state: GameState) -> bool:
        """Write *state* to the save slot. Failures are logged, not raised."""
        try:
            self.storage.write(self.slot, serialize(state))
        except Exception:
            logger.exception("Failed to write save slot %r", self.slot)
            return False
        return True

    def load(self, now: float | None = None) -> GameState | None:
        text = self.storage.read(self.slot)
        source = self.slot
        if not text:
            text = self.storage.read(self.legacy_slot)
            source = self.legacy_slot
        if not text:
            return None
        state = deserialize(text, self.definition, now)
        if state is None:
            logger.warning("Ignoring unreadable save in slot %r", source)
        elif source == self.legacy_slot:
            logger.info("Loaded legacy save from slot %r", source)
        return state

    def export_text(self, state: GameState) -> str:
        return serialize(state)

    def import_text(self, text: str, now: float | None = None) -> GameState | None:
        state = deserialize(text, self.definition, now)
        if state is None:
            logger.warning("Rejected imported save text")
        return state

    def clear(self) -> None:
        self.storage.delete(self.slot)
        self.storage.delete(self.legacy_slot)
