from __future__ import annotations

import asyncio
from pathlib import Path
import threading

from .errors import StorageError
from .fsutil import atomic_write_text
from .logger import logger
from .templates import Slot, TemplateRegistry, validate_template


class LayoutEditor:
    """Persists edited page layouts as override files for a TemplateRegistry."""

    def __init__(self, registry: TemplateRegistry) -> None:
        self.registry = registry
        # At most one override write per slot, taken inside the worker thread.
        self._locks = {slot: threading.Lock() for slot in Slot}

    async def save(self, slot: Slot | str, content: str) -> Path:
        slot = Slot.parse(slot)
        validate_template(content)

        path = self.registry.override_path(slot)
        await asyncio.to_thread(self._write, slot, path, content)
        self.registry.invalidate(slot)
        logger.info("Saved {} layout override to {}", slot, path)
        return path

    async def reset(self, slot: Slot | str) -> bool:
        slot = Slot.parse(slot)
        path = self.registry.override_path(slot)
        removed = await asyncio.to_thread(self._remove, slot, path)
        self.registry.invalidate(slot)
        if removed:
            logger.info("Removed {} layout override {}", slot, path)
        return removed

    def _write(self, slot: Slot, path: Path, content: str) -> None:
        with self._locks[slot]:
            atomic_write_text(path, content)

    def _remove(self, slot: Slot, path: Path) -> bool:
        with self._locks[slot]:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as exc:
                raise StorageError(f"Failed to remove {path}: {exc}") from exc
        return True
