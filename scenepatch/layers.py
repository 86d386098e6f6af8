"""
Layer Registry - the project's 32-slot layer name table.

Slots 0-7 are built in and read-only; 8-31 belong to the user. A name may
appear on at most one slot. Every check runs before any write, so a
rejected request never touches the table. Successful writes persist and
then signal dependents to refresh.

JsonLayerTable is the persisted table used outside the editor: a small
JSON document holding the 32 names.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from .exceptions import LayerTableError
from .main_thread import MainThreadDispatcher
from .types import (
    FIRST_USER_LAYER,
    LAYER_COUNT,
    Failure,
    LayerAlreadyEmpty,
    LayerCleared,
    LayerListing,
    LayerNamed,
    LayerOutcome,
    LayerRejected,
    LayerSlot,
    MissingArgument,
    RejectReason,
    UnknownOperation,
)

logger = logging.getLogger("scenepatch.layers")

ACTIVITY = "managing project layers"

DEFAULT_LAYERS = {
    0: "Default",
    1: "TransparentFX",
    2: "Ignore Raycast",
    4: "Water",
    5: "UI",
}


def default_layer_names() -> list[str]:
    return [DEFAULT_LAYERS.get(index, "") for index in range(LAYER_COUNT)]


def is_editable(index: int) -> bool:
    return FIRST_USER_LAYER <= index < LAYER_COUNT


# =============================================================================
# Persisted table
# =============================================================================

class LayerTable(Protocol):
    """Accessor for the persisted layer name table."""

    def read_all(self) -> list[str]:
        ...

    def write(self, index: int, name: str) -> None:
        ...

    def refresh_dependents(self) -> None:
        ...


class JsonLayerTable:
    """
    Layer names stored as {"layers": [32 strings]}.

    With path=None the table lives in memory only. Listeners added with
    add_listener() are called by refresh_dependents() after the cache
    has been reloaded.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        self._listeners: list[Callable[[list[str]], None]] = []
        self._names = self._load()

    def _load(self) -> list[str]:
        if self.path is None or not self.path.exists():
            return default_layer_names()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise LayerTableError(f"cannot read layer table {self.path}: {e}") from e

        names = data.get("layers") if isinstance(data, dict) else None
        if not isinstance(names, list) or len(names) != LAYER_COUNT:
            raise LayerTableError(f"layer table {self.path} must hold exactly {LAYER_COUNT} layers")
        return [name if isinstance(name, str) else "" for name in names]

    def _save(self) -> None:
        if self.path is None:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps({"layers": self._names}, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise LayerTableError(f"cannot write layer table {self.path}: {e}") from e

    def add_listener(self, listener: Callable[[list[str]], None]) -> None:
        self._listeners.append(listener)

    def read_all(self) -> list[str]:
        return list(self._names)

    def write(self, index: int, name: str) -> None:
        if not 0 <= index < LAYER_COUNT:
            raise LayerTableError(f"layer index {index} out of range")
        self._names[index] = name
        self._save()

    def refresh_dependents(self) -> None:
        if self.path is not None:
            self._names = self._load()
        for listener in self._listeners:
            listener(self.read_all())


# =============================================================================
# Registry
# =============================================================================

class LayerRegistry:
    """Validated reads and writes of the layer table, run on the main thread."""

    def __init__(self, table: LayerTable, main: MainThreadDispatcher):
        self.table = table
        self.main = main

    async def list_layers(self) -> LayerOutcome:
        def read() -> LayerOutcome:
            names = self._read()
            return LayerListing(tuple(LayerSlot(index, name) for index, name in enumerate(names)))

        return await self._run("list", read)

    async def set_name(self, index: int, name: str) -> LayerOutcome:
        def write() -> LayerOutcome:
            if not is_editable(index):
                return LayerRejected(RejectReason.NOT_EDITABLE, index, name=name)

            names = self._read()
            for other, existing in enumerate(names):
                if other != index and existing and existing == name:
                    return LayerRejected(RejectReason.NAME_CONFLICT, index, name=name, conflict_index=other)

            self.table.write(index, name)
            self.table.refresh_dependents()
            logger.info(f"Set layer {index} name to '{name}'")
            return LayerNamed(index, name)

        return await self._run("set", write)

    async def remove_name(self, index: int) -> LayerOutcome:
        def clear() -> LayerOutcome:
            if not is_editable(index):
                return LayerRejected(RejectReason.NOT_EDITABLE, index)

            previous = self._read()[index]
            if not previous:
                return LayerAlreadyEmpty(index)

            self.table.write(index, "")
            self.table.refresh_dependents()
            logger.info(f"Removed layer {index} name (was '{previous}')")
            return LayerCleared(index, previous)

        return await self._run("remove", clear)

    async def manage(
        self,
        operation: Optional[str],
        layer_index: Optional[int] = None,
        layer_name: Optional[str] = None
    ) -> LayerOutcome:
        """
        Run one layer operation by name.

        Args:
            operation: 'listlayers', 'setlayername' or 'removelayername' (any case)
            layer_index: Slot for set/remove
            layer_name: New name for set

        Returns:
            Layer outcome; argument problems are reported, never raised
        """
        op = operation.lower() if operation else None

        if op == "listlayers":
            return await self.list_layers()

        if op == "setlayername":
            if layer_index is None:
                return MissingArgument("layerIndex", op)
            if not is_editable(layer_index):
                return LayerRejected(RejectReason.NOT_EDITABLE, layer_index, name=layer_name)
            if not layer_name:
                return MissingArgument("layerName", op)
            return await self.set_name(layer_index, layer_name)

        if op == "removelayername":
            if layer_index is None:
                return MissingArgument("layerIndex", op)
            return await self.remove_name(layer_index)

        return UnknownOperation(operation)

    def _read(self) -> list[str]:
        names = self.table.read_all()
        if len(names) != LAYER_COUNT:
            raise LayerTableError(f"layer table holds {len(names)} slots, expected {LAYER_COUNT}")
        return names

    async def _run(self, label: str, fn: Callable[[], LayerOutcome]) -> LayerOutcome:
        try:
            return await self.main.run(fn)
        except Exception as e:
            logger.error(f"Layer {label} failed: {e}", exc_info=True)
            return Failure(ACTIVITY, str(e))
