"""
Shared runtime for the scenepatch tools.

Tools do not own the scene or the main thread; the server builds one
EditorRuntime at startup and registers it here. Each tool looks it up
per call and goes through patch() or the layer registry.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from scenepatch import (
    FieldSet,
    LayerRegistry,
    LayerTable,
    MainThreadDispatcher,
    PatchDispatcher,
    SceneGraph,
    render,
)

logger = logging.getLogger("scenepatch.tools")


@dataclass
class EditorRuntime:
    """The collaborators every tool call needs."""
    scene: SceneGraph
    main: MainThreadDispatcher
    patcher: PatchDispatcher
    layers: LayerRegistry

    @classmethod
    def create(cls, scene: SceneGraph, table: LayerTable, main: MainThreadDispatcher) -> "EditorRuntime":
        return cls(
            scene=scene,
            main=main,
            patcher=PatchDispatcher(scene, main),
            layers=LayerRegistry(table, main),
        )


# Global runtime - set during server startup
_runtime: Optional[EditorRuntime] = None


def set_editor_runtime(runtime: Optional[EditorRuntime]) -> None:
    """
    Set the global editor runtime.
    Called from server.py during startup (and with None on shutdown).
    """
    global _runtime
    _runtime = runtime
    if runtime is not None:
        logger.info(f"Editor runtime registered with tools (scene '{runtime.scene.name}')")


def get_editor_runtime() -> EditorRuntime:
    """
    Get the registered runtime.

    Raises:
        RuntimeError: If the server has not registered one yet
    """
    if _runtime is None:
        raise RuntimeError("Editor runtime not initialized. Tools cannot reach the scene.")
    return _runtime


async def patch(object_name: str, field_set: FieldSet, activity: str, **values: Any) -> str:
    """Dispatch one patch through the registered runtime and render the outcome."""
    runtime = get_editor_runtime()
    supplied = {key: value for key, value in values.items() if value is not None}
    logger.debug(f"patch: object={object_name!r} facet={field_set.facet.value} values={supplied}")

    outcome = await runtime.patcher.dispatch(object_name, field_set, values, activity)
    return render(outcome)
