"""
Scenepatch - sparse, validated edits to a live scene graph.

Every editing tool follows the same pattern: resolve a named object,
hand one closure to the main thread, apply the supplied optional fields
under per-field validation, record what changed, mark the object dirty
and report one line of text. The layer registry shares the result idioms
but edits the project's 32-slot layer name table instead of an object.

Usage:
    from scenepatch import SceneGraph, MainThreadDispatcher, PatchDispatcher, render

    main = MainThreadDispatcher()
    main.start()
    outcome = await PatchDispatcher(scene, main).dispatch(name, field_set, values, activity)
    print(render(outcome))
"""

__version__ = "0.1.0"

# Type definitions
from .types import (
    FacetKind,
    FieldKind,
    Change,
    ChangeRecord,
    NotFound,
    FacetNotFound,
    NoChange,
    Applied,
    Reparented,
    Failure,
    Outcome,
    LayerSlot,
    LayerOutcome,
    LAYER_COUNT,
    FIRST_USER_LAYER,
)

# Errors
from .exceptions import ScenePatchError, LayerTableError, SceneLoadError

# Field patching
from .fields import (
    FieldDescriptor,
    FieldSet,
    apply_field,
    apply_fields,
    format_float,
    format_vector,
    format_bool,
    format_burst,
)

# Scene graph collaborator
from .scene import GameObject, SceneGraph, load_scene

# Execution
from .main_thread import MainThreadDispatcher
from .dispatcher import PatchDispatcher
from .layers import JsonLayerTable, LayerRegistry, LayerTable

# Rendering
from .results import render

__all__ = [
    # Types
    "FacetKind",
    "FieldKind",
    "Change",
    "ChangeRecord",
    "NotFound",
    "FacetNotFound",
    "NoChange",
    "Applied",
    "Reparented",
    "Failure",
    "Outcome",
    "LayerSlot",
    "LayerOutcome",
    "LAYER_COUNT",
    "FIRST_USER_LAYER",
    # Errors
    "ScenePatchError",
    "LayerTableError",
    "SceneLoadError",
    # Fields
    "FieldDescriptor",
    "FieldSet",
    "apply_field",
    "apply_fields",
    "format_float",
    "format_vector",
    "format_bool",
    "format_burst",
    # Scene
    "GameObject",
    "SceneGraph",
    "load_scene",
    # Execution
    "MainThreadDispatcher",
    "PatchDispatcher",
    "JsonLayerTable",
    "LayerRegistry",
    "LayerTable",
    # Rendering
    "render",
    "__version__",
]
