"""
THE ENGINEER: component property tools
"I need to tune how an object collides, sounds, renders or sits in space."
Patches: Collider (by shape), AudioSource, Renderer, Transform
Moves: GameObjects between parents

Every patch parameter except object_name is optional. Absent parameters leave
the property untouched; out-of-range numbers are clamped and the clamped
value is what gets reported.
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from langchain_core.tools import StructuredTool

from scenepatch import FacetKind, FieldDescriptor, FieldKind, FieldSet, render
from scenepatch.scene import COLLIDER_SHAPES

from .connection import get_editor_runtime, logger, patch


OBJECT_NAME_DESCRIPTION = "Name of the GameObject, or a hierarchy path like 'Parent/Child'."


# =============================================================================
# Field declarations
# =============================================================================

IS_TRIGGER = FieldDescriptor("isTrigger", "is_trigger", FieldKind.BOOL)
CENTER = FieldDescriptor("center", "center", FieldKind.VECTOR3)
RADIUS = FieldDescriptor("radius", "radius", FieldKind.FLOAT, minimum=0.0)

COLLIDER_FIELDS = FieldSet.for_variants(
    FacetKind.COLLIDER,
    {
        "BoxCollider": (
            IS_TRIGGER,
            CENTER,
            FieldDescriptor("size", "size", FieldKind.VECTOR3),
        ),
        "SphereCollider": (IS_TRIGGER, CENTER, RADIUS),
        "CapsuleCollider": (
            IS_TRIGGER,
            CENTER,
            RADIUS,
            FieldDescriptor("height", "height", FieldKind.FLOAT, minimum=0.0),
            FieldDescriptor("direction", "direction", FieldKind.ENUM_INT, minimum=0, maximum=2),
        ),
        "MeshCollider": (IS_TRIGGER,),
    },
    COLLIDER_SHAPES,
)

AUDIO_SOURCE_FIELDS = FieldSet(
    facet=FacetKind.AUDIO_SOURCE,
    descriptors=(
        FieldDescriptor("playOnAwake", "play_on_awake", FieldKind.BOOL),
        FieldDescriptor("loop", "loop", FieldKind.BOOL),
        FieldDescriptor("volume", "volume", FieldKind.FLOAT, minimum=0.0, maximum=1.0),
        FieldDescriptor("pitch", "pitch", FieldKind.FLOAT, minimum=0.1, maximum=3.0),
        FieldDescriptor("spatialBlend", "spatial_blend", FieldKind.FLOAT, minimum=0.0, maximum=1.0),
        FieldDescriptor("minDistance", "min_distance", FieldKind.FLOAT, minimum=0.0),
        # Must follow minDistance: clamps against its post-patch value
        FieldDescriptor("maxDistance", "max_distance", FieldKind.FLOAT, minimum=0.0, minimum_from="min_distance"),
    ),
)

RENDERER_FIELDS = FieldSet(
    facet=FacetKind.RENDERER,
    descriptors=(
        FieldDescriptor("castShadows", "cast_shadows", FieldKind.BOOL),
        FieldDescriptor("receiveShadows", "receive_shadows", FieldKind.BOOL),
        FieldDescriptor("enabled", "enabled", FieldKind.BOOL),
    ),
)

TRANSFORM_FIELDS = FieldSet(
    facet=FacetKind.TRANSFORM,
    descriptors=(
        FieldDescriptor("position", "position", FieldKind.VECTOR3),
        FieldDescriptor("rotation", "rotation", FieldKind.VECTOR3),
        FieldDescriptor("scale", "scale", FieldKind.VECTOR3),
    ),
)


# =============================================================================
# Collider
# =============================================================================

class ColliderSchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    is_trigger: Optional[bool] = Field(None, description="Make the collider a trigger.")
    center: Optional[List[float]] = Field(None, description="Collider center [x, y, z] in local space.")
    size: Optional[List[float]] = Field(None, description="BoxCollider size [x, y, z].")
    radius: Optional[float] = Field(None, description="Sphere/Capsule radius (>= 0).")
    height: Optional[float] = Field(None, description="CapsuleCollider height (>= 0).")
    direction: Optional[int] = Field(None, description="CapsuleCollider axis: 0=X, 1=Y, 2=Z.")


async def _set_collider_properties(
    object_name: str,
    is_trigger: Optional[bool] = None,
    center: Optional[List[float]] = None,
    size: Optional[List[float]] = None,
    radius: Optional[float] = None,
    height: Optional[float] = None,
    direction: Optional[int] = None
) -> str:
    return await patch(
        object_name, COLLIDER_FIELDS, "setting collider properties",
        is_trigger=is_trigger, center=center, size=size,
        radius=radius, height=height, direction=direction,
    )


set_collider_properties = StructuredTool.from_function(
    coroutine=_set_collider_properties,
    name="set_collider_properties",
    description="""Set properties of the Collider on a GameObject.

Which parameters apply depends on the collider shape:
- BoxCollider: is_trigger, center, size
- SphereCollider: is_trigger, center, radius
- CapsuleCollider: is_trigger, center, radius, height, direction
- MeshCollider: is_trigger

Parameters that don't fit the shape are ignored.""",
    args_schema=ColliderSchema,
)


# =============================================================================
# AudioSource
# =============================================================================

class AudioSourceSchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    play_on_awake: Optional[bool] = Field(None, description="Start playing when the scene loads.")
    loop: Optional[bool] = Field(None, description="Loop the clip.")
    volume: Optional[float] = Field(None, description="Volume, clamped to 0-1.")
    pitch: Optional[float] = Field(None, description="Pitch, clamped to 0.1-3.")
    spatial_blend: Optional[float] = Field(None, description="2D (0) to 3D (1) blend, clamped to 0-1.")
    min_distance: Optional[float] = Field(None, description="Distance where attenuation starts (>= 0).")
    max_distance: Optional[float] = Field(None, description="Distance where attenuation stops (>= min distance).")


async def _set_audio_source_properties(
    object_name: str,
    play_on_awake: Optional[bool] = None,
    loop: Optional[bool] = None,
    volume: Optional[float] = None,
    pitch: Optional[float] = None,
    spatial_blend: Optional[float] = None,
    min_distance: Optional[float] = None,
    max_distance: Optional[float] = None
) -> str:
    return await patch(
        object_name, AUDIO_SOURCE_FIELDS, "setting audio source properties",
        play_on_awake=play_on_awake, loop=loop, volume=volume, pitch=pitch,
        spatial_blend=spatial_blend, min_distance=min_distance, max_distance=max_distance,
    )


set_audio_source_properties = StructuredTool.from_function(
    coroutine=_set_audio_source_properties,
    name="set_audio_source_properties",
    description="""Set properties of the AudioSource on a GameObject.

Volume and spatial_blend are clamped to 0-1, pitch to 0.1-3.
max_distance is never set below min_distance (including a min_distance set in the same call).""",
    args_schema=AudioSourceSchema,
)


# =============================================================================
# Renderer
# =============================================================================

class RendererSchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    cast_shadows: Optional[bool] = Field(None, description="Cast shadows.")
    receive_shadows: Optional[bool] = Field(None, description="Receive shadows.")
    enabled: Optional[bool] = Field(None, description="Enable or disable the renderer.")


async def _set_renderer_properties(
    object_name: str,
    cast_shadows: Optional[bool] = None,
    receive_shadows: Optional[bool] = None,
    enabled: Optional[bool] = None
) -> str:
    return await patch(
        object_name, RENDERER_FIELDS, "setting renderer properties",
        cast_shadows=cast_shadows, receive_shadows=receive_shadows, enabled=enabled,
    )


set_renderer_properties = StructuredTool.from_function(
    coroutine=_set_renderer_properties,
    name="set_renderer_properties",
    description="Set shadow and visibility properties of the Renderer (Mesh, SkinnedMesh or Sprite) on a GameObject.",
    args_schema=RendererSchema,
)


# =============================================================================
# Transform
# =============================================================================

class TransformSchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    position: Optional[List[float]] = Field(None, description="Local position [x, y, z].")
    rotation: Optional[List[float]] = Field(None, description="Local rotation [x, y, z] in euler angles.")
    scale: Optional[List[float]] = Field(None, description="Local scale [x, y, z].")


async def _set_transform_properties(
    object_name: str,
    position: Optional[List[float]] = None,
    rotation: Optional[List[float]] = None,
    scale: Optional[List[float]] = None
) -> str:
    return await patch(
        object_name, TRANSFORM_FIELDS, "setting transform properties",
        position=position, rotation=rotation, scale=scale,
    )


set_transform_properties = StructuredTool.from_function(
    coroutine=_set_transform_properties,
    name="set_transform_properties",
    description="Set local position, rotation (euler angles) and scale of a GameObject. Vectors are [x, y, z].",
    args_schema=TransformSchema,
)


# =============================================================================
# Hierarchy
# =============================================================================

class ParentChildSchema(BaseModel):
    child_object_name: str = Field(..., description="Name of the GameObject to move, or a hierarchy path.")
    parent_object_name: Optional[str] = Field(
        None, description="Name or path of the new parent. Leave empty to move the object to the scene root."
    )
    world_position_stays: bool = Field(
        True, description="Keep the object's world position, rotation and scale (default: true)."
    )


async def _set_parent_child(
    child_object_name: str,
    parent_object_name: Optional[str] = None,
    world_position_stays: bool = True
) -> str:
    runtime = get_editor_runtime()
    logger.debug(
        f"set_parent_child: child={child_object_name!r} parent={parent_object_name!r} "
        f"world_position_stays={world_position_stays}"
    )
    outcome = await runtime.patcher.reparent(child_object_name, parent_object_name, world_position_stays)
    return render(outcome)


set_parent_child = StructuredTool.from_function(
    coroutine=_set_parent_child,
    name="set_parent_child",
    description="""Move a GameObject under a new parent, or to the scene root.

With world_position_stays (the default) the object keeps where it is in the world
and its local position, rotation and scale are recalculated. Without it the local
values are kept and the object moves along with its new parent.
An object cannot be moved under itself or one of its own children.""",
    args_schema=ParentChildSchema,
)
