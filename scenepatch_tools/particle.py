"""
THE PYROTECHNICIAN: particle system module tools
"I need to shape an effect."
Patches: ParticleSystem main, emission, shape and velocity-over-lifetime modules

The ParticleSystem is looked up on the named object first, then on its
children, so naming an effect's root object is enough.
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from langchain_core.tools import StructuredTool

from scenepatch import FacetKind, FieldDescriptor, FieldKind, FieldSet
from scenepatch.scene import Burst

from .connection import patch


OBJECT_NAME_DESCRIPTION = "Name of the GameObject containing the particle system."

# Editor ParticleSystemShapeType names
SHAPE_TYPES = (
    "Sphere",
    "Hemisphere",
    "Cone",
    "Donut",
    "Box",
    "Mesh",
    "ConeVolume",
    "Circle",
    "SingleSidedEdge",
    "MeshRenderer",
    "SkinnedMeshRenderer",
    "BoxShell",
    "BoxEdge",
    "Rectangle",
    "Sprite",
    "SpriteRenderer",
)


def _make_burst(pair: tuple) -> Burst:
    count, time = pair
    return Burst(count=count, time=time)


def _module_fields(module: str, *descriptors: FieldDescriptor) -> FieldSet:
    return FieldSet(
        facet=FacetKind.PARTICLE_SYSTEM,
        descriptors=descriptors,
        module=module,
        label=f"ParticleSystem {module} module",
    )


MAIN_FIELDS = _module_fields(
    "main",
    FieldDescriptor("duration", "duration", FieldKind.FLOAT, minimum=0.0),
    FieldDescriptor("loop", "loop", FieldKind.BOOL),
    FieldDescriptor("playOnAwake", "play_on_awake", FieldKind.BOOL),
    FieldDescriptor("startLifetime", "start_lifetime", FieldKind.FLOAT, minimum=0.0),
    FieldDescriptor("startSpeed", "start_speed", FieldKind.FLOAT),
    FieldDescriptor("startSize", "start_size", FieldKind.FLOAT, minimum=0.0),
    FieldDescriptor("startColor", "start_color", FieldKind.COLOR),
    FieldDescriptor("maxParticles", "max_particles", FieldKind.INT, minimum=0),
)

EMISSION_FIELDS = _module_fields(
    "emission",
    FieldDescriptor("enabled", "enabled", FieldKind.BOOL),
    FieldDescriptor("rateOverTime", "rate_over_time", FieldKind.FLOAT, minimum=0.0),
    FieldDescriptor("burst", "burst", FieldKind.BURST, build=_make_burst),
)

SHAPE_FIELDS = _module_fields(
    "shape",
    FieldDescriptor("shapeType", "shape_type", FieldKind.CHOICE, choices=SHAPE_TYPES),
    FieldDescriptor("radius", "radius", FieldKind.FLOAT, minimum=0.0),
    FieldDescriptor("boxSize", "box_size", FieldKind.VECTOR3),
)

VELOCITY_FIELDS = _module_fields(
    "velocity",
    FieldDescriptor("enabled", "enabled", FieldKind.BOOL),
    FieldDescriptor("linear", "linear", FieldKind.VECTOR3),
    FieldDescriptor("random", "random", FieldKind.VECTOR3),
)


# =============================================================================
# Main module
# =============================================================================

class ParticleMainSchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    duration: Optional[float] = Field(None, description="System duration in seconds (>= 0).")
    loop: Optional[bool] = Field(None, description="Loop the system.")
    play_on_awake: Optional[bool] = Field(None, description="Start playing when the scene loads.")
    start_lifetime: Optional[float] = Field(None, description="Particle lifetime in seconds (>= 0).")
    start_speed: Optional[float] = Field(None, description="Initial particle speed.")
    start_size: Optional[float] = Field(None, description="Initial particle size (>= 0).")
    start_color: Optional[List[float]] = Field(None, description="Start color [r, g, b] or [r, g, b, a], channels 0-1.")
    max_particles: Optional[int] = Field(None, description="Maximum live particles (>= 0).")


async def _set_particle_system_main(
    object_name: str,
    duration: Optional[float] = None,
    loop: Optional[bool] = None,
    play_on_awake: Optional[bool] = None,
    start_lifetime: Optional[float] = None,
    start_speed: Optional[float] = None,
    start_size: Optional[float] = None,
    start_color: Optional[List[float]] = None,
    max_particles: Optional[int] = None
) -> str:
    return await patch(
        object_name, MAIN_FIELDS, "setting particle system main properties",
        duration=duration, loop=loop, play_on_awake=play_on_awake,
        start_lifetime=start_lifetime, start_speed=start_speed, start_size=start_size,
        start_color=start_color, max_particles=max_particles,
    )


set_particle_system_main = StructuredTool.from_function(
    coroutine=_set_particle_system_main,
    name="set_particle_system_main",
    description="Set main module properties of a particle system (duration, looping, start values, max particles).",
    args_schema=ParticleMainSchema,
)


# =============================================================================
# Emission module
# =============================================================================

class ParticleEmissionSchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    enabled: Optional[bool] = Field(None, description="Enable emission.")
    rate_over_time: Optional[float] = Field(None, description="Particles emitted per second (>= 0).")
    burst_count: Optional[int] = Field(None, description="Particles in a single burst. Needs burst_time.")
    burst_time: Optional[float] = Field(None, description="Time of the burst in seconds. Needs burst_count.")


async def _set_particle_system_emission(
    object_name: str,
    enabled: Optional[bool] = None,
    rate_over_time: Optional[float] = None,
    burst_count: Optional[int] = None,
    burst_time: Optional[float] = None
) -> str:
    burst = (burst_count, burst_time) if burst_count is not None and burst_time is not None else None
    return await patch(
        object_name, EMISSION_FIELDS, "setting particle system emission properties",
        enabled=enabled, rate_over_time=rate_over_time, burst=burst,
    )


set_particle_system_emission = StructuredTool.from_function(
    coroutine=_set_particle_system_emission,
    name="set_particle_system_emission",
    description="""Set emission module properties of a particle system.

A burst is only set when both burst_count and burst_time are given; it replaces any existing burst.""",
    args_schema=ParticleEmissionSchema,
)


# =============================================================================
# Shape module
# =============================================================================

class ParticleShapeSchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    shape_type: Optional[str] = Field(None, description="Emitter shape: Sphere, Hemisphere, Cone, Box, Circle, Rectangle, ...")
    radius: Optional[float] = Field(None, description="Radius for round shapes (>= 0).")
    box_size: Optional[List[float]] = Field(None, description="Box size [x, y, z].")


async def _set_particle_system_shape(
    object_name: str,
    shape_type: Optional[str] = None,
    radius: Optional[float] = None,
    box_size: Optional[List[float]] = None
) -> str:
    return await patch(
        object_name, SHAPE_FIELDS, "setting particle system shape properties",
        shape_type=shape_type, radius=radius, box_size=box_size,
    )


set_particle_system_shape = StructuredTool.from_function(
    coroutine=_set_particle_system_shape,
    name="set_particle_system_shape",
    description="Set shape module properties of a particle system. Unknown shape names are ignored.",
    args_schema=ParticleShapeSchema,
)


# =============================================================================
# Velocity over lifetime module
# =============================================================================

class ParticleVelocitySchema(BaseModel):
    object_name: str = Field(..., description=OBJECT_NAME_DESCRIPTION)
    enabled: Optional[bool] = Field(None, description="Enable velocity over lifetime.")
    linear: Optional[List[float]] = Field(None, description="Linear velocity [x, y, z].")
    random: Optional[List[float]] = Field(None, description="Random velocity range [x, y, z].")


async def _set_particle_system_velocity(
    object_name: str,
    enabled: Optional[bool] = None,
    linear: Optional[List[float]] = None,
    random: Optional[List[float]] = None
) -> str:
    return await patch(
        object_name, VELOCITY_FIELDS, "setting particle system velocity properties",
        enabled=enabled, linear=linear, random=random,
    )


set_particle_system_velocity = StructuredTool.from_function(
    coroutine=_set_particle_system_velocity,
    name="set_particle_system_velocity",
    description="Set velocity over lifetime properties of a particle system.",
    args_schema=ParticleVelocitySchema,
)
