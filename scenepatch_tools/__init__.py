"""
Scenepatch Tools Package - editor property tools exposed to agents and HTTP callers.

Each tool takes an object name plus sparse optional parameters and returns
one line of text describing what changed (or why nothing did).

Tools:
- set_collider_properties: Box/Sphere/Capsule/Mesh collider settings
- set_audio_source_properties: AudioSource playback and attenuation
- set_renderer_properties: Renderer shadows and visibility
- set_transform_properties: local position, rotation and scale
- set_parent_child: move an object under a new parent or to the root
- set_particle_system_main / _emission / _shape / _velocity: particle modules
- manage_project_layers: the project's layer name table
"""

from .connection import EditorRuntime, set_editor_runtime, get_editor_runtime
from .component import (
    set_collider_properties,
    set_audio_source_properties,
    set_renderer_properties,
    set_transform_properties,
    set_parent_child,
)
from .particle import (
    set_particle_system_main,
    set_particle_system_emission,
    set_particle_system_shape,
    set_particle_system_velocity,
)
from .layers import manage_project_layers

# Export the tools as a list for easy registration
scenepatch_tools = [
    set_collider_properties,
    set_audio_source_properties,
    set_renderer_properties,
    set_transform_properties,
    set_parent_child,
    set_particle_system_main,
    set_particle_system_emission,
    set_particle_system_shape,
    set_particle_system_velocity,
    manage_project_layers,
]

__all__ = [
    # Runtime
    "EditorRuntime",
    "set_editor_runtime",
    "get_editor_runtime",
    # Individual tools
    "set_collider_properties",
    "set_audio_source_properties",
    "set_renderer_properties",
    "set_transform_properties",
    "set_parent_child",
    "set_particle_system_main",
    "set_particle_system_emission",
    "set_particle_system_shape",
    "set_particle_system_velocity",
    "manage_project_layers",
    # Tool collection
    "scenepatch_tools",
]
