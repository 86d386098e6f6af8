"""
In-process scene graph.

Stands in for the editor's live object graph: GameObjects with a Transform,
a component list and ordered children. Provides the lookup, facet access
and dirty-marking the patch dispatcher relies on. Tests and the standalone
server use it directly; a real editor bridge supplies the same methods.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Iterator, Optional, Union

from . import spatial
from .exceptions import SceneLoadError, ScenePatchError
from .types import FacetKind


logger = logging.getLogger("scenepatch.scene")

Vector3 = tuple[float, float, float]


# =============================================================================
# Components
# =============================================================================

@dataclass
class Transform:
    type_name: ClassVar[str] = "Transform"
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)


@dataclass
class Collider:
    type_name: ClassVar[str] = "Collider"
    is_trigger: bool = False


@dataclass
class BoxCollider(Collider):
    type_name: ClassVar[str] = "BoxCollider"
    center: Vector3 = (0.0, 0.0, 0.0)
    size: Vector3 = (1.0, 1.0, 1.0)


@dataclass
class SphereCollider(Collider):
    type_name: ClassVar[str] = "SphereCollider"
    center: Vector3 = (0.0, 0.0, 0.0)
    radius: float = 0.5


@dataclass
class CapsuleCollider(Collider):
    type_name: ClassVar[str] = "CapsuleCollider"
    center: Vector3 = (0.0, 0.0, 0.0)
    radius: float = 0.5
    height: float = 2.0
    direction: int = 1  # 0=X, 1=Y, 2=Z


@dataclass
class MeshCollider(Collider):
    type_name: ClassVar[str] = "MeshCollider"
    convex: bool = False


COLLIDER_SHAPES = (BoxCollider, SphereCollider, CapsuleCollider, MeshCollider)


@dataclass
class AudioSource:
    type_name: ClassVar[str] = "AudioSource"
    play_on_awake: bool = True
    loop: bool = False
    volume: float = 1.0
    pitch: float = 1.0
    spatial_blend: float = 0.0
    min_distance: float = 1.0
    max_distance: float = 500.0


@dataclass
class Renderer:
    type_name: ClassVar[str] = "Renderer"
    cast_shadows: bool = True
    receive_shadows: bool = True
    enabled: bool = True


@dataclass
class MeshRenderer(Renderer):
    type_name: ClassVar[str] = "MeshRenderer"


@dataclass
class SkinnedMeshRenderer(Renderer):
    type_name: ClassVar[str] = "SkinnedMeshRenderer"


@dataclass
class SpriteRenderer(Renderer):
    type_name: ClassVar[str] = "SpriteRenderer"
    cast_shadows: bool = False


@dataclass
class MainModule:
    duration: float = 5.0
    loop: bool = True
    play_on_awake: bool = True
    start_lifetime: float = 5.0
    start_speed: float = 5.0
    start_size: float = 1.0
    start_color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    max_particles: int = 1000


@dataclass
class Burst:
    count: int
    time: float


@dataclass
class EmissionModule:
    enabled: bool = True
    rate_over_time: float = 10.0
    burst: Optional[Burst] = None


@dataclass
class ShapeModule:
    shape_type: str = "Cone"
    radius: float = 1.0
    box_size: Vector3 = (1.0, 1.0, 1.0)


@dataclass
class VelocityModule:
    enabled: bool = False
    linear: Vector3 = (0.0, 0.0, 0.0)
    random: Vector3 = (0.0, 0.0, 0.0)


@dataclass
class ParticleSystem:
    type_name: ClassVar[str] = "ParticleSystem"
    main: MainModule = field(default_factory=MainModule)
    emission: EmissionModule = field(default_factory=EmissionModule)
    shape: ShapeModule = field(default_factory=ShapeModule)
    velocity: VelocityModule = field(default_factory=VelocityModule)


COMPONENT_TYPES = {
    cls.type_name: cls
    for cls in (
        BoxCollider, SphereCollider, CapsuleCollider, MeshCollider,
        AudioSource, MeshRenderer, SkinnedMeshRenderer, SpriteRenderer,
        ParticleSystem,
    )
}

PARTICLE_MODULES = {
    "main": MainModule,
    "emission": EmissionModule,
    "shape": ShapeModule,
    "velocity": VelocityModule,
}

# Facet kind -> component base class looked up on the object itself
_COMPONENT_FACETS = {
    FacetKind.COLLIDER: Collider,
    FacetKind.AUDIO_SOURCE: AudioSource,
    FacetKind.RENDERER: Renderer,
}


# =============================================================================
# GameObject
# =============================================================================

@dataclass(eq=False)
class GameObject:
    """A node in the scene hierarchy. Compared by identity."""
    name: str
    transform: Transform = field(default_factory=Transform)
    components: list = field(default_factory=list)
    children: list["GameObject"] = field(default_factory=list)
    parent: Optional["GameObject"] = field(default=None, repr=False)

    def add_component(self, component: Any) -> Any:
        self.components.append(component)
        return component

    def add_child(self, child: "GameObject") -> "GameObject":
        child.parent = self
        self.children.append(child)
        return child

    def get_component(self, cls: type) -> Optional[Any]:
        for component in self.components:
            if isinstance(component, cls):
                return component
        return None

    def get_component_in_children(self, cls: type) -> Optional[Any]:
        """First matching component on this object or any descendant, depth-first."""
        for node in self.walk():
            component = node.get_component(cls)
            if component is not None:
                return component
        return None

    def walk(self) -> Iterator["GameObject"]:
        yield self
        for child in self.children:
            yield from child.walk()

    @property
    def path(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent.path}/{self.name}"


# =============================================================================
# Scene Graph
# =============================================================================

class SceneGraph:
    """
    Live object graph for one open scene.

    Lookup mirrors the editor: exact name first, then case-insensitive,
    both in hierarchy order. Mutation is only legal from the main thread
    dispatcher; this class does no locking of its own.
    """

    def __init__(self, name: str = "SampleScene"):
        self.name = name
        self.roots: list[GameObject] = []
        self._dirty_objects: set[int] = set()

    def add(self, obj: GameObject, parent: Optional[GameObject] = None) -> GameObject:
        if parent is None:
            obj.parent = None
            self.roots.append(obj)
        else:
            parent.add_child(obj)
        return obj

    def set_parent(
        self,
        child: GameObject,
        parent: Optional[GameObject],
        world_position_stays: bool = True
    ) -> None:
        """
        Move child (with its subtree) under parent, or to the scene root when
        parent is None. The child is appended after the new parent's
        existing children.

        Raises:
            ScenePatchError: If parent is child or one of its descendants,
                or world_position_stays is set and parent has a zero scale axis
        """
        if parent is not None and any(node is parent for node in child.walk()):
            raise ScenePatchError(f"Cannot parent '{child.name}' under itself or one of its descendants")

        local = None
        if world_position_stays:
            local = spatial.local_frame_under(child, parent)
            if local is None:
                raise ScenePatchError(f"Cannot keep world position of '{child.name}' under a zero-scaled parent")

        siblings = child.parent.children if child.parent is not None else self.roots
        siblings.remove(child)
        self.add(child, parent=parent)

        if local is not None:
            child.transform.position, child.transform.rotation, child.transform.scale = local
        logger.debug(f"Moved '{child.name}' to '{child.path}'")

    def create(self, name: str, *components: Any, parent: Optional[GameObject] = None) -> GameObject:
        """Create a GameObject with the given components and add it to the scene."""
        obj = GameObject(name=name)
        for component in components:
            obj.add_component(component)
        return self.add(obj, parent=parent)

    def walk(self) -> Iterator[GameObject]:
        for root in self.roots:
            yield from root.walk()

    def find_by_name(self, name: str) -> Optional[GameObject]:
        if not name:
            return None

        for obj in self.walk():
            if obj.name == name:
                return obj

        folded = name.casefold()
        for obj in self.walk():
            if obj.name.casefold() == folded:
                return obj

        return None

    def find_by_path(self, path: str) -> Optional[GameObject]:
        """Resolve 'Root/Child/Leaf' by exact segment names from the scene roots."""
        segments = [segment for segment in path.strip("/").split("/") if segment]
        if not segments:
            return None

        candidates = self.roots
        found: Optional[GameObject] = None
        for segment in segments:
            found = next((obj for obj in candidates if obj.name == segment), None)
            if found is None:
                return None
            candidates = found.children
        return found

    def get_facet(self, handle: GameObject, kind: FacetKind) -> Optional[Any]:
        if kind == FacetKind.TRANSFORM:
            return handle.transform
        if kind == FacetKind.PARTICLE_SYSTEM:
            return handle.get_component_in_children(ParticleSystem)
        return handle.get_component(_COMPONENT_FACETS[kind])

    def mark_dirty(self, handle: GameObject) -> None:
        if id(handle) not in self._dirty_objects:
            logger.debug(f"Marked '{handle.path}' dirty in scene '{self.name}'")
        self._dirty_objects.add(id(handle))

    def is_object_dirty(self, handle: GameObject) -> bool:
        return id(handle) in self._dirty_objects

    @property
    def is_dirty(self) -> bool:
        return bool(self._dirty_objects)

    def clear_dirty(self) -> None:
        """Forget dirty state, as after a scene save."""
        self._dirty_objects.clear()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> "SceneGraph":
        """
        Build a scene from a plain description.

        Args:
            data: {"name": str, "objects": [{"name", "components", "children"}]}

        Returns:
            Populated SceneGraph

        Raises:
            SceneLoadError: If the description is malformed
        """
        if not isinstance(data, dict):
            raise SceneLoadError("scene description must be an object")

        scene = cls(name=data.get("name", "SampleScene"))
        for spec in data.get("objects", []):
            scene.add(_build_object(spec))
        return scene


def load_scene(path: Union[str, Path]) -> SceneGraph:
    """Load a scene description from a JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SceneLoadError(f"cannot read scene file {path}: {e}") from e

    scene = SceneGraph.from_dict(data)
    logger.info(f"Loaded scene '{scene.name}' from {path} ({sum(1 for _ in scene.walk())} objects)")
    return scene


def _build_object(spec: dict) -> GameObject:
    if not isinstance(spec, dict) or not spec.get("name"):
        raise SceneLoadError(f"object entry needs a name: {spec!r}")

    obj = GameObject(name=spec["name"])
    for component_spec in spec.get("components", []):
        component = _build_component(component_spec)
        if isinstance(component, Transform):
            obj.transform = component
        else:
            obj.add_component(component)

    for child_spec in spec.get("children", []):
        obj.add_child(_build_object(child_spec))
    return obj


def _build_component(spec: dict) -> Any:
    if not isinstance(spec, dict) or "type" not in spec:
        raise SceneLoadError(f"component entry needs a type: {spec!r}")

    values = {key: value for key, value in spec.items() if key != "type"}
    type_name = spec["type"]

    if type_name == "Transform":
        return _construct(Transform, values)

    cls = COMPONENT_TYPES.get(type_name)
    if cls is None:
        raise SceneLoadError(f"unknown component type: {type_name!r}")

    if cls is ParticleSystem:
        modules = {}
        for module_name, module_values in values.items():
            module_cls = PARTICLE_MODULES.get(module_name)
            if module_cls is None:
                raise SceneLoadError(f"unknown ParticleSystem module: {module_name!r}")
            if module_cls is EmissionModule and module_values.get("burst") is not None:
                module_values = {**module_values, "burst": _construct(Burst, module_values["burst"])}
            modules[module_name] = _construct(module_cls, module_values)
        return ParticleSystem(**modules)

    return _construct(cls, values)


def _construct(cls: type, values: dict) -> Any:
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise SceneLoadError(f"{cls.__name__} has no field(s) {sorted(unknown)}")
    return cls(**{key: tuple(value) if isinstance(value, list) else value for key, value in values.items()})
