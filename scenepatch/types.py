"""
Type definitions for patch dispatch and the layer registry.

Every tool call reduces to exactly one outcome value defined here before
it is rendered to text by results.render().
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union


class FacetKind(str, Enum):
    """Component capability a tool patches on its target object."""
    TRANSFORM = "Transform"
    COLLIDER = "Collider"
    AUDIO_SOURCE = "AudioSource"
    RENDERER = "Renderer"
    PARTICLE_SYSTEM = "ParticleSystem"


class FieldKind(str, Enum):
    """Declared value type of a patchable field."""
    FLOAT = "float"
    VECTOR3 = "vector3"
    BOOL = "bool"
    INT = "int"
    ENUM_INT = "enum_int"
    COLOR = "color"
    CHOICE = "choice"
    BURST = "burst"


# =============================================================================
# Change Record
# =============================================================================

@dataclass(frozen=True)
class Change:
    """One altered field and its rendered new value."""
    field: str
    value: str

    def __str__(self) -> str:
        return f"{self.field}: {self.value}"


@dataclass
class ChangeRecord:
    """Ordered log of fields altered by one dispatch, in declaration order."""
    entries: list[Change] = field(default_factory=list)

    def add(self, field_name: str, rendered: str) -> None:
        self.entries.append(Change(field_name, rendered))

    def summary(self) -> str:
        return ", ".join(str(change) for change in self.entries)

    def fields(self) -> list[str]:
        return [change.field for change in self.entries]

    def __iter__(self) -> Iterator[Change]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


# =============================================================================
# Patch Outcomes
# =============================================================================

@dataclass(frozen=True)
class NotFound:
    """No object with the requested name exists."""
    kind: str
    name: str


@dataclass(frozen=True)
class FacetNotFound:
    """The object exists but lacks the component the tool needs."""
    object_name: str
    facet: str


@dataclass(frozen=True)
class NoChange:
    """Every supplied field was absent or skipped."""
    description: str


@dataclass(frozen=True)
class Applied:
    """At least one field changed; the owning scene was marked dirty."""
    description: str
    changes: ChangeRecord


@dataclass(frozen=True)
class Reparented:
    """An object moved under a new parent; None stands for the scene root."""
    child: str
    old_parent: Optional[str]
    new_parent: Optional[str]
    world_position_stays: bool


@dataclass(frozen=True)
class Failure:
    """Unexpected error while applying fields or touching a persisted table."""
    activity: str
    message: str


Outcome = Union[NotFound, FacetNotFound, NoChange, Applied, Reparented, Failure]


# =============================================================================
# Layer Registry
# =============================================================================

LAYER_COUNT = 32
FIRST_USER_LAYER = 8


@dataclass(frozen=True)
class LayerSlot:
    """One entry of the 32-slot layer table."""
    index: int
    name: str

    @property
    def is_builtin(self) -> bool:
        return self.index < FIRST_USER_LAYER

    @property
    def display_name(self) -> str:
        return self.name if self.name else "<unnamed>"


class RejectReason(str, Enum):
    """Why a layer write was refused before touching the table."""
    NOT_EDITABLE = "not editable"
    NAME_CONFLICT = "name conflict"


@dataclass(frozen=True)
class LayerListing:
    slots: tuple[LayerSlot, ...]


@dataclass(frozen=True)
class LayerNamed:
    index: int
    name: str


@dataclass(frozen=True)
class LayerCleared:
    index: int
    previous: str


@dataclass(frozen=True)
class LayerAlreadyEmpty:
    """Removing the name of an unnamed slot is a no-op, not an error."""
    index: int


@dataclass(frozen=True)
class LayerRejected:
    reason: RejectReason
    index: int
    name: Optional[str] = None
    conflict_index: Optional[int] = None


@dataclass(frozen=True)
class MissingArgument:
    argument: str
    operation: str


@dataclass(frozen=True)
class UnknownOperation:
    operation: Optional[str]


LayerOutcome = Union[
    LayerListing,
    LayerNamed,
    LayerCleared,
    LayerAlreadyEmpty,
    LayerRejected,
    MissingArgument,
    UnknownOperation,
    Failure,
]
