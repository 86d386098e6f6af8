"""
Field patch primitive.

A FieldDescriptor declares one optional, typed field of a component:
how to validate a supplied value (type check, range clamp, enum range,
minimum arity, paired lower bound) and how to render the stored value
for the change log. apply_field() applies one descriptor to one target.

Validation never raises. A value that cannot be used is skipped and the
rest of the request carries on.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .types import ChangeRecord, FacetKind, FieldKind


logger = logging.getLogger("scenepatch.dispatch")

VECTOR_ARITY = 3


# =============================================================================
# Rendering
# =============================================================================

def format_float(value: float) -> str:
    return f"{value:.2f}"


def format_vector(values: Sequence[float]) -> str:
    return "(" + ", ".join(format_float(v) for v in values) + ")"


def format_bool(value: bool) -> str:
    return "True" if value else "False"


def format_burst(burst: tuple[int, float]) -> str:
    count, time = burst
    return f"{count} at time {format_float(time)}"


# =============================================================================
# Results of a single field application
# =============================================================================

@dataclass(frozen=True)
class Skipped:
    """The field was absent or its value failed validation."""


@dataclass(frozen=True)
class Changed:
    rendered: str


SKIPPED = Skipped()
FieldResult = Union[Skipped, Changed]

# Sentinel returned by validation when a supplied value is unusable
_REJECT = object()


def _is_number(value: Any) -> bool:
    # bool is an int subclass; a flag is never a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite_number(value: Any) -> bool:
    if not _is_number(value):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to become a float
        return False


def _clamp(value, lower, upper):
    if lower is not None and value < lower:
        value = lower
    if upper is not None and value > upper:
        value = upper
    return value


# =============================================================================
# Field Descriptor
# =============================================================================

@dataclass(frozen=True)
class FieldDescriptor:
    """
    One patchable field.

    Attributes:
        label: Name used in the change log (editor spelling, e.g. 'maxDistance')
        attr: Attribute set on the target object
        kind: Declared value type
        param: Tool parameter supplying the value (defaults to attr)
        minimum: Lower clamp bound (FLOAT/INT/COLOR) or lowest allowed value (ENUM_INT)
        maximum: Upper clamp bound or highest allowed value
        minimum_from: Attribute on the same target whose current value is an
            additional lower bound; read at apply time, so a paired field
            declared earlier in the same call is already applied
        choices: Canonical names accepted by a CHOICE field
        build: Converts the validated value into the stored object
    """
    label: str
    attr: str
    kind: FieldKind
    param: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    minimum_from: Optional[str] = None
    choices: tuple[str, ...] = ()
    build: Optional[Callable[[Any], Any]] = None

    @property
    def parameter(self) -> str:
        return self.param or self.attr

    def validate(self, target: Any, value: Any) -> Any:
        """Return the value to store, or _REJECT if it must be skipped."""
        kind = self.kind

        if kind == FieldKind.BOOL:
            return value if isinstance(value, bool) else _REJECT

        if kind == FieldKind.FLOAT:
            if not _is_finite_number(value):
                return _REJECT
            lower = self.minimum
            if self.minimum_from is not None:
                paired = getattr(target, self.minimum_from)
                lower = paired if lower is None else max(lower, paired)
            return float(_clamp(float(value), lower, self.maximum))

        if kind == FieldKind.INT:
            if not isinstance(value, int) or isinstance(value, bool):
                return _REJECT
            return int(_clamp(value, self.minimum, self.maximum))

        if kind == FieldKind.ENUM_INT:
            if not isinstance(value, int) or isinstance(value, bool):
                return _REJECT
            if (self.minimum is not None and value < self.minimum) or \
                    (self.maximum is not None and value > self.maximum):
                return _REJECT
            return value

        if kind == FieldKind.VECTOR3:
            if not isinstance(value, (list, tuple)) or len(value) < VECTOR_ARITY:
                return _REJECT
            head = value[:VECTOR_ARITY]
            if not all(_is_finite_number(v) for v in head):
                return _REJECT
            return tuple(float(v) for v in head)

        if kind == FieldKind.COLOR:
            if not isinstance(value, (list, tuple)) or len(value) < 3:
                return _REJECT
            channels = list(value[:4])
            if not all(_is_finite_number(v) for v in channels):
                return _REJECT
            if len(channels) == 3:
                channels.append(1.0)
            return tuple(float(_clamp(v, 0.0, 1.0)) for v in channels)

        if kind == FieldKind.CHOICE:
            if not isinstance(value, str):
                return _REJECT
            folded = value.strip().casefold()
            for choice in self.choices:
                if choice.casefold() == folded:
                    return choice
            return _REJECT

        if kind == FieldKind.BURST:
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                return _REJECT
            count, time = value
            if not isinstance(count, int) or isinstance(count, bool) or not _is_finite_number(time):
                return _REJECT
            return (max(count, 0), max(float(time), 0.0))

        raise ValueError(f"Unsupported field kind: {kind}")

    def render(self, value: Any) -> str:
        kind = self.kind
        if kind == FieldKind.FLOAT:
            return format_float(value)
        if kind in (FieldKind.VECTOR3, FieldKind.COLOR):
            return format_vector(value)
        if kind == FieldKind.BOOL:
            return format_bool(value)
        if kind == FieldKind.BURST:
            return format_burst(value)
        return str(value)


def apply_field(target: Any, descriptor: FieldDescriptor, value: Any) -> FieldResult:
    """
    Apply one optional value to one field of target.

    Args:
        target: Object owning the attribute
        descriptor: Field declaration
        value: Supplied value, None when the caller left the field out

    Returns:
        SKIPPED if absent or rejected, otherwise Changed with the rendered stored value
    """
    if value is None:
        return SKIPPED

    validated = descriptor.validate(target, value)
    if validated is _REJECT:
        logger.debug(f"Skipped {descriptor.label}: unusable value {value!r}")
        return SKIPPED

    stored = descriptor.build(validated) if descriptor.build else validated
    setattr(target, descriptor.attr, stored)
    return Changed(descriptor.render(validated))


def apply_fields(
    target: Any,
    descriptors: Sequence[FieldDescriptor],
    values: Mapping[str, Any],
    record: ChangeRecord
) -> ChangeRecord:
    """Apply descriptors in declared order, appending every change to record."""
    for descriptor in descriptors:
        result = apply_field(target, descriptor, values.get(descriptor.parameter))
        if isinstance(result, Changed):
            logger.debug(f"Applied {descriptor.label}: {result.rendered}")
            record.add(descriptor.label, result.rendered)
    return record


# =============================================================================
# Field Sets
# =============================================================================

@dataclass(frozen=True)
class FieldSet:
    """
    The ordered field declarations one tool patches on a facet.

    Attributes:
        facet: Component kind the tool needs on its target
        descriptors: Fields for a facet with a single shape
        variants: Fields per concrete component type, for facets that are a
            tagged variant (colliders); keyed by the component's type_name
        module: Attribute of the facet holding the patched object (particle modules)
        label: Description label; defaults to the facet's type_name
    """
    facet: FacetKind
    descriptors: tuple[FieldDescriptor, ...] = ()
    variants: Optional[Mapping[str, tuple[FieldDescriptor, ...]]] = None
    module: Optional[str] = None
    label: Optional[str] = None

    @classmethod
    def for_variants(
        cls,
        facet: FacetKind,
        variants: Mapping[str, tuple[FieldDescriptor, ...]],
        universe: Sequence[type]
    ) -> "FieldSet":
        """Build a variant field set, refusing tables that miss a concrete type."""
        expected = {variant.type_name for variant in universe}
        if set(variants) != expected:
            missing = sorted(expected - set(variants))
            extra = sorted(set(variants) - expected)
            raise ValueError(f"{facet.value} variants not exhaustive: missing={missing} extra={extra}")
        return cls(facet=facet, variants=dict(variants))

    def target_of(self, facet: Any) -> Any:
        return getattr(facet, self.module) if self.module else facet

    def descriptors_for(self, facet: Any) -> tuple[FieldDescriptor, ...]:
        if self.variants is None:
            return self.descriptors
        return self.variants[facet.type_name]

    def describe(self, facet: Any, object_name: str) -> str:
        return f"{self.label or facet.type_name} on '{object_name}'"

    @property
    def parameters(self) -> set[str]:
        """Every tool parameter this set can consume."""
        groups = [self.descriptors] if self.variants is None else list(self.variants.values())
        return {descriptor.parameter for group in groups for descriptor in group}
