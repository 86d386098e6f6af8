"""
Result formatter: every outcome becomes one line (or block) of text.

These strings are the whole observable contract of a tool call.
"""

from .types import (
    FIRST_USER_LAYER,
    Applied,
    FacetKind,
    FacetNotFound,
    Failure,
    LayerAlreadyEmpty,
    LayerCleared,
    LayerListing,
    LayerNamed,
    LayerRejected,
    MissingArgument,
    NoChange,
    NotFound,
    RejectReason,
    Reparented,
    UnknownOperation,
)


def article(word: str) -> str:
    return "an" if word[:1].lower() in "aeiou" else "a"


def _parent_label(name) -> str:
    return f"'{name}'" if name is not None else "root"


def render(outcome) -> str:
    """Render a patch or layer outcome to its fixed text template."""
    if isinstance(outcome, NotFound):
        return f"Error: {outcome.kind} '{outcome.name}' not found"

    if isinstance(outcome, FacetNotFound):
        if outcome.facet == FacetKind.PARTICLE_SYSTEM.value:
            # Searched on descendants as well
            return f"Error: No ParticleSystem found on GameObject '{outcome.object_name}'"
        return (
            f"Error: GameObject '{outcome.object_name}' does not have "
            f"{article(outcome.facet)} {outcome.facet} component"
        )

    if isinstance(outcome, NoChange):
        return f"No changes applied to {outcome.description}"

    if isinstance(outcome, Applied):
        return f"Successfully updated {outcome.description}: {outcome.changes.summary()}"

    if isinstance(outcome, Reparented):
        return (
            f"Successfully moved '{outcome.child}' from {_parent_label(outcome.old_parent)} "
            f"to {_parent_label(outcome.new_parent)} (worldPositionStays: {outcome.world_position_stays})"
        )

    if isinstance(outcome, Failure):
        return f"Error {outcome.activity}: {outcome.message}"

    return _render_layer(outcome)


def _render_layer(outcome) -> str:
    if isinstance(outcome, LayerListing):
        lines = ["Project Layers (0-31):", "Built-in layers (0-7, non-editable):"]
        lines += [f"  {slot.index}: {slot.display_name}" for slot in outcome.slots if slot.is_builtin]
        lines.append("User layers (8-31, editable):")
        lines += [f"  {slot.index}: {slot.display_name}" for slot in outcome.slots if not slot.is_builtin]
        return "\n".join(lines)

    if isinstance(outcome, LayerNamed):
        return f"Successfully set layer {outcome.index} name to '{outcome.name}'"

    if isinstance(outcome, LayerCleared):
        return f"Successfully removed layer name from layer {outcome.index} (was '{outcome.previous}')"

    if isinstance(outcome, LayerAlreadyEmpty):
        return f"Layer {outcome.index} already has no name"

    if isinstance(outcome, LayerRejected):
        if outcome.reason == RejectReason.NOT_EDITABLE:
            return (
                f"Error: Layer {outcome.index} is not editable. "
                f"Only layers {FIRST_USER_LAYER}-31 can be modified"
            )
        return f"Error: Layer name '{outcome.name}' already exists on layer {outcome.conflict_index}"

    if isinstance(outcome, MissingArgument):
        return f"Error: {outcome.argument} is required for {outcome.operation} operation"

    if isinstance(outcome, UnknownOperation):
        return "Error: operation must be 'listlayers', 'setlayername', or 'removelayername'"

    raise TypeError(f"Cannot render outcome of type {type(outcome).__name__}")
