"""
Patch Dispatcher - the optional-field patch pipeline shared by every tool.

THE PIPELINE:
1. Resolve the target object, then the facet the tool patches. Either
   miss returns immediately; nothing is handed to the main thread.
2. Hand one closure to the main thread dispatcher.
3. Inside it, apply the tool's fields in declared order, collecting a
   ChangeRecord.
4. Empty record -> NoChange. Otherwise mark the object dirty once -> Applied.
5. An exception part-way through aborts the remaining fields and becomes
   Failure. Fields applied before it stay applied and the object is not
   marked dirty.

reparent() runs the same resolve-then-hand-off shape for moving an object
between parents.
"""

import logging
from typing import Any, Mapping, Optional

from .fields import FieldSet, apply_fields
from .main_thread import MainThreadDispatcher
from .resolver import resolve_facet, resolve_object
from .types import (
    Applied,
    ChangeRecord,
    FacetNotFound,
    Failure,
    NoChange,
    NotFound,
    Outcome,
    Reparented,
)

logger = logging.getLogger("scenepatch.dispatch")


class PatchDispatcher:
    """Applies sparse field patches to objects of one scene."""

    def __init__(self, scene, main: MainThreadDispatcher):
        self.scene = scene
        self.main = main

    async def dispatch(
        self,
        object_name: str,
        field_set: FieldSet,
        values: Mapping[str, Any],
        activity: str
    ) -> Outcome:
        """
        Patch one facet of a named object.

        Args:
            object_name: Name or hierarchy path of the target
            field_set: Field declarations for the facet
            values: Tool parameters by name; None means leave unchanged
            activity: Phrase used in failure text, e.g. 'setting collider properties'

        Returns:
            Exactly one outcome
        """
        handle = resolve_object(self.scene, object_name)
        if isinstance(handle, NotFound):
            logger.warning(f"{activity}: GameObject '{object_name}' not found")
            return handle

        facet = resolve_facet(self.scene, handle, object_name, field_set.facet)
        if isinstance(facet, FacetNotFound):
            logger.warning(f"{activity}: '{object_name}' has no {field_set.facet.value}")
            return facet

        description = field_set.describe(facet, object_name)
        record = ChangeRecord()

        def patch() -> Outcome:
            apply_fields(field_set.target_of(facet), field_set.descriptors_for(facet), values, record)
            if len(record) == 0:
                return NoChange(description)
            self.scene.mark_dirty(handle)
            return Applied(description, record)

        try:
            outcome = await self.main.run(patch)
        except Exception as e:
            logger.error(
                f"Failed {activity} on '{object_name}' after {len(record)} applied field(s): {e}",
                exc_info=True
            )
            return Failure(activity, str(e))

        if isinstance(outcome, Applied):
            logger.info(f"Updated {description}: {outcome.changes.summary()}")
        else:
            logger.info(f"No changes applied to {description}")
        return outcome

    async def reparent(
        self,
        child_name: str,
        parent_name: Optional[str],
        world_position_stays: bool = True
    ) -> Outcome:
        """
        Move a named object under another, or to the scene root.

        Both names are resolved before the hand-off. An empty parent_name
        means the scene root.
        """
        activity = "setting parent-child relationship"

        child = resolve_object(self.scene, child_name, kind="Child GameObject")
        if isinstance(child, NotFound):
            logger.warning(f"{activity}: child '{child_name}' not found")
            return child

        parent = None
        if parent_name:
            parent = resolve_object(self.scene, parent_name, kind="Parent GameObject")
            if isinstance(parent, NotFound):
                logger.warning(f"{activity}: parent '{parent_name}' not found")
                return parent

        def move() -> Reparented:
            old_parent = child.parent
            self.scene.set_parent(child, parent, world_position_stays)
            self.scene.mark_dirty(child)
            return Reparented(
                child_name,
                old_parent.name if old_parent is not None else None,
                parent.name if parent is not None else None,
                world_position_stays,
            )

        try:
            outcome = await self.main.run(move)
        except Exception as e:
            logger.error(f"Failed {activity} for '{child_name}': {e}", exc_info=True)
            return Failure(activity, str(e))

        logger.info(f"Moved '{child_name}' to '{child.path}'")
        return outcome
