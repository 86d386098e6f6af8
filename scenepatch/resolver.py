"""
Target and facet resolution.

Runs on the caller's context before any hand-off: a request naming a
missing object or facet is answered without ever touching the main thread.
"""

import logging
from typing import Any, Union

from .types import FacetKind, FacetNotFound, NotFound

logger = logging.getLogger("scenepatch.dispatch")


def resolve_object(scene, name: str, kind: str = "GameObject") -> Union[Any, NotFound]:
    """
    Find a GameObject by name or hierarchy path.

    A name containing '/' is treated as a path from the scene roots with
    exact segment matching. Otherwise the first exact match in hierarchy
    order wins, falling back to a case-insensitive match. kind names the
    role of the object in the NotFound result.
    """
    if name and "/" in name:
        handle = scene.find_by_path(name)
    else:
        handle = scene.find_by_name(name)

    if handle is None:
        logger.debug(f"{kind} '{name}' not found")
        return NotFound(kind, name)
    return handle


def resolve_facet(scene, handle, object_name: str, kind: FacetKind) -> Union[Any, FacetNotFound]:
    facet = scene.get_facet(handle, kind)
    if facet is None:
        logger.debug(f"GameObject '{object_name}' has no {kind.value}")
        return FacetNotFound(object_name, kind.value)
    return facet
