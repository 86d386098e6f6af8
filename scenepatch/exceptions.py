"""
Exceptions raised by the editor-side collaborators.

Patch outcomes never cross the tool boundary as exceptions; these are
raised by the scene graph and layer table and converted into Failure
results by the dispatcher and the layer registry.
"""


class ScenePatchError(Exception):
    """Base exception for all scenepatch errors."""


class LayerTableError(ScenePatchError):
    """The persisted layer table could not be read or written."""


class SceneLoadError(ScenePatchError):
    """A scene description is malformed."""
