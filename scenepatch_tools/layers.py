"""
THE REGISTRAR: manage_project_layers
"I need to name the project's layers."
Consumes: the 32-slot layer table (0-7 built in, 8-31 editable)
"""
from typing import Optional
from pydantic import BaseModel, Field
from langchain_core.tools import StructuredTool

from scenepatch import render

from .connection import get_editor_runtime, logger


class LayersSchema(BaseModel):
    operation: Optional[str] = Field(
        None, description="Operation to perform: 'listlayers', 'setlayername', or 'removelayername'."
    )
    layer_index: Optional[int] = Field(None, description="Layer index (8-31) for setlayername/removelayername.")
    layer_name: Optional[str] = Field(None, description="New layer name for setlayername.")


async def _manage_project_layers(
    operation: Optional[str] = None,
    layer_index: Optional[int] = None,
    layer_name: Optional[str] = None
) -> str:
    runtime = get_editor_runtime()
    logger.debug(f"manage_project_layers: operation={operation!r} index={layer_index} name={layer_name!r}")
    outcome = await runtime.layers.manage(operation, layer_index, layer_name)
    return render(outcome)


manage_project_layers = StructuredTool.from_function(
    coroutine=_manage_project_layers,
    name="manage_project_layers",
    description="""Manage project layers (list, set names, remove names).

Operations:
- 'listlayers': Show all 32 layers.
- 'setlayername': Name a user layer. Requires layer_index (8-31) and layer_name. Names must be unique.
- 'removelayername': Clear a user layer's name. Requires layer_index (8-31).""",
    args_schema=LayersSchema,
)
