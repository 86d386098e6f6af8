"""
HTTP routes for invoking tools.

Lets non-agent callers (scripts, tests, other hosts) run any registered
tool with a JSON body of parameters and get the rendered text back.
"""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from . import scenepatch_tools

logger = logging.getLogger("scenepatch.tools")

router = APIRouter(tags=["Tools"])

_tools_by_name = {t.name: t for t in scenepatch_tools}


@router.get("/tools")
async def list_tools() -> JSONResponse:
    """
    Describe every registered tool.

    Returns:
        JSON list of {name, description, parameters} with a JSON schema per tool
    """
    return JSONResponse(content=[
        {
            "name": t.name,
            "description": t.description,
            "parameters": t.args_schema.model_json_schema(),
        }
        for t in scenepatch_tools
    ])


@router.post("/tools/{tool_name}")
async def invoke_tool(tool_name: str, body: dict) -> JSONResponse:
    """
    Run one tool.

    Args:
        tool_name: Registered tool name (e.g., "set_audio_source_properties")
        body: Tool parameters

    Returns:
        {"tool": name, "result": text}
    """
    t = _tools_by_name.get(tool_name)
    if t is None:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")

    try:
        result = await t.ainvoke(body)
    except ValidationError as e:
        logger.warning(f"Invalid parameters for {tool_name}: {e.error_count()} error(s)")
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return JSONResponse(content={"tool": tool_name, "result": result})
