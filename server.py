"""
Scenepatch Tool Server

This server hosts the scene editing tools:
1. One scene graph, loaded from a JSON description or empty
2. The persisted project layer table
3. The main thread dispatcher every mutation is funneled through
4. HTTP routes to list and invoke the tools

Architecture:
┌─────────────────────────────────────────────────────────────┐
│                       server.py                             │
├─────────────────────────────────────────────────────────────┤
│  GET  /tools              ←── tool names + parameter schemas│
│  POST /tools/{tool_name}  ←── run a tool, get its text back │
│                                                             │
│  ┌─────────────────┐      ┌─────────────────┐               │
│  │ scenepatch_tools│ ───► │ PatchDispatcher │               │
│  │ (StructuredTool)│      │ LayerRegistry   │               │
│  └─────────────────┘      └────────┬────────┘               │
│                                    ▼                        │
│                          ┌─────────────────────┐            │
│                          │ MainThreadDispatcher│            │
│                          │ (single worker)     │            │
│                          └─────────┬───────────┘            │
│                                    ▼                        │
│                     SceneGraph + JsonLayerTable             │
└─────────────────────────────────────────────────────────────┘
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scenepatch import JsonLayerTable, MainThreadDispatcher, SceneGraph, load_scene
from scenepatch.config import Config, level_from_name, print_startup_banner, setup_logging
from scenepatch_tools import EditorRuntime, set_editor_runtime, scenepatch_tools
from scenepatch_tools.router import router as tools_router


# =============================================================================
# Global Configuration
# =============================================================================

config = Config.from_env()

setup_logging(level=level_from_name(config.server.log_level))
logger = logging.getLogger("scenepatch.server")

# Runtime is built during startup
runtime: Optional[EditorRuntime] = None


def build_runtime(cfg: Config) -> EditorRuntime:
    """Create the scene, layer table and main thread dispatcher from configuration."""
    if cfg.editor.scene_file:
        scene = load_scene(cfg.editor.scene_file)
    else:
        scene = SceneGraph()
        logger.info("No scene file configured, starting with an empty scene")

    table = JsonLayerTable(cfg.editor.layer_table_path)
    main = MainThreadDispatcher(max_size=cfg.editor.main_thread_queue_size)
    return EditorRuntime.create(scene, table, main)


# =============================================================================
# FastAPI Application
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    global runtime

    runtime = build_runtime(config)
    runtime.main.start()
    set_editor_runtime(runtime)
    logger.info(f"Registered {len(scenepatch_tools)} tools")

    print_startup_banner(config.server.host, config.server.port, runtime.scene.name)
    logger.info("Server ready")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await runtime.main.stop()
    set_editor_runtime(None)
    runtime = None
    logger.info("Goodbye! 👋")


app = FastAPI(
    title="Scenepatch Tool Server",
    description="Sparse, validated property edits for a live scene",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=config.server.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tools_router)


# =============================================================================
# Health Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "main_thread_running": runtime is not None and runtime.main.is_running,
    }


@app.get("/status")
async def status():
    """Detailed status endpoint."""
    if runtime is None:
        return {"status": "starting"}

    return {
        "status": "running",
        "scene": {
            "name": runtime.scene.name,
            "objects": sum(1 for _ in runtime.scene.walk()),
            "dirty": runtime.scene.is_dirty,
        },
        "main_thread": {
            "running": runtime.main.is_running,
            "pending": runtime.main.pending,
        },
        "tools": [t.name for t in scenepatch_tools],
    }


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",  # Reduce Uvicorn noise, our logger handles it
        access_log=False,
    )
