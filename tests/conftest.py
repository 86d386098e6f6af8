import asyncio

import pytest

from scenepatch import JsonLayerTable, MainThreadDispatcher, SceneGraph
from scenepatch.scene import (
    AudioSource,
    BoxCollider,
    CapsuleCollider,
    MeshCollider,
    MeshRenderer,
    ParticleSystem,
    SkinnedMeshRenderer,
    SphereCollider,
)
from scenepatch_tools import EditorRuntime, set_editor_runtime


def build_sample_scene() -> SceneGraph:
    scene = SceneGraph(name="Arena")
    scene.create("Crate", BoxCollider(), MeshRenderer())
    scene.create("Ball", SphereCollider())
    scene.create("Pill", CapsuleCollider())
    scene.create("Rock", MeshCollider())
    scene.create("Speaker", AudioSource())
    hero = scene.create("Hero", SkinnedMeshRenderer())
    scene.create("Sword", BoxCollider(), parent=hero)
    effects = scene.create("Effects")
    scene.create("Sparks", ParticleSystem(), parent=effects)
    scene.create("Empty")
    return scene


@pytest.fixture()
def scene():
    return build_sample_scene()


@pytest.fixture()
def layer_table():
    return JsonLayerTable()


@pytest.fixture()
def invoke(scene, layer_table):
    """Run one tool against the sample scene on a fresh main thread dispatcher."""

    def _invoke(t, **params):
        async def go():
            main = MainThreadDispatcher()
            set_editor_runtime(EditorRuntime.create(scene, layer_table, main))
            main.start()
            try:
                return await t.ainvoke(params)
            finally:
                await main.stop()

        return asyncio.run(go())

    yield _invoke
    set_editor_runtime(None)
