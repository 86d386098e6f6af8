"""Tests for the patch dispatcher pipeline."""

import asyncio
import dataclasses

from scenepatch import (
    Applied,
    FacetNotFound,
    Failure,
    MainThreadDispatcher,
    NoChange,
    NotFound,
    PatchDispatcher,
    Reparented,
    SceneGraph,
    render,
)
from scenepatch.scene import AudioSource, Transform
from scenepatch_tools.component import (
    AUDIO_SOURCE_FIELDS,
    COLLIDER_FIELDS,
    RENDERER_FIELDS,
    TRANSFORM_FIELDS,
)


class CountingMain:
    """Main thread stand-in that runs inline and counts hand-offs."""

    def __init__(self):
        self.handoffs = 0

    async def run(self, fn):
        self.handoffs += 1
        return fn()


class LockedPitchSource(AudioSource):
    """AudioSource whose pitch refuses writes once locked."""

    def __setattr__(self, name, value):
        if name == "pitch" and self.__dict__.get("locked"):
            raise RuntimeError("pitch is locked")
        super().__setattr__(name, value)


class JournalTransform(Transform):
    """Transform that logs every attribute write to a shared journal."""

    def __init__(self, journal):
        super().__init__()
        self.__dict__["journal"] = journal

    def __setattr__(self, name, value):
        journal = self.__dict__.get("journal")
        if journal is not None:
            journal.append((name, value))
        super().__setattr__(name, value)


def dispatch(scene, name, field_set, activity="patching", main=None, **values):
    async def go():
        dispatcher_main = main or MainThreadDispatcher()
        if isinstance(dispatcher_main, MainThreadDispatcher):
            dispatcher_main.start()
        try:
            return await PatchDispatcher(scene, dispatcher_main).dispatch(name, field_set, values, activity)
        finally:
            if isinstance(dispatcher_main, MainThreadDispatcher):
                await dispatcher_main.stop()

    return asyncio.run(go())


class TestOutcomes:

    def test_empty_patch_changes_nothing(self, scene):
        speaker = scene.find_by_name("Speaker")
        before = dataclasses.replace(speaker.get_component(AudioSource))

        outcome = dispatch(scene, "Speaker", AUDIO_SOURCE_FIELDS)

        assert outcome == NoChange("AudioSource on 'Speaker'")
        assert speaker.get_component(AudioSource) == before
        assert not scene.is_dirty

    def test_all_skipped_is_no_change(self, scene):
        outcome = dispatch(scene, "Pill", COLLIDER_FIELDS, direction=7, center=[1, 2])
        assert outcome == NoChange("CapsuleCollider on 'Pill'")
        assert not scene.is_dirty

    def test_applied_marks_object_dirty(self, scene):
        outcome = dispatch(scene, "Speaker", AUDIO_SOURCE_FIELDS, volume=5.0)

        assert isinstance(outcome, Applied)
        assert render(outcome) == "Successfully updated AudioSource on 'Speaker': volume: 1.00"
        assert scene.is_object_dirty(scene.find_by_name("Speaker"))

    def test_max_distance_clamps_to_new_min_distance(self, scene):
        outcome = dispatch(scene, "Speaker", AUDIO_SOURCE_FIELDS, min_distance=10.0, max_distance=5.0)

        assert outcome.changes.summary() == "minDistance: 10.00, maxDistance: 10.00"

    def test_huge_int_skips_only_its_field(self, scene):
        outcome = dispatch(scene, "Speaker", AUDIO_SOURCE_FIELDS, loop=False, volume=10**400, pitch=2.0)

        assert render(outcome) == "Successfully updated AudioSource on 'Speaker': loop: False, pitch: 2.00"

    def test_changes_in_declared_order_not_call_order(self, scene):
        outcome = dispatch(scene, "Speaker", AUDIO_SOURCE_FIELDS, pitch=2.0, loop=True, play_on_awake=False)
        assert outcome.changes.fields() == ["playOnAwake", "loop", "pitch"]


class TestResolutionShortCircuit:

    def test_missing_object_never_hands_off(self):
        main = CountingMain()
        outcome = dispatch(SceneGraph(), "Ghost", AUDIO_SOURCE_FIELDS, main=main, volume=0.5)

        assert outcome == NotFound("GameObject", "Ghost")
        assert render(outcome) == "Error: GameObject 'Ghost' not found"
        assert main.handoffs == 0

    def test_missing_facet_never_hands_off(self, scene):
        main = CountingMain()
        outcome = dispatch(scene, "Empty", AUDIO_SOURCE_FIELDS, main=main, volume=0.5)

        assert outcome == FacetNotFound("Empty", "AudioSource")
        assert render(outcome) == "Error: GameObject 'Empty' does not have an AudioSource component"
        assert main.handoffs == 0

    def test_found_target_hands_off_once(self, scene):
        main = CountingMain()
        dispatch(scene, "Speaker", AUDIO_SOURCE_FIELDS, main=main, volume=0.5, pitch=2.0, loop=True)
        assert main.handoffs == 1


class TestColliderVariants:

    def test_capsule_fields(self, scene):
        outcome = dispatch(scene, "Pill", COLLIDER_FIELDS, is_trigger=True, radius=-1.0, height=3, direction=2)

        assert outcome.changes.summary() == "isTrigger: True, radius: 0.00, height: 3.00, direction: 2"

    def test_box_ignores_sphere_parameters(self, scene):
        outcome = dispatch(scene, "Crate", COLLIDER_FIELDS, radius=2.0, size=[2, 2, 2])

        assert render(outcome) == "Successfully updated BoxCollider on 'Crate': size: (2.00, 2.00, 2.00)"

    def test_mesh_collider_only_takes_trigger(self, scene):
        outcome = dispatch(scene, "Rock", COLLIDER_FIELDS, radius=2.0, center=[0, 1, 0])
        assert outcome == NoChange("MeshCollider on 'Rock'")

    def test_renderer_description_uses_variant(self, scene):
        outcome = dispatch(scene, "Hero", RENDERER_FIELDS, cast_shadows=False)
        assert render(outcome) == "Successfully updated SkinnedMeshRenderer on 'Hero': castShadows: False"


class TestFailure:

    def test_failure_keeps_earlier_fields(self, scene):
        speaker = scene.create("Radio", LockedPitchSource())
        source = speaker.get_component(AudioSource)
        source.locked = True

        outcome = dispatch(
            scene, "Radio", AUDIO_SOURCE_FIELDS, "setting audio source properties",
            loop=True, volume=0.5, pitch=2.0, spatial_blend=1.0,
        )

        assert outcome == Failure("setting audio source properties", "pitch is locked")
        assert render(outcome) == "Error setting audio source properties: pitch is locked"
        assert source.loop is True
        assert source.volume == 0.5
        assert source.spatial_blend == 0.0
        assert not scene.is_object_dirty(speaker)


class TestConcurrency:

    def test_concurrent_patches_never_interleave(self):
        journal = []
        scene = SceneGraph()
        target = scene.create("Drone")
        target.transform = JournalTransform(journal)

        async def go():
            main = MainThreadDispatcher()
            main.start()
            dispatcher = PatchDispatcher(scene, main)
            outcomes = await asyncio.gather(*(
                dispatcher.dispatch(
                    "Drone", TRANSFORM_FIELDS,
                    {"position": [i, i, i], "rotation": [i, i, i], "scale": [i, i, i]},
                    "setting transform properties",
                )
                for i in range(20)
            ))
            await main.stop()
            return outcomes

        outcomes = asyncio.run(go())

        assert all(len(outcome.changes) == 3 for outcome in outcomes)
        assert len(journal) == 60
        for start in range(0, len(journal), 3):
            chunk = journal[start:start + 3]
            assert [name for name, _ in chunk] == ["position", "rotation", "scale"]
            assert len({value for _, value in chunk}) == 1

    def test_cancelled_before_resumption_applies_nothing(self, scene):
        async def go():
            main = MainThreadDispatcher()
            dispatcher = PatchDispatcher(scene, main)
            task = asyncio.create_task(
                dispatcher.dispatch("Speaker", AUDIO_SOURCE_FIELDS, {"volume": 0.25}, "setting audio source properties")
            )
            await asyncio.sleep(0)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            main.start()
            await main.run(lambda: None)
            await main.stop()
            return task.cancelled()

        assert asyncio.run(go()) is True
        assert scene.find_by_name("Speaker").get_component(AudioSource).volume == 1.0
        assert not scene.is_dirty


class TestReparent:

    def reparent(self, scene, child, parent, world_position_stays=True, main=None):
        async def go():
            dispatcher_main = main or MainThreadDispatcher()
            if isinstance(dispatcher_main, MainThreadDispatcher):
                dispatcher_main.start()
            try:
                return await PatchDispatcher(scene, dispatcher_main).reparent(child, parent, world_position_stays)
            finally:
                if isinstance(dispatcher_main, MainThreadDispatcher):
                    await dispatcher_main.stop()

        return asyncio.run(go())

    def test_missing_child_never_hands_off(self, scene):
        main = CountingMain()
        outcome = self.reparent(scene, "Ghost", "Hero", main=main)

        assert outcome == NotFound("Child GameObject", "Ghost")
        assert main.handoffs == 0

    def test_missing_parent_never_hands_off(self, scene):
        main = CountingMain()
        outcome = self.reparent(scene, "Crate", "Ghost", main=main)

        assert outcome == NotFound("Parent GameObject", "Ghost")
        assert render(outcome) == "Error: Parent GameObject 'Ghost' not found"
        assert main.handoffs == 0

    def test_empty_parent_means_root(self, scene):
        main = CountingMain()
        outcome = self.reparent(scene, "Sword", "", world_position_stays=False, main=main)

        assert outcome == Reparented("Sword", "Hero", None, False)
        assert main.handoffs == 1
        assert scene.find_by_name("Sword").parent is None

    def test_cycle_is_failure_and_not_dirty(self, scene):
        outcome = self.reparent(scene, "Effects", "Sparks")

        assert outcome == Failure(
            "setting parent-child relationship",
            "Cannot parent 'Effects' under itself or one of its descendants",
        )
        assert not scene.is_dirty
