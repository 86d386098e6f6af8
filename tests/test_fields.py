"""Tests for the field patch primitive and field sets."""

import math

import pytest

from scenepatch import ChangeRecord, FacetKind, FieldDescriptor, FieldKind, FieldSet
from scenepatch.fields import (
    Changed,
    SKIPPED,
    apply_field,
    apply_fields,
    format_bool,
    format_burst,
    format_float,
    format_vector,
)
from scenepatch.scene import COLLIDER_SHAPES, AudioSource, Burst, CapsuleCollider, EmissionModule, MainModule, ShapeModule


class TestFormatting:

    def test_float_uses_two_decimals(self):
        assert format_float(1) == "1.00"
        assert format_float(0.125) == "0.12"
        assert format_float(-3.456) == "-3.46"

    def test_vector_renders_as_tuple(self):
        assert format_vector((1.0, 2.5, -3.0)) == "(1.00, 2.50, -3.00)"

    def test_bool(self):
        assert format_bool(True) == "True"
        assert format_bool(False) == "False"

    def test_burst(self):
        assert format_burst((30, 0.5)) == "30 at time 0.50"


class TestClamping:

    def test_value_above_range_reports_bound(self):
        source = AudioSource()
        volume = FieldDescriptor("volume", "volume", FieldKind.FLOAT, minimum=0.0, maximum=1.0)

        result = apply_field(source, volume, 5.0)

        assert result == Changed("1.00")
        assert source.volume == 1.0

    def test_value_below_range_reports_bound(self):
        source = AudioSource()
        pitch = FieldDescriptor("pitch", "pitch", FieldKind.FLOAT, minimum=0.1, maximum=3.0)

        assert apply_field(source, pitch, -2) == Changed("0.10")
        assert source.pitch == pytest.approx(0.1)

    def test_int_clamped_and_rendered_plain(self):
        main = MainModule()
        max_particles = FieldDescriptor("maxParticles", "max_particles", FieldKind.INT, minimum=0)

        assert apply_field(main, max_particles, -5) == Changed("0")
        assert main.max_particles == 0

    def test_paired_lower_bound_reads_current_value(self):
        source = AudioSource(min_distance=10.0)
        max_distance = FieldDescriptor(
            "maxDistance", "max_distance", FieldKind.FLOAT, minimum=0.0, minimum_from="min_distance"
        )

        assert apply_field(source, max_distance, 5.0) == Changed("10.00")
        assert source.max_distance == 10.0


class TestSkipping:

    def test_absent_value_is_skipped(self):
        source = AudioSource()
        loop = FieldDescriptor("loop", "loop", FieldKind.BOOL)

        assert apply_field(source, loop, None) is SKIPPED
        assert source.loop is False

    def test_enum_out_of_range_is_skipped(self):
        capsule = CapsuleCollider()
        direction = FieldDescriptor("direction", "direction", FieldKind.ENUM_INT, minimum=0, maximum=2)

        assert apply_field(capsule, direction, 3) is SKIPPED
        assert apply_field(capsule, direction, -1) is SKIPPED
        assert capsule.direction == 1

    def test_short_vector_is_treated_as_absent(self):
        shape = ShapeModule()
        box_size = FieldDescriptor("boxSize", "box_size", FieldKind.VECTOR3)

        assert apply_field(shape, box_size, [2.0, 2.0]) is SKIPPED
        assert shape.box_size == (1.0, 1.0, 1.0)

    def test_long_vector_uses_first_three(self):
        shape = ShapeModule()
        box_size = FieldDescriptor("boxSize", "box_size", FieldKind.VECTOR3)

        assert apply_field(shape, box_size, [1, 2, 3, 4]) == Changed("(1.00, 2.00, 3.00)")
        assert shape.box_size == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize("value", ["loud", True, [1.0], math.nan, math.inf])
    def test_type_mismatch_on_float_is_skipped(self, value):
        source = AudioSource()
        volume = FieldDescriptor("volume", "volume", FieldKind.FLOAT, minimum=0.0, maximum=1.0)

        assert apply_field(source, volume, value) is SKIPPED
        assert source.volume == 1.0

    def test_int_beyond_float_range_is_skipped(self):
        source = AudioSource()
        volume = FieldDescriptor("volume", "volume", FieldKind.FLOAT, minimum=0.0, maximum=1.0)
        shape = ShapeModule()
        box_size = FieldDescriptor("boxSize", "box_size", FieldKind.VECTOR3)
        main = MainModule()
        start_color = FieldDescriptor("startColor", "start_color", FieldKind.COLOR)

        assert apply_field(source, volume, 10**400) is SKIPPED
        assert apply_field(shape, box_size, [10**400, 0, 0]) is SKIPPED
        assert apply_field(main, start_color, [1, 10**400, 0]) is SKIPPED
        assert source.volume == 1.0

    def test_float_for_int_field_is_skipped(self):
        main = MainModule()
        max_particles = FieldDescriptor("maxParticles", "max_particles", FieldKind.INT, minimum=0)

        assert apply_field(main, max_particles, 12.5) is SKIPPED

    def test_number_for_bool_field_is_skipped(self):
        source = AudioSource()
        loop = FieldDescriptor("loop", "loop", FieldKind.BOOL)

        assert apply_field(source, loop, 1) is SKIPPED


class TestCompositeKinds:

    def test_color_defaults_alpha_and_clamps_channels(self):
        main = MainModule()
        color = FieldDescriptor("startColor", "start_color", FieldKind.COLOR)

        assert apply_field(main, color, [2.0, 0.5, -1.0]) == Changed("(1.00, 0.50, 0.00, 1.00)")
        assert main.start_color == (1.0, 0.5, 0.0, 1.0)

    def test_color_keeps_supplied_alpha(self):
        main = MainModule()
        color = FieldDescriptor("startColor", "start_color", FieldKind.COLOR)

        assert apply_field(main, color, [0, 0, 1, 0.25]) == Changed("(0.00, 0.00, 1.00, 0.25)")

    def test_choice_is_case_insensitive_and_canonical(self):
        shape = ShapeModule()
        shape_type = FieldDescriptor("shapeType", "shape_type", FieldKind.CHOICE, choices=("Sphere", "Box"))

        assert apply_field(shape, shape_type, "sPHERE") == Changed("Sphere")
        assert shape.shape_type == "Sphere"

    def test_unknown_choice_is_skipped(self):
        shape = ShapeModule()
        shape_type = FieldDescriptor("shapeType", "shape_type", FieldKind.CHOICE, choices=("Sphere", "Box"))

        assert apply_field(shape, shape_type, "Pyramid") is SKIPPED
        assert shape.shape_type == "Cone"

    def test_burst_is_built_into_stored_object(self):
        emission = EmissionModule()
        burst = FieldDescriptor("burst", "burst", FieldKind.BURST, build=lambda pair: Burst(*pair))

        assert apply_field(emission, burst, (25, 1.5)) == Changed("25 at time 1.50")
        assert emission.burst == Burst(count=25, time=1.5)


class TestApplyFields:

    def test_changes_follow_declaration_order(self):
        source = AudioSource()
        descriptors = (
            FieldDescriptor("loop", "loop", FieldKind.BOOL),
            FieldDescriptor("volume", "volume", FieldKind.FLOAT, minimum=0.0, maximum=1.0),
            FieldDescriptor("pitch", "pitch", FieldKind.FLOAT, minimum=0.1, maximum=3.0),
        )

        record = apply_fields(source, descriptors, {"pitch": 2.0, "loop": True, "volume": "x"}, ChangeRecord())

        assert record.fields() == ["loop", "pitch"]
        assert record.summary() == "loop: True, pitch: 2.00"

    def test_param_name_can_differ_from_attribute(self):
        source = AudioSource()
        descriptors = (FieldDescriptor("volume", "volume", FieldKind.FLOAT, param="level"),)

        record = apply_fields(source, descriptors, {"level": 0.5, "volume": 0.9}, ChangeRecord())

        assert record.summary() == "volume: 0.50"


class TestFieldSet:

    def test_variants_must_cover_every_shape(self):
        is_trigger = FieldDescriptor("isTrigger", "is_trigger", FieldKind.BOOL)

        with pytest.raises(ValueError, match="MeshCollider"):
            FieldSet.for_variants(
                FacetKind.COLLIDER,
                {"BoxCollider": (is_trigger,), "SphereCollider": (is_trigger,), "CapsuleCollider": (is_trigger,)},
                COLLIDER_SHAPES,
            )

    def test_describe_uses_label_or_type_name(self):
        plain = FieldSet(facet=FacetKind.AUDIO_SOURCE)
        labelled = FieldSet(facet=FacetKind.PARTICLE_SYSTEM, module="main", label="ParticleSystem main module")

        assert plain.describe(AudioSource(), "Speaker") == "AudioSource on 'Speaker'"
        assert labelled.describe(object(), "Fire") == "ParticleSystem main module on 'Fire'"
