"""
Tests for BCE/SMM/presets.py — preset tables, lookup, cycling and validation.

Test organisation:
    TestPresetTables     — table contents and ordering
    TestLookup           — get_encode_preset / get_decode_preset
    TestCycling          — cycle_preset_index and next_*_preset wrap-around
    TestValidation       — validate_*_preset rejects unusable parameters
    TestCatalog          — preset_catalog() shape for JSON hosts
"""

from __future__ import annotations

import json

import numpy as np
import pytest

from BCE.SMM.errors import CodecError, PresetError
from BCE.SMM.presets import (
    DECODE_PRESETS,
    DEFAULT_DECODE_PRESET,
    DEFAULT_ENCODE_PRESET,
    ENCODE_PRESETS,
    cycle_preset_index,
    get_decode_preset,
    get_encode_preset,
    next_decode_preset,
    next_encode_preset,
    preset_catalog,
    validate_decode_preset,
    validate_encode_preset,
)

SR = 44_100


class TestPresetTables:
    def test_encode_table_values(self) -> None:
        assert [(p.id, p.carrier_base_freq, p.pitch_multiplier, p.input_lpf_cutoff)
                for p in ENCODE_PRESETS] == [
            ("turdus", 4000.0, 16.0, 2500.0),
            ("erithacus", 5500.0, 20.0, 3000.0),
            ("strix", 2000.0, 8.0, 1200.0),
        ]

    def test_decode_table_values(self) -> None:
        assert [(p.id, p.lpf_cutoff, p.filter_stages, p.gain_multiplier)
                for p in DECODE_PRESETS] == [
            ("std", 2500.0, 3, 8.0),
            ("wide", 3500.0, 2, 6.0),
            ("narrow", 1500.0, 4, 12.0),
        ]

    def test_defaults_are_first_entries(self) -> None:
        assert DEFAULT_ENCODE_PRESET is ENCODE_PRESETS[0]
        assert DEFAULT_DECODE_PRESET is DECODE_PRESETS[0]

    def test_every_shipped_preset_is_valid(self) -> None:
        for p in ENCODE_PRESETS:
            validate_encode_preset(p, SR)
        for p in DECODE_PRESETS:
            validate_decode_preset(p, SR)

    def test_presets_are_immutable(self) -> None:
        with pytest.raises(AttributeError):
            ENCODE_PRESETS[0].carrier_base_freq = 1.0


class TestLookup:
    def test_lookup_by_id(self) -> None:
        assert get_encode_preset("strix") is ENCODE_PRESETS[2]
        assert get_decode_preset("wide") is DECODE_PRESETS[1]

    def test_lookup_is_case_insensitive(self) -> None:
        assert get_encode_preset("ERITHACUS") is ENCODE_PRESETS[1]

    def test_unknown_id_raises(self) -> None:
        with pytest.raises(PresetError, match="Unknown decode preset"):
            get_decode_preset("loud")

    def test_preset_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            get_encode_preset("crow")
        assert issubclass(PresetError, CodecError)


class TestCycling:
    def test_forward_wraps(self) -> None:
        assert cycle_preset_index(2, 3) == 0

    def test_backward_wraps(self) -> None:
        assert cycle_preset_index(0, 3, step=-1) == 2

    def test_full_cycle_returns_to_start(self) -> None:
        for start in range(3):
            index = start
            for _ in range(3):
                index = cycle_preset_index(index, 3)
            assert index == start

    def test_empty_table_raises(self) -> None:
        with pytest.raises(PresetError):
            cycle_preset_index(0, 0)

    def test_next_encode_preset_order(self) -> None:
        seen = [DEFAULT_ENCODE_PRESET]
        for _ in range(3):
            seen.append(next_encode_preset(seen[-1]))
        assert [p.id for p in seen] == ["turdus", "erithacus", "strix", "turdus"]

    def test_next_decode_preset_backward(self) -> None:
        assert next_decode_preset(DECODE_PRESETS[0], step=-1) is DECODE_PRESETS[2]

    def test_next_encode_preset_rejects_custom_preset(self) -> None:
        custom = ENCODE_PRESETS[0]._replace(name="x")
        with pytest.raises(PresetError, match="Valid ids") as exc:
            next_encode_preset(custom)
        assert isinstance(exc.value, ValueError)

    def test_next_decode_preset_rejects_custom_preset(self) -> None:
        custom = DECODE_PRESETS[1]._replace(gain_multiplier=1.0)
        with pytest.raises(PresetError, match="'wide' is not in the table"):
            next_decode_preset(custom)


class TestValidation:
    @pytest.mark.parametrize("cutoff", [0.0, -100.0, SR / 2, 30_000.0, float("nan")])
    def test_decode_cutoff_out_of_range(self, cutoff: float) -> None:
        with pytest.raises(PresetError):
            validate_decode_preset(DECODE_PRESETS[0]._replace(lpf_cutoff=cutoff), SR)

    def test_encode_cutoff_at_nyquist(self) -> None:
        bad = ENCODE_PRESETS[0]._replace(input_lpf_cutoff=SR / 2)
        with pytest.raises(PresetError, match="Nyquist"):
            validate_encode_preset(bad, SR)

    def test_cutoff_checked_against_actual_rate(self) -> None:
        # 2500 Hz is fine at 44.1 kHz but above Nyquist at 4 kHz
        validate_decode_preset(DECODE_PRESETS[0], SR)
        with pytest.raises(PresetError):
            validate_decode_preset(DECODE_PRESETS[0], 4_000)

    def test_carrier_must_be_positive(self) -> None:
        with pytest.raises(PresetError, match="carrier_base_freq"):
            validate_encode_preset(ENCODE_PRESETS[0]._replace(carrier_base_freq=0.0), SR)

    @pytest.mark.parametrize("stages", [0, -1, 2.5, True])
    def test_filter_stages_must_be_positive_int(self, stages) -> None:
        with pytest.raises(PresetError, match="filter_stages"):
            validate_decode_preset(DECODE_PRESETS[0]._replace(filter_stages=stages), SR)

    def test_numpy_integer_stages_accepted(self) -> None:
        validate_decode_preset(DECODE_PRESETS[0]._replace(filter_stages=np.int64(2)), SR)

    def test_gain_must_be_positive(self) -> None:
        with pytest.raises(PresetError, match="gain_multiplier"):
            validate_decode_preset(DECODE_PRESETS[0]._replace(gain_multiplier=0.0), SR)

    def test_sample_rate_must_be_positive(self) -> None:
        with pytest.raises(PresetError):
            validate_encode_preset(ENCODE_PRESETS[0], 0)


class TestCatalog:
    def test_catalog_is_json_serialisable(self) -> None:
        catalog = json.loads(json.dumps(preset_catalog()))
        assert [p["id"] for p in catalog["encode"]] == ["turdus", "erithacus", "strix"]
        assert [p["id"] for p in catalog["decode"]] == ["std", "wide", "narrow"]
        assert catalog["decode"][2]["filter_stages"] == 4
