"""Tests for resistance composition and wire resistance."""

import math

import pytest
from circuitlab.errors import WiringError
from circuitlab.models.circuit import (
    CompositionMode,
    combine_resistances,
    resistance_in_parallel,
    resistance_in_series,
)
from circuitlab.models.component import ZERO_RESISTANCE
from circuitlab.models.wire import MAX_RADIUS, MIN_RADIUS, WireData


class TestSeries:
    def test_sum(self):
        assert resistance_in_series(1.0, 2.0, 3.5) == pytest.approx(6.5)

    def test_order_independent(self):
        values = [0.1, 220.0, 4.7, 1e3]
        assert resistance_in_series(*values) == pytest.approx(resistance_in_series(*reversed(values)))

    def test_empty_is_zero_sentinel(self):
        assert resistance_in_series() == ZERO_RESISTANCE


class TestParallel:
    @pytest.mark.parametrize("r1,r2", [(2.0, 2.0), (1.0, 3.0), (100.0, 0.5)])
    def test_two_branches(self, r1, r2):
        assert resistance_in_parallel(r1, r2) == pytest.approx(r1 * r2 / (r1 + r2))

    def test_zero_branch_shorts(self):
        result = resistance_in_parallel(0.0, 5.0)
        assert result == ZERO_RESISTANCE
        assert not math.isnan(result)

    def test_sentinel_branch_shorts(self):
        assert resistance_in_parallel(ZERO_RESISTANCE, 5.0) == ZERO_RESISTANCE

    def test_empty(self):
        assert resistance_in_parallel() == ZERO_RESISTANCE

    def test_combine_dispatches_on_mode(self):
        assert combine_resistances(CompositionMode.SERIES, [2.0, 2.0]) == pytest.approx(4.0)
        assert combine_resistances(CompositionMode.PARALLEL, [2.0, 2.0]) == pytest.approx(1.0)


class TestWireData:
    def test_no_resistance_by_default(self):
        wire = WireData(1, 1, 2)
        assert wire.get_resistance((0, 0), (100, 0), 2.5) == 0.0

    def test_resistance_formula(self):
        wire = WireData(1, 1, 2, has_resistance=True, material="copper", radius=1.0)
        # 250 px at 2.5 px/cm is one metre; a 1 px radius is 4 mm
        expected = 1.68e-8 * 1.0 / (math.pi * 0.004 ** 2)
        assert wire.get_resistance((0, 0), (250, 0), 2.5) == pytest.approx(expected)

    def test_length_follows_waypoints(self):
        wire = WireData(1, 1, 2, path=[(0, 100), (100, 100)])
        assert wire.length((0, 0), (100, 0)) == pytest.approx(300.0)

    def test_zero_length_clamped_to_sentinel(self):
        wire = WireData(1, 1, 2, has_resistance=True)
        assert wire.get_resistance((5, 5), (5, 5), 2.5) == ZERO_RESISTANCE

    def test_radius_clamped(self):
        assert WireData(1, 1, 2, radius=0.01).radius == MIN_RADIUS
        assert WireData(1, 1, 2, radius=99).radius == MAX_RADIUS

    def test_unknown_material(self):
        with pytest.raises(WiringError):
            WireData(1, 1, 2, material="unobtainium")

    def test_material_case_insensitive(self):
        assert WireData(1, 1, 2, material="Silver").material == "silver"

    def test_connects_component(self):
        wire = WireData(1, 3, 4)
        assert wire.connects_component(3)
        assert wire.connects_component(4)
        assert not wire.connects_component(5)

    def test_to_dict(self):
        wire = WireData(1, 3, 4, path=[(1, 2)], has_resistance=True, material="gold", radius=2.0)
        assert wire.to_dict(7) == {
            "target_index": 7,
            "path": [[1.0, 2.0]],
            "wire_options": {"has_resistance": True, "material": "gold", "radius": 2.0},
        }

    def test_to_dict_keeps_explicit_merge(self):
        assert WireData(1, 3, 4, merge=False).to_dict(0)["merge"] is False

    def test_to_dict_records_order(self):
        assert WireData(1, 3, 4).to_dict(0, 5)["order"] == 5

    @pytest.mark.parametrize("kwargs", [
        {"radius": "wide"},
        {"radius": None},
        {"path": [(1, 2, 3)]},
        {"path": [7]},
    ])
    def test_bad_geometry_rejected(self, kwargs):
        with pytest.raises(WiringError):
            WireData(1, 3, 4, **kwargs)
