"""Tests for the subdivision scenario generator.

Covers the per-percent algorithm, the three layout strategies and their
tie-break, and the invariants every generated scenario must satisfy.
"""

from __future__ import annotations

import logging
import math

import pytest

from microvilla.config import AREA_TOLERANCE, EngineConfig
from microvilla.errors import InputValidationError
from microvilla.models.parcel import LandParcel
from microvilla.models.scenario import (
    LayoutStrategy, Position, SocialClub, SubdivisionOptions,
)
from microvilla.planning_engine.subdivision import (
    LayoutInput,
    SubdivisionCalculator,
    TIE_BREAK_PRIORITY,
    _four_quadrants,
    _horizontal_strips,
    _vertical_strips,
    choose_layout,
)


@pytest.fixture
def calculator():
    return SubdivisionCalculator()


@pytest.fixture
def parcel():
    return LandParcel(width=20, length=45, id="parcel-20x45")


# ──────────────────────────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────────────────────────

def _club(width: float, length: float, area: float) -> SocialClub:
    aspect = length / width
    club_w = math.sqrt(area / aspect)
    club_l = club_w * aspect
    return SocialClub(
        width=club_w,
        length=club_l,
        area=area,
        position=Position((width - club_w) / 2, (length - club_l) / 2),
    )


def _layout(available: float, width: float = 20, length: float = 45,
            club_area: float = 180, min_lot_area: float = 90) -> LayoutInput:
    return LayoutInput(
        parcel_width=width,
        parcel_length=length,
        available_area=available,
        club=_club(width, length, club_area),
        min_lot_area=min_lot_area,
        quadrant_target_factor=1.2,
    )


PARCELS = [
    (20, 45),
    (30, 30),
    (50, 100),
    (100, 60),
    (12.5, 80),
]


# ──────────────────────────────────────────────────────────────────
# REFERENCE PARCEL (20 m × 45 m)
# ──────────────────────────────────────────────────────────────────

class TestReferenceParcel:
    """900 sqm parcel with a 20% social club."""

    def test_social_club_area(self, calculator, parcel):
        scenario = calculator.calculate_subdivision(parcel, 20)
        assert scenario is not None
        assert scenario.social_club.area == pytest.approx(180, abs=AREA_TOLERANCE)

    def test_at_least_one_viable_scenario(self, calculator, parcel):
        scenarios = calculator.calculate_all_scenarios(parcel)
        assert len(scenarios) >= 1
        assert all(s.lots.area >= 90 for s in scenarios)

    def test_twenty_percent_is_viable(self, calculator, parcel):
        scenario = calculator.calculate_subdivision(parcel, 20)
        assert scenario.is_viable is True
        assert scenario.lots.area >= 90
        assert scenario.lots.count >= 1

    def test_twenty_percent_uses_horizontal_strips(self, calculator, parcel):
        """209 sqm left for lots: strips fit 2 lots, quadrants only 1."""
        scenario = calculator.calculate_subdivision(parcel, 20)
        assert scenario.lots.grid.distribution == LayoutStrategy.HORIZONTAL_STRIPS
        assert scenario.lots.count == 2
        assert scenario.lots.width == 20
        assert scenario.lots.area == 90

    def test_ten_percent_tie_goes_to_four_quadrants(self, calculator, parcel):
        """All three strategies fit 2 lots; four-quadrants wins the tie."""
        scenario = calculator.calculate_subdivision(parcel, 10)
        assert scenario.lots.count == 2
        assert scenario.lots.grid.distribution == LayoutStrategy.FOUR_QUADRANTS

    def test_club_is_centered_with_parcel_aspect(self, calculator, parcel):
        club = calculator.calculate_subdivision(parcel, 20).social_club
        assert club.length / club.width == pytest.approx(45 / 20)
        assert club.position.x == pytest.approx((20 - club.width) / 2)
        assert club.position.y == pytest.approx((45 - club.length) / 2)

    def test_walkway_area(self, calculator, parcel):
        """(perimeter 130 + internal paths 65) × 1.5 m."""
        scenario = calculator.calculate_subdivision(parcel, 20)
        assert scenario.walkways.total_area == pytest.approx(292.5)
        assert scenario.walkways.average_width == 1.5

    def test_landscaping_uses_sizing_seed(self, calculator, parcel):
        """Seed of 5 lots → 175 sqm parking; 15% of (175 + 15)."""
        scenario = calculator.calculate_subdivision(parcel, 20)
        assert scenario.landscaping.total_area == pytest.approx(28.5)

    def test_parking_rederived_from_actual_lots(self, calculator, parcel):
        scenario = calculator.calculate_subdivision(parcel, 20)
        spaces = scenario.lots.count * 2
        assert scenario.parking_area.spaces_count == spaces
        assert scenario.parking_area.area == pytest.approx(spaces * 12.5 * 1.4)
        assert scenario.parking_area.width * scenario.parking_area.length == pytest.approx(
            scenario.parking_area.area
        )

    def test_maintenance_room_default(self, calculator, parcel):
        room = calculator.calculate_subdivision(parcel, 20).maintenance_room
        assert room.area == 15
        assert room.location.value == "in-social-club"

    def test_derived_totals(self, calculator, parcel):
        scenario = calculator.calculate_subdivision(parcel, 20)
        assert scenario.total_lots_area == pytest.approx(scenario.lots.count * scenario.lots.area)
        assert scenario.common_area_percent_per_lot == pytest.approx(100 / scenario.lots.count)


# ──────────────────────────────────────────────────────────────────
# INVARIANTS ACROSS PARCELS
# ──────────────────────────────────────────────────────────────────

class TestScenarioInvariants:

    @pytest.mark.parametrize("width,length", PARCELS)
    def test_club_area_matches_percent(self, calculator, width, length):
        parcel = LandParcel(width=width, length=length)
        for s in calculator.calculate_all_scenarios(parcel):
            expected = parcel.area * s.social_club_percent / 100
            assert abs(s.social_club.area - expected) <= AREA_TOLERANCE

    @pytest.mark.parametrize("width,length", PARCELS)
    def test_lots_meet_minimum_and_parking_ratio(self, calculator, width, length):
        parcel = LandParcel(width=width, length=length)
        for s in calculator.calculate_all_scenarios(parcel):
            assert s.lots.area >= s.lots.min_area
            assert s.parking_area.spaces_count == 2 * s.lots.count

    @pytest.mark.parametrize("width,length", PARCELS)
    def test_never_returns_non_viable(self, calculator, width, length):
        parcel = LandParcel(width=width, length=length)
        assert all(s.is_viable for s in calculator.calculate_all_scenarios(parcel))

    @pytest.mark.parametrize("width,length", PARCELS)
    def test_ascending_percent_order(self, calculator, width, length):
        parcel = LandParcel(width=width, length=length)
        percents = [s.social_club_percent for s in calculator.calculate_all_scenarios(parcel)]
        assert percents == sorted(set(percents))
        assert all(10 <= p <= 30 for p in percents)

    @pytest.mark.parametrize("width,length", PARCELS)
    def test_lots_fit_outside_the_club(self, calculator, width, length):
        parcel = LandParcel(width=width, length=length)
        for s in calculator.calculate_all_scenarios(parcel):
            assert s.total_lots_area <= parcel.area - s.social_club.area

    def test_large_parcel_yields_all_percents(self, calculator):
        parcel = LandParcel(width=100, length=60)
        scenarios = calculator.calculate_all_scenarios(parcel)
        assert [s.social_club_percent for s in scenarios] == list(range(10, 31))


# ──────────────────────────────────────────────────────────────────
# INFEASIBLE / EARLY EXIT
# ──────────────────────────────────────────────────────────────────

class TestInfeasible:

    def test_tiny_parcel_has_no_scenarios(self, calculator):
        parcel = LandParcel(width=10, length=10)
        assert calculator.calculate_all_scenarios(parcel) == []

    def test_tiny_parcel_single_percent_is_none(self, calculator):
        """100 sqm − 20% leaves 80 sqm, under two 90 sqm lots."""
        parcel = LandParcel(width=10, length=10)
        assert calculator.calculate_subdivision(parcel, 20) is None

    def test_walkways_can_consume_everything(self, calculator):
        """A long thin parcel loses all its land to perimeter walkways."""
        parcel = LandParcel(width=4, length=60)
        assert calculator.calculate_subdivision(parcel, 10) is None

    def test_infeasible_percent_does_not_raise(self, calculator):
        parcel = LandParcel(width=12, length=20)
        assert isinstance(calculator.calculate_all_scenarios(parcel), list)


# ──────────────────────────────────────────────────────────────────
# INPUT VALIDATION
# ──────────────────────────────────────────────────────────────────

class TestPercentValidation:

    @pytest.mark.parametrize("percent", [9, 31, 0, -5, 100])
    def test_out_of_range(self, calculator, parcel, percent):
        with pytest.raises(InputValidationError):
            calculator.calculate_subdivision(parcel, percent)

    @pytest.mark.parametrize("percent", [20.5, "20", True, None])
    def test_non_integer(self, calculator, parcel, percent):
        with pytest.raises(InputValidationError):
            calculator.calculate_subdivision(parcel, percent)

    def test_integral_float_accepted(self, calculator, parcel):
        scenario = calculator.calculate_subdivision(parcel, 20.0)
        assert scenario.social_club_percent == 20
        assert isinstance(scenario.social_club_percent, int)


# ──────────────────────────────────────────────────────────────────
# OPTIONS
# ──────────────────────────────────────────────────────────────────

class TestOptions:

    def test_larger_minimum_lot_area(self, calculator):
        parcel = LandParcel(width=50, length=100)
        options = SubdivisionOptions(min_lot_area=150)
        scenarios = calculator.calculate_all_scenarios(parcel, options)
        assert scenarios
        for s in scenarios:
            assert s.lots.min_area == 150
            assert s.lots.area >= 150

    def test_without_walkways(self, calculator, parcel):
        with_walk = calculator.calculate_subdivision(parcel, 20)
        without = calculator.calculate_subdivision(
            parcel, 20, SubdivisionOptions(include_walkways=False),
        )
        assert without.walkways.total_area == 0
        assert without.lots.count >= with_walk.lots.count

    def test_wider_walkways_never_add_lots(self, calculator):
        parcel = LandParcel(width=50, length=100)
        narrow = calculator.calculate_subdivision(parcel, 15)
        wide = calculator.calculate_subdivision(parcel, 15, SubdivisionOptions(walkway_width=3.0))
        assert wide.lots.count <= narrow.lots.count

    def test_pool_amenity_enlarges_maintenance_room(self, calculator):
        parcel = LandParcel(width=50, length=100)
        scenario = calculator.calculate_subdivision(
            parcel, 15, SubdivisionOptions(amenities=("Swimming Pool", "BBQ")),
        )
        assert scenario.maintenance_room.area == 30

    @pytest.mark.parametrize("kwargs", [
        {"min_lot_area": math.nan},
        {"walkway_width": math.nan},
        {"walkway_width": math.inf},
    ])
    def test_non_finite_sizes_rejected_before_calculation(self, kwargs):
        with pytest.raises(InputValidationError):
            SubdivisionOptions(**kwargs)

    def test_partial_options_use_calculator_config(self):
        calc = SubdivisionCalculator(EngineConfig(min_lot_area=120, walkway_width=2.0))
        parcel = LandParcel(width=50, length=100, id="partial")
        scenario = calc.calculate_subdivision(parcel, 15, SubdivisionOptions(amenities=("BBQ",)))
        assert scenario.lots.min_area == 120
        assert scenario.lots.area >= 120
        assert scenario.walkways.average_width == 2.0

    def test_explicit_sizes_override_config(self):
        calc = SubdivisionCalculator(EngineConfig(min_lot_area=120, walkway_width=2.0))
        parcel = LandParcel(width=50, length=100)
        scenario = calc.calculate_subdivision(
            parcel, 15, SubdivisionOptions(min_lot_area=100, walkway_width=1.0),
        )
        assert scenario.lots.min_area == 100
        assert scenario.walkways.average_width == 1.0

    def test_unset_and_explicit_default_sizes_share_identity(self, calculator, parcel):
        implicit = calculator.calculate_subdivision(parcel, 20, SubdivisionOptions())
        explicit = calculator.calculate_subdivision(
            parcel, 20, SubdivisionOptions(min_lot_area=90, walkway_width=1.5),
        )
        assert implicit.id == explicit.id

    def test_engine_config_min_lot_area_is_default(self):
        calc = SubdivisionCalculator(EngineConfig(min_lot_area=120))
        parcel = LandParcel(width=50, length=100)
        for s in calc.calculate_all_scenarios(parcel):
            assert s.lots.min_area == 120


# ──────────────────────────────────────────────────────────────────
# DETERMINISM & IDENTITY
# ──────────────────────────────────────────────────────────────────

class TestDeterminism:

    def test_same_inputs_same_scenario(self, calculator, parcel):
        a = calculator.calculate_subdivision(parcel, 18)
        b = calculator.calculate_subdivision(parcel, 18)
        assert a == b
        assert a.id == b.id

    def test_all_scenarios_repeatable(self, calculator):
        parcel = LandParcel(width=50, length=100, id="fixed")
        assert calculator.calculate_all_scenarios(parcel) == calculator.calculate_all_scenarios(parcel)

    def test_changed_input_changes_identity(self, calculator, parcel):
        base = calculator.calculate_subdivision(parcel, 20)
        other_percent = calculator.calculate_subdivision(parcel, 21)
        other_options = calculator.calculate_subdivision(
            parcel, 20, SubdivisionOptions(walkway_width=1.2),
        )
        other_parcel = calculator.calculate_subdivision(
            LandParcel(width=20, length=45, id="another"), 20,
        )
        ids = {base.id, other_percent.id, other_options.id, other_parcel.id}
        assert len(ids) == 4

    def test_scenarios_are_immutable(self, calculator, parcel):
        scenario = calculator.calculate_subdivision(parcel, 20)
        with pytest.raises(AttributeError):
            scenario.social_club_percent = 25


# ──────────────────────────────────────────────────────────────────
# LAYOUT STRATEGIES
# ──────────────────────────────────────────────────────────────────

class TestLayoutStrategies:

    def test_horizontal_strip_lot_shape(self):
        grid = _horizontal_strips(_layout(available=2000))
        assert grid.lot_width == 20
        assert grid.lot_length == pytest.approx(4.5)
        assert grid.lot_area == 90
        assert grid.columns == 1
        assert grid.rows == grid.lot_count

    def test_horizontal_rows_limited_by_space(self):
        """45 − 20.12 m of depth holds 5 rows of 4.5 m."""
        grid = _horizontal_strips(_layout(available=2000))
        assert grid.lot_count == 5

    def test_horizontal_rows_limited_by_available_area(self):
        grid = _horizontal_strips(_layout(available=209))
        assert grid.lot_count == 2

    def test_horizontal_none_when_club_fills_length(self):
        layout = LayoutInput(
            parcel_width=20, parcel_length=45, available_area=500,
            club=SocialClub(width=5, length=45, area=225, position=Position(7.5, 0)),
            min_lot_area=90, quadrant_target_factor=1.2,
        )
        assert _horizontal_strips(layout) is None

    def test_vertical_strip_lot_shape(self):
        grid = _vertical_strips(_layout(available=2000))
        assert grid.lot_length == 45
        assert grid.lot_width == pytest.approx(2.0)
        assert grid.rows == 1
        assert grid.columns == grid.lot_count == 5

    def test_vertical_none_when_club_fills_width(self):
        layout = LayoutInput(
            parcel_width=20, parcel_length=45, available_area=500,
            club=SocialClub(width=20, length=10, area=200, position=Position(0, 17.5)),
            min_lot_area=90, quadrant_target_factor=1.2,
        )
        assert _vertical_strips(layout) is None

    def test_four_quadrants_split_available_area(self):
        grid = _four_quadrants(_layout(available=2000))
        assert grid.lot_count == 18  # floor(2000 / 108)
        assert grid.lot_area == pytest.approx(2000 / 18)
        assert grid.lot_width == grid.lot_length
        assert grid.columns == max(1, math.floor(20 / grid.lot_width))
        assert grid.rows == math.ceil(18 / grid.columns)

    def test_four_quadrants_none_below_target(self):
        assert _four_quadrants(_layout(available=100)) is None

    def test_most_lots_wins(self):
        grid = choose_layout(_layout(available=2000))
        assert grid.strategy == LayoutStrategy.FOUR_QUADRANTS
        assert grid.lot_count == 18

    def test_tie_prefers_four_quadrants(self):
        """216 sqm: quadrants fit 2 × 108, both strip layouts 2 × 90."""
        layout = _layout(available=216)
        grids = [fn(layout) for fn in (_horizontal_strips, _vertical_strips, _four_quadrants)]
        assert [g.lot_count for g in grids] == [2, 2, 2]
        assert choose_layout(layout).strategy == LayoutStrategy.FOUR_QUADRANTS

    def test_tie_between_strips_prefers_horizontal(self):
        layout = _layout(available=209)
        assert _four_quadrants(layout).lot_count == 1
        assert choose_layout(layout).strategy == LayoutStrategy.HORIZONTAL_STRIPS

    def test_priority_order(self):
        assert (
            TIE_BREAK_PRIORITY[LayoutStrategy.FOUR_QUADRANTS]
            > TIE_BREAK_PRIORITY[LayoutStrategy.HORIZONTAL_STRIPS]
            > TIE_BREAK_PRIORITY[LayoutStrategy.VERTICAL_STRIPS]
        )

    def test_no_layout(self):
        assert choose_layout(_layout(available=50)) is None


# ──────────────────────────────────────────────────────────────────
# MATCHING & BUDGET
# ──────────────────────────────────────────────────────────────────

class TestFindMatchingScenarios:

    def test_filters_by_tolerance(self, calculator):
        scenarios = calculator.calculate_all_scenarios(LandParcel(width=50, length=100))
        target = scenarios[len(scenarios) // 2].lots.count
        matching = calculator.find_matching_scenarios(scenarios, target)
        assert matching
        assert all(abs(s.lots.count - target) <= 2 for s in matching)
        excluded = [s for s in scenarios if s not in matching]
        assert all(abs(s.lots.count - target) > 2 for s in excluded)

    def test_zero_tolerance(self, calculator):
        scenarios = calculator.calculate_all_scenarios(LandParcel(width=50, length=100))
        target = scenarios[0].lots.count
        matching = SubdivisionCalculator.find_matching_scenarios(scenarios, target, tolerance=0)
        assert all(s.lots.count == target for s in matching)

    def test_empty_input(self):
        assert SubdivisionCalculator.find_matching_scenarios([], 10) == []


class TestPerformanceBudget:

    def test_within_budget(self, calculator):
        import time
        started = time.perf_counter()
        calculator.calculate_all_scenarios(LandParcel(width=200, length=300))
        assert time.perf_counter() - started < 2.0

    def test_overrun_logs_warning_without_raising(self, caplog):
        calc = SubdivisionCalculator(EngineConfig(scenario_budget_seconds=-1.0))
        with caplog.at_level(logging.WARNING, logger="microvilla.planning_engine.subdivision"):
            scenarios = calc.calculate_all_scenarios(LandParcel(width=20, length=45))
        assert scenarios
        assert "exceeded budget" in caplog.text
