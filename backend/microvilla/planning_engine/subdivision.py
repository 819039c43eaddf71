"""
Subdivision scenario generator.

For every social-club percent between 10% and 30% (1% steps, 21 candidates)
the calculator carves a centred social club out of the parcel, reserves
parking, a maintenance room, walkways and landscaping, and tiles the rest
with uniform micro-villa lots.

Layout strategies evaluated per percent:
  1. Horizontal strips  (full-width lots above / below the club)
  2. Vertical strips    (full-length lots left / right of the club)
  3. Four quadrants     (near-square lots tiled over the remaining land)

The strategy with the most lots wins.  Ties go to four-quadrants, then
horizontal strips, then vertical strips.

Percents that cannot hold a viable layout are dropped, never raised.
"""

from __future__ import annotations

import logging
import math
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Optional

from microvilla.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from microvilla.errors import InputValidationError
from microvilla.models.parcel import LandParcel
from microvilla.models.scenario import (
    Landscaping, LayoutStrategy, LotGrid, Lots, MaintenanceLocation,
    MaintenanceRoom, ParkingArea, Position, SocialClub, SubdivisionOptions,
    SubdivisionScenario, Walkways,
)
from microvilla.planning_engine.facilities import (
    calculate_parking_area, estimate_landscaping_area, estimate_walkway_area,
    maintenance_room_area,
)

logger = logging.getLogger(__name__)

# Namespace for deterministic scenario identities.
SCENARIO_NAMESPACE = uuid.UUID("6f1c9a52-3d4e-4b7a-9c11-2e5d8f0a7b34")

# Higher wins when two strategies yield the same lot count.
TIE_BREAK_PRIORITY = {
    LayoutStrategy.FOUR_QUADRANTS: 2,
    LayoutStrategy.HORIZONTAL_STRIPS: 1,
    LayoutStrategy.VERTICAL_STRIPS: 0,
}


@dataclass(frozen=True)
class LayoutInput:
    """Everything a layout strategy needs to size a lot grid."""
    parcel_width: float
    parcel_length: float
    available_area: float
    club: SocialClub
    min_lot_area: float
    quadrant_target_factor: float


@dataclass(frozen=True)
class GridLayout:
    strategy: LayoutStrategy
    lot_width: float
    lot_length: float
    lot_area: float
    lot_count: int
    rows: int
    columns: int


# ──────────────────────────────────────────────────────────────────
# LAYOUT STRATEGIES
# ──────────────────────────────────────────────────────────────────

def _horizontal_strips(layout: LayoutInput) -> Optional[GridLayout]:
    """Full parcel-width lots stacked in the space above and below the club."""
    vertical_space = layout.parcel_length - layout.club.length
    if vertical_space <= 0:
        return None

    lot_width = layout.parcel_width
    lot_area = layout.min_lot_area
    lot_length = lot_area / lot_width

    rows = math.floor(vertical_space / lot_length)
    rows = min(rows, math.floor(layout.available_area / lot_area))
    if rows <= 0:
        return None

    return GridLayout(
        strategy=LayoutStrategy.HORIZONTAL_STRIPS,
        lot_width=lot_width,
        lot_length=lot_length,
        lot_area=lot_area,
        lot_count=rows,
        rows=rows,
        columns=1,
    )


def _vertical_strips(layout: LayoutInput) -> Optional[GridLayout]:
    """Full parcel-length lots side by side left and right of the club."""
    horizontal_space = layout.parcel_width - layout.club.width
    if horizontal_space <= 0:
        return None

    lot_length = layout.parcel_length
    lot_area = layout.min_lot_area
    lot_width = lot_area / lot_length

    columns = math.floor(horizontal_space / lot_width)
    columns = min(columns, math.floor(layout.available_area / lot_area))
    if columns <= 0:
        return None

    return GridLayout(
        strategy=LayoutStrategy.VERTICAL_STRIPS,
        lot_width=lot_width,
        lot_length=lot_length,
        lot_area=lot_area,
        lot_count=columns,
        rows=1,
        columns=columns,
    )


def _four_quadrants(layout: LayoutInput) -> Optional[GridLayout]:
    """Near-square lots splitting the available area evenly."""
    target_area = layout.min_lot_area * layout.quadrant_target_factor
    estimated = math.floor(layout.available_area / target_area)
    if estimated <= 0:
        return None

    lot_area = layout.available_area / estimated
    lot_side = math.sqrt(lot_area)
    columns = max(1, math.floor(layout.parcel_width / lot_side))
    rows = max(1, math.ceil(estimated / columns))

    return GridLayout(
        strategy=LayoutStrategy.FOUR_QUADRANTS,
        lot_width=lot_side,
        lot_length=lot_side,
        lot_area=lot_area,
        lot_count=min(estimated, rows * columns),
        rows=rows,
        columns=columns,
    )


LAYOUT_STRATEGIES: dict[LayoutStrategy, Callable[[LayoutInput], Optional[GridLayout]]] = {
    LayoutStrategy.HORIZONTAL_STRIPS: _horizontal_strips,
    LayoutStrategy.VERTICAL_STRIPS: _vertical_strips,
    LayoutStrategy.FOUR_QUADRANTS: _four_quadrants,
}


def choose_layout(layout: LayoutInput) -> Optional[GridLayout]:
    """Pick the viable layout with the most lots (tie-break: TIE_BREAK_PRIORITY)."""
    candidates = []
    for fn in LAYOUT_STRATEGIES.values():
        grid = fn(layout)
        if grid is not None and grid.lot_area >= layout.min_lot_area:
            candidates.append(grid)
    if not candidates:
        return None
    return max(
        candidates,
        key=lambda g: (g.lot_count, TIE_BREAK_PRIORITY[g.strategy]),
    )


# ──────────────────────────────────────────────────────────────────
# CALCULATOR
# ──────────────────────────────────────────────────────────────────

def _validate_percent(percent, config: EngineConfig) -> int:
    if isinstance(percent, bool) or not isinstance(percent, (int, float)):
        raise InputValidationError(f"Social club percent must be a number, got {percent!r}")
    if isinstance(percent, float):
        if not percent.is_integer():
            raise InputValidationError(
                f"Social club percent must be a whole number, got {percent}"
            )
        percent = int(percent)
    if not config.social_club_min_percent <= percent <= config.social_club_max_percent:
        raise InputValidationError(
            f"Social club percent must be between {config.social_club_min_percent} "
            f"and {config.social_club_max_percent}, got {percent}"
        )
    return percent


def scenario_id(parcel: LandParcel, options: SubdivisionOptions, percent: int) -> str:
    """Deterministic identity: same inputs, same id; any change, new id."""
    key = f"{parcel.id}|{parcel.width}|{parcel.length}|{options.cache_key()}|{percent}"
    return str(uuid.uuid5(SCENARIO_NAMESPACE, key))


class SubdivisionCalculator:
    """Generates candidate subdivision layouts for a land parcel."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.config = config

    def resolve_options(self, options: Optional[SubdivisionOptions] = None) -> SubdivisionOptions:
        """Fill unset lot and walkway sizes from this calculator's config."""
        options = options or SubdivisionOptions()
        return replace(
            options,
            min_lot_area=options.min_lot_area or self.config.min_lot_area,
            walkway_width=options.walkway_width or self.config.walkway_width,
        )

    def calculate_all_scenarios(
        self,
        parcel: LandParcel,
        options: Optional[SubdivisionOptions] = None,
    ) -> list[SubdivisionScenario]:
        """All viable scenarios for 10-30% social club, ascending by percent."""
        options = self.resolve_options(options)
        started = time.perf_counter()

        scenarios: list[SubdivisionScenario] = []
        for percent in range(
            self.config.social_club_min_percent,
            self.config.social_club_max_percent + 1,
        ):
            scenario = self.calculate_subdivision(parcel, percent, options)
            if scenario is not None and scenario.is_viable:
                scenarios.append(scenario)

        elapsed = time.perf_counter() - started
        if elapsed > self.config.scenario_budget_seconds:
            logger.warning(
                "Scenario generation exceeded budget: %d viable scenarios in %.3fs "
                "(target < %.1fs)",
                len(scenarios), elapsed, self.config.scenario_budget_seconds,
            )
        return scenarios

    def calculate_subdivision(
        self,
        parcel: LandParcel,
        social_club_percent,
        options: Optional[SubdivisionOptions] = None,
    ) -> Optional[SubdivisionScenario]:
        """Layout for one social-club percent, or None when infeasible."""
        cfg = self.config
        percent = _validate_percent(social_club_percent, cfg)
        options = self.resolve_options(options)
        min_lot_area = options.min_lot_area

        # ── 1. Social club: centred, same aspect ratio as the parcel ──
        total_area = parcel.area
        club_area = total_area * percent / 100
        aspect = parcel.aspect_ratio
        club_width = math.sqrt(club_area / aspect)
        club_length = club_width * aspect
        club = SocialClub(
            width=club_width,
            length=club_length,
            area=club_area,
            position=Position(
                x=(parcel.width - club_width) / 2,
                y=(parcel.length - club_length) / 2,
            ),
        )

        # ── 2. Early exit: not enough room for two lots ──
        remaining = total_area - club_area
        if remaining < 2 * min_lot_area:
            logger.debug(
                "Skipping %d%% club: %.2f sqm remaining < 2 lots of %.2f sqm",
                percent, remaining, min_lot_area,
            )
            return None

        # ── 3. Sizing seed for shared facilities ──
        estimated_lots = math.floor(remaining / (min_lot_area * cfg.lot_estimate_factor))
        seed_parking = calculate_parking_area(estimated_lots, cfg).recommended_area
        room_area = maintenance_room_area(options.amenities, cfg)
        walkway_area = (
            estimate_walkway_area(parcel.width, parcel.length, options.walkway_width, cfg)
            if options.include_walkways else 0.0
        )
        landscaping_area = estimate_landscaping_area(seed_parking, room_area, cfg)

        # ── 4. Land left for lots ──
        available = remaining - seed_parking - room_area - walkway_area - landscaping_area
        if available <= 0:
            logger.debug("Skipping %d%% club: no land left for lots", percent)
            return None

        # ── 5. Layout strategies ──
        grid = choose_layout(LayoutInput(
            parcel_width=parcel.width,
            parcel_length=parcel.length,
            available_area=available,
            club=club,
            min_lot_area=min_lot_area,
            quadrant_target_factor=cfg.quadrant_target_factor,
        ))
        if grid is None:
            logger.debug("Skipping %d%% club: no viable lot layout", percent)
            return None

        # ── 6. Parking from the actual lot count ──
        parking = calculate_parking_area(grid.lot_count, cfg)
        space_ratio = cfg.parking_space_length / cfg.parking_space_width
        parking_width = math.sqrt(parking.recommended_area / space_ratio)
        parking_length = parking.recommended_area / parking_width

        room_width = math.sqrt(room_area)

        # ── 7. Assemble ──
        return SubdivisionScenario(
            id=scenario_id(parcel, options, percent),
            land_parcel_id=parcel.id,
            social_club_percent=percent,
            social_club=club,
            parking_area=ParkingArea(
                width=parking_width,
                length=parking_length,
                area=parking.recommended_area,
                spaces_count=parking.spaces_count,
                space_width=cfg.parking_space_width,
                space_length=cfg.parking_space_length,
                position=Position(x=0.0, y=0.0),
            ),
            maintenance_room=MaintenanceRoom(
                width=room_width,
                length=room_area / room_width,
                area=room_area,
                position=club.position,
                location=MaintenanceLocation.IN_SOCIAL_CLUB,
            ),
            lots=Lots(
                count=grid.lot_count,
                width=grid.lot_width,
                length=grid.lot_length,
                area=grid.lot_area,
                min_area=min_lot_area,
                grid=LotGrid(rows=grid.rows, columns=grid.columns, distribution=grid.strategy),
            ),
            walkways=Walkways(total_area=walkway_area, average_width=options.walkway_width),
            landscaping=Landscaping(total_area=landscaping_area),
        )

    @staticmethod
    def find_matching_scenarios(
        scenarios: list[SubdivisionScenario],
        target_lot_count: int,
        tolerance: int = 2,
    ) -> list[SubdivisionScenario]:
        """Scenarios whose lot count is within ``tolerance`` of the target."""
        return [s for s in scenarios if abs(s.lots.count - target_lot_count) <= tolerance]
