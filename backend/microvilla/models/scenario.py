"""
Subdivision scenario value types.

A scenario is one candidate layout for a fixed social-club percent.  It is
computed fresh on every calculator call and never mutated afterwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from microvilla.errors import InputValidationError


class LayoutStrategy(str, Enum):
    HORIZONTAL_STRIPS = "horizontal-strips"
    VERTICAL_STRIPS = "vertical-strips"
    FOUR_QUADRANTS = "four-quadrants"


class MaintenanceLocation(str, Enum):
    IN_SOCIAL_CLUB = "in-social-club"
    SEPARATE_AREA = "separate-area"


def _is_positive_finite(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


@dataclass(frozen=True)
class SubdivisionOptions:
    """Per-request layout options.

    ``min_lot_area`` and ``walkway_width`` left as None take the calculator's
    configured values.
    """
    min_lot_area: Optional[float] = None
    include_walkways: bool = True
    walkway_width: Optional[float] = None
    target_lot_count: Optional[int] = None
    amenities: tuple[str, ...] = ()

    def __post_init__(self):
        for label, value in (("Minimum lot area", self.min_lot_area), ("Walkway width", self.walkway_width)):
            if value is not None and not _is_positive_finite(value):
                raise InputValidationError(f"{label} must be a positive number, got {value!r}")
        if self.target_lot_count is not None and self.target_lot_count < 1:
            raise InputValidationError(
                f"Target lot count must be at least 1, got {self.target_lot_count}"
            )
        object.__setattr__(self, "amenities", tuple(self.amenities))

    def cache_key(self) -> str:
        """Stable text form used to derive scenario identities."""
        return (
            f"min={self.min_lot_area}|walk={int(self.include_walkways)}:{self.walkway_width}"
            f"|amenities={','.join(sorted(self.amenities))}"
        )


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class SocialClub:
    width: float
    length: float
    area: float
    position: Position

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "length": self.length,
            "area": self.area,
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class ParkingArea:
    width: float
    length: float
    area: float
    spaces_count: int
    space_width: float
    space_length: float
    position: Position

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "length": self.length,
            "area": self.area,
            "spaces_count": self.spaces_count,
            "space_width": self.space_width,
            "space_length": self.space_length,
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class MaintenanceRoom:
    width: float
    length: float
    area: float
    position: Position
    location: MaintenanceLocation = MaintenanceLocation.IN_SOCIAL_CLUB

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "length": self.length,
            "area": self.area,
            "position": self.position.to_dict(),
            "location": self.location.value,
        }


@dataclass(frozen=True)
class LotGrid:
    rows: int
    columns: int
    distribution: LayoutStrategy

    def to_dict(self) -> dict:
        return {
            "rows": self.rows,
            "columns": self.columns,
            "distribution": self.distribution.value,
        }


@dataclass(frozen=True)
class Lots:
    count: int
    width: float
    length: float
    area: float
    min_area: float
    grid: LotGrid

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "width": self.width,
            "length": self.length,
            "area": self.area,
            "min_area": self.min_area,
            "grid": self.grid.to_dict(),
        }


@dataclass(frozen=True)
class Walkways:
    total_area: float
    average_width: float

    def to_dict(self) -> dict:
        return {"total_area": self.total_area, "average_width": self.average_width}


@dataclass(frozen=True)
class Landscaping:
    total_area: float

    def to_dict(self) -> dict:
        return {"total_area": self.total_area}


@dataclass(frozen=True)
class SubdivisionScenario:
    id: str
    land_parcel_id: str
    social_club_percent: int
    social_club: SocialClub
    parking_area: ParkingArea
    maintenance_room: MaintenanceRoom
    lots: Lots
    walkways: Walkways
    landscaping: Landscaping
    calculated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False,
    )

    @property
    def total_lots_area(self) -> float:
        return self.lots.count * self.lots.area

    @property
    def common_area_percent_per_lot(self) -> float:
        # Only hand-built scenarios have zero lots.
        if self.lots.count == 0:
            return 0.0
        return 100 / self.lots.count

    @property
    def total_common_area(self) -> float:
        return (
            self.social_club.area
            + self.parking_area.area
            + self.maintenance_room.area
            + self.walkways.total_area
            + self.landscaping.total_area
        )

    @property
    def is_viable(self) -> bool:
        return self.lots.area >= self.lots.min_area

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "land_parcel_id": self.land_parcel_id,
            "social_club_percent": self.social_club_percent,
            "social_club": self.social_club.to_dict(),
            "parking_area": self.parking_area.to_dict(),
            "maintenance_room": self.maintenance_room.to_dict(),
            "lots": self.lots.to_dict(),
            "walkways": self.walkways.to_dict(),
            "landscaping": self.landscaping.to_dict(),
            "total_lots_area": self.total_lots_area,
            "common_area_percent_per_lot": self.common_area_percent_per_lot,
            "total_common_area": self.total_common_area,
            "is_viable": self.is_viable,
            "calculated_at": self.calculated_at.isoformat(),
        }
