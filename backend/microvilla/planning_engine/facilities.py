"""
Shared-facility sizing for a micro-villa subdivision.

Facilities sized here:
  1. Parking (always 2 spaces per lot, standard 2.5 m × 5.0 m spaces
     plus 40% for aisles and maneuvering)
  2. Maintenance room (15 sqm floor, larger when amenities need equipment)
  3. Walkways (perimeter path plus internal paths)
  4. Landscaping (share of parking + maintenance footprint)

``validate_scenario`` re-checks a finished scenario against the same rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from microvilla.config import AREA_TOLERANCE, DEFAULT_ENGINE_CONFIG, EngineConfig
from microvilla.models.scenario import MaintenanceLocation, SubdivisionScenario


@dataclass
class ParkingRequirement:
    spaces_count: int
    minimum_area: float      # spaces only, no aisles
    recommended_area: float  # spaces + aisles

    def to_dict(self) -> dict:
        return {
            "spaces_count": self.spaces_count,
            "minimum_area": self.minimum_area,
            "recommended_area": self.recommended_area,
        }


@dataclass
class FacilityCheck:
    """Outcome of validating a scenario's shared facilities."""
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": self.errors, "warnings": self.warnings}


# Amenity keywords that call for a larger maintenance room.
POOL_KEYWORDS = ("pool", "aquatic")
HVAC_KEYWORDS = ("climate", "hvac")


def calculate_parking_area(
    lot_count: int,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ParkingRequirement:
    spaces = lot_count * config.parking_spaces_per_lot
    minimum = spaces * config.parking_space_area
    return ParkingRequirement(
        spaces_count=spaces,
        minimum_area=minimum,
        recommended_area=minimum * config.parking_aisle_factor,
    )


def maintenance_room_area(
    amenities: tuple[str, ...] | list[str] = (),
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Room size for the selected amenities, never below the configured floor."""
    labels = [a.lower() for a in amenities]
    has_pool = any(k in a for a in labels for k in POOL_KEYWORDS)
    has_hvac = any(k in a for a in labels for k in HVAC_KEYWORDS)

    if has_pool or len(labels) > 10:
        area = config.maintenance_room_extended_area
    elif has_hvac or len(labels) > 5:
        area = config.maintenance_room_recommended_area
    else:
        area = config.maintenance_room_min_area
    return max(area, config.maintenance_room_min_area)


def estimate_walkway_area(
    parcel_width: float,
    parcel_length: float,
    walkway_width: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Perimeter path plus internal paths sized as a share of the perimeter."""
    perimeter = 2 * (parcel_width + parcel_length)
    internal_paths = perimeter * config.internal_path_factor
    return (perimeter + internal_paths) * walkway_width


def estimate_landscaping_area(
    parking_area: float,
    maintenance_area: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    return (parking_area + maintenance_area) * config.landscaping_factor


def validate_scenario(
    scenario: SubdivisionScenario,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> FacilityCheck:
    check = FacilityCheck()
    lot_count = scenario.lots.count
    parking = scenario.parking_area
    room = scenario.maintenance_room

    # ── Parking ──
    expected_spaces = lot_count * config.parking_spaces_per_lot
    if parking.spaces_count != expected_spaces:
        check.errors.append(
            f"Parking must have exactly {expected_spaces} spaces "
            f"({config.parking_spaces_per_lot} per villa × {lot_count} lots), "
            f"got {parking.spaces_count}"
        )
    if parking.space_width < config.parking_space_width:
        check.errors.append(
            f"Parking space width must be at least {config.parking_space_width}m"
        )
    if parking.space_length < config.parking_space_length:
        check.errors.append(
            f"Parking space length must be at least {config.parking_space_length}m"
        )
    minimum = calculate_parking_area(lot_count, config).minimum_area
    if parking.area + AREA_TOLERANCE < minimum:
        check.errors.append(
            f"Parking area too small: {parking.area:.2f}sqm < {minimum:.2f}sqm minimum"
        )

    # ── Maintenance room ──
    if room.area + AREA_TOLERANCE < config.maintenance_room_min_area:
        check.errors.append(
            f"Maintenance room area must be at least "
            f"{config.maintenance_room_min_area}sqm, got {room.area}sqm"
        )
    if abs(room.width * room.length - room.area) > AREA_TOLERANCE:
        check.errors.append(
            f"Maintenance room area mismatch: {room.area}sqm specified but "
            f"{room.width}m × {room.length}m = {room.width * room.length:.2f}sqm"
        )
    if room.area < config.maintenance_room_recommended_area:
        check.warnings.append(
            f"Maintenance room area is below recommended "
            f"{config.maintenance_room_recommended_area}sqm."
        )
    if room.location == MaintenanceLocation.IN_SOCIAL_CLUB and room.area > 25:
        check.warnings.append(
            f"Large maintenance room ({room.area}sqm) in social club may reduce "
            "usable amenity space. Consider a separate location."
        )

    check.valid = not check.errors
    return check
