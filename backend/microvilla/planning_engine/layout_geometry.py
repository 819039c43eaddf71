"""
Indicative 2D footprints for a subdivision scenario.

Turns a scenario's dimensions into rectangles in local parcel coordinates
(metres, origin at the parcel's bottom-left corner) and returns a GeoJSON
FeatureCollection the UI layer can draw.  Lots are laid out per the
scenario's grid distribution and never overlap the social club; lots that
do not fit on the drawing are reported in ``unplaced_lots``.
"""

from __future__ import annotations

from shapely.geometry import Polygon, box, mapping

from microvilla.models.parcel import LandParcel
from microvilla.models.scenario import LayoutStrategy, SubdivisionScenario

# Cells may touch the club edge but not share area with it.
_OVERLAP_EPSILON = 1e-6


def _feature(geom: Polygon, kind: str, **props) -> dict:
    return {
        "type": "Feature",
        "geometry": mapping(geom),
        "properties": {"type": kind, "area_sqm": round(geom.area, 2), **props},
    }


def _fits(cell: Polygon, parcel: Polygon, club: Polygon) -> bool:
    return (
        cell.within(parcel.buffer(_OVERLAP_EPSILON))
        and cell.intersection(club).area <= _OVERLAP_EPSILON
    )


def _strip_cells(
    scenario: SubdivisionScenario,
    parcel: LandParcel,
    horizontal: bool,
) -> list[Polygon]:
    """Full-width (or full-length) strips on both sides of the club."""
    club = scenario.social_club
    step = scenario.lots.length if horizontal else scenario.lots.width
    if step <= 0:
        return []

    if horizontal:
        bands = [(0.0, club.position.y), (club.position.y + club.length, parcel.length)]
    else:
        bands = [(0.0, club.position.x), (club.position.x + club.width, parcel.width)]

    cells = []
    for start, end in bands:
        pos = start
        while pos + step <= end + _OVERLAP_EPSILON:
            if horizontal:
                cells.append(box(0, pos, parcel.width, pos + step))
            else:
                cells.append(box(pos, 0, pos + step, parcel.length))
            pos += step
    return cells


def _grid_cells(
    scenario: SubdivisionScenario,
    parcel_poly: Polygon,
    club_poly: Polygon,
    parcel: LandParcel,
) -> list[Polygon]:
    """Square cells scanned row by row, skipping those over the club."""
    side_x, side_y = scenario.lots.width, scenario.lots.length
    if side_x <= 0 or side_y <= 0:
        return []
    cells = []
    y = 0.0
    while y + side_y <= parcel.length + _OVERLAP_EPSILON:
        x = 0.0
        while x + side_x <= parcel.width + _OVERLAP_EPSILON:
            cell = box(x, y, x + side_x, y + side_y)
            if _fits(cell, parcel_poly, club_poly):
                cells.append(cell)
            x += side_x
        y += side_y
    return cells


def build_scenario_footprints(parcel: LandParcel, scenario: SubdivisionScenario) -> dict:
    """GeoJSON FeatureCollection for the parcel, shared facilities and lots."""
    parcel_poly = box(0, 0, parcel.width, parcel.length)

    club = scenario.social_club
    club_poly = box(
        club.position.x, club.position.y,
        club.position.x + club.width, club.position.y + club.length,
    )

    parking = scenario.parking_area
    parking_poly = box(
        parking.position.x, parking.position.y,
        parking.position.x + parking.width, parking.position.y + parking.length,
    )

    room = scenario.maintenance_room
    room_poly = box(
        room.position.x, room.position.y,
        room.position.x + room.width, room.position.y + room.length,
    )

    distribution = scenario.lots.grid.distribution
    if distribution == LayoutStrategy.HORIZONTAL_STRIPS:
        cells = _strip_cells(scenario, parcel, horizontal=True)
    elif distribution == LayoutStrategy.VERTICAL_STRIPS:
        cells = _strip_cells(scenario, parcel, horizontal=False)
    else:
        cells = _grid_cells(scenario, parcel_poly, club_poly, parcel)

    placed = cells[:scenario.lots.count]

    features = [
        _feature(parcel_poly, "parcel"),
        _feature(club_poly, "social_club", percent=scenario.social_club_percent),
        _feature(parking_poly, "parking", spaces=parking.spaces_count),
        _feature(room_poly, "maintenance_room", location=room.location.value),
    ]
    for number, cell in enumerate(placed, start=1):
        features.append(_feature(cell, "lot", lot_number=number))

    return {
        "type": "FeatureCollection",
        "features": features,
        "properties": {
            "scenario_id": scenario.id,
            "distribution": distribution.value,
            "club_within_parcel": club_poly.within(parcel_poly),
            "placed_lots": len(placed),
            "unplaced_lots": scenario.lots.count - len(placed),
        },
    }
