"""Metre / foot conversions used when marshalling request dimensions."""

from __future__ import annotations

# Exact factors (International Yard and Pound Agreement, 1959).
METRES_PER_FOOT = 0.3048
SQFT_PER_SQM = 10.763910417
SQM_PER_SQFT = 0.09290304

AREA_PRECISION = 2


def to_metres(value: float, unit: str = "m") -> float:
    if unit == "m":
        return value
    if unit == "ft":
        return value * METRES_PER_FOOT
    raise ValueError(f"Unsupported length unit: {unit!r}")


def sqm_to_sqft(sqm: float, precision: int = AREA_PRECISION) -> float:
    return round(sqm * SQFT_PER_SQM, precision)


def sqft_to_sqm(sqft: float, precision: int = AREA_PRECISION) -> float:
    return round(sqft * SQM_PER_SQFT, precision)
