"""Land parcel input: rectangular dimensions in metres plus location context."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from microvilla.config import AREA_TOLERANCE
from microvilla.errors import InputValidationError
from microvilla.models.money import Money


# All 32 provinces of the Dominican Republic.
PROVINCES: tuple[str, ...] = (
    "Azua", "Baoruco", "Barahona", "Dajabón", "Distrito Nacional", "Duarte",
    "Elías Piña", "El Seibo", "Espaillat", "Hato Mayor", "Hermanas Mirabal",
    "Independencia", "La Altagracia", "La Romana", "La Vega",
    "María Trinidad Sánchez", "Monseñor Nouel", "Monte Cristi", "Monte Plata",
    "Pedernales", "Peravia", "Puerto Plata", "Samaná", "San Cristóbal",
    "San José de Ocoa", "San Juan", "San Pedro de Macorís", "Sánchez Ramírez",
    "Santiago", "Santiago Rodríguez", "Santo Domingo", "Valverde",
)


class LandmarkType(str, Enum):
    BEACH = "beach"
    AIRPORT = "airport"
    TOURIST_ATTRACTION = "tourist_attraction"
    INFRASTRUCTURE = "infrastructure"
    OTHER = "other"


@dataclass(frozen=True)
class Landmark:
    type: LandmarkType
    name: str
    distance: Optional[float] = None  # km
    description: Optional[str] = None

    def __post_init__(self):
        try:
            object.__setattr__(self, "type", LandmarkType(self.type))
        except ValueError:
            raise InputValidationError(f"Unknown landmark type: {self.type!r}") from None
        if not self.name:
            raise InputValidationError("Landmark name is required")
        if self.distance is not None and self.distance <= 0:
            raise InputValidationError(f"Landmark distance must be positive, got {self.distance}")

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "name": self.name,
            "distance": self.distance,
            "description": self.description,
        }


def _is_positive_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


@dataclass(frozen=True)
class LandParcel:
    """Immutable calculator input.

    ``area`` defaults to width × length; an explicit area must agree with the
    dimensions within AREA_TOLERANCE.
    """
    width: float
    length: float
    area: Optional[float] = None
    province: Optional[str] = None
    acquisition_cost: Optional[Money] = None
    landmarks: tuple[Landmark, ...] = ()
    is_urbanized: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not _is_positive_number(self.width):
            raise InputValidationError(f"Parcel width must be positive, got {self.width!r}")
        if not _is_positive_number(self.length):
            raise InputValidationError(f"Parcel length must be positive, got {self.length!r}")

        computed = self.width * self.length
        if self.area is None:
            object.__setattr__(self, "area", computed)
        elif not _is_positive_number(self.area) or abs(self.area - computed) > AREA_TOLERANCE:
            raise InputValidationError(
                f"Parcel area {self.area} does not match "
                f"{self.width} × {self.length} = {computed}"
            )

        if self.province is not None and self.province not in PROVINCES:
            raise InputValidationError(f"Unknown province: {self.province!r}")
        if self.acquisition_cost is not None:
            self.acquisition_cost.require_non_negative("Acquisition cost")
        object.__setattr__(self, "landmarks", tuple(self.landmarks))

    @property
    def aspect_ratio(self) -> float:
        return self.length / self.width

    @property
    def perimeter(self) -> float:
        return 2 * (self.width + self.length)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "width": self.width,
            "length": self.length,
            "area": self.area,
            "province": self.province,
            "acquisition_cost": self.acquisition_cost.to_dict() if self.acquisition_cost else None,
            "landmarks": [lm.to_dict() for lm in self.landmarks],
            "is_urbanized": self.is_urbanized,
        }
