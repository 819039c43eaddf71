"""Cost inputs and financial analysis results."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from microvilla.config import MONEY_TOLERANCE
from microvilla.errors import InputValidationError
from microvilla.models.money import Currency, ExchangeRate, Money, ensure_same_currency


class StorageType(str, Enum):
    CENTRALIZED = "centralized"              # shared units in the social club
    INDIVIDUAL_PATIOS = "individual-patios"  # one unit on each lot's patio


@dataclass(frozen=True)
class LegalCosts:
    notary_fees: Money
    permits: Money
    registrations: Money
    total: Money

    def __post_init__(self):
        for label in ("notary_fees", "permits", "registrations", "total"):
            getattr(self, label).require_non_negative(f"Legal {label.replace('_', ' ')}")
        expected = self.notary_fees.amount + self.permits.amount + self.registrations.amount
        if abs(self.total.amount - expected) > MONEY_TOLERANCE:
            raise InputValidationError(
                "Legal costs total must equal notary + permits + registrations "
                f"({self.total.amount} != {expected})"
            )

    @classmethod
    def from_components(
        cls,
        notary_fees: Money,
        permits: Money,
        registrations: Money,
    ) -> "LegalCosts":
        """Build legal costs with the total derived from its three parts."""
        currency = ensure_same_currency([notary_fees, permits, registrations])
        total = round(notary_fees.amount + permits.amount + registrations.amount, 2)
        return cls(notary_fees, permits, registrations, Money(total, currency))

    def monies(self) -> list[Money]:
        return [self.notary_fees, self.permits, self.registrations, self.total]

    def to_dict(self) -> dict:
        return {
            "notary_fees": self.notary_fees.to_dict(),
            "permits": self.permits.to_dict(),
            "registrations": self.registrations.to_dict(),
            "total": self.total.to_dict(),
        }


@dataclass(frozen=True)
class OtherCost:
    """User-labelled extra cost (e.g. "Infrastructure", "Marketing")."""
    label: str
    amount: Money
    description: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not self.label or len(self.label) > 200:
            raise InputValidationError("Other cost label must be 1-200 characters")
        self.amount.require_non_negative(f"Cost '{self.label}'")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "amount": self.amount.to_dict(),
            "description": self.description,
        }


@dataclass(frozen=True)
class CostBreakdown:
    land_acquisition: Money
    amenities: Money
    parking_area: Money
    walkways: Money
    landscaping: Money
    maintenance_room: Money
    storage: Money
    legal: LegalCosts
    other: tuple[OtherCost, ...] = ()

    _SIMPLE_FIELDS = (
        "land_acquisition", "amenities", "parking_area", "walkways",
        "landscaping", "maintenance_room", "storage",
    )

    def __post_init__(self):
        for name in self._SIMPLE_FIELDS:
            getattr(self, name).require_non_negative(name.replace("_", " ").capitalize())
        object.__setattr__(self, "other", tuple(self.other))

    def monies(self) -> list[Money]:
        """Every monetary field, in declaration order."""
        values = [getattr(self, name) for name in self._SIMPLE_FIELDS]
        values.extend(self.legal.monies())
        values.extend(c.amount for c in self.other)
        return values

    def currency(self) -> Currency:
        return ensure_same_currency(self.monies())

    @property
    def shared_area_costs(self) -> float:
        """Parking + walkways + landscaping + maintenance room."""
        return (
            self.parking_area.amount
            + self.walkways.amount
            + self.landscaping.amount
            + self.maintenance_room.amount
        )

    def to_dict(self) -> dict:
        return {
            "land_acquisition": self.land_acquisition.to_dict(),
            "amenities": self.amenities.to_dict(),
            "parking_area": self.parking_area.to_dict(),
            "walkways": self.walkways.to_dict(),
            "landscaping": self.landscaping.to_dict(),
            "maintenance_room": self.maintenance_room.to_dict(),
            "storage": self.storage.to_dict(),
            "legal": self.legal.to_dict(),
            "other": [c.to_dict() for c in self.other],
        }


@dataclass(frozen=True)
class PricingScenario:
    profit_margin_percent: float
    lot_sale_price: Money
    total_revenue: Money
    expected_profit: Money
    roi: float
    id: str = field(default_factory=lambda: str(uuid.uuid4()), compare=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "profit_margin_percent": self.profit_margin_percent,
            "lot_sale_price": self.lot_sale_price.to_dict(),
            "total_revenue": self.total_revenue.to_dict(),
            "expected_profit": self.expected_profit.to_dict(),
            "roi": self.roi,
        }


@dataclass(frozen=True)
class CostAllocation:
    lot_number: int
    lot_area: float
    proportional_land_cost: Money
    proportional_shared_costs: Money
    storage_cost: Money
    total_base_cost: Money

    def to_dict(self) -> dict:
        return {
            "lot_number": self.lot_number,
            "lot_area": self.lot_area,
            "proportional_land_cost": self.proportional_land_cost.to_dict(),
            "proportional_shared_costs": self.proportional_shared_costs.to_dict(),
            "storage_cost": self.storage_cost.to_dict(),
            "total_base_cost": self.total_base_cost.to_dict(),
        }


@dataclass(frozen=True)
class FinancialAnalysis:
    id: str
    project_id: Optional[str]
    costs: CostBreakdown
    lot_count: int
    total_project_cost: Money
    cost_per_sqm: Money
    base_lot_cost: Money
    pricing_scenarios: tuple[PricingScenario, ...]
    calculated_at: datetime
    last_modified: datetime
    monthly_maintenance_cost: Optional[Money] = None
    monthly_maintenance_per_owner: Optional[Money] = None
    exchange_rate: Optional[ExchangeRate] = None

    @property
    def profit_margins(self) -> list[float]:
        return [s.profit_margin_percent for s in self.pricing_scenarios]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "costs": self.costs.to_dict(),
            "lot_count": self.lot_count,
            "total_project_cost": self.total_project_cost.to_dict(),
            "cost_per_sqm": self.cost_per_sqm.to_dict(),
            "base_lot_cost": self.base_lot_cost.to_dict(),
            "pricing_scenarios": [s.to_dict() for s in self.pricing_scenarios],
            "monthly_maintenance_cost": (
                self.monthly_maintenance_cost.to_dict()
                if self.monthly_maintenance_cost else None
            ),
            "monthly_maintenance_per_owner": (
                self.monthly_maintenance_per_owner.to_dict()
                if self.monthly_maintenance_per_owner else None
            ),
            "exchange_rate": self.exchange_rate.to_dict() if self.exchange_rate else None,
            "calculated_at": self.calculated_at.isoformat(),
            "last_modified": self.last_modified.isoformat(),
        }


@dataclass(frozen=True)
class FinancialSummary:
    total_project_cost: Money
    cost_per_sqm: Money
    base_lot_cost: Money
    recommended_scenario: Optional[PricingScenario]

    def to_dict(self) -> dict:
        return {
            "total_project_cost": self.total_project_cost.to_dict(),
            "cost_per_sqm": self.cost_per_sqm.to_dict(),
            "base_lot_cost": self.base_lot_cost.to_dict(),
            "recommended_scenario": (
                self.recommended_scenario.to_dict() if self.recommended_scenario else None
            ),
        }
