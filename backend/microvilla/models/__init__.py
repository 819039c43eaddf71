from __future__ import annotations

from microvilla.models.money import Currency, ExchangeRate, Money
from microvilla.models.parcel import LandParcel, Landmark, LandmarkType
from microvilla.models.scenario import LayoutStrategy, SubdivisionOptions, SubdivisionScenario
from microvilla.models.financial import (
    CostAllocation, CostBreakdown, FinancialAnalysis, LegalCosts, OtherCost,
    PricingScenario, StorageType,
)

__all__ = [
    "Currency", "ExchangeRate", "Money",
    "LandParcel", "Landmark", "LandmarkType",
    "LayoutStrategy", "SubdivisionOptions", "SubdivisionScenario",
    "CostAllocation", "CostBreakdown", "FinancialAnalysis", "LegalCosts",
    "OtherCost", "PricingScenario", "StorageType",
]
