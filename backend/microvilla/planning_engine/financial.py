"""
Project cost roll-up, per-lot allocation and profit-margin pricing.

Pipeline for one analysis:
  1. Currency check across every monetary field of the cost breakdown
  2. Total project cost (rounded to cents at the point of computation)
  3. Shared-area cost density per sqm of land
  4. Base lot cost (flat division across all lots)
  5. Pricing scenarios, one per requested profit margin (input order kept)
  6. Optional monthly maintenance share per owner

The per-lot allocation helper is a separate transparency breakdown; its
totals are proportional to lot area and differ from the flat base lot cost.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, Sequence

from microvilla.config import DEFAULT_ENGINE_CONFIG, MONEY_TOLERANCE, EngineConfig
from microvilla.errors import CurrencyMismatchError, DivisionByZeroError, InputValidationError
from microvilla.models.financial import (
    CostAllocation, CostBreakdown, FinancialAnalysis, FinancialSummary,
    PricingScenario, StorageType,
)
from microvilla.models.money import ExchangeRate, Money, ensure_same_currency
from microvilla.models.parcel import LandParcel
from microvilla.models.scenario import SubdivisionScenario

logger = logging.getLogger(__name__)


def _cents(value: float) -> float:
    return round(value, 2)


@dataclass
class AnalysisCheck:
    """Advisory result of ``FinancialAnalyzer.validate``."""
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": self.errors}


class FinancialAnalyzer:
    """Turns a cost breakdown plus a chosen scenario into pricing options."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.config = config

    # ──────────────────────────────────────────────────────────────
    # ANALYSIS
    # ──────────────────────────────────────────────────────────────

    def analyze(
        self,
        costs: CostBreakdown,
        profit_margins: Sequence[float],
        parcel: LandParcel,
        scenario: SubdivisionScenario,
        monthly_maintenance: Optional[Money] = None,
        project_id: Optional[str] = None,
        exchange_rate: Optional[ExchangeRate] = None,
    ) -> FinancialAnalysis:
        started = time.perf_counter()
        margins = self._validate_margins(profit_margins)
        currency = costs.currency()
        if monthly_maintenance is not None:
            monthly_maintenance.require_non_negative("Monthly maintenance cost")
            ensure_same_currency([costs.land_acquisition, monthly_maintenance])

        lot_count = scenario.lots.count
        total = self.calculate_total_project_cost(costs)
        cost_per_sqm = self.calculate_cost_per_sqm_shared_areas(costs, parcel.area)
        base_lot_cost = self.calculate_base_lot_cost(total, lot_count)
        pricing = self.generate_pricing_scenarios(base_lot_cost, total, lot_count, margins)

        per_owner = None
        if monthly_maintenance is not None:
            per_owner = self.calculate_maintenance_contribution(
                monthly_maintenance, scenario.common_area_percent_per_lot,
            )

        now = datetime.now(timezone.utc)
        analysis = FinancialAnalysis(
            id=str(uuid.uuid4()),
            project_id=project_id,
            costs=costs,
            lot_count=lot_count,
            total_project_cost=total,
            cost_per_sqm=cost_per_sqm,
            base_lot_cost=base_lot_cost,
            pricing_scenarios=tuple(pricing),
            calculated_at=now,
            last_modified=now,
            monthly_maintenance_cost=monthly_maintenance,
            monthly_maintenance_per_owner=per_owner,
            exchange_rate=exchange_rate,
        )

        elapsed = time.perf_counter() - started
        if elapsed > self.config.analysis_budget_seconds:
            logger.warning(
                "Financial analysis exceeded budget: %.3fs (target < %.1fs), %s %d lots",
                elapsed, self.config.analysis_budget_seconds, currency.value, lot_count,
            )
        return analysis

    def recalculate(
        self,
        existing: FinancialAnalysis,
        parcel: LandParcel,
        scenario: SubdivisionScenario,
    ) -> FinancialAnalysis:
        """Same cost inputs and margins over new geometry.

        Keeps the identity and creation time of ``existing``; only the
        derived numbers and ``last_modified`` change.
        """
        fresh = self.analyze(
            existing.costs,
            existing.profit_margins,
            parcel,
            scenario,
            monthly_maintenance=existing.monthly_maintenance_cost,
            project_id=existing.project_id,
            exchange_rate=existing.exchange_rate,
        )
        return replace(fresh, id=existing.id, calculated_at=existing.calculated_at)

    # ──────────────────────────────────────────────────────────────
    # COMPONENTS
    # ──────────────────────────────────────────────────────────────

    @staticmethod
    def calculate_total_project_cost(costs: CostBreakdown) -> Money:
        """land + amenities + parking + walkways + landscaping + maintenance
        room + storage + legal total + other costs."""
        currency = costs.currency()
        total = (
            costs.land_acquisition.amount
            + costs.amenities.amount
            + costs.parking_area.amount
            + costs.walkways.amount
            + costs.landscaping.amount
            + costs.maintenance_room.amount
            + costs.storage.amount
            + costs.legal.total.amount
            + sum(c.amount.amount for c in costs.other)
        )
        return Money(_cents(total), currency)

    @staticmethod
    def calculate_cost_per_sqm_shared_areas(costs: CostBreakdown, land_area: float) -> Money:
        """Shared infrastructure cost density; excludes land and legal costs."""
        currency = costs.currency()
        if land_area <= 0:
            raise DivisionByZeroError("Land area must be positive to derive cost per sqm")
        shared = costs.shared_area_costs + costs.storage.amount
        return Money(_cents(shared / land_area), currency)

    @staticmethod
    def calculate_base_lot_cost(total_project_cost: Money, lot_count: int) -> Money:
        if lot_count <= 0:
            raise DivisionByZeroError(
                f"Cannot derive base lot cost for a scenario with {lot_count} lots"
            )
        return Money(_cents(total_project_cost.amount / lot_count), total_project_cost.currency)

    @staticmethod
    def generate_pricing_scenarios(
        base_lot_cost: Money,
        total_project_cost: Money,
        lot_count: int,
        profit_margins: Sequence[float],
    ) -> list[PricingScenario]:
        if total_project_cost.amount == 0:
            raise DivisionByZeroError("Cannot derive ROI with a total project cost of zero")
        currency = base_lot_cost.currency

        scenarios = []
        for margin in profit_margins:
            price = _cents(base_lot_cost.amount * (1 + margin / 100))
            revenue = _cents(price * lot_count)
            profit = _cents(revenue - total_project_cost.amount)
            roi = _cents(profit / total_project_cost.amount * 100)
            scenarios.append(PricingScenario(
                profit_margin_percent=margin,
                lot_sale_price=Money(price, currency),
                total_revenue=Money(revenue, currency),
                expected_profit=Money(profit, currency),
                roi=roi,
            ))
        return scenarios

    @staticmethod
    def calculate_maintenance_contribution(
        monthly_cost: Money,
        common_area_percent_per_lot: float,
    ) -> Money:
        return Money(
            _cents(monthly_cost.amount * common_area_percent_per_lot / 100),
            monthly_cost.currency,
        )

    def calculate_cost_allocation_for_lot(
        self,
        lot_number: int,
        costs: CostBreakdown,
        scenario: SubdivisionScenario,
        storage_type: StorageType = StorageType.CENTRALIZED,
    ) -> CostAllocation:
        """Per-lot transparency breakdown.

        Land and shared costs are split by
        ``share = lot_area / (lot_count × lot_area)``, the lot's fraction of
        the saleable area rather than of ``land − social club``, so the land
        shares of all lots add back up to the land cost.
        Patio storage is split evenly; centralized storage by share.
        """
        currency = costs.currency()
        lot_count = scenario.lots.count
        if lot_count <= 0:
            raise DivisionByZeroError("Scenario has no lots to allocate costs to")
        if not 1 <= lot_number <= lot_count:
            raise InputValidationError(
                f"Lot number must be between 1 and {lot_count}, got {lot_number}"
            )
        saleable_area = scenario.total_lots_area
        if saleable_area <= 0:
            raise DivisionByZeroError("Scenario has no saleable lot area")

        storage_type = StorageType(storage_type)
        lot_area = scenario.lots.area
        share = lot_area / saleable_area

        land = _cents(costs.land_acquisition.amount * share)
        shared = _cents(costs.shared_area_costs * share)
        if storage_type == StorageType.INDIVIDUAL_PATIOS:
            storage = _cents(costs.storage.amount / lot_count)
        else:
            storage = _cents(costs.storage.amount * share)

        return CostAllocation(
            lot_number=lot_number,
            lot_area=lot_area,
            proportional_land_cost=Money(land, currency),
            proportional_shared_costs=Money(shared, currency),
            storage_cost=Money(storage, currency),
            total_base_cost=Money(_cents(land + shared + storage), currency),
        )

    def calculate_cost_allocations(
        self,
        costs: CostBreakdown,
        scenario: SubdivisionScenario,
        storage_type: StorageType = StorageType.CENTRALIZED,
    ) -> list[CostAllocation]:
        """Allocation rows for every lot, numbered from 1."""
        return [
            self.calculate_cost_allocation_for_lot(n, costs, scenario, storage_type)
            for n in range(1, scenario.lots.count + 1)
        ]

    # ──────────────────────────────────────────────────────────────
    # VALIDATION & SUMMARY
    # ──────────────────────────────────────────────────────────────

    def validate(self, analysis: FinancialAnalysis) -> AnalysisCheck:
        """Recompute totals, prices and ROI from scratch; report mismatches."""
        check = AnalysisCheck()

        try:
            expected_total = self.calculate_total_project_cost(analysis.costs)
        except CurrencyMismatchError as e:
            check.errors.append(f"Cost breakdown: {e}")
        else:
            if abs(analysis.total_project_cost.amount - expected_total.amount) > MONEY_TOLERANCE:
                check.errors.append("Total project cost does not match sum of cost breakdown")

        total = analysis.total_project_cost.amount
        for index, ps in enumerate(analysis.pricing_scenarios, start=1):
            expected_price = analysis.base_lot_cost.amount * (1 + ps.profit_margin_percent / 100)
            if abs(ps.lot_sale_price.amount - expected_price) > MONEY_TOLERANCE:
                check.errors.append(
                    f"Pricing scenario {index}: lot sale price calculation is incorrect"
                )
            if total == 0:
                check.errors.append(f"Pricing scenario {index}: ROI undefined for zero total cost")
                continue
            expected_roi = ps.expected_profit.amount / total * 100
            if abs(ps.roi - expected_roi) > MONEY_TOLERANCE:
                check.errors.append(f"Pricing scenario {index}: ROI calculation is incorrect")

        currencies = {
            analysis.total_project_cost.currency,
            analysis.cost_per_sqm.currency,
            analysis.base_lot_cost.currency,
        }
        currencies.update(ps.lot_sale_price.currency for ps in analysis.pricing_scenarios)
        if len(currencies) > 1:
            check.errors.append("Inconsistent currency across financial analysis")

        check.is_valid = not check.errors
        return check

    @staticmethod
    def summarize(analysis: FinancialAnalysis) -> FinancialSummary:
        """Headline figures plus the pricing scenario with the best ROI."""
        recommended = max(analysis.pricing_scenarios, key=lambda s: s.roi, default=None)
        return FinancialSummary(
            total_project_cost=analysis.total_project_cost,
            cost_per_sqm=analysis.cost_per_sqm,
            base_lot_cost=analysis.base_lot_cost,
            recommended_scenario=recommended,
        )

    # ──────────────────────────────────────────────────────────────

    @staticmethod
    def _validate_margins(profit_margins: Sequence[float]) -> list[float]:
        margins = list(profit_margins)
        if not margins:
            raise InputValidationError("At least one profit margin is required")
        for m in margins:
            if isinstance(m, bool) or not isinstance(m, (int, float)) or m < 0:
                raise InputValidationError(f"Profit margin must be a non-negative number, got {m!r}")
        return margins
