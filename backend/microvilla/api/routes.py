from __future__ import annotations

from fastapi import APIRouter, HTTPException

from microvilla.config import settings
from microvilla.errors import DivisionByZeroError, PlannerError
from microvilla.models.money import Currency, ExchangeRate, convert_money
from microvilla.models.parcel import LandParcel
from microvilla.models.scenario import SubdivisionOptions, SubdivisionScenario
from microvilla.models.schemas import (
    AllocationRequest, FinancialRequest, ScenarioRequest, ScenariosRequest,
)
from microvilla.planning_engine.facilities import validate_scenario
from microvilla.planning_engine.financial import FinancialAnalyzer
from microvilla.planning_engine.layout_geometry import build_scenario_footprints
from microvilla.planning_engine.subdivision import SubdivisionCalculator
from microvilla.units import sqm_to_sqft

router = APIRouter(prefix="/api")
engine_config = settings.engine_config()
calculator = SubdivisionCalculator(engine_config)
analyzer = FinancialAnalyzer(engine_config)


def _engine_error(exc: PlannerError) -> HTTPException:
    status = 422 if isinstance(exc, DivisionByZeroError) else 400
    return HTTPException(status_code=status, detail=str(exc))


def _scenario_payload(
    parcel: LandParcel,
    scenario: SubdivisionScenario,
    include_geometry: bool,
) -> dict:
    payload = scenario.to_dict()
    payload["lot_area_sqft"] = sqm_to_sqft(scenario.lots.area)
    payload["facility_check"] = validate_scenario(scenario, engine_config).to_dict()
    if include_geometry:
        payload["geometry"] = build_scenario_footprints(parcel, scenario)
    return payload


def _resolve_scenario(
    parcel: LandParcel,
    options: SubdivisionOptions,
    percent: int,
) -> SubdivisionScenario:
    """Recompute the chosen scenario; identical inputs give identical results."""
    scenario = calculator.calculate_subdivision(parcel, percent, options)
    if scenario is None or not scenario.is_viable:
        raise HTTPException(
            status_code=422,
            detail=f"No viable subdivision for a {percent}% social club on this parcel.",
        )
    return scenario


@router.post("/subdivision/scenarios")
async def list_scenarios(req: ScenariosRequest):
    """All viable scenarios for the parcel, ascending by social-club percent."""
    try:
        parcel = req.parcel.to_parcel()
        options = req.options.to_options(engine_config)
        scenarios = calculator.calculate_all_scenarios(parcel, options)
    except PlannerError as e:
        raise _engine_error(e)

    matching = []
    if options.target_lot_count is not None:
        matching = [
            s.id for s in
            calculator.find_matching_scenarios(scenarios, options.target_lot_count)
        ]

    return {
        "parcel": parcel.to_dict(),
        "count": len(scenarios),
        "scenarios": [_scenario_payload(parcel, s, req.include_geometry) for s in scenarios],
        "matching_scenario_ids": matching,
    }


@router.post("/subdivision/scenario")
async def get_scenario(req: ScenarioRequest):
    """One scenario for an explicit social-club percent."""
    try:
        parcel = req.parcel.to_parcel()
        scenario = _resolve_scenario(parcel, req.options.to_options(engine_config), req.social_club_percent)
    except PlannerError as e:
        raise _engine_error(e)
    return _scenario_payload(parcel, scenario, req.include_geometry)


@router.post("/financial/analyze")
async def analyze_financials(req: FinancialRequest):
    """Total cost, base lot cost and one pricing scenario per profit margin."""
    try:
        parcel = req.parcel.to_parcel()
        rate = ExchangeRate(
            Currency.USD, Currency.DOP, req.exchange_rate or settings.default_exchange_rate,
        )
        scenario = _resolve_scenario(parcel, req.options.to_options(engine_config), req.social_club_percent)
        analysis = analyzer.analyze(
            req.costs.to_costs(),
            req.profit_margins,
            parcel,
            scenario,
            monthly_maintenance=(
                req.monthly_maintenance.to_money() if req.monthly_maintenance else None
            ),
            project_id=req.project_id,
            exchange_rate=rate,
        )
    except PlannerError as e:
        raise _engine_error(e)

    total = analysis.total_project_cost
    other = Currency.DOP if total.currency == Currency.USD else Currency.USD

    return {
        "scenario_id": scenario.id,
        "analysis": analysis.to_dict(),
        "summary": analyzer.summarize(analysis).to_dict(),
        "converted_total": convert_money(total, other, rate.rate).to_dict(),
    }


@router.post("/financial/allocation")
async def allocate_costs(req: AllocationRequest):
    """Per-lot cost allocation table for the chosen scenario."""
    try:
        parcel = req.parcel.to_parcel()
        scenario = _resolve_scenario(parcel, req.options.to_options(engine_config), req.social_club_percent)
        rows = analyzer.calculate_cost_allocations(req.costs.to_costs(), scenario, req.storage_type)
    except PlannerError as e:
        raise _engine_error(e)

    return {
        "scenario_id": scenario.id,
        "storage_type": req.storage_type.value,
        "allocations": [r.to_dict() for r in rows],
    }
