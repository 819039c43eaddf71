from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from microvilla.config import EngineConfig
from microvilla.models.financial import CostBreakdown, LegalCosts, OtherCost, StorageType
from microvilla.models.money import Money
from microvilla.models.parcel import LandParcel, Landmark
from microvilla.models.scenario import SubdivisionOptions
from microvilla.units import to_metres


class MoneyIn(BaseModel):
    amount: float = Field(ge=0)
    currency: Literal["DOP", "USD"] = "USD"

    def to_money(self) -> Money:
        return Money(self.amount, self.currency)


class LandmarkIn(BaseModel):
    type: Literal["beach", "airport", "tourist_attraction", "infrastructure", "other"]
    name: str = Field(min_length=1)
    distance: Optional[float] = Field(default=None, gt=0)  # km
    description: Optional[str] = None


class ParcelIn(BaseModel):
    width: float = Field(gt=0)
    length: float = Field(gt=0)
    unit: Literal["m", "ft"] = "m"
    id: Optional[str] = None
    province: Optional[str] = None
    acquisition_cost: Optional[MoneyIn] = None
    landmarks: list[LandmarkIn] = []
    is_urbanized: bool = False

    def to_parcel(self) -> LandParcel:
        extra = {"id": self.id} if self.id else {}
        return LandParcel(
            width=to_metres(self.width, self.unit),
            length=to_metres(self.length, self.unit),
            province=self.province,
            acquisition_cost=self.acquisition_cost.to_money() if self.acquisition_cost else None,
            landmarks=tuple(Landmark(**lm.model_dump()) for lm in self.landmarks),
            is_urbanized=self.is_urbanized,
            **extra,
        )


class OptionsIn(BaseModel):
    """Unset sizes fall back to the configured engine defaults."""
    min_lot_area: Optional[float] = Field(default=None, gt=0)
    include_walkways: bool = True
    walkway_width: Optional[float] = Field(default=None, gt=0)
    target_lot_count: Optional[int] = Field(default=None, ge=1)
    amenities: list[str] = []

    def to_options(self, config: EngineConfig) -> SubdivisionOptions:
        return SubdivisionOptions(
            min_lot_area=self.min_lot_area or config.min_lot_area,
            include_walkways=self.include_walkways,
            walkway_width=self.walkway_width or config.walkway_width,
            target_lot_count=self.target_lot_count,
            amenities=tuple(self.amenities),
        )


class ScenariosRequest(BaseModel):
    parcel: ParcelIn
    options: OptionsIn = OptionsIn()
    include_geometry: bool = False


class ScenarioRequest(BaseModel):
    parcel: ParcelIn
    options: OptionsIn = OptionsIn()
    social_club_percent: int = Field(ge=10, le=30)
    include_geometry: bool = False


class LegalCostsIn(BaseModel):
    notary_fees: MoneyIn
    permits: MoneyIn
    registrations: MoneyIn


class OtherCostIn(BaseModel):
    label: str = Field(min_length=1, max_length=200)
    amount: MoneyIn
    description: Optional[str] = None


class CostBreakdownIn(BaseModel):
    land_acquisition: MoneyIn
    amenities: MoneyIn
    parking_area: MoneyIn
    walkways: MoneyIn
    landscaping: MoneyIn
    maintenance_room: MoneyIn
    storage: MoneyIn
    legal: LegalCostsIn
    other: list[OtherCostIn] = []

    def to_costs(self) -> CostBreakdown:
        return CostBreakdown(
            land_acquisition=self.land_acquisition.to_money(),
            amenities=self.amenities.to_money(),
            parking_area=self.parking_area.to_money(),
            walkways=self.walkways.to_money(),
            landscaping=self.landscaping.to_money(),
            maintenance_room=self.maintenance_room.to_money(),
            storage=self.storage.to_money(),
            legal=LegalCosts.from_components(
                self.legal.notary_fees.to_money(),
                self.legal.permits.to_money(),
                self.legal.registrations.to_money(),
            ),
            other=tuple(
                OtherCost(label=c.label, amount=c.amount.to_money(), description=c.description)
                for c in self.other
            ),
        )


class FinancialRequest(BaseModel):
    """Cost inputs plus the parcel/percent that identify the chosen scenario."""
    parcel: ParcelIn
    options: OptionsIn = OptionsIn()
    social_club_percent: int = Field(ge=10, le=30)
    costs: CostBreakdownIn
    profit_margins: list[float] = Field(default=[15, 20, 25, 30], min_length=1, max_length=10)
    monthly_maintenance: Optional[MoneyIn] = None
    project_id: Optional[str] = None
    exchange_rate: Optional[float] = Field(default=None, gt=0)  # DOP per USD


class AllocationRequest(BaseModel):
    parcel: ParcelIn
    options: OptionsIn = OptionsIn()
    social_club_percent: int = Field(ge=10, le=30)
    costs: CostBreakdownIn
    storage_type: StorageType = StorageType.CENTRALIZED
